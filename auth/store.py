"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper. UserStore (credential store) and
SessionStore are the repositories; _row_to_user / _row_to_session are the
mappers. Service code never touches SQL directly.

Every method takes the caller's Connection as its first argument. Stores never
open or commit transactions themselves -- see core/database.py.

Absence is a value: get_* methods return None when nothing matches. Only
infrastructure failures (and IntegrityError on a uniqueness race) raise.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Connection

from auth.models import AuthSession, User
from core.database import answers, from_iso, questions, to_iso, user_sessions, users, utcnow


class UserStore:
    """Repository for User records (the credential store)."""

    def insert(self, conn: Connection, user: User) -> User:
        """Insert a new user and return it with id and created_at filled in.

        Raises sqlalchemy.exc.IntegrityError if the username or email is
        already taken -- the UNIQUE constraints are the real guard against a
        concurrent signup slipping past the service-level check.
        """
        created_at = user.created_at or utcnow()
        result = conn.execute(
            users.insert().values(
                uuid=user.uuid,
                username=user.username,
                email=user.email,
                salt=user.salt,
                password_digest=user.password_digest,
                role=user.role,
                first_name=user.first_name,
                last_name=user.last_name,
                country=user.country,
                about_me=user.about_me,
                dob=user.dob,
                contact_number=user.contact_number,
                created_at=to_iso(created_at),
            )
        )
        user.id = result.inserted_primary_key[0]
        user.created_at = created_at
        return user

    def get_by_id(self, conn: Connection, user_id: int) -> User | None:
        row = conn.execute(select(users).where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_uuid(self, conn: Connection, user_uuid: str) -> User | None:
        row = conn.execute(select(users).where(users.c.uuid == user_uuid)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_username(self, conn: Connection, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive)."""
        row = conn.execute(select(users).where(users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, conn: Connection, email: str) -> User | None:
        row = conn.execute(select(users).where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def delete(self, conn: Connection, user_id: int) -> bool:
        """Permanently delete a user and everything that references them.

        Answers go first (they reference both users and questions), then
        answers to the user's questions, then questions, sessions, and
        finally the user row. Runs inside the caller's transaction.

        Returns True if the user row was deleted, False if it did not exist.
        """
        own_questions = select(questions.c.id).where(questions.c.user_id == user_id)
        conn.execute(delete(answers).where(answers.c.user_id == user_id))
        conn.execute(delete(answers).where(answers.c.question_id.in_(own_questions)))
        conn.execute(delete(questions).where(questions.c.user_id == user_id))
        conn.execute(delete(user_sessions).where(user_sessions.c.user_id == user_id))
        result = conn.execute(delete(users).where(users.c.id == user_id))
        return result.rowcount > 0


class SessionStore:
    """Repository for AuthSession records (one row per login event)."""

    def insert(self, conn: Connection, session: AuthSession) -> AuthSession:
        result = conn.execute(
            user_sessions.insert().values(
                uuid=session.uuid,
                user_id=session.user_id,
                token=session.token,
                issued_at=to_iso(session.issued_at),
                expires_at=to_iso(session.expires_at),
                logged_out_at=to_iso(session.logged_out_at),
            )
        )
        session.id = result.inserted_primary_key[0]
        return session

    def get_by_token(self, conn: Connection, token: str) -> AuthSession | None:
        """Look up a session by its bearer token. O(1) via UNIQUE index."""
        row = conn.execute(select(user_sessions).where(user_sessions.c.token == token)).fetchone()
        return _row_to_session(row) if row is not None else None

    def mark_signed_out(self, conn: Connection, session_id: int, when: datetime) -> bool:
        """Set logged_out_at (and pull expires_at forward) on an active session.

        The WHERE clause only matches while logged_out_at IS NULL, which makes
        this a compare-and-set: of two concurrent signouts on the same token,
        exactly one sees rowcount == 1. The loser gets False and must report
        AlreadySignedOut. logged_out_at is never cleared once set.
        """
        result = conn.execute(
            update(user_sessions)
            .where((user_sessions.c.id == session_id) & (user_sessions.c.logged_out_at.is_(None)))
            .values(logged_out_at=to_iso(when), expires_at=to_iso(when))
        )
        return result.rowcount == 1

    def list_for_user(self, conn: Connection, user_id: int) -> list[AuthSession]:
        """Return every session a user has ever opened, oldest first."""
        rows = conn.execute(
            select(user_sessions)
            .where(user_sessions.c.user_id == user_id)
            .order_by(user_sessions.c.issued_at, user_sessions.c.id)
        ).fetchall()
        return [_row_to_session(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        uuid=row.uuid,
        username=row.username,
        email=row.email,
        salt=row.salt,
        password_digest=row.password_digest,
        role=row.role,
        first_name=row.first_name,
        last_name=row.last_name,
        country=row.country,
        about_me=row.about_me,
        dob=row.dob,
        contact_number=row.contact_number,
        created_at=from_iso(row.created_at),
    )


def _row_to_session(row) -> AuthSession:
    return AuthSession(
        id=row.id,
        uuid=row.uuid,
        user_id=row.user_id,
        token=row.token,
        issued_at=from_iso(row.issued_at),
        expires_at=from_iso(row.expires_at),
        logged_out_at=from_iso(row.logged_out_at),
    )

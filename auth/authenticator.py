"""
auth/authenticator.py -- Signup, signin, and signout.

Each operation runs in a single transaction obtained from the injected
Database, so a signin either persists its session or fails without leaving
anything behind.

Failure kinds (see core/errors.py):
  signup  -> UsernameTaken, EmailTaken
  signin  -> UnknownUser, BadCredential
  signout -> UnknownSession, AlreadySignedOut

Username enumeration:
  signin keeps UnknownUser and BadCredential distinct so callers and logs can
  tell them apart. It always runs a full bcrypt verification, even for an
  unknown username, so response timing does not give the difference away. The
  API layer decides whether to show one uniform message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from auth.models import ROLE_NONADMIN, ROLES, AuthSession, SignupCandidate, User
from auth.store import SessionStore, UserStore
from auth.tokens import burn_password_check, generate_token, generate_uuid, hash_password, token_hint, verify_password
from core.database import Database, utcnow
from core.errors import AlreadySignedOut, BadCredential, EmailTaken, UnknownSession, UnknownUser, UsernameTaken

logger = logging.getLogger("forum.auth")

DEFAULT_SESSION_TTL = timedelta(hours=8)


class Authenticator:
    def __init__(
        self,
        db: Database,
        users: UserStore,
        sessions: SessionStore,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.users = users
        self.sessions = sessions
        self.session_ttl = session_ttl
        self.clock = clock

    # ------------------------------------------------------------------
    # Signup
    # ------------------------------------------------------------------

    def signup(self, candidate: SignupCandidate, role: str = ROLE_NONADMIN) -> User:
        """Register a new user.

        role defaults to nonadmin and is not reachable from the HTTP surface;
        only trusted code (bootstrap scripts, tests) passes anything else.
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        salt, digest = hash_password(candidate.password)
        user = User(
            uuid=generate_uuid(),
            username=candidate.username,
            email=candidate.email,
            salt=salt,
            password_digest=digest,
            role=role,
            first_name=candidate.first_name,
            last_name=candidate.last_name,
            country=candidate.country,
            about_me=candidate.about_me,
            dob=candidate.dob,
            contact_number=candidate.contact_number,
        )
        try:
            with self.db.transaction() as conn:
                if self.users.get_by_username(conn, candidate.username) is not None:
                    raise UsernameTaken()
                if self.users.get_by_email(conn, candidate.email) is not None:
                    raise EmailTaken()
                self.users.insert(conn, user)
        except IntegrityError as exc:
            # A concurrent signup won the race between our look-up and insert.
            raise self._classify_conflict(candidate) from exc
        logger.info("Signup: user %s registered (role=%s)", user.uuid, user.role)
        return user

    def _classify_conflict(self, candidate: SignupCandidate) -> UsernameTaken | EmailTaken:
        with self.db.transaction() as conn:
            if self.users.get_by_username(conn, candidate.username) is not None:
                return UsernameTaken()
        return EmailTaken()

    # ------------------------------------------------------------------
    # Signin
    # ------------------------------------------------------------------

    def signin(self, username: str, password: str) -> AuthSession:
        """Verify credentials and open a new session.

        Returns the persisted AuthSession; its token is the bearer credential
        handed back to the caller.
        """
        with self.db.transaction() as conn:
            user = self.users.get_by_username(conn, username)
            if user is None:
                burn_password_check(password)
                logger.warning("Signin failed: unknown username")
                raise UnknownUser()
            if not verify_password(password, user.salt, user.password_digest):
                logger.warning("Signin failed: bad credential for user %s", user.uuid)
                raise BadCredential()

            now = self.clock()
            session = AuthSession(
                uuid=generate_uuid(),
                user_id=user.id,
                token=generate_token(),
                issued_at=now,
                expires_at=now + self.session_ttl,
            )
            self.sessions.insert(conn, session)
            session.user = user
        logger.info("Signin: user %s opened session %s", user.uuid, token_hint(session.token))
        return session

    # ------------------------------------------------------------------
    # Signout
    # ------------------------------------------------------------------

    def signout(self, token: str) -> User:
        """Close the session identified by token and return its owner.

        The logged-out check and the write are one conditional UPDATE (see
        SessionStore.mark_signed_out), so a retried or concurrent signout on
        the same token fails with AlreadySignedOut instead of succeeding twice.
        """
        with self.db.transaction() as conn:
            session = self.sessions.get_by_token(conn, token)
            if session is None:
                raise UnknownSession()
            if session.is_signed_out:
                raise AlreadySignedOut()
            if not self.sessions.mark_signed_out(conn, session.id, self.clock()):
                raise AlreadySignedOut()
            user = self.users.get_by_id(conn, session.user_id)
        logger.info("Signout: session %s closed", token_hint(token))
        return user

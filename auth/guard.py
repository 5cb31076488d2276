"""
auth/guard.py -- Access Guard: token -> Principal, plus authorization predicates.

authenticate() only establishes identity. Whether that identity may touch a
given resource is decided by the predicates below, which the resource
services call after fetching the target.

Expiry:
  By default a session that was never signed out is accepted even after its
  expires_at has passed -- long-standing clients depend on that. With
  reject_expired=True the guard also raises SessionExpired for such sessions.
  Expiry is always derived from the clock at read time; nothing is written.

Admin override:
  Admins may delete content they do not own. Editing requires ownership even
  for admins unless the guard is built with admin_can_edit=True.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.engine import Connection

from auth.models import Principal
from auth.store import SessionStore, UserStore
from core.database import utcnow
from core.errors import Forbidden, NotSignedIn, SessionExpired, SignedOut


class AccessGuard:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        reject_expired: bool = False,
        admin_can_edit: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.reject_expired = reject_expired
        self.admin_can_edit = admin_can_edit
        self.clock = clock

    def authenticate(self, conn: Connection, token: str | None) -> Principal:
        """Resolve a bearer token to the Principal that owns it.

        Runs on the caller's connection so the identity check and whatever the
        caller does next share one transaction.
        """
        if not token:
            raise NotSignedIn()
        session = self.sessions.get_by_token(conn, token)
        if session is None:
            raise NotSignedIn()
        if session.is_signed_out:
            raise SignedOut()
        if self.reject_expired and session.is_expired(self.clock()):
            raise SessionExpired()
        user = self.users.get_by_id(conn, session.user_id)
        if user is None:
            # Sessions of a deleted user are removed with it; a dangling one
            # means the account is gone.
            raise NotSignedIn()
        return Principal(user=user, session=session)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @staticmethod
    def is_owner(principal: Principal, owner_id: int) -> bool:
        return principal.user_id == owner_id

    def require_owner_for_edit(self, principal: Principal, owner_id: int, message: str | None = None) -> None:
        if self.is_owner(principal, owner_id):
            return
        if self.admin_can_edit and principal.is_admin:
            return
        raise Forbidden(message)

    def require_owner_or_admin(self, principal: Principal, owner_id: int, message: str | None = None) -> None:
        if self.is_owner(principal, owner_id) or principal.is_admin:
            return
        raise Forbidden(message)

    @staticmethod
    def require_admin(principal: Principal, message: str | None = None) -> None:
        if not principal.is_admin:
            raise Forbidden(message)

"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost zero logic). Dataclasses own
domain shape; stores and services do the work. The only behaviour here is
AuthSession's derived state, because "expired" is computed at read time and
never stored.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_NONADMIN = "nonadmin"
ROLES = (ROLE_ADMIN, ROLE_NONADMIN)


@dataclass
class User:
    """A registered forum member.

    salt / password_digest are written once at signup and never mutated by
    the core. role is always "nonadmin" for users created through signup;
    admins are provisioned by trusted code only.

    id is the internal primary key (None before insert); uuid is the opaque
    public identifier.
    """

    uuid: str
    username: str
    email: str
    salt: str
    password_digest: str
    role: str = ROLE_NONADMIN
    first_name: str | None = None
    last_name: str | None = None
    country: str | None = None
    about_me: str | None = None
    dob: str | None = None
    contact_number: str | None = None
    id: int | None = None
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class SignupCandidate:
    """Caller-supplied signup fields. Carries a plaintext password, so it is
    never persisted or logged as-is."""

    username: str
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    country: str | None = None
    about_me: str | None = None
    dob: str | None = None
    contact_number: str | None = None


@dataclass
class AuthSession:
    """One login event. The token is the bearer credential.

    State machine:
      issued -> active -> signed out   (logged_out_at set, terminal)
      issued -> active -> expired      (now >= expires_at, derived, terminal)
    """

    uuid: str
    user_id: int
    token: str
    issued_at: datetime
    expires_at: datetime
    logged_out_at: datetime | None = None
    id: int | None = None
    # Not persisted: set by signin so callers can report who signed in.
    user: User | None = field(default=None, repr=False, compare=False)

    @property
    def is_signed_out(self) -> bool:
        return self.logged_out_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.is_signed_out and not self.is_expired(now)


@dataclass(frozen=True)
class Principal:
    """The authenticated identity resolved from a bearer token."""

    user: User
    session: AuthSession

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

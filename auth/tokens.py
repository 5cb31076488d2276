"""
auth/tokens.py -- Password hashing, bearer token, and identifier utilities.

Security design decisions:
  Passwords: bcrypt used directly (no passlib wrapper). The salt is generated
       with bcrypt.gensalt() and stored in its own column next to the digest,
       so the credential is the (salt, digest) pair the rest of the core
       expects. bcrypt embeds the salt in the digest as well, so verification
       only needs the digest; the stored salt is checked for consistency.

  Timing: _DUMMY_SALT / _DUMMY_DIGEST let the authenticator run a full bcrypt
       verification even when the username does not exist, so response time
       does not reveal whether an account is registered.

  Bearer tokens: secrets.token_urlsafe(48) gives 384 bits of entropy. Tokens
       are opaque -- no embedded structure, no signature. Their validity lives
       entirely in the user_sessions table.

  Identifiers: uuid4 strings for every public entity id.

Layer rule: no imports from api/ or forum/.
"""

from __future__ import annotations

import hmac
import secrets
import uuid

import bcrypt

from core.errors import PasswordTooLong

# bcrypt only looks at the first 72 bytes, and bcrypt 5 refuses longer input.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> tuple[str, str]:
    """Return (salt, digest) for the given plaintext password.

    Raises PasswordTooLong if the UTF-8 encoding exceeds MAX_PASSWORD_BYTES,
    so no password is ever silently truncated.
    """
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLong()
    salt = bcrypt.gensalt()
    digest = bcrypt.hashpw(encoded, salt)
    return salt.decode("utf-8"), digest.decode("utf-8")


def verify_password(plain: str, salt: str, digest: str) -> bool:
    """Return True if plain hashes to digest under salt."""
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # Never stored, so never valid. Checked here because bcrypt 4 would
        # truncate and compare only the first 72 bytes.
        return False
    try:
        candidate = bcrypt.hashpw(encoded, salt.encode("utf-8"))
    except ValueError:
        # Malformed salt in the stored record.
        return False
    return hmac.compare_digest(candidate, digest.encode("utf-8"))


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_SALT, _DUMMY_DIGEST = hash_password("forum_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run a verification that always fails, at the same cost as a real one."""
    verify_password(plain, _DUMMY_SALT, _DUMMY_DIGEST)


# ---------------------------------------------------------------------------
# Bearer tokens and identifiers
# ---------------------------------------------------------------------------


def generate_token() -> str:
    return secrets.token_urlsafe(48)


def generate_uuid() -> str:
    return str(uuid.uuid4())


def token_hint(token: str) -> str:
    """Return a log-safe prefix of a token. Full tokens are never logged."""
    return f"{token[:8]}..." if token else "<empty>"

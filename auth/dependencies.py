"""
auth/dependencies.py -- FastAPI Depends() helpers for credential extraction.

Two header shapes are read here:
  1. Authorization: Bearer <token>  -- every protected route. A bare token
     with no scheme is accepted too; older clients send the raw value.
  2. Authorization: Basic base64(username:password) -- signin only.

These helpers only pull credentials out of the request. Whether a token is
valid is decided by AccessGuard inside the service call, in the same
transaction as the operation it protects.

Layer rule: no imports from api/ or forum/. This module may import from
fastapi because it is part of the dependency injection system.
"""

from __future__ import annotations

import base64
import binascii

from fastapi import Request

from core.errors import BadCredential


def get_bearer_token(request: Request) -> str | None:
    """Return the token from the Authorization header, or None if absent.

    Never raises -- a missing token is reported by the access guard as
    NotSignedIn, the same as an unknown one.
    """
    header = request.headers.get("Authorization", "").strip()
    if not header:
        return None
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer":
        return value.strip() or None
    if value:
        # Some other scheme (e.g. Basic) on a bearer route.
        return None
    return header


def get_basic_credentials(request: Request) -> tuple[str, str]:
    """Decode HTTP Basic credentials for signin.

    Raises BadCredential on a missing or malformed header so the caller gets
    the same 401 shape as a wrong password.
    """
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "basic" or not value:
        raise BadCredential("Use Basic authorization with base64(username:password).")
    try:
        decoded = base64.b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise BadCredential("Authorization header is not valid base64.") from exc
    username, sep, password = decoded.partition(":")
    if not sep or not username:
        raise BadCredential("Authorization header must encode username:password.")
    return username, password

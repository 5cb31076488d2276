"""
core/errors.py -- Classified failures raised by the forum core.

Every failure carries a stable machine-readable `code` and a human-readable
`message`. The API layer branches on the exception class (via `status_code`)
and renders code + message into the shared error envelope; it never parses
message text.

Hierarchy:
  ForumError
    SignupRestricted      -- UsernameTaken, EmailTaken, PasswordTooLong
    AuthenticationFailed  -- UnknownUser, BadCredential
    AuthorizationFailed   -- NotSignedIn, SignedOut, SessionExpired, Forbidden
    SignoutRestricted     -- UnknownSession (also a NotSignedIn), AlreadySignedOut
    NotFound              -- QuestionNotFound, AnswerNotFound, UserNotFound

Layer rule: core/ is the kernel. No imports from api/, auth/, or forum/.
"""

from __future__ import annotations


class ForumError(Exception):
    """Base class for every classified failure.

    Subclasses set `code`, `message` and `status_code` as class attributes.
    A raise site may pass a more specific message; the code never changes.
    """

    code: str = "FORUM-000"
    message: str = "Request failed."
    status_code: int = 400

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(f"{self.code}: {self.message}")


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------


class SignupRestricted(ForumError):
    status_code = 409


class UsernameTaken(SignupRestricted):
    code = "SGR-001"
    message = "Try any other Username, this Username has already been taken."


class EmailTaken(SignupRestricted):
    code = "SGR-002"
    message = "This user has already been registered, try with any other emailId."


class PasswordTooLong(SignupRestricted):
    code = "SGR-003"
    message = "Password must be at most 72 bytes when UTF-8 encoded."
    status_code = 422


# ---------------------------------------------------------------------------
# Signin
# ---------------------------------------------------------------------------


class AuthenticationFailed(ForumError):
    status_code = 401


class UnknownUser(AuthenticationFailed):
    code = "ATH-001"
    message = "This username does not exist."


class BadCredential(AuthenticationFailed):
    code = "ATH-002"
    message = "Password failed."


# ---------------------------------------------------------------------------
# Token checks on protected operations
# ---------------------------------------------------------------------------


class AuthorizationFailed(ForumError):
    status_code = 401


class NotSignedIn(AuthorizationFailed):
    code = "ATHR-001"
    message = "User has not signed in."


class SignedOut(AuthorizationFailed):
    code = "ATHR-002"
    message = "User is signed out. Sign in first."


class SessionExpired(AuthorizationFailed):
    code = "ATHR-004"
    message = "Session has expired. Sign in again."


class Forbidden(AuthorizationFailed):
    code = "ATHR-003"
    message = "You are not allowed to perform this operation."
    status_code = 403


# ---------------------------------------------------------------------------
# Signout
# ---------------------------------------------------------------------------


class SignoutRestricted(ForumError):
    status_code = 401


class UnknownSession(SignoutRestricted, NotSignedIn):
    code = "SGO-001"
    message = "User is not Signed in."


class AlreadySignedOut(SignoutRestricted):
    code = "SGO-002"
    message = "User has already signed out with this token."


# ---------------------------------------------------------------------------
# Missing resources
# ---------------------------------------------------------------------------


class NotFound(ForumError):
    status_code = 404


class QuestionNotFound(NotFound):
    code = "QUES-001"
    message = "Entered question uuid does not exist."


class AnswerNotFound(NotFound):
    code = "ANS-001"
    message = "Entered answer uuid does not exist."


class UserNotFound(NotFound):
    code = "USR-001"
    message = "User with entered uuid does not exist."

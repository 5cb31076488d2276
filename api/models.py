"""
API request and response models for the forum REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
forum/models.py, which own the internal domain representation. Route handlers
map between the two and only ever expose uuids, never internal primary keys.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.tokens import MAX_PASSWORD_BYTES

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one @, no whitespace. Deliverability is not checked.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/v1/user/signup.

    There is deliberately no role field: every self-registered account is
    nonadmin. Whitespace is not stripped here: the password must reach the
    hasher byte-for-byte as the client will later send it in Basic auth.
    """

    user_name: str = Field(min_length=1, max_length=255)
    email_address: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    # bcrypt accepts at most 72 bytes; the byte count is checked below.
    password: str = Field(min_length=1, max_length=72)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    about_me: Optional[str] = Field(default=None, max_length=1000)
    dob: Optional[str] = Field(default=None, max_length=32)
    contact_number: Optional[str] = Field(default=None, max_length=32)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """Reject passwords whose UTF-8 encoding is longer than bcrypt accepts.

        max_length counts characters; a 72-character non-ASCII password can be
        several times that many bytes.
        """
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
        return v


class ContentRequest(BaseModel):
    """Body for creating or editing a question or an answer."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=10000)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    """{id, status} acknowledgement returned by every mutating route."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: str


class MessageResponse(BaseModel):
    """{id, message} returned by signin and signout."""

    model_config = ConfigDict(frozen=True)

    id: str
    message: str


class SigninResponse(MessageResponse):
    access_token: str
    token_type: str = "bearer"
    expires_at: str


class UserDetailsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_name: str
    email_address: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country: Optional[str] = None
    about_me: Optional[str] = None
    dob: Optional[str] = None
    contact_number: Optional[str] = None


class QuestionDetailsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str


class AnswerDetailsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    question_content: str
    answer_content: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]

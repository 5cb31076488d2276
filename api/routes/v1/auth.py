"""
api/routes/v1/auth.py -- Signup, signin, and signout endpoints.

Routes:
  POST /api/v1/user/signup   -- register a nonadmin account; 201
  POST /api/v1/user/signin   -- Basic credentials -> new session; token in
                                the access-token header and the body
  POST /api/v1/user/signout  -- close the session behind the bearer token

Security:
  UnknownUser and BadCredential are logged distinctly by the authenticator.
  With uniform_signin_errors (the default) both are rendered here as the same
  generic bad_credentials error so the response does not reveal whether a
  username exists.
  Cache-Control: no-store on signin responses -- they carry a live token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import MessageResponse, SigninResponse, SignupRequest, StatusResponse
from auth.dependencies import get_basic_credentials, get_bearer_token
from auth.models import SignupCandidate
from core.errors import AuthenticationFailed, NotSignedIn
from forum.container import ForumServices

# Auth policy:
# - POST /user/signup:  public
# - POST /user/signin:  public -- Basic credentials in Authorization header
# - POST /user/signout: bearer token required (validated by the authenticator)
router = APIRouter()


@router.post("/user/signup", response_model=StatusResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> StatusResponse:
    """Register a new account. The role is always nonadmin."""
    services: ForumServices = request.app.state.services
    user = services.authenticator.signup(
        SignupCandidate(
            username=body.user_name,
            email=body.email_address,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            country=body.country,
            about_me=body.about_me,
            dob=body.dob,
            contact_number=body.contact_number,
        )
    )
    return StatusResponse(id=user.uuid, status="USER SUCCESSFULLY REGISTERED")


@router.post("/user/signin", response_model=SigninResponse)
def signin(request: Request) -> JSONResponse:
    """Open a new session for Basic username:password credentials.

    The header is decoded inside the try block so a malformed header gets the
    same response as a wrong password when signin errors are uniform.
    """
    services: ForumServices = request.app.state.services
    try:
        username, password = get_basic_credentials(request)
        session = services.authenticator.signin(username, password)
    except AuthenticationFailed:
        if not request.app.state.settings.uniform_signin_errors:
            raise
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid username or password.", "detail": None}},
        )
        resp.headers["Cache-Control"] = "no-store"
        resp.headers["WWW-Authenticate"] = "Basic"
        return resp

    resp = JSONResponse(
        status_code=200,
        content=SigninResponse(
            id=session.user.uuid,
            message="SIGNED IN SUCCESSFULLY",
            access_token=session.token,
            expires_at=session.expires_at.isoformat(),
        ).model_dump(),
    )
    resp.headers["access-token"] = session.token
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/user/signout", response_model=MessageResponse)
def signout(request: Request, token: str | None = Depends(get_bearer_token)) -> MessageResponse:
    """Sign out the session behind the bearer token."""
    services: ForumServices = request.app.state.services
    if not token:
        raise NotSignedIn()
    user = services.authenticator.signout(token)
    return MessageResponse(id=user.uuid, message="SIGNED OUT SUCCESSFULLY")


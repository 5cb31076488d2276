"""
api/routes/v1/users.py -- Member profile and admin account routes.

Routes:
  GET    /userprofile/{user_id}     -- any signed-in member
  DELETE /admin/user/{user_id}      -- admin only; removes the member, their
                                       sessions, and everything they posted
"""

from fastapi import APIRouter, Depends, Request

from api.models import StatusResponse, UserDetailsResponse
from auth.dependencies import get_bearer_token
from forum.container import ForumServices

router = APIRouter()


@router.get("/userprofile/{user_id}", response_model=UserDetailsResponse)
def get_user_profile(
    request: Request,
    user_id: str,
    token: str | None = Depends(get_bearer_token),
) -> UserDetailsResponse:
    """Return the public profile of a member. The password material never leaves the store."""
    services: ForumServices = request.app.state.services
    user = services.users.get_profile(token, user_id)
    return UserDetailsResponse(
        id=user.uuid,
        user_name=user.username,
        email_address=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        country=user.country,
        about_me=user.about_me,
        dob=user.dob,
        contact_number=user.contact_number,
    )


@router.delete("/admin/user/{user_id}", response_model=StatusResponse)
def delete_user(
    request: Request,
    user_id: str,
    token: str | None = Depends(get_bearer_token),
) -> StatusResponse:
    services: ForumServices = request.app.state.services
    user = services.users.delete_user(token, user_id)
    return StatusResponse(id=user.uuid, status="USER SUCCESSFULLY DELETED")

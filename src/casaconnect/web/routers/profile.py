from fastapi import APIRouter
from pydantic import BaseModel, Field

from casaconnect.core.modules.user.models import UserView
from casaconnect.web.deps import AppDep, CurrentUserDep
from casaconnect.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


class ChangePasswordRequest(BaseModel):
    """Request to change user password."""

    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile of the user bound to the current session.",
    operation_id="getCurrentUserProfile",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_profile(user: CurrentUserDep) -> UserView:
    return UserView.from_domain(user)


@router.post(
    "/profile/change-password",
    summary="Change password",
    description="Change the password for the currently authenticated user.",
    operation_id="changePassword",
    status_code=204,
    responses={
        204: {"description": "Password changed successfully"},
        400: {"model": ErrorResponse, "description": "Invalid current password or weak new password"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def change_password(request: ChangePasswordRequest, app: AppDep, user: CurrentUserDep) -> None:
    await app.change_password(user, request.old_password, request.new_password)

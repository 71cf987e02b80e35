from fastapi import APIRouter
from pydantic import BaseModel, Field

from casaconnect.core.modules.user.models import UserRole, UserView
from casaconnect.web.deps import AppDep, CurrentUserDep, SessionDep
from casaconnect.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class LoginResponse(BaseModel):
    """Authentication response."""

    success: bool = Field(True, description="Always true on success")
    message: str = Field("Login successful", description="Human-readable status")
    role: UserRole = Field(..., description="Role used by the frontend to pick a dashboard")
    user: UserView = Field(..., description="Authenticated user")


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password. The session cookie is set on the response.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account deactivated"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, session: SessionDep) -> LoginResponse:
    user = await app.login(session, login_data.email, login_data.password)
    return LoginResponse(role=user.role, user=user)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Destroy the current session and expire its cookie.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, session: SessionDep, _user: CurrentUserDep) -> None:
    app.logout(session)

from fastapi import APIRouter
from pydantic import BaseModel, Field

from blogsmith.core.modules.user.models import UserView
from blogsmith.web.deps import AppDep, AuthTokenDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


class ChangePasswordRequest(BaseModel):
    """Request to change user password."""

    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")


class UpdateProfileRequest(BaseModel):
    """Profile fields; omitted or empty values clear the stored value."""

    full_name: str | None = Field(None, description="Display name")
    avatar_url: str | None = Field(None, description="Avatar image URL")


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getCurrentUserProfile",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_profile(app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.get_current_user(auth_token)


@router.patch(
    "/profile",
    summary="Update profile",
    description="Update display name and avatar of the currently authenticated user.",
    operation_id="updateProfile",
    responses={
        200: {"description": "Updated profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def update_profile(request: UpdateProfileRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.update_profile(auth_token, request.full_name, request.avatar_url)


@router.post(
    "/profile/change-password",
    summary="Change password",
    description="Change the password for the currently authenticated user.",
    operation_id="changePassword",
    status_code=204,
    responses={
        204: {"description": "Password changed successfully"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        400: {"model": ErrorResponse, "description": "Invalid current password or weak new password"},
    },
)
async def change_password(request: ChangePasswordRequest, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.change_password(auth_token, request.old_password, request.new_password)

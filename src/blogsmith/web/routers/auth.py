from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from blogsmith.core.modules.session.models import SESSION_TTL_SECONDS
from blogsmith.core.modules.user.models import UserView
from blogsmith.web.deps import AUTH_COOKIE_NAME, AppDep, AuthTokenDep, RequestMetaDep
from blogsmith.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., description="Email for authentication")
    password: str = Field(..., description="Password for authentication")


class LoginResponse(BaseModel):
    """Authentication response."""

    token: str = Field(..., description="Authentication token for subsequent requests")


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, description="Email used to sign in")
    password: str = Field(..., min_length=1, description="Password for the new account")
    full_name: str | None = Field(None, description="Display name")


@router.post(
    "/auth/register",
    summary="Register account",
    description="Create a new account. The account must be approved by an admin before AI features can be used.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid email, weak password or email already registered"},
    },
)
async def register(register_data: RegisterRequest, app: AppDep) -> UserView:
    return await app.register(register_data.email, register_data.password, register_data.full_name)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive an authentication token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, meta: RequestMetaDep, response: Response) -> LoginResponse:
    token = await app.login(login_data.email, login_data.password, meta)

    # Set cookie for browser-based clients
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=app.config.secure_cookies,
        max_age=SESSION_TTL_SECONDS,
    )

    return LoginResponse(token=token)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Invalidate the current authentication session.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, auth_token: AuthTokenDep, response: Response) -> None:
    await app.logout(auth_token)
    response.delete_cookie(AUTH_COOKIE_NAME)

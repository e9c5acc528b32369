from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from blogsmith.app import App
from blogsmith.core.modules.history.models import RequestMeta
from blogsmith.core.modules.session.models import AuthToken
from blogsmith.errors import AuthenticationError

AUTH_COOKIE_NAME = "auth_token"

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name=AUTH_COOKIE_NAME, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> AuthToken:
    """Get and validate auth token from Authorization Bearer header or cookie."""

    # Check Bearer token first (preferred)
    if credentials and credentials.scheme == "Bearer":
        auth_token = AuthToken(credentials.credentials)
        if await app.is_auth_token_valid(auth_token):
            return auth_token

    # Fallback to cookie
    if token_cookie:
        auth_token = AuthToken(token_cookie)
        if await app.is_auth_token_valid(auth_token):
            return auth_token

    raise AuthenticationError


async def get_request_meta(request: Request) -> RequestMeta:
    """Client address and user agent.

    Behind a proxy, uvicorn resolves the client address from X-Forwarded-For for trusted proxies only.
    """
    ip_address = request.client.host if request.client else None
    return RequestMeta(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken, Depends(get_auth_token)]
RequestMetaDep = Annotated[RequestMeta, Depends(get_request_meta)]

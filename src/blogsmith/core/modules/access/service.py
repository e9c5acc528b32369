from blogsmith.core.core import Service
from blogsmith.core.modules.session.models import AuthToken
from blogsmith.core.modules.user.models import User
from blogsmith.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> User:
        """Ensure the user is authenticated."""
        return await self.core.services.session.get_authenticated_user(auth_token)

    async def ensure_approved(self, auth_token: AuthToken) -> User:
        """Ensure the authenticated user's account was approved. Admins always pass."""
        user = await self.ensure_authenticated(auth_token)
        if not (user.is_admin or user.is_approved):
            raise AccessDeniedError("Account is pending approval")
        return user

    async def ensure_admin(self, auth_token: AuthToken) -> User:
        """Ensure the authenticated user is admin, raise AccessDeniedError if not."""
        user = await self.ensure_authenticated(auth_token)
        if not user.is_admin:
            raise AccessDeniedError("Admin privileges required")
        return user

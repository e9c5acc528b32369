from blogsmith.web.routers.admin import router as admin_router
from blogsmith.web.routers.auth import router as auth_router
from blogsmith.web.routers.chat import router as chat_router
from blogsmith.web.routers.generate import router as generate_router
from blogsmith.web.routers.history import router as history_router
from blogsmith.web.routers.profile import router as profile_router
from blogsmith.web.routers.status import router as status_router

__all__ = [
    "admin_router",
    "auth_router",
    "chat_router",
    "generate_router",
    "history_router",
    "profile_router",
    "status_router",
]

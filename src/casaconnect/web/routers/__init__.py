from casaconnect.web.routers.areas import router as areas_router
from casaconnect.web.routers.auth import router as auth_router
from casaconnect.web.routers.profile import router as profile_router

__all__ = [
    "areas_router",
    "auth_router",
    "profile_router",
]

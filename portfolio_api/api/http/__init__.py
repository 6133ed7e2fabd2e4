from portfolio_api.api.http.health import router as health_router
from portfolio_api.api.http.auth import router as auth_router
from portfolio_api.api.http.files import router as files_router
from portfolio_api.api.http.desktop import router as desktop_router

__all__ = [
    "health_router",
    "auth_router",
    "files_router",
    "desktop_router"
]

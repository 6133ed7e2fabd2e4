from portfolio_api.db.models.user import User
from portfolio_api.db.models.file import File, FileHistory, FileAccessLog
from portfolio_api.db.models.desktop import DesktopState, DESKTOP_STATE_ID

__all__ = [
    "User",
    "File",
    "FileHistory",
    "FileAccessLog",
    "DesktopState",
    "DESKTOP_STATE_ID"
]

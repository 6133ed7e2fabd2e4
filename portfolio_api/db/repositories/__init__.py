from portfolio_api.db.repositories.user_repository import UserRepository
from portfolio_api.db.repositories.file_repository import (
    FileRepository, FileHistoryRepository, FileAccessLogRepository
)
from portfolio_api.db.repositories.desktop_repository import DesktopRepository

__all__ = [
    "UserRepository",
    "FileRepository",
    "FileHistoryRepository",
    "FileAccessLogRepository",
    "DesktopRepository"
]

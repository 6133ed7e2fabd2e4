from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from portfolio_api.core.security import verify_password


class Unset:
    """Маркер «поле не передано» (отличается от явного None)"""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset()


class AccessAction(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


@dataclass
class FileDocument:
    """Доменная сущность документа"""
    file_id: str
    file_name: str
    content: str
    version: int
    password_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_locked(self) -> bool:
        return bool(self.password_hash)

    @property
    def size(self) -> int:
        return len(self.content or "")

    def check_password(self, password: Optional[str]) -> bool:
        """Проверка пароля блокировки"""
        if not self.password_hash or not password:
            return False
        return verify_password(password, self.password_hash)

    def __repr__(self):
        return f"<FileDocument(id={self.file_id}, version={self.version}, locked={self.is_locked})>"


@dataclass
class HistorySnapshot:
    """Состояние документа до перезаписи"""
    file_id: str
    user_id: str
    file_name: str
    content: str
    version: int
    saved_at: datetime
    ip_address: Optional[str] = None


@dataclass
class AccessLogEntry:
    file_id: str
    action: AccessAction
    user_id: str
    timestamp: datetime
    ip_address: str
    user_agent: str
    file_name: Optional[str] = None
    browser: Optional[str] = None
    browser_version: Optional[str] = None
    os: Optional[str] = None
    device: Optional[str] = None
    request_method: Optional[str] = None
    content_length: Optional[int] = None
    # Размер содержимого после операции и изменение длины относительно прежнего
    file_size: int = 0
    length_change: Optional[int] = None

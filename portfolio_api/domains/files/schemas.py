from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict

from portfolio_api.core.schemas import CamelModel


class FileSaveRequest(CamelModel):
    """Тело запроса на сохранение документа.

    Поле password трёхзначное: если не передано, пароль не меняется;
    пустая строка или null снимают пароль, иное значение его устанавливает.
    """
    file_name: Optional[str] = None
    content: Optional[str] = None
    password: Optional[str] = None
    unlock_password: Optional[str] = None

    @property
    def password_provided(self) -> bool:
        return "password" in self.model_fields_set


class FileUnlockRequest(CamelModel):
    password: Optional[str] = None


class FileView(CamelModel):
    """Документ в ответе на чтение; у заблокированного content = null"""
    file_id: str
    file_name: Optional[str] = None
    content: Optional[str] = None
    is_locked: bool = False
    version: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SaveResult(CamelModel):
    success: bool = True
    message: str = "File saved"
    file_id: str
    file_name: str
    version: int
    is_locked: bool


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class HistoryItem(CamelModel):
    version: int
    content: str
    saved_at: datetime
    file_name: str

    model_config = ConfigDict(from_attributes=True)


class HistoryResponse(CamelModel):
    success: bool = True
    history: List[HistoryItem]


class AccessLogItem(CamelModel):
    action: str
    user_id: str
    ip_address: str
    timestamp: datetime
    user_agent: str
    file_name: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    device: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AccessLogsResponse(CamelModel):
    success: bool = True
    logs: List[AccessLogItem]

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.exceptions import LockedError, ValidationError, WrongPasswordError
from portfolio_api.core.security import get_password_hash
from portfolio_api.db.repositories.file_repository import (
    FileAccessLogRepository,
    FileHistoryRepository,
    FileRepository,
)
from portfolio_api.domains.files.entities import (
    UNSET,
    AccessAction,
    AccessLogEntry,
    FileDocument,
    HistorySnapshot,
    Unset,
)
from portfolio_api.domains.files.request_info import RequestInfo
from portfolio_api.domains.files.schemas import FileView, SaveResult
from portfolio_api.domains.identity.entities import GUEST_USER_ID, Subject, subject_id

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FileService:
    """Сервис для работы с документами: версии, блокировка паролем, история и журнал доступа"""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or default_settings
        self.file_repository = FileRepository(session)
        self.history_repository = FileHistoryRepository(session)
        self.access_log_repository = FileAccessLogRepository(session)

    async def _log(
        self,
        action: AccessAction,
        file_id: str,
        subject: Optional[Subject],
        info: Optional[RequestInfo],
        file_name: Optional[str] = None,
        file_size: int = 0,
        length_change: Optional[int] = None
    ) -> None:
        info = info or RequestInfo()
        entry = AccessLogEntry(
            file_id=file_id,
            action=action,
            user_id=subject_id(subject),
            timestamp=_now(),
            ip_address=info.ip_address,
            user_agent=info.user_agent,
            file_name=file_name,
            file_size=file_size,
            length_change=length_change
        )
        await self.access_log_repository.create(entry, info)

    def _check_unlock(self, document: FileDocument, password: Optional[str]) -> None:
        """Проверка доступа к заблокированному документу"""
        if not document.is_locked:
            return
        if not password:
            logger.info(f"File {document.file_id} is locked, no unlock password given")
            raise LockedError()
        if not document.check_password(password):
            logger.info(f"File {document.file_id}: wrong unlock password")
            raise WrongPasswordError()

    def _resolve_password_hash(
        self,
        current_hash: Optional[str],
        password: Union[str, None, Unset]
    ) -> Optional[str]:
        if password is UNSET:
            return current_hash
        if password is None or not password.strip():
            return None
        return get_password_hash(password, rounds=self.settings.file_password_rounds)

    @staticmethod
    def _view(document: FileDocument, reveal: bool) -> FileView:
        return FileView(
            file_id=document.file_id,
            file_name=document.file_name,
            content=document.content if reveal else None,
            is_locked=document.is_locked,
            version=document.version,
            created_at=document.created_at,
            updated_at=document.updated_at
        )

    async def read_file(
        self,
        file_id: str,
        subject: Optional[Subject] = None,
        info: Optional[RequestInfo] = None
    ) -> FileView:
        """Чтение документа; у заблокированного отдаются только метаданные"""
        if not file_id:
            raise ValidationError("fileId is required")

        document = await self.file_repository.get_by_file_id(file_id)

        await self._log(
            AccessAction.VIEW, file_id, subject, info,
            file_name=document.file_name if document else None,
            file_size=document.size if document else 0
        )

        if document is None:
            return FileView(file_id=file_id, content="", is_locked=False)

        return self._view(document, reveal=not document.is_locked)

    async def unlock_file(
        self,
        file_id: str,
        password: Optional[str],
        subject: Optional[Subject] = None,
        info: Optional[RequestInfo] = None
    ) -> FileView:
        """Чтение заблокированного документа по паролю"""
        if not file_id:
            raise ValidationError("fileId is required")

        document = await self.file_repository.get_by_file_id(file_id)
        if document is None or not document.is_locked:
            return await self.read_file(file_id, subject, info)

        self._check_unlock(document, password)

        await self._log(
            AccessAction.VIEW, file_id, subject, info,
            file_name=document.file_name,
            file_size=document.size
        )
        return self._view(document, reveal=True)

    async def save_file(
        self,
        file_id: str,
        file_name: Optional[str],
        content: Optional[str] = None,
        password: Union[str, None, Unset] = UNSET,
        unlock_password: Optional[str] = None,
        subject: Optional[Subject] = None,
        info: Optional[RequestInfo] = None
    ) -> SaveResult:
        """Сохранение документа (upsert) с увеличением версии"""
        if not file_id:
            raise ValidationError("fileId is required")
        if not file_name or not file_name.strip():
            raise ValidationError("fileName is required")

        content = content if content is not None else ""
        user_id = subject_id(subject)
        now = _now()

        existing = await self.file_repository.get_by_file_id(file_id)

        if existing is not None:
            self._check_unlock(existing, unlock_password)

            # Снимок сохраняется только для авторизованных и только при изменении текста;
            # фиксируется одним commit вместе с документом
            if user_id != GUEST_USER_ID and existing.content != content:
                self.history_repository.add(HistorySnapshot(
                    file_id=file_id,
                    user_id=user_id,
                    file_name=existing.file_name,
                    content=existing.content,
                    version=existing.version,
                    saved_at=existing.updated_at or existing.created_at or now,
                    ip_address=info.ip_address if info else None
                ))

        document = FileDocument(
            file_id=file_id,
            file_name=file_name,
            content=content,
            version=existing.version + 1 if existing else 1,
            password_hash=self._resolve_password_hash(
                existing.password_hash if existing else None, password
            ),
            created_at=existing.created_at if existing else now,
            updated_at=now
        )

        await self.file_repository.save(document)

        if existing is None:
            action = AccessAction.CREATE
            length_change = document.size
        else:
            action = AccessAction.EDIT
            length_change = document.size - existing.size

        await self._log(
            action, file_id, subject, info,
            file_name=document.file_name,
            file_size=document.size,
            length_change=length_change
        )
        logger.info(f"File {file_id} saved by {user_id}, version {document.version}")

        return SaveResult(
            file_id=document.file_id,
            file_name=document.file_name,
            version=document.version,
            is_locked=document.is_locked
        )

    async def delete_file(
        self,
        file_id: str,
        subject: Optional[Subject] = None,
        info: Optional[RequestInfo] = None
    ) -> None:
        """Удаление документа вместе с историей; журнал доступа сохраняется"""
        if not file_id:
            raise ValidationError("fileId is required")

        existing = await self.file_repository.get_by_file_id(file_id)

        await self._log(
            AccessAction.DELETE, file_id, subject, info,
            file_name=existing.file_name if existing else None,
            file_size=existing.size if existing else 0
        )

        await self.file_repository.delete(file_id)
        removed = await self.history_repository.delete_by_file_id(file_id)
        logger.info(f"File {file_id} deleted by {subject_id(subject)}, {removed} history entries removed")

    async def get_history(self, file_id: str, subject: Subject) -> List[HistorySnapshot]:
        """История документа, сохранённая текущим пользователем"""
        return await self.history_repository.list_for_user(file_id, subject.id)

    async def get_access_logs(self, file_id: str) -> List[AccessLogEntry]:
        """Последние события доступа к документу"""
        return await self.access_log_repository.list_for_file(file_id)

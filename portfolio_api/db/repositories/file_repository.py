from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.exceptions import NotConfiguredError
from portfolio_api.db.models.file import (
    File as FileModel,
    FileAccessLog as FileAccessLogModel,
    FileHistory as FileHistoryModel,
)
from portfolio_api.domains.files.entities import (
    AccessAction,
    AccessLogEntry,
    FileDocument,
    HistorySnapshot,
)
from portfolio_api.domains.files.request_info import RequestInfo

HISTORY_LIMIT = 50
ACCESS_LOG_LIMIT = 100

# INSERT ... ON CONFLICT DO UPDATE по диалекту хранилища
_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

# При конфликте created_at не перезаписывается
_UPSERT_UPDATED_COLUMNS = ("file_name", "content", "version", "password_hash", "updated_at")


class FileRepository:
    """Репозиторий для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_file_id(self, file_id: str) -> Optional[FileDocument]:
        """Получение документа по file_id"""
        result = await self.session.execute(
            select(FileModel)
            .where(FileModel.file_id == file_id)
            .execution_options(populate_existing=True)
        )
        db_file = result.scalar_one_or_none()
        return self._to_domain(db_file) if db_file else None

    def _upsert_insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect not in _UPSERT_INSERTS:
            raise NotConfiguredError(f"Unsupported database dialect: {dialect}")
        return _UPSERT_INSERTS[dialect]

    async def save(self, document: FileDocument) -> Optional[FileDocument]:
        """Upsert документа; created_at задаётся только при вставке.

        Вместе с документом фиксируются изменения, уже добавленные в сессию
        (снимок истории), одним commit.
        """
        stmt = self._upsert_insert()(FileModel).values(
            file_id=document.file_id,
            file_name=document.file_name,
            content=document.content,
            version=document.version,
            password_hash=document.password_hash,
            created_at=document.created_at,
            updated_at=document.updated_at
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[FileModel.file_id],
            set_={column: stmt.excluded[column] for column in _UPSERT_UPDATED_COLUMNS}
        )

        await self.session.execute(stmt)
        await self.session.commit()

        return await self.get_by_file_id(document.file_id)

    async def delete(self, file_id: str) -> bool:
        """Удаление документа"""
        stmt = delete(FileModel).where(FileModel.file_id == file_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    def _to_domain(self, db_file: FileModel) -> FileDocument:
        return FileDocument(
            file_id=db_file.file_id,
            file_name=db_file.file_name,
            content=db_file.content or "",
            version=db_file.version,
            password_hash=db_file.password_hash,
            created_at=db_file.created_at,
            updated_at=db_file.updated_at
        )


class FileHistoryRepository:
    """Репозиторий для работы с историей документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, snapshot: HistorySnapshot) -> HistorySnapshot:
        """Добавление снимка в сессию; фиксируется вместе с документом"""
        db_snapshot = FileHistoryModel(
            file_id=snapshot.file_id,
            user_id=snapshot.user_id,
            file_name=snapshot.file_name,
            content=snapshot.content,
            version=snapshot.version,
            saved_at=snapshot.saved_at,
            ip_address=snapshot.ip_address
        )

        self.session.add(db_snapshot)
        return snapshot

    async def list_for_user(self, file_id: str, user_id: str, limit: int = HISTORY_LIMIT) -> List[HistorySnapshot]:
        """Снимки документа, сохранённые пользователем, от новых к старым"""
        result = await self.session.execute(
            select(FileHistoryModel)
            .where(
                FileHistoryModel.file_id == file_id,
                FileHistoryModel.user_id == user_id
            )
            .order_by(FileHistoryModel.saved_at.desc(), FileHistoryModel.id.desc())
            .limit(limit)
        )
        return [self._to_domain(row) for row in result.scalars().all()]

    async def delete_by_file_id(self, file_id: str) -> int:
        """Удаление всей истории документа"""
        stmt = delete(FileHistoryModel).where(FileHistoryModel.file_id == file_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount

    def _to_domain(self, row: FileHistoryModel) -> HistorySnapshot:
        return HistorySnapshot(
            file_id=row.file_id,
            user_id=row.user_id,
            file_name=row.file_name,
            content=row.content or "",
            version=row.version,
            saved_at=row.saved_at,
            ip_address=row.ip_address
        )


class FileAccessLogRepository:
    """Журнал доступа к документам (только добавление)"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        entry: AccessLogEntry,
        info: RequestInfo
    ) -> AccessLogEntry:
        """Запись события доступа"""
        db_entry = FileAccessLogModel(
            file_id=entry.file_id,
            action=entry.action.value,
            user_id=entry.user_id,
            file_name=entry.file_name,
            timestamp=entry.timestamp,
            ip_address=info.ip_address,
            user_agent=info.user_agent,
            browser=info.agent.browser,
            browser_version=info.agent.browser_version,
            os=info.agent.os,
            device=info.agent.device,
            referrer=info.referrer,
            origin=info.origin,
            accept_language=info.accept_language,
            request_method=info.request_method,
            content_type=info.content_type,
            content_length=info.content_length,
            file_size=entry.file_size,
            length_change=entry.length_change
        )

        self.session.add(db_entry)
        await self.session.commit()
        return entry

    async def list_for_file(self, file_id: str, limit: int = ACCESS_LOG_LIMIT) -> List[AccessLogEntry]:
        """Последние события по документу"""
        result = await self.session.execute(
            select(FileAccessLogModel)
            .where(FileAccessLogModel.file_id == file_id)
            .order_by(FileAccessLogModel.timestamp.desc(), FileAccessLogModel.id.desc())
            .limit(limit)
        )
        return [self._to_domain(row) for row in result.scalars().all()]

    def _to_domain(self, row: FileAccessLogModel) -> AccessLogEntry:
        return AccessLogEntry(
            file_id=row.file_id,
            action=AccessAction(row.action),
            user_id=row.user_id,
            timestamp=row.timestamp,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            file_name=row.file_name,
            browser=row.browser,
            browser_version=row.browser_version,
            os=row.os,
            device=row.device,
            request_method=row.request_method,
            content_length=row.content_length,
            file_size=row.file_size,
            length_change=row.length_change
        )

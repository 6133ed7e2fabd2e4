from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.auth import get_current_subject, get_optional_subject, get_settings
from portfolio_api.core.config import Settings
from portfolio_api.core.db import get_db
from portfolio_api.domains.files.entities import UNSET
from portfolio_api.domains.files.request_info import RequestInfo
from portfolio_api.domains.files.schemas import (
    AccessLogItem, AccessLogsResponse, FileSaveRequest, FileUnlockRequest,
    FileView, HistoryItem, HistoryResponse, MessageResponse, SaveResult
)
from portfolio_api.domains.files.services import FileService
from portfolio_api.domains.identity.entities import Subject

router = APIRouter(prefix="/api/files", tags=["files"])


def get_request_info(request: Request) -> RequestInfo:
    """Метаданные запроса для журнала доступа"""
    peer = request.client.host if request.client else None
    return RequestInfo.from_headers(request.headers, peer=peer, method=request.method)


@router.get("/{file_id}", response_model=FileView, response_model_exclude_unset=True)
async def read_file(
    file_id: str,
    subject: Optional[Subject] = Depends(get_optional_subject),
    info: RequestInfo = Depends(get_request_info),
    db: AsyncSession = Depends(get_db)
):
    """Получение документа"""
    return await FileService(db).read_file(file_id, subject, info)


@router.post("/{file_id}", response_model=SaveResult)
async def save_file(
    file_id: str,
    file_data: FileSaveRequest,
    subject: Optional[Subject] = Depends(get_optional_subject),
    info: RequestInfo = Depends(get_request_info),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Сохранение документа"""
    file_service = FileService(db, settings)

    return await file_service.save_file(
        file_id,
        file_data.file_name,
        content=file_data.content,
        password=file_data.password if file_data.password_provided else UNSET,
        unlock_password=file_data.unlock_password,
        subject=subject,
        info=info
    )


@router.post("/{file_id}/unlock", response_model=FileView, response_model_exclude_unset=True)
async def unlock_file(
    file_id: str,
    unlock_data: FileUnlockRequest,
    subject: Optional[Subject] = Depends(get_optional_subject),
    info: RequestInfo = Depends(get_request_info),
    db: AsyncSession = Depends(get_db)
):
    """Получение содержимого заблокированного документа по паролю"""
    return await FileService(db).unlock_file(file_id, unlock_data.password, subject, info)


@router.delete("/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: str,
    subject: Optional[Subject] = Depends(get_optional_subject),
    info: RequestInfo = Depends(get_request_info),
    db: AsyncSession = Depends(get_db)
):
    """Удаление документа"""
    await FileService(db).delete_file(file_id, subject, info)
    return MessageResponse(message="File deleted")


@router.get("/{file_id}/history", response_model=HistoryResponse)
async def get_file_history(
    file_id: str,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db)
):
    """История изменений документа текущего пользователя"""
    snapshots = await FileService(db).get_history(file_id, subject)
    return HistoryResponse(
        history=[HistoryItem.model_validate(snapshot) for snapshot in snapshots]
    )


@router.get("/{file_id}/access-logs", response_model=AccessLogsResponse)
async def get_access_logs(
    file_id: str,
    subject: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db)
):
    """Журнал доступа к документу"""
    entries = await FileService(db).get_access_logs(file_id)
    return AccessLogsResponse(
        logs=[
            AccessLogItem(
                action=entry.action.value,
                user_id=entry.user_id,
                ip_address=entry.ip_address,
                timestamp=entry.timestamp,
                user_agent=entry.user_agent,
                file_name=entry.file_name,
                browser=entry.browser,
                os=entry.os,
                device=entry.device
            )
            for entry in entries
        ]
    )

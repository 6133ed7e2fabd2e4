from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.db import get_db, get_optional_db
from portfolio_api.domains.desktop.schemas import DesktopStateIn, DesktopStateOut
from portfolio_api.domains.desktop.services import DesktopService
from portfolio_api.domains.files.schemas import MessageResponse

router = APIRouter(prefix="/api/desktop", tags=["desktop"])


@router.get("", response_model=DesktopStateOut)
async def get_desktop_state(db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Получение состояния рабочего стола"""
    layout = await DesktopService(db).get_state()
    return DesktopStateOut(icon_positions=layout.icon_positions, desktop_items=layout.desktop_items)


@router.post("", response_model=MessageResponse)
async def save_desktop_state(
    state: DesktopStateIn,
    db: AsyncSession = Depends(get_db)
):
    """Сохранение состояния рабочего стола"""
    await DesktopService(db).save_state(state.icon_positions, state.desktop_items)
    return MessageResponse(message="Desktop data saved")

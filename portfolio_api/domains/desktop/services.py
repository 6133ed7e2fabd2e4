import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.exceptions import NotConfiguredError
from portfolio_api.db.repositories.desktop_repository import DesktopRepository
from portfolio_api.domains.desktop.entities import DesktopLayout

logger = logging.getLogger(__name__)


class DesktopService:
    """Сервис состояния рабочего стола (одна общая запись, последняя запись выигрывает)"""

    def __init__(self, session: Optional[AsyncSession]):
        self.session = session
        self.repository = DesktopRepository(session) if session is not None else None

    async def get_state(self) -> DesktopLayout:
        """Получение состояния; при недоступном хранилище пустое состояние"""
        if self.repository is None:
            logger.warning("Database not configured, returning empty desktop state")
            return DesktopLayout()

        try:
            layout = await self.repository.get()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load desktop state: {e}")
            return DesktopLayout()

        return layout or DesktopLayout()

    async def save_state(
        self,
        icon_positions: Optional[Dict[str, Any]],
        desktop_items: Optional[List[Any]]
    ) -> DesktopLayout:
        """Сохранение состояния целиком"""
        if self.repository is None:
            raise NotConfiguredError("Database not configured")

        layout = DesktopLayout(
            icon_positions=icon_positions if icon_positions is not None else {},
            desktop_items=desktop_items if desktop_items is not None else []
        )
        return await self.repository.save(layout, datetime.now(timezone.utc))

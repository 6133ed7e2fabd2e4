from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.db.models.desktop import DESKTOP_STATE_ID, DesktopState as DesktopStateModel
from portfolio_api.domains.desktop.entities import DesktopLayout


class DesktopRepository:
    """Репозиторий единственной записи состояния рабочего стола"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> Optional[DesktopLayout]:
        result = await self.session.execute(
            select(DesktopStateModel).where(DesktopStateModel.id == DESKTOP_STATE_ID)
        )
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def save(self, layout: DesktopLayout, updated_at: datetime) -> DesktopLayout:
        """Полная перезапись состояния (upsert)"""
        row = await self.session.get(DesktopStateModel, DESKTOP_STATE_ID)
        if row is None:
            row = DesktopStateModel(id=DESKTOP_STATE_ID)
            self.session.add(row)

        row.icon_positions = layout.icon_positions
        row.desktop_items = layout.desktop_items
        row.updated_at = updated_at

        await self.session.commit()
        return layout

    def _to_domain(self, row: DesktopStateModel) -> DesktopLayout:
        return DesktopLayout(
            icon_positions=row.icon_positions or {},
            desktop_items=row.desktop_items or [],
            updated_at=row.updated_at
        )

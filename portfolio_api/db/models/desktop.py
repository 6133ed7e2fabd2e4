from sqlalchemy import JSON, Column, DateTime, String

from portfolio_api.core.db import Base

DESKTOP_STATE_ID = "desktop_state"


class DesktopState(Base):
    __tablename__ = "desktop_state"

    id = Column(String(32), primary_key=True, default=DESKTOP_STATE_ID)
    icon_positions = Column(JSON, nullable=False, default=dict)
    desktop_items = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), nullable=True)

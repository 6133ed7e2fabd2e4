from typing import Any, Dict, List, Optional

from portfolio_api.core.schemas import CamelModel


class DesktopStateIn(CamelModel):
    """Состояние рабочего стола; отсутствующие поля сохраняются пустыми"""
    icon_positions: Optional[Dict[str, Any]] = None
    desktop_items: Optional[List[Any]] = None


class DesktopStateOut(CamelModel):
    icon_positions: Dict[str, Any]
    desktop_items: List[Any]

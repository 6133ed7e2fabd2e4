from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class DesktopLayout:
    """Расположение иконок и элементы рабочего стола; содержимое сервер не интерпретирует"""
    icon_positions: Dict[str, Any] = field(default_factory=dict)
    desktop_items: List[Any] = field(default_factory=list)
    updated_at: Optional[datetime] = None

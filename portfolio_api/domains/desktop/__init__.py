from portfolio_api.domains.desktop.entities import DesktopLayout
from portfolio_api.domains.desktop.schemas import DesktopStateIn, DesktopStateOut

__all__ = ["DesktopLayout", "DesktopStateIn", "DesktopStateOut"]

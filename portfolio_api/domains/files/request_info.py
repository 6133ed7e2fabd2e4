"""Метаданные запроса для журнала доступа к файлам.

IP клиента берётся из заголовков прокси (X-Forwarded-For, X-Real-IP,
CF-Connecting-IP), затем из адреса сокета. User-Agent разбирается на браузер,
ОС и тип устройства простыми проверками подстрок.
"""
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

UNKNOWN = "Unknown"


@dataclass
class UserAgentInfo:
    browser: str = UNKNOWN
    browser_version: str = ""
    os: str = UNKNOWN
    device: str = UNKNOWN


@dataclass
class RequestInfo:
    """То, что попадает в журнал доступа помимо самого действия"""
    ip_address: str = "unknown"
    user_agent: str = "unknown"
    agent: UserAgentInfo = field(default_factory=UserAgentInfo)
    referrer: Optional[str] = None
    origin: Optional[str] = None
    accept_language: Optional[str] = None
    request_method: Optional[str] = None
    content_type: Optional[str] = None
    content_length: Optional[int] = None

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        peer: Optional[str] = None,
        method: Optional[str] = None
    ) -> "RequestInfo":
        user_agent = headers.get("user-agent") or "unknown"
        return cls(
            ip_address=client_ip(headers, peer),
            user_agent=user_agent,
            agent=parse_user_agent(user_agent),
            referrer=headers.get("referer") or headers.get("referrer"),
            origin=headers.get("origin"),
            accept_language=headers.get("accept-language"),
            request_method=method,
            content_type=headers.get("content-type"),
            content_length=_to_int(headers.get("content-length")),
        )


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """IP клиента с учётом прокси"""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        # Первый адрес в цепочке: исходный клиент
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(header)
        if value:
            return value.strip()

    return peer or "unknown"


def _version(pattern: str, ua: str) -> str:
    match = re.search(pattern, ua)
    return match.group(1) if match else ""


def _detect_browser(ua: str) -> tuple:
    # Порядок важен: UA Edge и Opera тоже содержат "chrome", а UA Chrome содержит "safari"
    if "edg" in ua:
        return "Edge", _version(r"edg(?:e|a|ios)?/([\d.]+)", ua)
    if "opr/" in ua or "opera" in ua:
        return "Opera", _version(r"(?:opera|opr)/([\d.]+)", ua)
    if "chrome" in ua or "crios" in ua:
        return "Chrome", _version(r"(?:chrome|crios)/([\d.]+)", ua)
    if "firefox" in ua or "fxios" in ua:
        return "Firefox", _version(r"(?:firefox|fxios)/([\d.]+)", ua)
    if "safari" in ua:
        return "Safari", _version(r"version/([\d.]+)", ua)
    return UNKNOWN, ""


_WINDOWS_VERSIONS = (
    ("windows nt 10", "Windows 10/11"),
    ("windows nt 6.3", "Windows 8.1"),
    ("windows nt 6.2", "Windows 8"),
    ("windows nt 6.1", "Windows 7"),
)


def _detect_os(ua: str) -> str:
    if "windows" in ua:
        for marker, name in _WINDOWS_VERSIONS:
            if marker in ua:
                return name
        return "Windows"
    # iOS и Android проверяются раньше macOS и Linux: их UA содержат "mac os x" / "linux"
    if "iphone" in ua or "ipad" in ua or "ipod" in ua:
        version = _version(r"os ([\d_]+)", ua)
        return f"iOS {version.replace('_', '.')}" if version else "iOS"
    if "android" in ua:
        version = _version(r"android ([\d.]+)", ua)
        return f"Android {version}" if version else "Android"
    if "mac os" in ua or "macintosh" in ua:
        return "macOS"
    if "linux" in ua:
        return "Linux"
    return UNKNOWN


def _detect_device(ua: str) -> str:
    if "ipad" in ua or "tablet" in ua:
        return "Tablet"
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile"
    return "Desktop"


def parse_user_agent(user_agent: Optional[str]) -> UserAgentInfo:
    """Разбор строки User-Agent"""
    if not user_agent or user_agent == "unknown":
        return UserAgentInfo()

    ua = user_agent.lower()
    browser, browser_version = _detect_browser(ua)

    return UserAgentInfo(
        browser=browser,
        browser_version=browser_version,
        os=_detect_os(ua),
        device=_detect_device(ua),
    )

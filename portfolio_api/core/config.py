import re
from datetime import timedelta
from typing import List, Optional

from pydantic_settings import BaseSettings


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_duration(value: str) -> timedelta:
    """Разбор длительности вида "7d", "15m", "12h" или числа секунд"""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings(BaseSettings):
    # Хранилище; None означает "не настроено"
    database_url: Optional[str] = None
    db_pool_size: int = 1
    db_pool_timeout: float = 3
    db_connect_timeout: float = 5
    db_auto_create: bool = True

    # JWT
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "swiftserve"
    jwt_audience: str = "swiftserve-users"
    jwt_access_expires_in: str = "7d"
    jwt_refresh_expires_in: str = "30d"

    # Стоимость bcrypt для паролей документов
    file_password_rounds: int = 10

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_access_expires_in)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_refresh_expires_in)


settings = Settings()

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from portfolio_api.core.security import verify_password

GUEST_USER_ID = "guest"


@dataclass(frozen=True)
class Subject:
    """Аутентифицированный субъект запроса (из access токена)"""
    id: str
    email: Optional[str] = None


def subject_id(subject: Optional[Subject]) -> str:
    """Идентификатор для журналов: id пользователя или "guest" """
    return subject.id if subject is not None else GUEST_USER_ID


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        id: str,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.name = name
        self.created_at = created_at

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email})"

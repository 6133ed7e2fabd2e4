from typing import Optional

from pydantic import BaseModel

from portfolio_api.core.schemas import CamelModel


class UserLogin(BaseModel):
    """Схема для входа пользователя; обязательность полей проверяет сервис"""
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class LoginResponse(CamelModel):
    """Ответ на успешный вход"""
    success: bool = True
    access_token: str
    refresh_token: str
    user: UserOut


class VerifyResponse(CamelModel):
    valid: bool = True
    user: UserOut

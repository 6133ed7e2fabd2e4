from typing import Optional

from fastapi import Depends, Header, Request

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.security import ACCESS_TOKEN, decode_token, extract_token
from portfolio_api.domains.identity.entities import Subject
from portfolio_api.domains.identity.services import IdentityService


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


def get_request_token(
    token: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    return extract_token(token, authorization)


async def get_optional_subject(
    token: Optional[str] = Depends(get_request_token),
    settings: Settings = Depends(get_settings),
) -> Optional[Subject]:
    """Текущий пользователь или None (гость); ошибок не выбрасывает"""
    claims = decode_token(token, ACCESS_TOKEN, settings)
    if claims is None:
        return None
    return Subject(id=claims.id, email=claims.email)


async def get_current_subject(
    token: Optional[str] = Depends(get_request_token),
    settings: Settings = Depends(get_settings),
) -> Subject:
    """Текущий пользователь; без валидного access токена 401"""
    return IdentityService(None, settings).verify(token)

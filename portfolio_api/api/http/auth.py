from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.auth import get_request_token, get_settings
from portfolio_api.core.config import Settings
from portfolio_api.core.db import get_optional_db
from portfolio_api.domains.identity.schemas import LoginResponse, UserLogin, UserOut, VerifyResponse
from portfolio_api.domains.identity.services import IdentityService

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: UserLogin,
    db: Optional[AsyncSession] = Depends(get_optional_db),
    settings: Settings = Depends(get_settings)
):
    """Вход пользователя"""
    identity_service = IdentityService(db, settings)

    result = await identity_service.login(login_data.email, login_data.password)

    return LoginResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        user=UserOut(
            id=result.user.id,
            email=result.user.email,
            name=result.user.display_name
        )
    )


@router.post("/verify", response_model=VerifyResponse, response_model_exclude_none=True)
async def verify(
    token: Optional[str] = Depends(get_request_token),
    settings: Settings = Depends(get_settings)
):
    """Проверка access токена"""
    subject = IdentityService(None, settings).verify(token)
    return VerifyResponse(user=UserOut(id=subject.id, email=subject.email))

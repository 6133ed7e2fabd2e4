import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import AuthError, NotConfiguredError, ValidationError
from portfolio_api.core.security import ACCESS_TOKEN, TokenPair, decode_token, issue_tokens
from portfolio_api.db.repositories.user_repository import UserRepository
from portfolio_api.domains.identity.entities import Subject, User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class LoginResult:
    tokens: TokenPair
    user: User


class IdentityService:
    """Сервис для аутентификации пользователей"""

    def __init__(self, session: Optional[AsyncSession], settings: Settings):
        self.session = session
        self.settings = settings
        self.user_repository = UserRepository(session) if session is not None else None

    async def authenticate_user(self, email: Optional[str], password: Optional[str]) -> User:
        """Проверка учётных данных"""
        if not email or not password:
            raise ValidationError("Email and password are required")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self.user_repository is None:
            raise NotConfiguredError("Database not configured")

        user = await self.user_repository.get_by_email(email)

        if not user or not user.authenticate(password):
            raise AuthError("Invalid credentials")

        return user

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """Вход пользователя и выпуск JWT токенов"""
        user = await self.authenticate_user(email, password)

        if not self.settings.jwt_secret:
            logger.error("JWT_SECRET is missing, cannot issue tokens")
            raise NotConfiguredError()

        tokens = issue_tokens(user.id, user.email, self.settings)
        logger.info(f"User {user.id} logged in")

        return LoginResult(tokens=tokens, user=user)

    def verify(self, token: Optional[str]) -> Subject:
        """Проверка access токена"""
        if not token:
            raise AuthError("No token provided")

        claims = decode_token(token, ACCESS_TOKEN, self.settings)
        if claims is None:
            raise AuthError("Invalid token")

        return Subject(id=claims.id, email=claims.email)

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext

from portfolio_api.core.config import Settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class TokenClaims:
    """Проверенные данные из JWT токена"""
    id: str
    type: str
    email: Optional[str] = None


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    # bcrypt учитывает только первые 72 байта
    try:
        return pwd_context.verify(plain_password[:72], hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Хеширование пароля"""
    if rounds is None:
        return pwd_context.hash(password[:72])
    return pwd_context.handler("bcrypt").using(rounds=rounds).hash(password[:72])


def create_token(
    subject_id: str,
    email: Optional[str],
    token_type: str,
    expires_delta: timedelta,
    settings: Settings,
) -> str:
    """Создание подписанного JWT токена заданного типа"""
    if not settings.jwt_secret:
        raise RuntimeError("JWT secret is not configured")

    now = datetime.now(timezone.utc)
    to_encode = {
        "id": subject_id,
        "type": token_type,
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def issue_tokens(subject_id: str, email: Optional[str], settings: Settings) -> TokenPair:
    """Выпуск пары access/refresh токенов"""
    return TokenPair(
        access_token=create_token(subject_id, email, ACCESS_TOKEN, settings.access_token_lifetime, settings),
        refresh_token=create_token(subject_id, email, REFRESH_TOKEN, settings.refresh_token_lifetime, settings),
    )


def decode_token(token: Optional[str], expected_type: str, settings: Settings) -> Optional[TokenClaims]:
    """Проверка JWT токена; при любой ошибке возвращает None"""
    if not token:
        return None
    if not settings.jwt_secret:
        logger.warning("Token rejected: JWT secret is not configured")
        return None

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError:
        logger.debug("Token rejected: expired")
        return None
    except JWTClaimsError as e:
        logger.debug(f"Token rejected: bad claims ({e})")
        return None
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        return None

    if payload.get("type") != expected_type:
        logger.debug(f"Token rejected: type {payload.get('type')!r}, expected {expected_type!r}")
        return None

    subject_id = payload.get("id")
    if not subject_id:
        logger.debug("Token rejected: missing subject id")
        return None

    return TokenClaims(id=str(subject_id), type=expected_type, email=payload.get("email"))


def extract_token(token_header: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Извлечение токена: сначала заголовок token, затем Authorization: Bearer"""
    if token_header:
        return token_header

    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization[len("Bearer "):].strip()
    return token or None

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from coursemarket.config import Settings
from coursemarket.core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(
    user_id: int,
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Подписанный токен, несет только идентификатор пользователя"""
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(user_id), "user_id": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str, settings: Settings) -> int:
    """Проверяет подпись и срок действия, возвращает user_id"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Unauthorized: Token expired")
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        raise UnauthorizedException("Unauthorized: Invalid token")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise UnauthorizedException("Unauthorized: Invalid token")
    return user_id

def generate_session_id() -> str:
    return secrets.token_urlsafe(32)

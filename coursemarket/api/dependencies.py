import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coursemarket.config import Settings
from coursemarket.core.exceptions import ForbiddenException, UnauthorizedException
from coursemarket.core.security import decode_access_token
from coursemarket.crud import user as crud_user
from coursemarket.database import get_db
from coursemarket.models.user import User, UserRole
from coursemarket.services.catalog_service import CatalogService
from coursemarket.services.enrollment_service import EnrollmentService
from coursemarket.services.instructor_service import InstructorService
from coursemarket.services.paypal_service import PayPalService
from coursemarket.services.review_service import ReviewService
from coursemarket.services.stripe_service import StripeService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_request_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> Optional[str]:
    """Токен из заголовка Authorization, иначе из серверной сессии"""
    if credentials and credentials.credentials:
        return credentials.credentials

    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if session_id:
        session = crud_user.get_active_session(db, session_id=session_id)
        if session:
            return session.token
    return None

def get_current_user(
    token: Optional[str] = Depends(get_request_token),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> User:
    if not token:
        raise UnauthorizedException("Unauthorized: No token provided")

    user_id = decode_access_token(token, settings)
    user = crud_user.get_user(db, user_id=user_id)
    if not user:
        raise UnauthorizedException("Unauthorized: Invalid token")
    return user

def get_optional_user_id(
    token: Optional[str] = Depends(get_request_token),
    settings: Settings = Depends(get_settings)
) -> Optional[int]:
    """Покупатель для гостевого checkout: невалидный токен = гость"""
    if not token:
        return None
    try:
        return decode_access_token(token, settings)
    except UnauthorizedException:
        logger.info("Token verification failed, proceeding as guest checkout")
        return None

def ensure_role(role: UserRole, *allowed: UserRole):
    """Политика доступа по роли, роль передается явно"""
    if role not in allowed:
        names = ", ".join(r.value for r in allowed)
        raise ForbiddenException(f"Access denied. {names.capitalize()} role required.")

def require_role(*allowed: UserRole):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        ensure_role(current_user.role, *allowed)
        return current_user
    return role_checker

# === Сервисы ===
def get_enrollment_service(db: Session = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)

def get_catalog_service(request: Request, db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db, markdown_service=request.app.state.markdown_service)

def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)

def get_instructor_service(db: Session = Depends(get_db)) -> InstructorService:
    return InstructorService(db)

def get_stripe_service(request: Request) -> StripeService:
    return request.app.state.stripe_service

def get_paypal_service(request: Request) -> PayPalService:
    return request.app.state.paypal_service

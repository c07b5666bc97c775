from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from coursemarket.api.dependencies import get_current_user, get_settings
from coursemarket.config import Settings
from coursemarket.core.security import create_access_token
from coursemarket.crud import user as crud_user
from coursemarket.database import get_db
from coursemarket.models.user import User
from coursemarket.schemas.user import AuthResponse, LoginRequest, UserCreate, UserResponse

router = APIRouter()

def _start_session(response: Response, db: Session, user: User, settings: Settings) -> str:
    """Выпускает токен и кладет его в серверную сессию"""
    expires_in = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(user.id, settings, expires_delta=expires_in)
    session = crud_user.create_session(db, user_id=user.id, token=token, expires_in=expires_in)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.id,
        max_age=int(expires_in.total_seconds()),
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax"
    )
    return token

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user: UserCreate,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Регистрация: пользователь сразу получает токен и сессию"""
    if crud_user.get_user_by_email_or_username(db, email=user.email, username=user.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email or username already exists"
        )

    db_user = crud_user.create_user(db=db, user=user)
    token = _start_session(response, db, db_user, settings)
    return {"user": db_user, "token": token}

@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    user = crud_user.authenticate_user(db, email=credentials.email, password=credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = _start_session(response, db, user, settings)
    return {"user": user, "token": token}

@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Выход только уничтожает сессию, сам токен не отзывается"""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if session_id:
        crud_user.delete_session(db, session_id=session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Successfully logged out"}

@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_user)):
    return current_user

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from coursemarket.core.security import generate_session_id, get_password_hash, verify_password
from coursemarket.models.user import User, UserSession
from coursemarket.schemas.user import UserCreate

def get_user(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()

def get_user_by_email_or_username(db: Session, email: str, username: str):
    return db.query(User).filter(
        or_(User.email == email, User.username == username)
    ).first()

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email=email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user

def create_user(db: Session, user: UserCreate):
    user_data = user.model_dump(exclude={"password"})
    db_user = User(**user_data, hashed_password=get_password_hash(user.password))
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def create_session(db: Session, user_id: int, token: str, expires_in: timedelta):
    db_session = UserSession(
        id=generate_session_id(),
        user_id=user_id,
        token=token,
        expires_at=datetime.utcnow() + expires_in
    )
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session

def get_active_session(db: Session, session_id: str):
    return db.query(UserSession).filter(
        UserSession.id == session_id,
        UserSession.expires_at > datetime.utcnow()
    ).first()

def delete_session(db: Session, session_id: str):
    db_session = db.query(UserSession).filter(UserSession.id == session_id).first()
    if db_session:
        db.delete(db_session)
        db.commit()
    return db_session

from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
from datetime import datetime
from coursemarket.models.user import UserRole
from coursemarket.utils.validators import validate_username, validate_password

class UserBase(BaseModel):
    username: str
    email: EmailStr
    full_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None

class UserCreate(UserBase):
    password: str
    role: UserRole = UserRole.STUDENT

    @field_validator('username')
    @classmethod
    def username_format(cls, v):
        if not validate_username(v):
            raise ValueError('Username must be at least 3 characters (letters, digits, ".", "-", "_")')
        return v

    @field_validator('password')
    @classmethod
    def password_strength(cls, v):
        if not validate_password(v):
            raise ValueError('Password must be at least 6 characters')
        return v

    @field_validator('full_name')
    @classmethod
    def full_name_length(cls, v):
        if len(v.strip()) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v

    @field_validator('role')
    @classmethod
    def no_self_admin(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError('Admin accounts cannot be self-registered')
        return v

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class UserResponse(UserBase):
    id: int
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True

class UserSummary(BaseModel):
    id: int
    full_name: str
    avatar: Optional[str] = None
    username: str

    class Config:
        from_attributes = True

class InstructorSummary(UserSummary):
    bio: Optional[str] = None

class AuthResponse(BaseModel):
    user: UserResponse
    token: str

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
import uuid

from taskflow.database.models.enums import Role


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    again_password: str
    full_name: str
    department: Optional[str] = None


class AdminUserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str
    department: Optional[str] = None
    role: Role = Role.USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    department: Optional[str]
    role: Role
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class OwnProfileUpdate(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=30)
    address: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = None


class ProfileUpdate(OwnProfileUpdate):
    full_name: Optional[str] = None
    department: Optional[str] = None
    phone_verified: Optional[bool] = None


class ProfileResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    department: Optional[str]
    role: Role
    phone: Optional[str]
    phone_verified: bool
    address: Optional[str]
    bio: Optional[str]
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True

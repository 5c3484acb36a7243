# models/user.py

from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr
from sqlmodel import SQLModel, Field

from core.utils import new_id, utcnow
from models.enums import Role


# ===============================================================
# TABLE
# ===============================================================

class User(SQLModel, table=True):
    """Account row. `email` is stored lower-cased and is unique."""
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: Optional[str] = None
    email: str = Field(index=True, unique=True)
    password: Optional[str] = None
    role: str = Field(default=Role.CUSTOMER.value, index=True)

    school: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


# ===============================================================
# API MODELS
# ===============================================================

class UserRead(BaseModel):
    """Public view of an account. Never carries the password hash."""
    id: str
    name: Optional[str] = None
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProfileRead(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    school: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    school: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None


class StaffCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Optional[str] = Role.STAFF.value


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    password: Optional[str] = None

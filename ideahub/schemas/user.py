"""User Pydantic schemas — signup, login, profile output."""

from datetime import datetime
from typing import List, Optional

from ideahub.schemas.base import CamelModel


class UserCreate(CamelModel):
    """Fields submitted on the signup form."""
    email: str
    password: str
    name: str


class UserLogin(CamelModel):
    """Fields submitted on the login form."""
    email: str
    password: str


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    portfolio: Optional[str] = None


class UserOut(CamelModel):
    """Public user representation returned by the API (never the password)."""
    id: str
    email: str
    name: str
    skills: List[str] = []
    interests: List[str] = []
    portfolio: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthOut(CamelModel):
    user: UserOut
    token: str

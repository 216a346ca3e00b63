"""
Pydantic schemas for User and Authentication.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from autoshop.models.user import UserRole


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    business_name: Optional[str] = None


class User(UserBase):
    """Schema for user responses."""
    id: int
    is_active: bool = True
    permissions: list[str] = []
    customer_id: Optional[int] = None
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
    """Unified registration form.

    Field rules are checked by ``autoshop.validators`` so that every
    failing field is reported at once.
    """
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    role: UserRole = UserRole.CUSTOMER
    phone: Optional[str] = None
    business_name: Optional[str] = None


class LoginRequest(BaseModel):
    """Schema for login request."""
    email: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class PasswordStrengthRequest(BaseModel):
    password: str


class PasswordStrength(BaseModel):
    score: int
    label: str
    suggestions: list[str]


class AuthResponse(BaseModel):
    """Schema returned after login or registration."""
    user: User
    token: str
    token_type: str = "bearer"
    redirect_to: str
    password_strength: Optional[PasswordStrength] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str

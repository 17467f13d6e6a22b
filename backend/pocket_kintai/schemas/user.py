from typing import Literal, Optional
from pydantic import EmailStr, Field
from pocket_kintai.schemas.base import CamelModel


class SetupRequest(CamelModel):
    email: EmailStr
    password: str
    name: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    company_id: Optional[int] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)
    user_id: int


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class AdminUserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: Literal["ADMIN", "EMPLOYEE"] = "EMPLOYEE"
    company_id: Optional[int] = None


class AdminUserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[Literal["ADMIN", "EMPLOYEE"]] = None

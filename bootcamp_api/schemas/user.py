# bootcamp_api/schemas/user.py
from typing import Literal, Optional

from pydantic import EmailStr, Field

from bootcamp_api.schemas.common import CamelModel

Role = Literal["user", "publisher", "admin"]


class RegisterSchema(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    # admins are created by other admins or the seeder
    role: Literal["user", "publisher"] = "user"


class LoginSchema(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordSchema(CamelModel):
    email: EmailStr


class ResetPasswordSchema(CamelModel):
    password: str = Field(..., min_length=6)


class UpdateDetailsSchema(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None


class UpdatePasswordSchema(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = "user"


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None

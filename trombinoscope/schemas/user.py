"""
Schémas Pydantic des utilisateurs et de l'authentification
"""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
import re

from trombinoscope.models.user import UserRole
from trombinoscope.schemas.common import CamelModel


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
_PASSWORD_RULE = (
    "Le mot de passe doit contenir au moins une minuscule, une majuscule, "
    "un chiffre et un caractère spécial"
)


def _check_email(v: str) -> str:
    v = v.strip()
    if not _EMAIL_RE.match(v):
        raise ValueError("Email valide requis")
    return v


def _check_password_strength(v: str) -> str:
    if not _PASSWORD_RE.match(v):
        raise ValueError(_PASSWORD_RULE)
    return v


class UserCreate(BaseModel):
    """Création d'un compte (administrateurs uniquement)"""
    username: str = Field(..., min_length=3, max_length=50)
    email: str
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.USER
    employee_id: Optional[int] = None

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_strength(v)


class UserLogin(BaseModel):
    """Connexion (nom d'utilisateur ou email)"""
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProfileUpdate(BaseModel):
    """Modification du profil courant"""
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("Email valide requis")
        return _check_email(v)

    def column_diff(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=8)

    class Config:
        populate_by_name = True

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password_strength(v)


class UserResponse(CamelModel):
    """Utilisateur exposé par l'API"""
    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool
    employee_id: Optional[int] = None


class ProfileResponse(UserResponse):
    member_since: datetime


class TokenData(BaseModel):
    """Jeton et utilisateur connecté"""
    token: str
    user: UserResponse


class TokenPayload(BaseModel):
    """Contenu du jeton JWT"""
    sub: str
    user_id: int = Field(..., alias="userId")
    username: str
    role: UserRole
    iat: int
    exp: int
    iss: str
    aud: str

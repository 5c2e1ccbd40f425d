# tfg_backend/schemas/auth.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


class UsuarioBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("El nombre no puede estar vacío")
        return value


class RegisterRequest(UsuarioBase):
    password: str = Field(..., min_length=6)


class UsuarioResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    validated: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UsuarioUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class RoleUpdate(BaseModel):
    role: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UsuarioResponse


class ValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=6)


class RecoveryRequest(BaseModel):
    """Solicitud de código de recuperación de contraseña"""
    email: EmailStr


class RecoverPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=6)
    password: str = Field(..., min_length=6)

# tfg_backend/core/security.py
"""
Funciones centralizadas de seguridad: hash de contraseñas y tokens JWT.
"""
import random
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tfg_backend.core.config import settings
from tfg_backend.core.exceptions import AppError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Genera el hash de una contraseña plana usando bcrypt."""
    return pwd_context.hash(password.strip())


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Verifica una contraseña plana contra un hash almacenado."""
    if not password_hash:
        return False
    return pwd_context.verify(password.strip(), password_hash)


def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Genera un token de acceso JWT firmado.

    Args:
        subject: ID del usuario (claim ``sub``)
        role: Rol del usuario (claim ``role``)
        expires_delta: Duración opcional; por defecto la configurada

    Returns:
        String del JWT codificado.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": subject, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """Decodifica y valida un JWT. Lanza INVALID_TOKEN si no es válido o expiró."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise AppError("INVALID_TOKEN") from exc

    if not payload.get("sub"):
        raise AppError("INVALID_TOKEN")
    return payload


def generate_verification_code(length: int = 6) -> str:
    """Genera un código numérico aleatorio de 6 dígitos."""
    return "".join(random.SystemRandom().choices(string.digits, k=length))

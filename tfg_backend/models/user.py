"""
Modelo de Usuario para autenticación.
"""
from sqlalchemy import Column, Integer, String, Boolean

from tfg_backend.db.base import Base
from tfg_backend.models.mixins import SoftDeleteMixin, TimestampMixin


class User(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    # Se guarda siempre en minúsculas
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="usuario")  # administrador, coordinador, usuario
    validated = Column(Boolean, nullable=False, default=False)

    # Intentos fallidos de login (bloqueo de cuenta)
    attempts = Column(Integer, nullable=False, default=0)
    # Intentos fallidos con el código de verificación / recuperación
    code_attempts = Column(Integer, nullable=False, default=0)
    verification_code = Column(String(6), nullable=True)

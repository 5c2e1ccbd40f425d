# tfg_backend/services/user_service.py
"""
Gestión de usuarios: consulta, actualización, cambio de rol y baja.
"""
import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tfg_backend.core.config import Roles
from tfg_backend.core.exceptions import AppError
from tfg_backend.core.security import hash_password
from tfg_backend.crud import user as crud_user
from tfg_backend.models.user import User
from tfg_backend.schemas.auth import UsuarioUpdate
from tfg_backend.services.auth_service import check_email_domain
from tfg_backend.services.base_service import BaseService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> List[User]:
        return crud_user.list_users(self.db)

    def get_user(self, user_id) -> User:
        """Raises: AppError INVALID_ID, USER_NOT_EXISTS"""
        user = crud_user.get_user_by_id(self.db, BaseService.parse_id(user_id))
        if not user:
            raise AppError("USER_NOT_EXISTS")
        return user

    def search_by_email(self, email: str) -> List[User]:
        return crud_user.search_users_by_email(self.db, email)

    def update_user(self, user_id, data: UsuarioUpdate, current_user: User) -> User:
        """
        Actualiza los datos propios, o los de cualquiera si es administrador.

        Raises:
            AppError: NOT_ALLOWED, USER_NOT_EXISTS, EMAIL_ALREADY_EXISTS,
                VALIDATION_ERROR (dominio de email no permitido)
        """
        user = self.get_user(user_id)
        if user.id != current_user.id and current_user.role != Roles.ADMIN:
            raise AppError("NOT_ALLOWED")

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in update_data:
            email = update_data.pop("email").lower()
            check_email_domain(email)
            other = crud_user.get_user_by_email(self.db, email, include_deleted=True)
            if other and other.id != user.id:
                raise AppError("EMAIL_ALREADY_EXISTS")
            user.email = email
        if "password" in update_data:
            user.password_hash = hash_password(update_data.pop("password"))

        for field, value in update_data.items():
            setattr(user, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AppError("EMAIL_ALREADY_EXISTS")
        self.db.refresh(user)
        logger.info("Usuario actualizado", extra={"user_id": user.id, "by": current_user.id})
        return user

    def update_role(self, user_id, role: str, current_user: User) -> User:
        """
        Cambia el rol de un usuario. Un administrador no puede cambiar el suyo.

        Raises:
            AppError: UNAUTHORIZED_ACTION, VALIDATION_ERROR, USER_NOT_EXISTS
        """
        user = self.get_user(user_id)
        if user.id == current_user.id:
            raise AppError("UNAUTHORIZED_ACTION")
        if role not in Roles.TODOS:
            raise AppError(
                "VALIDATION_ERROR",
                [{"field": "role", "message": f"Rol inválido. Roles válidos: {', '.join(Roles.TODOS)}"}],
            )

        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info("Rol actualizado", extra={"user_id": user.id, "role": role, "by": current_user.id})
        return user

    def delete_user(self, user_id, current_user: User) -> dict:
        """Baja lógica. Raises: AppError USER_NOT_EXISTS, UNAUTHORIZED_ACTION"""
        user = self.get_user(user_id)
        if user.id == current_user.id:
            raise AppError("UNAUTHORIZED_ACTION")
        user.soft_delete()
        self.db.commit()
        logger.info("Usuario eliminado", extra={"user_id": user.id, "by": current_user.id})
        return {"message": "usuario eliminado"}

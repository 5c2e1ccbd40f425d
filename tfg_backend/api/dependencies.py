from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tfg_backend.core.config import Roles, settings
from tfg_backend.core.exceptions import AppError
from tfg_backend.core.security import decode_token
from tfg_backend.crud.user import get_user_by_id
from tfg_backend.db.session import get_db
from tfg_backend.models.user import User
from tfg_backend.services.email_service import EmailService
from tfg_backend.utils.pinata_client import PinataClient

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> User:
    if credentials is None or not credentials.credentials:
        raise AppError("NOT_TOKEN")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AppError("INVALID_TOKEN")

    user = get_user_by_id(db, user_id)
    if not user:
        raise AppError("USER_NOT_EXISTS")
    if user.attempts >= settings.login_max_attempts:
        raise AppError("ACCOUNT_LOCKED")
    return user


def get_current_user_allow_unvalidated(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Usuario de la sesión aunque no haya validado su email (solo /validate)."""
    return _user_from_token(credentials, db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    user = _user_from_token(credentials, db)
    if not user.validated:
        raise AppError("EMAIL_NOT_VALIDATED")
    return user


def require_role(*roles: str):
    """
    Dependencia que exige uno de los roles indicados.

    Uso:
        @router.post("/", dependencies=[Depends(require_role(Roles.ADMIN))])
    """
    def checker(user: User = Depends(get_current_user)) -> User:
        if not user.role:
            raise AppError("UNAUTHORIZED_ACTION")
        if user.role not in roles:
            raise AppError("NOT_ALLOWED")
        return user

    return checker


require_admin = require_role(Roles.ADMIN)
require_privileged = require_role(*Roles.PRIVILEGIADOS)


def is_privileged(user: Optional[User]) -> bool:
    return user is not None and user.role in Roles.PRIVILEGIADOS


# -----------------------------------------------------
# Colaboradores externos (sustituibles en tests)
# -----------------------------------------------------
def get_file_store() -> PinataClient:
    return PinataClient(settings)


def get_email_sender() -> EmailService:
    return EmailService(settings)

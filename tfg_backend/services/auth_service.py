# tfg_backend/services/auth_service.py
"""
Registro, login, validación de cuenta y recuperación de contraseña.

Umbrales (configurables):
- ``login_max_attempts``: fallos de contraseña que bloquean la cuenta
  (ACCOUNT_LOCKED). El contador es ``User.attempts``.
- ``code_max_attempts``: fallos con el código de validación o recuperación
  (MAX_ATTEMPTS, el código se anula). El contador es ``User.code_attempts``.
"""
import logging
from typing import Any, Dict

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tfg_backend.core.config import settings
from tfg_backend.core.exceptions import AppError
from tfg_backend.core.security import (
    create_access_token,
    generate_verification_code,
    hash_password,
    verify_password,
)
from tfg_backend.crud.user import create_user, get_user_by_email, get_user_by_id
from tfg_backend.models.user import User
from tfg_backend.services.email_notifications import (
    enviar_codigo_recuperacion,
    enviar_codigo_verificacion,
)

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(subject=str(user.id), role=user.role)


def check_email_domain(email: str) -> None:
    domains = settings.email_domains
    if not domains:
        return
    domain = email.rsplit("@", 1)[-1].lower()
    if domain not in domains:
        raise AppError(
            "VALIDATION_ERROR",
            [{"field": "email", "message": f"Dominio no permitido. Dominios válidos: {', '.join(domains)}"}],
        )


def _notify(sender, func, user: User, code: str) -> None:
    # El envío es best-effort: un fallo nunca aborta la operación
    if sender is None:
        return
    try:
        func(sender, user.email, user.name, code)
    except Exception as e:
        logger.warning("No se pudo enviar el email: %s", e, extra={"user_id": user.id})


def _increment_counter(db: Session, user: User, column: str) -> int:
    """Suma un fallo en la base de datos (sin leer antes el valor) y devuelve el total."""
    db.execute(
        update(User)
        .where(User.id == user.id)
        .values({column: getattr(User, column) + 1})
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(user)
    return getattr(user, column)


def register(db: Session, name: str, email: str, password: str, email_sender=None) -> Dict[str, Any]:
    """
    Registra un usuario no validado con rol ``usuario``.

    Returns:
        {"user", "access_token", "code"}

    Raises:
        AppError: VALIDATION_ERROR, EMAIL_ALREADY_EXISTS
    """
    check_email_domain(email)
    if get_user_by_email(db, email, include_deleted=True):
        raise AppError("EMAIL_ALREADY_EXISTS")

    code = generate_verification_code()
    try:
        user = create_user(db, name=name, email=email, password=password, verification_code=code)
    except IntegrityError:
        db.rollback()
        raise AppError("EMAIL_ALREADY_EXISTS")
    logger.info("Usuario registrado", extra={"user_id": user.id})

    _notify(email_sender, enviar_codigo_verificacion, user, code)
    return {"user": user, "access_token": issue_token(user), "code": code}


def login(db: Session, email: str, password: str) -> Dict[str, Any]:
    """
    Raises:
        AppError: USER_NOT_EXISTS, ACCOUNT_LOCKED, INVALID_PASSWORD
    """
    user = get_user_by_email(db, email)
    if not user:
        raise AppError("USER_NOT_EXISTS")

    if user.attempts >= settings.login_max_attempts:
        logger.warning("Login sobre cuenta bloqueada", extra={"user_id": user.id})
        raise AppError("ACCOUNT_LOCKED")

    if not verify_password(password, user.password_hash):
        attempts = _increment_counter(db, user, "attempts")
        logger.warning(
            "Contraseña incorrecta", extra={"user_id": user.id, "attempts": attempts}
        )
        raise AppError("INVALID_PASSWORD")

    user.attempts = 0
    db.commit()
    db.refresh(user)
    logger.info("Login correcto", extra={"user_id": user.id})
    return {"user": user, "access_token": issue_token(user)}


def _check_code(db: Session, user: User, code: str) -> None:
    """
    Compara el código enviado con el almacenado. Al llegar al umbral de
    fallos el código se anula y todos los intentos siguientes fallan con
    MAX_ATTEMPTS.
    """
    if not user.verification_code or user.code_attempts >= settings.code_max_attempts:
        raise AppError("MAX_ATTEMPTS")

    if code.strip() != user.verification_code:
        if _increment_counter(db, user, "code_attempts") >= settings.code_max_attempts:
            user.verification_code = None
            db.commit()
            logger.warning("Código anulado por exceso de intentos", extra={"user_id": user.id})
            raise AppError("MAX_ATTEMPTS")
        raise AppError("INVALID_CODE")


def validate_account(db: Session, user_id: int, code: str) -> User:
    """
    Raises:
        AppError: USER_NOT_EXISTS, INVALID_CODE, MAX_ATTEMPTS
    """
    user = get_user_by_id(db, user_id)
    if not user:
        raise AppError("USER_NOT_EXISTS")
    if user.validated:
        return user

    _check_code(db, user, code)

    user.validated = True
    user.attempts = 0
    user.code_attempts = 0
    user.verification_code = None
    db.commit()
    db.refresh(user)
    logger.info("Cuenta validada", extra={"user_id": user.id})
    return user


def request_password_recovery(db: Session, email: str, email_sender=None) -> str:
    """
    Genera un nuevo código de recuperación y reinicia sus intentos.

    Raises:
        AppError: USER_NOT_EXISTS
    """
    user = get_user_by_email(db, email)
    if not user:
        raise AppError("USER_NOT_EXISTS")

    code = generate_verification_code()
    user.verification_code = code
    user.code_attempts = 0
    db.commit()
    logger.info("Recuperación de contraseña solicitada", extra={"user_id": user.id})

    _notify(email_sender, enviar_codigo_recuperacion, user, code)
    return code


def recover_password(db: Session, email: str, code: str, new_password: str) -> User:
    """
    Cambia la contraseña con el código de recuperación. Desbloquea la cuenta.

    Raises:
        AppError: USER_NOT_EXISTS, INVALID_CODE, MAX_ATTEMPTS, SAME_PASSWORD
    """
    user = get_user_by_email(db, email)
    if not user:
        raise AppError("USER_NOT_EXISTS")

    _check_code(db, user, code)

    if verify_password(new_password, user.password_hash):
        raise AppError("SAME_PASSWORD")

    user.password_hash = hash_password(new_password)
    user.verification_code = None
    user.code_attempts = 0
    user.attempts = 0
    db.commit()
    db.refresh(user)
    logger.info("Contraseña restablecida", extra={"user_id": user.id})
    return user


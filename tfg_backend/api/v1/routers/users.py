#tfg_backend/api/v1/routers/users.py
"""
Router de usuarios: autenticación y gestión de cuentas.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tfg_backend.api.dependencies import (
    get_current_user,
    get_current_user_allow_unvalidated,
    get_email_sender,
    require_admin,
)
from tfg_backend.db.session import get_db
from tfg_backend.schemas.auth import (
    LoginRequest,
    RecoverPasswordRequest,
    RecoveryRequest,
    RegisterRequest,
    RoleUpdate,
    TokenResponse,
    UsuarioResponse,
    UsuarioUpdate,
    ValidateRequest,
)
from tfg_backend.schemas.common import ErrorResponse, MessageResponse
from tfg_backend.services import auth_service
from tfg_backend.services.user_service import UserService

router = APIRouter(tags=["Usuarios"])


# ==================== AUTENTICACIÓN ====================

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Registrar usuario",
    description="Crea una cuenta sin validar y envía el código de verificación por email.",
)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    email_sender=Depends(get_email_sender),
):
    result = auth_service.register(
        db, payload.name, payload.email, payload.password, email_sender=email_sender
    )
    return {"access_token": result["access_token"], "user": result["user"]}


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Iniciar sesión",
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, payload.email, payload.password)


@router.post(
    "/validate",
    response_model=UsuarioResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Validar cuenta con el código recibido",
)
def validate(
    payload: ValidateRequest,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user_allow_unvalidated),
):
    return auth_service.validate_account(db, current_user.id, payload.code)


@router.post(
    "/recover-password",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Solicitar código de recuperación",
)
def request_recover_password(
    payload: RecoveryRequest,
    db: Session = Depends(get_db),
    email_sender=Depends(get_email_sender),
):
    auth_service.request_password_recovery(db, payload.email, email_sender=email_sender)
    return {"message": "Código de recuperación enviado"}


@router.patch(
    "/recover-password",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Restablecer contraseña con el código",
)
def recover_password(payload: RecoverPasswordRequest, db: Session = Depends(get_db)):
    auth_service.recover_password(db, payload.email, payload.code, payload.password)
    return {"message": "Contraseña actualizada"}


# ==================== GESTIÓN DE USUARIOS ====================

@router.get("/", response_model=List[UsuarioResponse], summary="Listar usuarios")
def list_users(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return UserService(db).list_users()


@router.get("/search", response_model=List[UsuarioResponse], summary="Buscar usuarios por email")
def search_users(
    email: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return UserService(db).search_by_email(email)


@router.get(
    "/{user_id}",
    response_model=UsuarioResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Obtener usuario por ID",
)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return UserService(db).get_user(user_id)


@router.patch(
    "/{user_id}",
    response_model=UsuarioResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Actualizar usuario",
    description="Un usuario puede modificar sus datos; el administrador, los de cualquiera.",
)
def update_user(
    user_id: str,
    payload: UsuarioUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return UserService(db).update_user(user_id, payload, current_user)


@router.patch(
    "/{user_id}/role",
    response_model=UsuarioResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Cambiar rol de un usuario",
)
def update_role(
    user_id: str,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return UserService(db).update_role(user_id, payload.role, current_user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Eliminar usuario",
)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return UserService(db).delete_user(user_id, current_user)

#tfg_backend/api/v1/routers/reference.py
"""
Rutas comunes de las entidades de referencia (cursos, titulaciones, tutores).

Todas siguen el mismo esquema: GET /, GET /name/{name}, GET /{id}, POST /,
PATCH /{id}, DELETE /{id}. La lectura solo exige sesión; la escritura exige
los roles indicados.
"""
from typing import Iterable, List, Optional, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tfg_backend.api.dependencies import get_current_user, require_role
from tfg_backend.db.session import get_db
from tfg_backend.schemas.common import ErrorResponse, MessageResponse
from tfg_backend.services.reference_service import get_reference_service


def build_reference_router(
    entity_name: str,
    read_schema: Type[BaseModel],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    write_roles: Iterable[str],
) -> APIRouter:
    router = APIRouter()
    write_guard = require_role(*write_roles)

    @router.get(
        "/",
        response_model=List[read_schema],
        summary=f"Listar {entity_name}",
    )
    def list_entities(
        active: Optional[bool] = None,
        db: Session = Depends(get_db),
        current_user=Depends(get_current_user),
    ):
        filters = {"active": active} if active is not None else None
        return get_reference_service(db, entity_name).get_all(filters)

    @router.get(
        "/name/{name}",
        response_model=List[read_schema],
        summary=f"Buscar {entity_name} por nombre",
    )
    def find_by_name(
        name: str,
        db: Session = Depends(get_db),
        current_user=Depends(get_current_user),
    ):
        return get_reference_service(db, entity_name).find_by_name(name)

    @router.get(
        "/{entity_id}",
        response_model=read_schema,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        summary=f"Obtener {entity_name} por ID",
    )
    def get_entity(
        entity_id: str,
        db: Session = Depends(get_db),
        current_user=Depends(get_current_user),
    ):
        return get_reference_service(db, entity_name).get_by_id(entity_id)

    @router.post(
        "/",
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
        summary=f"Crear {entity_name}",
    )
    def create_entity(
        payload: create_schema,
        db: Session = Depends(get_db),
        current_user=Depends(write_guard),
    ):
        return get_reference_service(db, entity_name).create(payload)

    @router.patch(
        "/{entity_id}",
        response_model=read_schema,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        summary=f"Actualizar {entity_name}",
    )
    def update_entity(
        entity_id: str,
        payload: update_schema,
        db: Session = Depends(get_db),
        current_user=Depends(write_guard),
    ):
        return get_reference_service(db, entity_name).update(entity_id, payload)

    @router.delete(
        "/{entity_id}",
        response_model=MessageResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        summary=f"Eliminar {entity_name}",
        description="Borrado lógico. Falla si algún TFG no eliminado lo referencia.",
    )
    def delete_entity(
        entity_id: str,
        db: Session = Depends(get_db),
        current_user=Depends(write_guard),
    ):
        return get_reference_service(db, entity_name).delete(entity_id)

    return router

#tfg_backend/api/v1/routers/tfgs.py
"""
Router de TFGs.

Los usuarios sin privilegios solo ven TFGs verificados; administradores y
coordinadores ven todos y son quienes editan, verifican y eliminan.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.orm import Session

from tfg_backend.api.dependencies import (
    get_current_user,
    get_file_store,
    is_privileged,
    require_privileged,
)
from tfg_backend.core.exceptions import AppError
from tfg_backend.db.session import get_db
from tfg_backend.schemas.common import ErrorResponse, MessageResponse
from tfg_backend.schemas.tfg import (
    SearchRequest,
    TFGCreate,
    TFGName,
    TFGPage,
    TFGReplace,
    TFGResponse,
    TFGUpdate,
    VerifyRequest,
)
from tfg_backend.services.file_service import FileService
from tfg_backend.services.tfg_service import TFGService
from tfg_backend.utils.logger import logger

router = APIRouter(tags=["TFGs"])


# ==================== CONSULTA ====================

@router.get("/", response_model=List[TFGResponse], summary="Listar TFGs")
def list_tfgs(
    year: Optional[str] = None,
    degree: Optional[str] = None,
    verified: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    if not is_privileged(current_user):
        verified = True
    filters = {"year": year, "degree": degree, "verified": verified}
    return TFGService(db).get_all_tfgs(filters)


@router.get("/names", response_model=List[TFGName], summary="Títulos de los TFGs verificados")
def list_tfg_names(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return TFGService(db).get_tfg_names()


@router.post(
    "/pages/{page_number}",
    response_model=TFGPage,
    responses={422: {"model": ErrorResponse}},
    summary="Búsqueda paginada de TFGs",
)
def search_tfgs(
    page_number: int,
    payload: SearchRequest,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    filters = payload.model_dump(exclude={"page_size"})
    if not is_privileged(current_user):
        filters["verified"] = True
    return TFGService(db).get_paginated_tfgs(filters, page_number, payload.page_size)


@router.post(
    "/unverified/{page_number}",
    response_model=TFGPage,
    responses={403: {"model": ErrorResponse}},
    summary="TFGs pendientes de verificar",
)
def search_unverified_tfgs(
    page_number: int,
    payload: SearchRequest,
    db: Session = Depends(get_db),
    current_user=Depends(require_privileged),
):
    filters = payload.model_dump(exclude={"page_size"})
    filters["verified"] = False
    return TFGService(db).get_paginated_tfgs(filters, page_number, payload.page_size)


@router.get(
    "/pdf/{tfg_id}",
    response_class=Response,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Descargar el PDF de un TFG",
)
def download_tfg_pdf(
    tfg_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    file_store=Depends(get_file_store),
):
    service = TFGService(db, file_store)
    tfg = service.get_tfg_by_id(tfg_id, allow_unverified=is_privileged(current_user))
    content = FileService(db, file_store).get_tfg_file(tfg.id)
    service.increment_downloads(tfg.id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="tfg_{tfg.id}.pdf"'},
    )


@router.get(
    "/{tfg_id}",
    response_model=TFGResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Obtener TFG",
    description="Cada consulta correcta suma una visita.",
)
def get_tfg(
    tfg_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    service = TFGService(db)
    tfg = service.get_tfg_by_id(tfg_id, allow_unverified=is_privileged(current_user))
    return service.increment_views(tfg.id) or tfg


# ==================== ALTA Y EDICIÓN ====================

@router.post(
    "/",
    response_model=TFGResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Crear TFG",
    description="El TFG se crea sin verificar y sin archivo.",
)
def create_tfg(
    payload: TFGCreate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    tfg = TFGService(db).create_tfg(payload, created_by=current_user.id)
    logger.info("TFG creado vía API", extra={"tfg_id": tfg.id, "user_id": current_user.id})
    return tfg


@router.put(
    "/{tfg_id}",
    response_model=TFGResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Reemplazar TFG",
)
def replace_tfg(
    tfg_id: str,
    payload: TFGReplace,
    db: Session = Depends(get_db),
    current_user=Depends(require_privileged),
):
    return TFGService(db).update_tfg(tfg_id, payload)


@router.patch(
    "/{tfg_id}",
    response_model=TFGResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Actualizar TFG",
)
def update_tfg(
    tfg_id: str,
    payload: TFGUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_privileged),
):
    return TFGService(db).update_tfg(tfg_id, payload)


@router.patch(
    "/pdf/{tfg_id}",
    response_model=TFGResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Subir el PDF de un TFG",
)
def upload_tfg_pdf(
    tfg_id: str,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
    file_store=Depends(get_file_store),
):
    service = TFGService(db, file_store)
    tfg = service.get_by_id(tfg_id)
    if tfg.created_by != current_user.id and not is_privileged(current_user):
        raise AppError("NOT_ALLOWED")

    if file is None or not file.filename:
        raise AppError("NO_FILE_UPLOADED")
    if not file.filename.lower().endswith(".pdf"):
        raise AppError("INVALID_FILE_TYPE")

    content = file.file.read()
    if not content:
        raise AppError("NO_FILE_UPLOADED")

    url = FileService(db, file_store).upload_file(content, f"tfg_{tfg.id}.pdf")
    return service.update_tfg_file(tfg.id, url)


@router.patch(
    "/verify/{tfg_id}",
    response_model=TFGResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Verificar o retirar la verificación de un TFG",
)
def verify_tfg(
    tfg_id: str,
    payload: VerifyRequest,
    db: Session = Depends(get_db),
    current_user=Depends(require_privileged),
):
    return TFGService(db).verify_tfg(
        tfg_id, user_id=current_user.id, verified=payload.verified, reason=payload.reason
    )


@router.delete(
    "/{tfg_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Eliminar TFG",
    description="Borrado lógico; antes intenta eliminar el PDF del almacenamiento.",
)
def delete_tfg(
    tfg_id: str,
    db: Session = Depends(get_db),
    current_user=Depends(require_privileged),
    file_store=Depends(get_file_store),
):
    return TFGService(db, file_store).delete(tfg_id)

#tfg_backend/api/v1/routers/years.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tfg_backend.api.dependencies import get_current_user
from tfg_backend.api.v1.routers.reference import build_reference_router
from tfg_backend.core.config import Roles
from tfg_backend.core.exceptions import AppError
from tfg_backend.db.session import get_db
from tfg_backend.schemas.common import ErrorResponse
from tfg_backend.schemas.reference import YearCreate, YearRead, YearUpdate
from tfg_backend.services.reference_service import get_current_year

router = APIRouter(tags=["Cursos"])


# Debe registrarse antes que /{entity_id}
@router.get(
    "/current",
    response_model=YearRead,
    responses={404: {"model": ErrorResponse}},
    summary="Curso académico actual",
)
def current_year(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    year = get_current_year(db)
    if not year:
        raise AppError("YEAR_NOT_FOUND")
    return year


router.include_router(
    build_reference_router("year", YearRead, YearCreate, YearUpdate, write_roles=[Roles.ADMIN])
)

# tfg_backend/services/reference_service.py
"""
Servicios de las entidades de referencia (cursos, titulaciones, tutores).

Son instancias de ``BaseService`` configuradas por entidad.
"""
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from tfg_backend.models.advisor import Advisor
from tfg_backend.models.degree import Degree
from tfg_backend.models.year import Year
from tfg_backend.schemas.reference import AdvisorCreate, DegreeCreate, YearCreate
from tfg_backend.services.base_service import BaseService

REFERENCE_ENTITIES = {
    "year": (Year, YearCreate),
    "degree": (Degree, DegreeCreate),
    "advisor": (Advisor, AdvisorCreate),
}


def get_reference_service(db: Session, entity_name: str) -> BaseService:
    model, create_schema = REFERENCE_ENTITIES[entity_name]
    return BaseService(db, model, entity_name, create_schema=create_schema)


def year_service(db: Session) -> BaseService:
    return get_reference_service(db, "year")


def degree_service(db: Session) -> BaseService:
    return get_reference_service(db, "degree")


def advisor_service(db: Session) -> BaseService:
    return get_reference_service(db, "advisor")


def current_year_label(today: Optional[date] = None) -> str:
    """
    Etiqueta del curso académico en vigor para una fecha.
    El curso empieza en septiembre: 15/10/2023 -> "23/24", 15/03/2024 -> "23/24".
    """
    today = today or date.today()
    start = today.year if today.month >= 9 else today.year - 1
    return f"{start % 100:02d}/{(start + 1) % 100:02d}"


def get_current_year(db: Session, today: Optional[date] = None) -> Optional[Year]:
    """
    Curso actual: primero el que tenga fechas que contengan ``today``;
    si no hay, el que tenga la etiqueta calculada por calendario.
    """
    today = today or date.today()
    service = year_service(db)
    by_dates = (
        service.find_active()
        .filter(
            Year.start_date.isnot(None),
            Year.end_date.isnot(None),
            Year.start_date <= today,
            Year.end_date >= today,
        )
        .order_by(Year.start_date.desc())
        .first()
    )
    if by_dates:
        return by_dates
    return service.find_by_field("year", current_year_label(today), exact=True)

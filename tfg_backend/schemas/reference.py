# tfg_backend/schemas/reference.py
"""
Schemas de las entidades de referencia: cursos, titulaciones y tutores.
"""
import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

YEAR_PATTERN = re.compile(r"^\d{2}/\d{2}$")


def validate_year_label(value: str) -> str:
    """Valida el formato ``NN/NN`` con años consecutivos (99/00 incluido)."""
    value = value.strip()
    if not YEAR_PATTERN.match(value):
        raise ValueError("El formato de 'year' debe ser XX/XX")
    first, second = (int(part) for part in value.split("/"))
    if second != (first + 1) % 100:
        raise ValueError("Los años deben ser consecutivos (ej: 22/23, 23/24)")
    return value


def _strip_label(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("El valor no puede estar vacío")
    return value


# ==================== CURSOS ACADÉMICOS ====================

class YearCreate(BaseModel):
    year: str = Field(..., examples=["23/24"])
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: bool = True

    @field_validator("year")
    @classmethod
    def check_year(cls, value: str) -> str:
        return validate_year_label(value)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValueError("La fecha de fin debe ser posterior a la fecha de inicio")
        return self


class YearUpdate(BaseModel):
    year: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: Optional[bool] = None


class YearRead(BaseModel):
    id: int
    year: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ==================== TITULACIONES ====================

class DegreeCreate(BaseModel):
    degree: str = Field(..., min_length=1, max_length=255, examples=["Ingeniería del Software"])
    active: bool = True

    @field_validator("degree")
    @classmethod
    def check_degree(cls, value: str) -> str:
        return _strip_label(value)


class DegreeUpdate(BaseModel):
    degree: Optional[str] = None
    active: Optional[bool] = None


class DegreeRead(BaseModel):
    id: int
    degree: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ==================== TUTORES ====================

class AdvisorCreate(BaseModel):
    advisor: str = Field(..., min_length=1, max_length=255, examples=["Jane Doe"])
    active: bool = True

    @field_validator("advisor")
    @classmethod
    def check_advisor(cls, value: str) -> str:
        return _strip_label(value)


class AdvisorUpdate(BaseModel):
    advisor: Optional[str] = None
    active: Optional[bool] = None


class AdvisorRead(BaseModel):
    id: int
    advisor: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

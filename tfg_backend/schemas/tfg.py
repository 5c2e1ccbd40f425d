# tfg_backend/schemas/tfg.py
"""
Schemas de TFG.

Las referencias a curso, titulación y tutor se aceptan como ID o como
etiqueta; el servicio las resuelve al ID canónico antes de guardar.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RefInput = Union[int, str]


def split_keywords(value: Union[str, List[str], None]) -> Optional[List[str]]:
    """Acepta una lista o una cadena separada por comas; recorta y descarta vacías."""
    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else value
    keywords = [str(item).strip() for item in items]
    return [keyword for keyword in keywords if keyword]


class TFGCreate(BaseModel):
    year: RefInput
    degree: RefInput
    advisor: RefInput
    student: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=500)
    abstract: str = Field(..., min_length=1)
    keywords: Union[List[str], str]

    @field_validator("student", "title", "abstract")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("El campo no puede estar vacío")
        return value

    @field_validator("keywords")
    @classmethod
    def check_keywords(cls, value):
        keywords = split_keywords(value)
        if not keywords:
            raise ValueError("Debe indicarse al menos una palabra clave")
        return keywords


class TFGUpdate(BaseModel):
    """Actualización parcial: solo se aplican los campos enviados."""
    year: Optional[RefInput] = None
    degree: Optional[RefInput] = None
    advisor: Optional[RefInput] = None
    student: Optional[str] = Field(None, min_length=1, max_length=255)
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    abstract: Optional[str] = Field(None, min_length=1)
    keywords: Optional[Union[List[str], str]] = None

    @field_validator("keywords")
    @classmethod
    def check_keywords(cls, value):
        return split_keywords(value)


class TFGReplace(TFGCreate):
    """Reemplazo completo (PUT)."""


class VerifyRequest(BaseModel):
    verified: bool = True
    reason: Optional[str] = None


class SearchRequest(BaseModel):
    year: Optional[RefInput] = None
    degree: Optional[RefInput] = None
    advisor: Optional[RefInput] = None
    verified: Optional[bool] = None
    search: Optional[str] = None
    page_size: Optional[int] = Field(None, ge=1, le=100)


# ==================== RESPUESTAS ====================

class YearSummary(BaseModel):
    id: int
    year: str

    model_config = ConfigDict(from_attributes=True)


class DegreeSummary(BaseModel):
    id: int
    degree: str

    model_config = ConfigDict(from_attributes=True)


class AdvisorSummary(BaseModel):
    id: int
    advisor: str

    model_config = ConfigDict(from_attributes=True)


class TFGResponse(BaseModel):
    id: int
    year: YearSummary
    degree: DegreeSummary
    advisor: AdvisorSummary
    student: str
    title: str
    abstract: str
    keywords: List[str]
    link: str
    verified: bool
    verified_by: Optional[int] = None
    reason: Optional[str] = None
    views: int
    download_count: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TFGName(BaseModel):
    id: int
    title: str

    model_config = ConfigDict(from_attributes=True)


class TFGListItem(BaseModel):
    """Campos de listado de las búsquedas paginadas."""
    id: int
    year: YearSummary
    degree: DegreeSummary
    advisor: AdvisorSummary
    student: str
    title: str
    abstract: str
    keywords: List[str]

    model_config = ConfigDict(from_attributes=True)


class TFGPage(BaseModel):
    items: List[TFGListItem]
    total_pages: int
    current_page: int
    total_items: int

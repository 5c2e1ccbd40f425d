"""
Excepciones de dominio del backend de TFGs.

Todos los servicios lanzan ``AppError`` con un código estable (``kind``).
La capa HTTP solo traduce ese código a status + mensaje usando ``ERROR_TYPES``.

Uso:
    from tfg_backend.core.exceptions import AppError

    if not tfg:
        raise AppError("TFG_NOT_FOUND")
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


# Código -> (status HTTP, mensaje para el cliente)
ERROR_TYPES: Dict[str, Tuple[int, str]] = {
    # Autenticación y autorización
    "NOT_TOKEN": (401, "No se proporcionó token de autenticación"),
    "INVALID_TOKEN": (401, "Token de autenticación inválido"),
    "EMAIL_NOT_VALIDATED": (401, "El correo electrónico no ha sido validado"),
    "INVALID_PASSWORD": (401, "Contraseña incorrecta"),
    "INVALID_CODE": (401, "Código de verificación incorrecto"),
    "MAX_ATTEMPTS": (401, "Se ha superado el número máximo de intentos"),
    "ACCOUNT_LOCKED": (403, "La cuenta está bloqueada por demasiados intentos fallidos"),
    "NOT_ALLOWED": (403, "No tienes permisos para realizar esta acción"),
    "UNAUTHORIZED_ACTION": (403, "Acción no autorizada"),

    # Validación
    "VALIDATION_ERROR": (422, "Error de validación en los datos proporcionados"),
    "INVALID_ID": (400, "ID inválido"),
    "INVALID_YEAR_FORMAT": (400, "Formato de año inválido. Debe ser XX/XX"),
    "INVALID_ENTITY_NAME": (500, "Operación no soportada para esta entidad"),

    # Recursos
    "USER_NOT_EXISTS": (404, "El usuario no existe"),
    "TFG_NOT_FOUND": (404, "El TFG no existe"),
    "NOT_VERIFIED": (403, "El TFG no está verificado"),
    "YEAR_NOT_FOUND": (404, "El curso académico no existe"),
    "DEGREE_NOT_FOUND": (404, "La titulación no existe"),
    "ADVISOR_NOT_FOUND": (404, "El tutor no existe"),

    # Duplicados
    "EMAIL_ALREADY_EXISTS": (409, "El correo electrónico ya está registrado"),
    "YEAR_ALREADY_EXISTS": (409, "El curso académico ya existe"),
    "DEGREE_ALREADY_EXISTS": (409, "La titulación ya existe"),
    "ADVISOR_ALREADY_EXISTS": (409, "El tutor ya existe"),
    "SAME_PASSWORD": (409, "La nueva contraseña no puede ser igual a la anterior"),

    # Relaciones
    "YEAR_IN_USE": (409, "El curso académico está asociado a TFGs existentes"),
    "DEGREE_IN_USE": (409, "La titulación está asociada a TFGs existentes"),
    "ADVISOR_IN_USE": (409, "El tutor está asociado a TFGs existentes"),

    # Archivos
    "NO_FILE_UPLOADED": (400, "No se ha subido ningún archivo"),
    "INVALID_FILE_TYPE": (400, "Tipo de archivo inválido. Solo se aceptan archivos PDF"),
    "FILE_URL_INVALID": (400, "La URL del archivo no es válida"),
    "CID_NOT_FOUND": (400, "No se pudo extraer el identificador del archivo"),
    "TFG_FILE_NOT_FOUND": (404, "El TFG no tiene archivo asociado"),
    "PINATA_API_ERROR": (502, "Error en el servicio de almacenamiento"),
    "PINATA_FETCH_ERROR": (502, "Error al obtener el archivo del almacenamiento"),
    "FILE_FETCH_ERROR": (502, "Error al descargar el archivo"),
    "ERROR_UPLOADING_FILE": (500, "Error al subir el archivo"),
    "ERROR_DELETING_FILE": (500, "Error al eliminar el archivo"),
    "ERROR_GETTING_FILE": (500, "Error al obtener el archivo"),

    # General
    "DEFAULT_ERROR": (500, "Error interno del servidor"),
}

_SUFFIX_STATUS = {
    "_NOT_FOUND": 404,
    "_ALREADY_EXISTS": 409,
    "_IN_USE": 409,
}


class AppError(Exception):
    """Error de dominio identificado por un código estable."""

    def __init__(self, kind: str, details: Optional[Any] = None):
        self.kind = kind
        self.details = details
        super().__init__(kind)

    @property
    def status_code(self) -> int:
        return resolve_error(self.kind)[0]

    @property
    def message(self) -> str:
        return resolve_error(self.kind)[1]

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error": self.kind,
            "message": self.message,
            "status": self.status_code,
        }
        if self.details:
            body["details"] = self.details
        return body


def resolve_error(kind: str) -> Tuple[int, str]:
    """Devuelve (status, mensaje) para un código, con fallback por sufijo."""
    if kind in ERROR_TYPES:
        return ERROR_TYPES[kind]
    for suffix, status in _SUFFIX_STATUS.items():
        if kind.endswith(suffix):
            return status, kind.replace("_", " ").capitalize()
    return ERROR_TYPES["DEFAULT_ERROR"]


def validation_details(error: ValidationError) -> List[Dict[str, str]]:
    """Convierte un ValidationError de pydantic a [{field, message}]."""
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())) or "__root__",
            "message": err.get("msg", ""),
        }
        for err in error.errors()
    ]


def normalize_error(
    error: Exception,
    entity_name: str,
    operation: str,
    entity_id: Any = None,
    data: Any = None,
) -> AppError:
    """
    Traduce cualquier excepción a un ``AppError``.

    Los errores ya normalizados se devuelven tal cual (nunca se re-envuelven).
    """
    if isinstance(error, AppError):
        return error

    suffix = f" {entity_id}" if entity_id is not None else ""

    if isinstance(error, ValidationError):
        details = validation_details(error)
        logger.error(
            "Error de validación al %s %s%s", operation, entity_name, suffix,
            extra={"details": details, "data": data},
        )
        return AppError("VALIDATION_ERROR", details)

    if isinstance(error, IntegrityError):
        logger.error(
            "%s duplicado al %s%s", entity_name, operation, suffix,
            extra={"error": str(error.orig), "data": data},
        )
        return AppError(f"{entity_name.upper()}_ALREADY_EXISTS")

    logger.error(
        "Error %s %s%s", operation, entity_name, suffix,
        extra={"data": data}, exc_info=error,
    )
    return AppError("DEFAULT_ERROR")

# tfg_backend/services/base_service.py
"""
Servicio base con las operaciones CRUD comunes.

Se parametriza con el modelo y el nombre de la entidad (``year``, ``degree``,
``advisor``, ``tfg``). Del nombre se derivan los códigos de error
(``YEAR_NOT_FOUND``, ``YEAR_ALREADY_EXISTS``, ``YEAR_IN_USE``) y, por defecto,
el campo etiqueta del modelo.

Convenciones:
- Solo se consultan registros no eliminados a través de ``find_active()``;
  ``find_including_deleted()`` es la única vía para ver los borrados.
- Todo error sale normalizado como ``AppError`` (ver ``normalize_error``).
- ``delete`` solo está permitido para entidades referenciadas por TFGs y
  comprueba antes que no estén en uso.

Uso:
    service = BaseService(db, Year, "year", create_schema=YearCreate)
    year = service.create({"year": "23/24"})
"""

import logging
from typing import Any, Dict, Iterable, List, NoReturn, Optional, Type, Union

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from tfg_backend.core.exceptions import AppError, normalize_error
from tfg_backend.models.tfg import TFG
from tfg_backend.services.refs import Ref, RefById, RefByLabel

logger = logging.getLogger(__name__)

# Entidad -> columna de TFG que la referencia
TFG_REFERENCE_COLUMNS = {
    "advisor": TFG.advisor_id,
    "degree": TFG.degree_id,
    "year": TFG.year_id,
}


class BaseService:
    """Motor CRUD genérico sobre un modelo con borrado lógico."""

    DELETABLE_ENTITIES = tuple(TFG_REFERENCE_COLUMNS)

    def __init__(
        self,
        db: Session,
        model: Type,
        entity_name: str,
        create_schema: Optional[Type[BaseModel]] = None,
        label_field: Optional[str] = None,
    ):
        self.db = db
        self.model = model
        self.entity_name = entity_name
        self.create_schema = create_schema
        self.label_field = label_field or entity_name

        prefix = entity_name.upper()
        self.ERRORS = {
            "NOT_FOUND": f"{prefix}_NOT_FOUND",
            "ALREADY_EXISTS": f"{prefix}_ALREADY_EXISTS",
            "IN_USE": f"{prefix}_IN_USE",
        }

    # ================================================================================
    # CONSULTAS BASE
    # ================================================================================

    @property
    def label_column(self):
        return getattr(self.model, self.label_field)

    def find_active(self) -> Query:
        """Consulta raíz: solo registros no eliminados."""
        return self.db.query(self.model).filter(self.model.deleted_at.is_(None))

    def find_including_deleted(self) -> Query:
        """Consulta raíz incluyendo registros con borrado lógico."""
        return self.db.query(self.model)

    def _handle_error(
        self,
        error: Exception,
        operation: str,
        entity_id: Any = None,
        data: Any = None,
    ) -> NoReturn:
        """Normaliza el error y lo relanza. Los AppError pasan sin cambios."""
        if not isinstance(error, AppError):
            self.db.rollback()
        normalized = normalize_error(error, self.entity_name, operation, entity_id, data)
        if normalized is error:
            raise error
        raise normalized from error

    @staticmethod
    def parse_id(value: Any) -> int:
        """Valida la forma del ID. Lanza INVALID_ID si no es un entero positivo."""
        if isinstance(value, bool):
            raise AppError("INVALID_ID")
        if isinstance(value, int):
            parsed = value
        elif isinstance(value, str) and value.strip().isdigit():
            parsed = int(value.strip())
        else:
            raise AppError("INVALID_ID")
        if parsed < 1:
            raise AppError("INVALID_ID")
        return parsed

    def _column(self, field: str):
        if field not in self.model.__table__.columns:
            raise AppError(
                "VALIDATION_ERROR",
                [{"field": field, "message": f"Campo desconocido para {self.entity_name}"}],
            )
        return getattr(self.model, field)

    # ================================================================================
    # LECTURA
    # ================================================================================

    def get_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        select: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Lista las entidades no eliminadas con etiqueta, proyectadas a
        ``{id, <etiqueta>, active}`` más los campos de ``select``.
        """
        try:
            fields = ["id", self.label_field, "active"]
            for extra in select or ():
                self._column(extra)
                if extra not in fields:
                    fields.append(extra)

            query = self.find_active().filter(self.label_column.isnot(None))
            for field, value in (filters or {}).items():
                query = query.filter(self._column(field) == value)

            entities = query.order_by(self.label_column).all()
            return [{field: getattr(entity, field) for field in fields} for entity in entities]
        except Exception as e:
            self._handle_error(e, "getAll", data=filters)

    def get_by_id(self, entity_id: Any, for_update: bool = False):
        """Obtiene una entidad por ID. Lanza INVALID_ID o <ENTIDAD>_NOT_FOUND."""
        try:
            parsed = self.parse_id(entity_id)
            query = self.find_active().filter(self.model.id == parsed)
            if for_update:
                query = query.with_for_update()
            entity = query.first()
            if not entity:
                raise AppError(self.ERRORS["NOT_FOUND"])
            return entity
        except Exception as e:
            self._handle_error(e, "getById", entity_id)

    def find_by_field(
        self,
        field: str,
        value: Any,
        exact: bool = False,
        case_insensitive: bool = False,
    ):
        """
        Busca una entidad por un campo.

        - ``id`` o ``exact``: igualdad exacta
        - ``case_insensitive``: igualdad completa sin distinguir mayúsculas
        - en otro caso: contiene la subcadena

        Returns:
            La primera entidad encontrada o None
        """
        try:
            column = self._column(field)
            if field == "id":
                criterion = column == self.parse_id(value)
            elif exact:
                criterion = column == value
            elif case_insensitive:
                criterion = func.lower(column) == str(value).lower()
            else:
                criterion = column.contains(str(value), autoescape=True)
            return self.find_active().filter(criterion).first()
        except AppError as e:
            if e.kind == "INVALID_ID":
                return None
            raise
        except Exception as e:
            self._handle_error(e, "findByField", data={"field": field, "value": value})

    def find_by_name(self, name: str) -> List:
        """Entidades cuya etiqueta contiene ``name`` sin distinguir mayúsculas."""
        try:
            return (
                self.find_active()
                .filter(self.label_column.icontains(name, autoescape=True))
                .order_by(self.label_column)
                .all()
            )
        except Exception as e:
            self._handle_error(e, "findByName", data={"name": name})

    def resolve_ref(self, ref: Ref, lock: bool = False):
        """Resuelve una referencia (ID o etiqueta) a la entidad activa, o None."""
        query = self.find_active()
        if isinstance(ref, RefById):
            query = query.filter(self.model.id == ref.id)
        elif isinstance(ref, RefByLabel):
            query = query.filter(func.lower(self.label_column) == ref.label.lower())
        else:
            raise AppError("VALIDATION_ERROR", [{"field": self.entity_name, "message": "Referencia inválida"}])
        if lock:
            # Bloqueo compartido: impide borrar la entidad mientras se referencia
            query = query.with_for_update(read=True)
        return query.first()

    # ================================================================================
    # ESCRITURA
    # ================================================================================

    def _validate(self, data: Union[Dict[str, Any], BaseModel]) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if self.create_schema is None:
            return dict(data)
        return self.create_schema.model_validate(data).model_dump()

    def _ensure_unique_label(self, label: Optional[str], exclude_id: Optional[int] = None) -> None:
        if label is None:
            return
        query = self.find_active().filter(func.lower(self.label_column) == str(label).lower())
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        if query.first():
            raise AppError(self.ERRORS["ALREADY_EXISTS"])

    def _find_deleted_duplicate(self, label: Optional[str]):
        if label is None:
            return None
        return (
            self.find_including_deleted()
            .filter(
                self.model.deleted_at.isnot(None),
                func.lower(self.label_column) == str(label).lower(),
            )
            .first()
        )

    def create(self, data: Union[Dict[str, Any], BaseModel]):
        """
        Crea una entidad.

        Si existe una entidad eliminada con la misma etiqueta se restaura con
        los nuevos datos en lugar de insertar otra fila.

        Raises:
            AppError: VALIDATION_ERROR, <ENTIDAD>_ALREADY_EXISTS
        """
        try:
            payload = self._validate(data)
            label = payload.get(self.label_field)
            self._ensure_unique_label(label)

            entity = self._find_deleted_duplicate(label)
            if entity:
                for field, value in payload.items():
                    setattr(entity, field, value)
                entity.restore()
                logger.info(
                    "%s restaurado", self.entity_name,
                    extra={"entity_id": entity.id, "label": label},
                )
            else:
                entity = self.model(**payload)
                self.db.add(entity)

            self.db.commit()
            self.db.refresh(entity)
            logger.info("%s creado", self.entity_name, extra={"entity_id": entity.id})
            return entity
        except Exception as e:
            self._handle_error(e, "create", data=data)

    def update(self, entity_id: Any, data: Union[Dict[str, Any], BaseModel]):
        """
        Actualización parcial. Los datos resultantes se vuelven a validar
        completos con el schema de creación.

        Raises:
            AppError: INVALID_ID, <ENTIDAD>_NOT_FOUND, VALIDATION_ERROR,
                <ENTIDAD>_ALREADY_EXISTS
        """
        try:
            entity = self.get_by_id(entity_id)
            if isinstance(data, BaseModel):
                changes = data.model_dump(exclude_unset=True)
            else:
                changes = dict(data)

            if self.create_schema is not None:
                current = {
                    field: getattr(entity, field)
                    for field in self.create_schema.model_fields
                    if hasattr(entity, field)
                }
                validated = self._validate({**current, **changes})
                changes = {field: validated[field] for field in changes if field in validated}

            if self.label_field in changes:
                self._ensure_unique_label(changes[self.label_field], exclude_id=entity.id)

            for field, value in changes.items():
                setattr(entity, field, value)

            self.db.commit()
            self.db.refresh(entity)
            logger.info("%s actualizado", self.entity_name, extra={"entity_id": entity.id})
            return entity
        except Exception as e:
            self._handle_error(e, "update", entity_id, data)

    def delete(self, entity_id: Any) -> Dict[str, str]:
        """
        Borrado lógico de una entidad de referencia.

        Comprueba dentro de la misma transacción (con la fila bloqueada) que
        ningún TFG no eliminado la referencia. Devuelve solo un acuse.

        Raises:
            AppError: INVALID_ENTITY_NAME, INVALID_ID, <ENTIDAD>_NOT_FOUND,
                <ENTIDAD>_IN_USE
        """
        try:
            if self.entity_name not in self.DELETABLE_ENTITIES:
                raise AppError("INVALID_ENTITY_NAME")

            entity = self.get_by_id(entity_id, for_update=True)
            if self._count_tfg_usages(entity.id) > 0:
                self.db.rollback()
                raise AppError(self.ERRORS["IN_USE"])

            entity.soft_delete()
            self.db.commit()
            logger.info("%s eliminado", self.entity_name, extra={"entity_id": entity.id})
            return {"message": f"{self.entity_name} eliminado"}
        except Exception as e:
            self._handle_error(e, "delete", entity_id)

    # ================================================================================
    # USO EN TFGs
    # ================================================================================

    def _count_tfg_usages(self, entity_id: int) -> int:
        column = TFG_REFERENCE_COLUMNS[self.entity_name]
        return (
            self.db.query(func.count(TFG.id))
            .filter(column == entity_id, TFG.deleted_at.is_(None))
            .scalar()
        )

    def is_used_in_tfgs(self, entity_id: Any) -> bool:
        """
        Indica si algún TFG no eliminado referencia la entidad.
        Una entidad inexistente o un ID inválido se consideran "no en uso".
        """
        try:
            entity = self.get_by_id(entity_id)
        except AppError as e:
            if e.kind in (self.ERRORS["NOT_FOUND"], "INVALID_ID"):
                return False
            raise

        if self.entity_name not in TFG_REFERENCE_COLUMNS:
            return False
        try:
            return self._count_tfg_usages(entity.id) > 0
        except Exception as e:
            self._handle_error(e, "isUsedInTFGs", entity_id)

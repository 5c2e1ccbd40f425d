# tfg_backend/services/tfg_service.py
"""
Servicio de TFGs.

Extiende ``BaseService`` con la lógica propia del TFG:
- resolución de referencias (curso, titulación, tutor) por ID o etiqueta
- control de visibilidad de TFGs no verificados
- búsqueda paginada
- verificación, contadores y borrado con limpieza del archivo
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from tfg_backend.core.config import settings
from tfg_backend.core.exceptions import AppError
from tfg_backend.models.tfg import TFG, TFGKeyword, NO_FILE_LINK
from tfg_backend.schemas.tfg import TFGCreate, split_keywords
from tfg_backend.services.base_service import BaseService
from tfg_backend.services.file_service import FileService
from tfg_backend.services.reference_service import (
    advisor_service,
    degree_service,
    year_service,
)
from tfg_backend.services.refs import parse_ref

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = {"year": "year_id", "degree": "degree_id", "advisor": "advisor_id"}


class TFGService(BaseService):
    def __init__(self, db: Session, file_store=None):
        super().__init__(db, TFG, "tfg", create_schema=TFGCreate, label_field="title")
        self.file_store = file_store
        self.years = year_service(db)
        self.degrees = degree_service(db)
        self.advisors = advisor_service(db)

    # ================================================================================
    # LECTURA
    # ================================================================================

    def get_all_tfgs(self, filters: Optional[Dict[str, Any]] = None) -> List[TFG]:
        """Lista de TFGs filtrada por curso, titulación y estado de verificación."""
        try:
            query = self._apply_filters(self.find_active(), filters or {})
            if query is None:
                return []
            return query.order_by(TFG.id.desc()).all()
        except Exception as e:
            self._handle_error(e, "getAllTFGs", data=filters)

    def get_tfg_names(self) -> List[TFG]:
        """ID y título de los TFGs verificados."""
        return (
            self.find_active()
            .filter(TFG.verified.is_(True))
            .order_by(TFG.title)
            .all()
        )

    def get_tfg_by_id(self, tfg_id: Any, allow_unverified: bool = False) -> TFG:
        """
        Obtiene un TFG aplicando la regla de visibilidad.

        Raises:
            AppError: INVALID_ID, TFG_NOT_FOUND, NOT_VERIFIED
        """
        tfg = self.get_by_id(tfg_id)
        if not tfg.verified and not allow_unverified:
            raise AppError("NOT_VERIFIED")
        return tfg

    def _apply_filters(self, query: Query, filters: Dict[str, Any]) -> Optional[Query]:
        """
        Añade a la consulta los filtros de referencia y verificación.
        Devuelve None si alguna referencia no existe (resultado vacío).
        """
        services = {"year": self.years, "degree": self.degrees, "advisor": self.advisors}
        for name, service in services.items():
            value = filters.get(name)
            if value is None or value == "":
                continue
            try:
                ref = parse_ref(value)
            except ValueError:
                return None
            entity = service.resolve_ref(ref)
            if entity is None:
                return None
            query = query.filter(getattr(TFG, REFERENCE_FIELDS[name]) == entity.id)

        if filters.get("verified") is not None:
            query = query.filter(TFG.verified.is_(bool(filters["verified"])))
        return query

    def get_paginated_tfgs(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Búsqueda paginada (páginas desde 1).

        ``search`` busca sin distinguir mayúsculas en estudiante, título y
        resumen, y además compara cada palabra de la búsqueda con las
        palabras clave.

        Returns:
            {"items", "total_pages", "current_page", "total_items"}
        """
        page_size = page_size or settings.page_size
        if page < 1 or page_size < 1:
            raise AppError(
                "VALIDATION_ERROR",
                [{"field": "page", "message": "La página y su tamaño deben ser mayores que 0"}],
            )

        filters = filters or {}
        try:
            query = self._apply_filters(self.find_active(), filters)
            if query is None:
                return self._page([], 0, page, page_size)

            search = (filters.get("search") or "").strip()
            if search:
                tokens = [token.lower() for token in search.split() if token]
                keyword_match = select(TFGKeyword.tfg_id).where(
                    func.lower(TFGKeyword.keyword).in_(tokens)
                )
                query = query.filter(
                    or_(
                        TFG.student.icontains(search, autoescape=True),
                        TFG.title.icontains(search, autoescape=True),
                        TFG.abstract.icontains(search, autoescape=True),
                        TFG.id.in_(keyword_match),
                    )
                )

            total = query.count()
            items = (
                query.order_by(TFG.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
            return self._page(items, total, page, page_size)
        except Exception as e:
            self._handle_error(e, "getPaginatedTFGs", data=filters)

    @staticmethod
    def _page(items: List[TFG], total: int, page: int, page_size: int) -> Dict[str, Any]:
        return {
            "items": items,
            "total_pages": math.ceil(total / page_size),
            "current_page": page,
            "total_items": total,
        }

    # ================================================================================
    # RESOLUCIÓN DE REFERENCIAS
    # ================================================================================

    @staticmethod
    def _ref_or_fail(value: Any, kind: str):
        try:
            return parse_ref(value)
        except ValueError:
            raise AppError(kind)

    def validate_year_and_degree(self, year: Any, degree: Any, lock: bool = False) -> Tuple[int, int]:
        """
        Resuelve curso y titulación (ID o etiqueta) a sus IDs.

        Raises:
            AppError: YEAR_NOT_FOUND, DEGREE_NOT_FOUND
        """
        year_entity = self.years.resolve_ref(self._ref_or_fail(year, "YEAR_NOT_FOUND"), lock=lock)
        if year_entity is None:
            raise AppError("YEAR_NOT_FOUND")
        degree_entity = self.degrees.resolve_ref(self._ref_or_fail(degree, "DEGREE_NOT_FOUND"), lock=lock)
        if degree_entity is None:
            raise AppError("DEGREE_NOT_FOUND")
        return year_entity.id, degree_entity.id

    def validate_advisor(self, advisor: Any, lock: bool = False) -> int:
        """Resuelve el tutor (ID o etiqueta). Lanza ADVISOR_NOT_FOUND."""
        entity = self.advisors.resolve_ref(self._ref_or_fail(advisor, "ADVISOR_NOT_FOUND"), lock=lock)
        if entity is None:
            raise AppError("ADVISOR_NOT_FOUND")
        return entity.id

    def prepare_tfg_data(
        self,
        data: Dict[str, Any],
        current: Optional[TFG] = None,
        lock: bool = False,
    ) -> Dict[str, Any]:
        """
        Normaliza los datos de entrada: referencias a IDs y keywords a lista.
        Solo trata los campos presentes; en una actualización parcial las
        referencias que faltan se toman de ``current``.
        """
        prepared = dict(data)

        if "year" in prepared or "degree" in prepared:
            year = prepared.pop("year") if "year" in prepared else getattr(current, "year_id", None)
            degree = prepared.pop("degree") if "degree" in prepared else getattr(current, "degree_id", None)
            year_id, degree_id = self.validate_year_and_degree(year, degree, lock=lock)
            prepared["year_id"] = year_id
            prepared["degree_id"] = degree_id

        if "advisor" in prepared:
            prepared["advisor_id"] = self.validate_advisor(prepared.pop("advisor"), lock=lock)

        if "keywords" in prepared:
            keywords = split_keywords(prepared["keywords"])
            if not keywords:
                raise AppError(
                    "VALIDATION_ERROR",
                    [{"field": "keywords", "message": "Debe indicarse al menos una palabra clave"}],
                )
            prepared["keywords"] = keywords

        return prepared

    # ================================================================================
    # ESCRITURA
    # ================================================================================

    def create_tfg(self, data: Union[Dict[str, Any], BaseModel], created_by: Optional[int] = None) -> TFG:
        """
        Crea un TFG no verificado y sin archivo.

        Raises:
            AppError: VALIDATION_ERROR, YEAR_NOT_FOUND, DEGREE_NOT_FOUND,
                ADVISOR_NOT_FOUND
        """
        try:
            payload = self._validate(data)
            prepared = self.prepare_tfg_data(payload, lock=True)
            keywords = prepared.pop("keywords")

            tfg = TFG(**prepared, link=NO_FILE_LINK, verified=False, created_by=created_by)
            tfg.keywords = keywords
            self.db.add(tfg)
            self.db.commit()
            self.db.refresh(tfg)
            logger.info("TFG creado", extra={"tfg_id": tfg.id, "created_by": created_by})
            return tfg
        except Exception as e:
            self._handle_error(e, "create", data=data)

    def create(self, data):
        return self.create_tfg(data)

    def update_tfg(self, tfg_id: Any, data: Union[Dict[str, Any], BaseModel]) -> TFG:
        """
        Actualiza un TFG. Con un modelo pydantic solo se aplican los campos
        enviados; los campos resultantes se validan completos.

        Raises:
            AppError: INVALID_ID, TFG_NOT_FOUND, VALIDATION_ERROR,
                YEAR_NOT_FOUND, DEGREE_NOT_FOUND, ADVISOR_NOT_FOUND
        """
        try:
            tfg = self.get_by_id(tfg_id)
            if isinstance(data, BaseModel):
                changes = data.model_dump(exclude_unset=True)
            else:
                changes = dict(data)
            changes = {key: value for key, value in changes.items() if value is not None}

            validated = self._validate({
                "year": tfg.year_id,
                "degree": tfg.degree_id,
                "advisor": tfg.advisor_id,
                "student": tfg.student,
                "title": tfg.title,
                "abstract": tfg.abstract,
                "keywords": tfg.keywords,
                **changes,
            })
            changes = {field: validated[field] for field in changes if field in validated}
            prepared = self.prepare_tfg_data(changes, current=tfg, lock=True)

            keywords = prepared.pop("keywords", None)
            for field, value in prepared.items():
                setattr(tfg, field, value)
            if keywords is not None:
                tfg.keywords = keywords

            self.db.commit()
            self.db.refresh(tfg)
            logger.info("TFG actualizado", extra={"tfg_id": tfg.id})
            return tfg
        except Exception as e:
            self._handle_error(e, "update", tfg_id, data)

    def update(self, entity_id, data):
        return self.update_tfg(entity_id, data)

    def update_tfg_file(self, tfg_id: Any, file_url: str) -> TFG:
        """
        Asocia la URL del PDF al TFG. Si ya tenía otro archivo, se elimina
        del almacenamiento; un fallo al eliminarlo solo se registra.
        """
        try:
            tfg = self.get_by_id(tfg_id)
            previous = tfg.link if tfg.has_file else None
            tfg.link = file_url
            self.db.commit()
            self.db.refresh(tfg)
            logger.info("Archivo asociado al TFG", extra={"tfg_id": tfg.id})
        except Exception as e:
            self._handle_error(e, "updateFile", tfg_id)

        if previous and previous != file_url and self.file_store is not None:
            try:
                self.file_store.delete(previous)
            except AppError as e:
                logger.warning(
                    "No se pudo eliminar el archivo anterior del TFG",
                    extra={"tfg_id": tfg.id, "kind": e.kind},
                )
        return tfg

    def verify_tfg(
        self,
        tfg_id: Any,
        user_id: Optional[int] = None,
        verified: bool = True,
        reason: Optional[str] = None,
    ) -> TFG:
        """
        Marca el TFG como verificado (o retira la verificación con
        ``verified=False``) y registra quién lo hizo.
        """
        try:
            tfg = self.get_by_id(tfg_id)
            tfg.verified = verified
            if user_id is not None:
                tfg.verified_by = user_id
            if reason is not None:
                tfg.reason = reason
            self.db.commit()
            self.db.refresh(tfg)
            logger.info(
                "TFG %s", "verificado" if verified else "desverificado",
                extra={"tfg_id": tfg.id, "user_id": user_id},
            )
            return tfg
        except Exception as e:
            self._handle_error(e, "verify", tfg_id)

    def delete(self, tfg_id: Any) -> Dict[str, str]:
        """
        Borrado lógico del TFG. Antes intenta eliminar su archivo; si falla,
        se registra y el borrado continúa.
        """
        try:
            tfg = self.get_by_id(tfg_id)
            if tfg.has_file and self.file_store is not None:
                try:
                    tfg = FileService(self.db, self.file_store).delete_file(tfg.id)
                except AppError as e:
                    logger.warning(
                        "No se pudo eliminar el archivo del TFG",
                        extra={"tfg_id": tfg.id, "kind": e.kind},
                    )

            tfg.soft_delete()
            self.db.commit()
            logger.info("TFG eliminado", extra={"tfg_id": tfg.id})
            return {"message": "tfg eliminado"}
        except Exception as e:
            self._handle_error(e, "delete", tfg_id)

    # ================================================================================
    # CONTADORES
    # ================================================================================

    def _increment(self, tfg_id: int, column: str) -> Optional[TFG]:
        try:
            self.db.execute(
                update(TFG)
                .where(TFG.id == tfg_id, TFG.deleted_at.is_(None))
                .values({column: getattr(TFG, column) + 1})
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            return self.db.get(TFG, tfg_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                "No se pudo incrementar %s", column,
                extra={"tfg_id": tfg_id, "error": str(e)},
            )
            return None

    def increment_views(self, tfg_id: int) -> Optional[TFG]:
        """Suma una visita. Nunca lanza: en caso de error devuelve None."""
        return self._increment(tfg_id, "views")

    def increment_downloads(self, tfg_id: int) -> Optional[TFG]:
        """Suma una descarga. Nunca lanza: en caso de error devuelve None."""
        return self._increment(tfg_id, "download_count")

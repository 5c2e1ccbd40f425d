# tfg_backend/services/file_service.py
"""
Gestión de los PDFs asociados a los TFGs.

El almacenamiento concreto (Pinata) se inyecta como ``store``: cualquier
objeto con ``upload(content, filename) -> url``, ``fetch(url) -> bytes`` y
``delete(url)``.
"""
import logging

from sqlalchemy.orm import Session

from tfg_backend.core.exceptions import AppError
from tfg_backend.models.tfg import TFG, NO_FILE_LINK

logger = logging.getLogger(__name__)


class FileService:
    def __init__(self, db: Session, store):
        self.db = db
        self.store = store

    def _get_tfg(self, tfg_id: int) -> TFG:
        tfg = (
            self.db.query(TFG)
            .filter(TFG.id == tfg_id, TFG.deleted_at.is_(None))
            .first()
        )
        if not tfg:
            raise AppError("TFG_NOT_FOUND")
        return tfg

    def upload_file(self, content: bytes, filename: str) -> str:
        """Sube el archivo y devuelve su URL. Errores -> ERROR_UPLOADING_FILE."""
        try:
            return self.store.upload(content, filename)
        except AppError as e:
            logger.error("Error subiendo archivo", extra={"file_name": filename, "kind": e.kind})
            raise AppError("ERROR_UPLOADING_FILE", {"cause": e.kind}) from e
        except Exception as e:
            logger.error("Error subiendo archivo: %s", e, extra={"file_name": filename})
            raise AppError("ERROR_UPLOADING_FILE") from e

    def get_tfg_file(self, tfg_id: int) -> bytes:
        """Descarga el PDF de un TFG."""
        tfg = self._get_tfg(tfg_id)
        if not tfg.has_file:
            raise AppError("TFG_FILE_NOT_FOUND")
        try:
            return self.store.fetch(tfg.link)
        except AppError:
            raise
        except Exception as e:
            logger.error("Error obteniendo archivo: %s", e, extra={"tfg_id": tfg_id})
            raise AppError("ERROR_GETTING_FILE") from e

    def delete_file(self, tfg_id: int) -> TFG:
        """
        Elimina el PDF del almacenamiento y deja el TFG sin archivo y sin
        verificar.
        """
        tfg = self._get_tfg(tfg_id)
        if not tfg.has_file:
            raise AppError("TFG_FILE_NOT_FOUND")
        try:
            self.store.delete(tfg.link)
        except AppError:
            raise
        except Exception as e:
            logger.error("Error eliminando archivo: %s", e, extra={"tfg_id": tfg_id})
            raise AppError("ERROR_DELETING_FILE") from e

        tfg.link = NO_FILE_LINK
        tfg.verified = False
        self.db.commit()
        self.db.refresh(tfg)
        logger.info("Archivo del TFG eliminado", extra={"tfg_id": tfg_id})
        return tfg

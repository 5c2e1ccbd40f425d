# tfg_backend/utils/logger.py
import logging
import sys

from tfg_backend.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> logging.Logger:
    """Configura el logger raíz de la aplicación una sola vez."""
    app_logger = logging.getLogger("tfg_backend")
    if app_logger.handlers:
        return app_logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(handler)
    app_logger.setLevel(logging.DEBUG if settings.environment == "development" else logging.INFO)
    app_logger.propagate = False
    return app_logger


logger = setup_logging()

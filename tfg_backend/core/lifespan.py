from contextlib import asynccontextmanager
from fastapi import FastAPI

from tfg_backend.db.base import Base
from tfg_backend.db.session import engine, SessionLocal
from tfg_backend.db.init_db import create_default_admin
from tfg_backend.utils.logger import logger
from tfg_backend.core.config import settings

# Registra los modelos en Base.metadata
import tfg_backend.models  # noqa: F401


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Maneja startup/shutdown de la app.
    En desarrollo crea las tablas; en producción se usan las migraciones de Alembic.
    """
    # --- Startup ---
    logger.info("Iniciando backend del repositorio de TFGs (%s)...", settings.environment)

    if settings.environment == "development":
        Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        create_default_admin(session)
    finally:
        session.close()

    logger.info("Startup completado correctamente")

    # La app se levanta aquí
    yield

    # --- Shutdown ---
    logger.info("Aplicación cerrada correctamente")

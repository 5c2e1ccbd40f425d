from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from tfg_backend.core.config import settings

# Engine de conexión
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verifica la conexión antes de usarla
    future=True,
)

# Sesión de base de datos
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency de FastAPI para obtener una sesión de base de datos.
    Garantiza que la sesión se cierre al finalizar.
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()

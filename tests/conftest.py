"""
Fixtures comunes.

La configuración se fija por variables de entorno antes de importar la app:
SQLite en memoria y bcrypt con el mínimo de rondas para que los tests sean
rápidos.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("FIRST_ADMIN_EMAIL", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tfg_backend.api.dependencies import get_email_sender, get_file_store
from tfg_backend.core.config import Roles
from tfg_backend.core.exceptions import AppError
from tfg_backend.crud.user import create_user
from tfg_backend.db.session import get_db
from tfg_backend.main import app
from tfg_backend.models import Base
from tfg_backend.services.auth_service import issue_token
from tfg_backend.services.reference_service import (
    advisor_service,
    degree_service,
    year_service,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ==================== DOBLES DE COLABORADORES ====================

class FakeFileStore:
    """Almacenamiento de archivos en memoria con la interfaz de PinataClient."""

    def __init__(self):
        self.files = {}
        self.deleted = []
        self.fail_delete = False
        self._counter = 0

    def upload(self, content: bytes, filename: str) -> str:
        self._counter += 1
        url = f"https://gateway.example.com/ipfs/QmFake{self._counter}"
        self.files[url] = content
        return url

    def fetch(self, url: str) -> bytes:
        if url not in self.files:
            raise AppError("PINATA_FETCH_ERROR")
        return self.files[url]

    def delete(self, url: str) -> None:
        if self.fail_delete:
            raise AppError("PINATA_API_ERROR")
        self.files.pop(url, None)
        self.deleted.append(url)


class FakeEmailSender:
    def __init__(self):
        self.sent = []

    def send_email(self, to_email, subject, body_html, body_text=None) -> bool:
        self.sent.append({"to": to_email, "subject": subject, "body": body_text})
        return True


# ==================== BASE DE DATOS Y CLIENTE ====================

@pytest.fixture
def db() -> Session:
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_store():
    return FakeFileStore()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def client(db: Session, file_store, email_sender):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: file_store
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==================== USUARIOS ====================

def _make_user(db: Session, email: str, role: str, validated: bool = True):
    return create_user(
        db,
        name=email.split("@")[0],
        email=email,
        password="secreto123",
        role=role,
        validated=validated,
    )


@pytest.fixture
def admin_user(db: Session):
    return _make_user(db, "admin@uni.es", Roles.ADMIN)


@pytest.fixture
def coordinador_user(db: Session):
    return _make_user(db, "coordinador@uni.es", Roles.COORDINADOR)


@pytest.fixture
def normal_user(db: Session):
    return _make_user(db, "alumno@uni.es", Roles.USUARIO)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def coordinador_headers(coordinador_user):
    return auth_headers(coordinador_user)


@pytest.fixture
def user_headers(normal_user):
    return auth_headers(normal_user)


# ==================== DATOS DE REFERENCIA ====================

@pytest.fixture
def year(db: Session):
    return year_service(db).create({"year": "23/24"})


@pytest.fixture
def degree(db: Session):
    return degree_service(db).create({"degree": "Computer Science"})


@pytest.fixture
def advisor(db: Session):
    return advisor_service(db).create({"advisor": "Jane Doe"})


@pytest.fixture
def tfg_data(year, degree, advisor):
    return {
        "year": "23/24",
        "degree": "Computer Science",
        "advisor": "Jane Doe",
        "student": "John Smith",
        "title": "Redes neuronales para clasificar TFGs",
        "abstract": "Estudio sobre clasificación automática de trabajos.",
        "keywords": "machine learning, redes, clasificación",
    }

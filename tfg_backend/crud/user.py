from sqlalchemy.orm import Session
from typing import List, Optional

from tfg_backend.core.config import Roles
from tfg_backend.models.user import User


def _active(db: Session):
    return db.query(User).filter(User.deleted_at.is_(None))


# -----------------------------------------------------
# Obtener usuario por ID
# -----------------------------------------------------
def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return _active(db).filter(User.id == user_id).first()


# -----------------------------------------------------
# Obtener usuario por email (siempre en minúsculas)
# -----------------------------------------------------
def get_user_by_email(db: Session, email: str, include_deleted: bool = False) -> Optional[User]:
    query = db.query(User) if include_deleted else _active(db)
    return query.filter(User.email == email.strip().lower()).first()


# -----------------------------------------------------
# Listar y buscar usuarios
# -----------------------------------------------------
def list_users(db: Session) -> List[User]:
    return _active(db).order_by(User.id).all()


def search_users_by_email(db: Session, email: str) -> List[User]:
    return (
        _active(db)
        .filter(User.email.icontains(email.strip(), autoescape=True))
        .order_by(User.email)
        .all()
    )


# -----------------------------------------------------
# Crear usuario
# -----------------------------------------------------
def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = Roles.USUARIO,
    validated: bool = False,
    verification_code: Optional[str] = None,
) -> User:
    from tfg_backend.core.security import hash_password

    obj = User(
        name=name,
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=role,
        validated=validated,
        verification_code=verification_code,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

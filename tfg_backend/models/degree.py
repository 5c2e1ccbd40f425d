from sqlalchemy import Column, Integer, String, Boolean

from tfg_backend.db.base import Base
from tfg_backend.models.mixins import SoftDeleteMixin, TimestampMixin


class Degree(SoftDeleteMixin, TimestampMixin, Base):
    """Titulación de grado."""

    __tablename__ = "degrees"

    id = Column(Integer, primary_key=True, index=True)
    degree = Column(String(255), nullable=False, unique=True)
    active = Column(Boolean, nullable=False, default=True)

from sqlalchemy import Column, Integer, String, Boolean, Date

from tfg_backend.db.base import Base
from tfg_backend.models.mixins import SoftDeleteMixin, TimestampMixin


class Year(SoftDeleteMixin, TimestampMixin, Base):
    """Curso académico con formato ``NN/NN`` (p. ej. 23/24)."""

    __tablename__ = "years"

    id = Column(Integer, primary_key=True, index=True)
    year = Column(String(5), nullable=False, unique=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

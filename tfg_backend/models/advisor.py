from sqlalchemy import Column, Integer, String, Boolean

from tfg_backend.db.base import Base
from tfg_backend.models.mixins import SoftDeleteMixin, TimestampMixin


class Advisor(SoftDeleteMixin, TimestampMixin, Base):
    """Tutor de TFG."""

    __tablename__ = "advisors"

    id = Column(Integer, primary_key=True, index=True)
    advisor = Column(String(255), nullable=False, unique=True)
    active = Column(Boolean, nullable=False, default=True)

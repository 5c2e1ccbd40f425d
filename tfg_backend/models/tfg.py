"""
Modelo de TFG (Trabajo de Fin de Grado).

Ciclo de vida:
    creado (no verificado, sin archivo) -> archivo subido -> verificado
    cualquier estado -> eliminado (borrado lógico)
"""
from typing import List

from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship

from tfg_backend.db.base import Base
from tfg_backend.models.mixins import SoftDeleteMixin, TimestampMixin

# Valor de ``link`` cuando aún no se ha subido el PDF
NO_FILE_LINK = "undefined"


class TFGKeyword(Base):
    __tablename__ = "tfg_keywords"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tfg_id = Column(Integer, ForeignKey("tfgs.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    keyword = Column(String(100), nullable=False, index=True)


class TFG(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "tfgs"

    id = Column(Integer, primary_key=True, index=True)
    year_id = Column(Integer, ForeignKey("years.id"), nullable=False, index=True)
    degree_id = Column(Integer, ForeignKey("degrees.id"), nullable=False, index=True)
    advisor_id = Column(Integer, ForeignKey("advisors.id"), nullable=False, index=True)

    student = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    abstract = Column(Text, nullable=False)
    link = Column(String(500), nullable=False, default=NO_FILE_LINK)

    verified = Column(Boolean, nullable=False, default=False, index=True)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reason = Column(Text, nullable=True)

    views = Column(Integer, nullable=False, default=0)
    download_count = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relaciones
    year = relationship("Year", lazy="joined")
    degree = relationship("Degree", lazy="joined")
    advisor = relationship("Advisor", lazy="joined")
    keyword_rows = relationship(
        "TFGKeyword",
        order_by=TFGKeyword.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def keywords(self) -> List[str]:
        return [row.keyword for row in self.keyword_rows]

    @keywords.setter
    def keywords(self, values: List[str]) -> None:
        self.keyword_rows = [
            TFGKeyword(position=i, keyword=value) for i, value in enumerate(values)
        ]

    @property
    def has_file(self) -> bool:
        return bool(self.link) and self.link != NO_FILE_LINK

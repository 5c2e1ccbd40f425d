from tfg_backend.db.base import Base

# Importa modelos para que se registren en Base.metadata
from .user import User
from .year import Year
from .degree import Degree
from .advisor import Advisor
from .tfg import TFG, TFGKeyword, NO_FILE_LINK

__all__ = [
    "User",
    "Year",
    "Degree",
    "Advisor",
    "TFG",
    "TFGKeyword",
    "NO_FILE_LINK",
    "Base",
]

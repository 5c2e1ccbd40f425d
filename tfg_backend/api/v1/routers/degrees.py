#tfg_backend/api/v1/routers/degrees.py
from tfg_backend.api.v1.routers.reference import build_reference_router
from tfg_backend.core.config import Roles
from tfg_backend.schemas.reference import DegreeCreate, DegreeRead, DegreeUpdate

router = build_reference_router(
    "degree", DegreeRead, DegreeCreate, DegreeUpdate, write_roles=[Roles.ADMIN]
)

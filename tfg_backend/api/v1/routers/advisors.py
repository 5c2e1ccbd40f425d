#tfg_backend/api/v1/routers/advisors.py
from tfg_backend.api.v1.routers.reference import build_reference_router
from tfg_backend.core.config import Roles
from tfg_backend.schemas.reference import AdvisorCreate, AdvisorRead, AdvisorUpdate

# Los coordinadores también gestionan tutores
router = build_reference_router(
    "advisor", AdvisorRead, AdvisorCreate, AdvisorUpdate, write_roles=Roles.PRIVILEGIADOS
)

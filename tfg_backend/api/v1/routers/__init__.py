from fastapi import APIRouter

# Importa cada módulo de rutas
from tfg_backend.api.v1.routers import (
    advisors,
    degrees,
    tfgs,
    users,
    years,
)

# Router principal con prefijo global
api_router = APIRouter(prefix="/api")

# Endpoint raíz para verificar que la API funciona
@api_router.get("/", tags=["Root"])
def read_root():
    return {"message": "Bienvenido a la API del repositorio de TFGs"}

# Registro de módulos de rutas
api_router.include_router(users.router, prefix="/users", tags=["Usuarios"])
api_router.include_router(tfgs.router, prefix="/tfgs", tags=["TFGs"])
api_router.include_router(years.router, prefix="/years", tags=["Cursos"])
api_router.include_router(degrees.router, prefix="/degrees", tags=["Titulaciones"])
api_router.include_router(advisors.router, prefix="/advisors", tags=["Tutores"])

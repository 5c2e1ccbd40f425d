from fastapi import FastAPI

from tfg_backend.api.v1.routers import api_router
from tfg_backend.core.error_handlers import register_error_handlers
from tfg_backend.core.lifespan import lifespan
from tfg_backend.core.logging_middleware import log_requests
from tfg_backend.utils.cors import setup_cors


def create_app() -> FastAPI:
    app = FastAPI(
        title="TFG Backend",
        version="1.0.0",
        description="Backend del repositorio de Trabajos de Fin de Grado",
        lifespan=lifespan,
    )

    # --- Configuración CORS ---
    setup_cors(app)

    # --- Logging de peticiones ---
    app.middleware("http")(log_requests)

    # --- Errores en formato {error, message, status} ---
    register_error_handlers(app)

    # --- Rutas centralizadas ---
    app.include_router(api_router)

    return app


app = create_app()

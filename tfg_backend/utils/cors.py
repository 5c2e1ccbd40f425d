from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tfg_backend.core.config import settings


def setup_cors(app: FastAPI) -> None:
    origins = settings.backend_cors_origins
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

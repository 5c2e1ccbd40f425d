import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import FastAPI

from tfg_backend.core.exceptions import AppError

logger = logging.getLogger("tfg_backend")


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Error %s en %s %s", exc.kind, request.method, request.url.path)
        else:
            logger.warning("Error %s en %s %s", exc.kind, request.method, request.url.path)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.error("Error HTTP %s en %s - %s", exc.status_code, request.url, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.error("Error de validación en %s - %s", request.url, details)
        error = AppError("VALIDATION_ERROR", details)
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Error no controlado en %s %s: %s", request.method, request.url.path, exc,
            exc_info=exc,
        )
        error = AppError("DEFAULT_ERROR")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

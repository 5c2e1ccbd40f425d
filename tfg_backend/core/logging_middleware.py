import logging
import time

from fastapi import Request

logger = logging.getLogger("tfg_backend.requests")


async def log_requests(request: Request, call_next):
    start = time.time()
    logger.info("Petición: %s %s", request.method, request.url.path)
    response = await call_next(request)
    logger.info(
        "Respuesta: %s %s %s (%.1f ms)",
        response.status_code, request.method, request.url.path, (time.time() - start) * 1000,
    )
    return response

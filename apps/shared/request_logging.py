"""Access logging for API-tjenester."""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import Response

logger = logging.getLogger("access")

BODY_METHODS = {"POST", "PUT", "PATCH"}


def setup_request_logging(app: FastAPI) -> None:
    """Logg metode, sti, statuskode og varighet for hver forespørsel."""

    @app.middleware("http")
    async def log_request(request: Request, call_next) -> Response:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        # Forespørselskroppen logges bare på DEBUG-nivå
        if request.method in BODY_METHODS and logger.isEnabledFor(logging.DEBUG):
            body = await request.body()
            if body:
                logger.debug("%s %s body: %s", request.method, target, body.decode("utf-8", errors="replace"))

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info("%s %s -> %s (%.0fms)", request.method, target, response.status_code, duration_ms)
        return response

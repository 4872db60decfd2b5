"""Application logging setup and per-request access log."""
import logging
import sys
from time import time
from typing import Optional

from fastapi import FastAPI, Request

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach a console handler to the ``sipe`` logger tree (idempotent)."""
    global _configured
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("sipe")
    logger.setLevel(log_level)
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    # keep third-party chatter down
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    _configured = True


def add_request_logging(app: FastAPI) -> None:
    logger = logging.getLogger("sipe.http")

    @app.middleware("http")
    async def request_logger(request: Request, call_next):  # type: ignore[override]
        start = time()
        response = await call_next(request)
        duration_ms = (time() - start) * 1000
        client_ip: Optional[str] = request.client.host if request.client else None
        logger.info(
            "%s %s | status=%s | client=%s | duration=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            client_ip or "unknown",
            duration_ms,
        )
        return response

# backend/sipe/main.py

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sipe.api.auth_routes import router as auth_router
from sipe.api.equipment_routes import router as equipment_router
from sipe.api.errors import setup_exception_handlers
from sipe.api.user_routes import router as user_router
from sipe.core.config import get_settings
from sipe.core.database import init_db
from sipe.core.logging_config import add_request_logging, configure_logging

logger = logging.getLogger("sipe")

VERSION = "1.0.0"
STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("SIPE API %s ready (env=%s)", VERSION, get_settings().app_env)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="SIPE API", version=VERSION, lifespan=lifespan)

    # Prefer a comma-separated allowlist in prod, fallback to FRONTEND_URL/local
    # Example: CORS_ORIGINS="https://sipe.example.com,http://localhost:3000"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["Authorization", "Content-Type"],
    )
    add_request_logging(app)
    setup_exception_handlers(app)

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(user_router, prefix="/api/usuarios", tags=["usuarios"])
    app.include_router(equipment_router, prefix="/api/equipos", tags=["equipos"])

    @app.get("/")
    def index():
        return {
            "message": "API Sistema de Gestión de Inventario - SIPE",
            "version": VERSION,
            "endpoints": {
                "auth": "/api/auth",
                "usuarios": "/api/usuarios",
                "equipos": "/api/equipos",
            },
        }

    @app.get("/api/health")
    def health():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - STARTED_AT, 3),
        }

    return app


app = create_app()

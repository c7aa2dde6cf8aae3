import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend import SignalingBackend
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATIC_DIR
from logging_config import get_logger, setup_logging
from routers.rooms import rooms_router
from routers.signaling import signaling_router
from schemas.rooms import HealthResponse

setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    backend: SignalingBackend = app.state.backend
    logger.info("Starting signalling server")
    backend.start()
    yield
    logger.info("Shutting down signalling server")
    await backend.stop()


def create_app(backend: Optional[SignalingBackend] = None, static_dir: Optional[str] = STATIC_DIR) -> FastAPI:
    app = FastAPI(title="Signalling Server", lifespan=lifespan)
    app.state.backend = backend or SignalingBackend()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)
    app.include_router(signaling_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        summary = request.app.state.backend.health_summary()
        return HealthResponse(
            status="OK",
            timestamp=datetime.now(timezone.utc),
            activeRooms=summary.room_count,
            totalUsers=summary.total_participants,
        )

    # mounted last: "/" would otherwise shadow the API routes
    if static_dir and os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        logger.info(f"Serving static files from {static_dir}")

    logger.info("FastAPI application initialized")
    return app


app = create_app()

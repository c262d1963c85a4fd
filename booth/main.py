"""PartyBooth Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from booth.config import settings
from booth.database import init_db
from booth.services.password_cache import PasswordRevealCache
from booth.utils.storage import FILES_URL_PREFIX, get_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database and app-owned collaborators on startup."""
    init_db()
    app.state.storage = get_storage()
    app.state.password_cache = PasswordRevealCache(ttl_seconds=settings.password_reveal_ttl_seconds)
    logger.info("%s ready, storing photos in %s", settings.server_name, settings.storage_dir)

    yield


app = FastAPI(
    title="PartyBooth",
    description="Party photo booth: device login, burst capture, photo sharing",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - booth pages and download pages may be served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register API routers ---
from booth.api.auth import router as auth_router  # noqa: E402
from booth.api.admin import router as admin_router  # noqa: E402
from booth.api.sessions import router as sessions_router  # noqa: E402
from booth.api.system import router as system_router  # noqa: E402

API_PREFIX = "/api/v1"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)
app.include_router(sessions_router, prefix=API_PREFIX)
app.include_router(system_router, prefix=API_PREFIX)


# --- WebSocket endpoints ---
from booth.ws.capture import websocket_capture  # noqa: E402


@app.websocket("/ws/capture")
async def ws_capture_endpoint(ws: WebSocket, token: str = Query(default="")):
    await websocket_capture(ws, token or None)


@app.get("/")
def root():
    """Health check / server info."""
    return {
        "name": settings.server_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/api/v1/health")
def health():
    return {"status": "ok"}


# --- Stored photos ---
app.mount(FILES_URL_PREFIX, StaticFiles(directory=str(settings.storage_dir)), name="files")


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)

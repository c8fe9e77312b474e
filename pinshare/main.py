"""
PinShare
- PIN login at /login, signed session cookie for everything else
- /upload, /files, /download/{name}, /delete/{name} over a flat upload dir
- file metadata mirrored to a JSON index on every change
- serves the browser UI from /public
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from pinshare.api.deps import get_settings
from pinshare.api.middleware import install_middleware
from pinshare.api.routes.auth import router as auth_router
from pinshare.api.routes.files import router as files_router
from pinshare.core.config import Settings, settings as default_settings
from pinshare.core.errors import register_exception_handlers
from pinshare.core.logging import configure_logging
from pinshare.core.security import LoginRateLimiter, SessionSigner
from pinshare.services.filestore import FileService
from pinshare.services.index import MetadataIndex

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    settings = app.state.settings
    configure_logging(settings.LOG_DIR, settings.LOG_LEVEL)
    settings.validate()
    app.state.files.init()
    logger.info(f"PinShare ready, {len(app.state.files.catalog)} files indexed.")
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="PinShare", version="0.2.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.files = FileService(
        settings.UPLOAD_DIR,
        MetadataIndex(settings.METADATA_FILE, settings.UPLOAD_DIR),
        settings.MAX_UPLOAD_BYTES,
    )
    app.state.signer = SessionSigner(settings.SESSION_SECRET_KEY, settings.SESSION_TTL_SECONDS)
    app.state.login_limiter = LoginRateLimiter(settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_SECONDS)

    register_exception_handlers(app)
    install_middleware(app)

    # Static UI
    app.mount("/public", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="public")

    @app.get("/")
    def index(settings: Settings = Depends(get_settings)):
        return FileResponse(Path(settings.STATIC_DIR) / "index.html")

    # APIs
    app.include_router(auth_router, tags=["auth"])
    app.include_router(files_router, tags=["files"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


def run():
    import uvicorn

    logger.info(f"Starting PinShare on {default_settings.HOST}:{default_settings.PORT} ...")
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()

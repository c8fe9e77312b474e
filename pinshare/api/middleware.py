import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pinshare.core.errors import AuthInvalid, UploadTooLarge, login_redirect
from pinshare.core.security import SESSION_COOKIE

logger = logging.getLogger(__name__)

# reachable without a session
PUBLIC_PATHS = {"/login", "/logout", "/health"}
PUBLIC_PREFIXES = ("/public/",)


def is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def authenticate(request: Request) -> None:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise AuthInvalid("No session cookie")
    if not request.app.state.signer.verify(token):
        raise AuthInvalid("Invalid or expired session")


def install_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def require_session(request: Request, call_next):
        if not is_public(request.url.path):
            try:
                authenticate(request)
            except AuthInvalid as e:
                logger.info(f"[AUTH] {e.message} on {request.url.path}, redirecting to login.")
                return login_redirect()
        return await call_next(request)

    # the last one registered is outermost
    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        if request.method == "POST" and request.url.path == "/upload":
            limit = request.app.state.settings.MAX_UPLOAD_BYTES
            length = request.headers.get("content-length")
            if length is not None and length.isdigit() and int(length) > limit:
                logger.warning(f"Rejected upload of {length} bytes (limit {limit})")
                exc = UploadTooLarge()
                return JSONResponse(status_code=exc.status_code, content=exc.body())
        return await call_next(request)

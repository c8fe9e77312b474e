import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from pinshare.api.deps import get_login_limiter, get_settings, get_signer
from pinshare.core.config import Settings
from pinshare.core.errors import RateLimited, login_redirect
from pinshare.core.security import SESSION_COOKIE, LoginRateLimiter, SessionSigner, check_pin

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    pin: str


@router.get("/login")
def login_page(settings: Settings = Depends(get_settings)):
    return FileResponse(Path(settings.STATIC_DIR) / "login.html")

@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    signer: SessionSigner = Depends(get_signer),
    limiter: LoginRateLimiter = Depends(get_login_limiter),
):
    client = request.client.host if request.client else "unknown"
    if not limiter.hit(client):
        logger.warning(f"[AUTH] Login rate limit exceeded for {client}")
        raise RateLimited()

    if not check_pin(body.pin, settings.LOGIN_PIN):
        logger.warning(f"[AUTH] Failed login attempt from {client}")
        return JSONResponse(status_code=401, content={"error": "Incorrect PIN"})

    logger.info(f"[AUTH] Login successful from {client}")
    resp = JSONResponse({"status": "ok"})
    resp.set_cookie(
        SESSION_COOKIE,
        signer.issue(),
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )
    return resp

@router.get("/logout")
def logout():
    logger.info("[AUTH] User logged out.")
    return login_redirect()

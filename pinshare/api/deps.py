from fastapi import Request

from pinshare.core.config import Settings
from pinshare.core.security import LoginRateLimiter, SessionSigner
from pinshare.services.filestore import FileService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_file_service(request: Request) -> FileService:
    return request.app.state.files

def get_signer(request: Request) -> SessionSigner:
    return request.app.state.signer

def get_login_limiter(request: Request) -> LoginRateLimiter:
    return request.app.state.login_limiter

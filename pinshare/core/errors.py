"""
Error kinds raised by the file service and the auth layer, and the handlers
that render them as JSON bodies of the form {"error": "<message>"}.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from pinshare.core.security import SESSION_COOKIE
from pinshare.services.records import FileRecord


class PinShareError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def body(self) -> dict:
        return {"error": self.message}


class InvalidName(PinShareError):
    status_code = 400
    message = "Invalid filename"


class NotFound(PinShareError):
    """Target missing from the catalog ("metadata") or from disk ("disk")."""

    status_code = 404

    def __init__(self, where: str = "metadata", message: Optional[str] = None):
        self.where = where
        preposition = "on" if where == "disk" else "in"
        super().__init__(message or f"File not found {preposition} {where}")


class UploadTooLarge(PinShareError):
    status_code = 413
    message = "Upload exceeds the maximum allowed size"


class DiskWriteFailure(PinShareError):
    status_code = 500
    message = "Could not write file to disk"


class MetadataPersistFailure(PinShareError):
    """
    The index could not be written after a disk operation succeeded.
    When raised by an upload, `record` is the file that is on disk and in
    memory but not durably indexed.
    """

    status_code = 500
    message = "Failed to save metadata"

    def __init__(self, message: Optional[str] = None, record: Optional[FileRecord] = None):
        self.record = record
        super().__init__(message)

    def body(self) -> dict:
        out = super().body()
        if self.record is not None:
            out.update(self.record.to_public())
        return out


class RateLimited(PinShareError):
    status_code = 429
    message = "Too many login attempts, try again later"


class AuthInvalid(PinShareError):
    status_code = 401
    message = "Session missing or expired"


def login_redirect() -> RedirectResponse:
    resp = RedirectResponse("/login", status_code=302)
    resp.delete_cookie(SESSION_COOKIE)
    return resp


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PinShareError)
    async def _pinshare_error(request: Request, exc: PinShareError):
        return JSONResponse(status_code=exc.status_code, content=exc.body())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

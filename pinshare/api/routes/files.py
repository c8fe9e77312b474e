import os
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.responses import StreamingResponse

from pinshare.api.deps import get_file_service
from pinshare.services.filestore import FileService

router = APIRouter()

_CHUNK = 64 * 1024


def _attachment(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _iter_file(handle):
    try:
        while True:
            chunk = handle.read(_CHUNK)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


@router.post("/upload")
def upload(file: UploadFile = File(...), files: FileService = Depends(get_file_service)):
    record = files.upload(file.filename, file.file, declared_size=file.size)
    return {"status": "uploaded", "filename": record.filename, "size": record.size}

@router.get("/files")
def list_files(files: FileService = Depends(get_file_service)):
    return files.list_files()

@router.get("/download/{filename}")
def download(filename: str, files: FileService = Depends(get_file_service)):
    # path params arrive percent-decoded; the file is opened under the catalog
    # lock so a concurrent delete cannot remove it before it is streamed
    record, handle = files.open_download(filename)
    return StreamingResponse(
        _iter_file(handle),
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": _attachment(record.filename),
            "Content-Length": str(os.fstat(handle.fileno()).st_size),
        },
    )

@router.delete("/delete/{filename}")
def delete(filename: str, files: FileService = Depends(get_file_service)):
    return files.delete(filename)

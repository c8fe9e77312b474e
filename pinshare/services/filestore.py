# pinshare/services/filestore.py
"""
Upload, list, download and delete, each run as a single critical section
over the catalog: disk work, the in-memory update and the index write all
happen while `catalog.lock` is held.
"""

import logging
import os
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Dict, List, Optional, Tuple

from pinshare.core.errors import (
    DiskWriteFailure,
    InvalidName,
    MetadataPersistFailure,
    NotFound,
    UploadTooLarge,
)
from pinshare.services.catalog import Catalog
from pinshare.services.index import MetadataIndex
from pinshare.services.records import FileRecord

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 1024

# NAME_MAX on common filesystems, less room for the "_<time_ns>" suffix
_MAX_NAME_BYTES = 255 - 21


def sanitize_filename(raw: Optional[str]) -> str:
    """Reduce a client-supplied name to a bare file name, or raise InvalidName."""
    if raw is None:
        raise InvalidName()
    name = PurePosixPath(raw.replace("\\", "/")).name.strip()
    if name in ("", ".", "..") or "\x00" in name:
        logger.warning(f"Rejected filename {raw!r}")
        raise InvalidName()
    if len(name.encode("utf-8", "surrogatepass")) > _MAX_NAME_BYTES:
        logger.warning(f"Rejected filename longer than {_MAX_NAME_BYTES} bytes: {name[:40]!r}...")
        raise InvalidName("Filename is too long")
    return name


def disambiguate(name: str) -> str:
    """report.pdf -> report_<ns timestamp>.pdf"""
    stem, ext = os.path.splitext(name)
    return f"{stem}_{time.time_ns()}{ext}"


class FileService:
    def __init__(self, upload_dir: str, index: MetadataIndex, max_upload_bytes: int):
        self.upload_dir = Path(upload_dir)
        self.index = index
        self.max_upload_bytes = max_upload_bytes
        self.catalog = Catalog()

    def init(self) -> "FileService":
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.catalog = Catalog(self.index.load())
        return self

    # ---- upload ----

    def upload(self, raw_filename: Optional[str], stream: BinaryIO,
               declared_size: Optional[int] = None) -> FileRecord:
        name = sanitize_filename(raw_filename)
        if declared_size is not None and declared_size > self.max_upload_bytes:
            raise UploadTooLarge()

        with self.catalog.lock:
            final_name = name
            if name in self.catalog or os.path.exists(self.upload_dir / name):
                final_name = disambiguate(name)
                logger.info(f"{name!r} already exists, storing as {final_name!r}")
            path = self.upload_dir / final_name

            size = self._write(path, stream)
            record = FileRecord(filename=final_name, size=size, storage_path=str(path))
            self.catalog.insert(record)

            try:
                self.index.persist(self.catalog.list_all())
            except OSError as e:
                logger.error(f"Uploaded {final_name!r} but could not save metadata: {e}")
                raise MetadataPersistFailure(record=record) from e

        logger.info(f"Uploaded {final_name!r} ({size} bytes)")
        return record

    def _write(self, path: Path, stream: BinaryIO) -> int:
        written = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = stream.read(_CHUNK)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_upload_bytes:
                        raise UploadTooLarge()
                    out.write(chunk)
        except UploadTooLarge:
            self._discard(path)
            raise
        except OSError as e:
            logger.error(f"Failed to save file to {path}: {e}")
            self._discard(path)
            raise DiskWriteFailure() from e
        return written

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial upload {path}: {e}")

    # ---- read side ----

    def list_files(self) -> List[Dict]:
        with self.catalog.lock:
            records = self.catalog.list_all()
        logger.debug(f"Listing files. Total count: {len(records)}")
        return [r.to_public() for r in records]

    def resolve_download(self, filename: str) -> FileRecord:
        with self.catalog.lock:
            return self._lookup(filename)

    def _lookup(self, filename: str) -> FileRecord:
        record = self.catalog.find_by_name(filename)
        if record is None:
            raise NotFound("metadata")
        if not os.path.isfile(record.storage_path):
            logger.warning(f"{filename!r} is indexed but missing on disk at {record.storage_path}")
            raise NotFound("disk")
        return record

    def open_download(self, filename: str) -> Tuple[FileRecord, BinaryIO]:
        """Look up `filename` and open it before the lock is released."""
        with self.catalog.lock:
            record = self._lookup(filename)
            try:
                handle = open(record.storage_path, "rb")
            except OSError as e:
                logger.warning(f"Could not open {record.storage_path} for download: {e}")
                raise NotFound("disk") from e
        return record, handle

    # ---- delete ----

    def delete(self, filename: str) -> List[Dict]:
        with self.catalog.lock:
            record = self.catalog.find_by_name(filename)
            if record is None:
                raise NotFound("metadata")

            try:
                os.remove(record.storage_path)
            except FileNotFoundError:
                logger.info(f"{record.storage_path} was already gone from disk")
            except OSError as e:
                # the metadata entry is dropped anyway
                logger.warning(f"Could not delete {record.storage_path} from disk: {e}")

            self.catalog.remove_by_name(filename)
            try:
                self.index.persist(self.catalog.list_all())
            except OSError as e:
                raise MetadataPersistFailure("Failed to update metadata") from e
            remaining = self.catalog.list_all()

        logger.info(f"Deleted {filename!r}")
        return [r.to_public() for r in remaining]

"""
JSON sidecar index for uploaded files.

The index is a full snapshot of the catalog, rewritten on every mutation:

    {"files": [{"filename": "a.txt", "size": 12, "path": "uploads/a.txt"}, ...]}

Loading never aborts startup. A missing, unreadable or malformed document
yields whatever entries could be recovered, possibly none.
"""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from pinshare.services.records import FileRecord

logger = logging.getLogger(__name__)


class MetadataIndex:
    def __init__(self, path: str, upload_dir: str):
        self.path = Path(path)
        # legacy entries without a stored path live here
        self.upload_dir = Path(upload_dir)

    def load(self) -> List[FileRecord]:
        if not self.path.exists():
            logger.info(f"Metadata file {self.path} not found, starting fresh.")
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read metadata file {self.path}: {e}")
            return []

        entries = doc.get("files") if isinstance(doc, dict) else None
        if not isinstance(entries, list):
            logger.error(f"Metadata file {self.path} has no 'files' list, ignoring it.")
            return []

        records: List[FileRecord] = []
        seen = set()
        for i, entry in enumerate(entries):
            record = self._parse_entry(entry)
            if record is None:
                logger.warning(f"Skipping malformed metadata entry #{i}: {entry!r}")
                continue
            if record.filename in seen:
                logger.warning(f"Skipping duplicate metadata entry for {record.filename!r}")
                continue
            seen.add(record.filename)
            records.append(record)

        logger.info(f"Metadata loaded. Total files: {len(records)}")
        return records

    def _parse_entry(self, entry) -> Optional[FileRecord]:
        if not isinstance(entry, dict):
            return None
        name = entry.get("filename")
        size = entry.get("size")
        if not isinstance(name, str) or not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            return None
        path = entry.get("path")
        if not isinstance(path, str) or not path:
            path = str(self.upload_dir / name)
        return FileRecord(filename=name, size=size, storage_path=path)

    def persist(self, records: Iterable[FileRecord]) -> None:
        """
        Overwrite the index with a snapshot of `records`.
        The caller must hold the catalog lock. Raises OSError on failure.
        """
        doc = {"files": [r.to_index() for r in records]}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp, self.path)
        except OSError:
            logger.exception(f"Failed to write metadata file {self.path}")
            tmp.unlink(missing_ok=True)
            raise

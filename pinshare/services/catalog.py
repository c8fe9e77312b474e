import threading
from typing import Dict, Iterable, List, Optional

from pinshare.services.records import FileRecord


class Catalog:
    """
    In-memory directory of uploaded files, keyed by filename in upload order.

    One lock guards the whole collection. None of the methods take it
    themselves: callers hold `catalog.lock` across a lookup, the disk work and
    the index write so the sequence is one critical section.
    """

    def __init__(self, records: Iterable[FileRecord] = ()):
        self.lock = threading.Lock()
        self._records: Dict[str, FileRecord] = {}
        for r in records:
            self.insert(r)

    def list_all(self) -> List[FileRecord]:
        return list(self._records.values())

    def find_by_name(self, name: str) -> Optional[FileRecord]:
        return self._records.get(name)

    def insert(self, record: FileRecord) -> None:
        if record.filename in self._records:
            raise ValueError(f"duplicate filename in catalog: {record.filename!r}")
        self._records[record.filename] = record

    def remove_by_name(self, name: str) -> Optional[FileRecord]:
        return self._records.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

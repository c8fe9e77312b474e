from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class FileRecord:
    filename: str
    size: int
    storage_path: str

    def to_public(self) -> Dict:
        # storage_path stays server-side
        return {"filename": self.filename, "size": self.size}

    def to_index(self) -> Dict:
        return {"filename": self.filename, "size": self.size, "path": self.storage_path}

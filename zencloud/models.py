from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FileRecord:
    id: str
    filename: str
    extension: Optional[str] = None
    upload_date: Optional[str] = None

    @classmethod
    def from_payload(cls, row: Dict[str, Any]) -> "FileRecord":
        if not isinstance(row, dict) or row.get("id") in (None, ""):
            raise ValueError(f"Unexpected file entry: {row!r}")
        return cls(
            id=str(row["id"]),
            filename=row.get("filename") or "",
            extension=row.get("extension") or None,
            upload_date=row.get("upload_date") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "extension": self.extension,
            "upload_date": self.upload_date,
        }


@dataclass(frozen=True)
class UploadResult:
    id: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class DownloadedFile:
    content: bytes
    filename: str

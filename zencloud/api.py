from pathlib import Path
from typing import Any, List, Optional, Union
import os
import re
import tempfile

import httpx

from endpoints import FILES
from .client import OperationFailed, StorageClient
from .models import DownloadedFile, FileRecord, UploadResult

_DISPOSITION_NAME = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


def _json_or_none(resp: httpx.Response) -> Any:
    if not resp.content.strip():
        return None
    try:
        return resp.json()
    except ValueError as exc:
        raise OperationFailed(f"Non-JSON response: {resp.text[:200]}") from exc


def list_files(client: StorageClient) -> List[FileRecord]:
    resp = client.request(FILES["list"]["method"], FILES["list"]["path"])
    payload = _json_or_none(resp)
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise OperationFailed(f"Unexpected file list: {payload!r}")
    try:
        return [FileRecord.from_payload(row) for row in payload]
    except ValueError as exc:
        raise OperationFailed(str(exc)) from exc


def upload_file(client: StorageClient, path: Union[str, Path], name: Optional[str] = None) -> UploadResult:
    filename = name or Path(path).name
    with open(path, 'rb') as f:
        resp = client.request(
            FILES["upload"]["method"],
            FILES["upload"]["path"],
            files={"file": (filename, f)},
        )
    payload = _json_or_none(resp)
    if not isinstance(payload, dict) or payload.get("id") in (None, ""):
        raise OperationFailed(f"Unexpected upload response: {payload!r}")
    return UploadResult(id=str(payload["id"]), filename=payload.get("filename") or filename)


def _disposition_filename(resp: httpx.Response) -> Optional[str]:
    match = _DISPOSITION_NAME.search(resp.headers.get("content-disposition", ""))
    if not match:
        return None
    return os.path.basename(match.group(1).strip()) or None


def download_file(client: StorageClient, file_id: str, filename: Optional[str] = None) -> DownloadedFile:
    params = {"id": str(file_id)}
    resp = client.request(FILES["download"]["method"], FILES["download"]["path"], params=params)
    suggested = filename or _disposition_filename(resp) or str(file_id)
    return DownloadedFile(content=resp.content, filename=suggested)


def delete_file(client: StorageClient, file_id: str) -> None:
    params = {"id": str(file_id)}
    client.request(FILES["delete"]["method"], FILES["delete"]["path"], params=params)


def save_download(download: DownloadedFile, dest: Union[str, Path]) -> Path:
    target = Path(dest)
    if target.is_dir():
        name = os.path.basename(download.filename)
        target = target / (name if name not in ("", ".", "..") else "download")
    target.parent.mkdir(parents=True, exist_ok=True)

    # The temporary file is always closed and removed, even when the write or rename fails.
    handle = tempfile.NamedTemporaryFile(dir=target.parent, prefix=".zencloud-", suffix=".part", delete=False)
    try:
        with handle:
            handle.write(download.content)
        os.replace(handle.name, target)
    finally:
        if os.path.exists(handle.name):
            os.remove(handle.name)
    return target

from typing import Any, Optional
import json
import os

try:
    import httpx
except ModuleNotFoundError as exc:  # pragma: no cover - user environment dependency
    raise ModuleNotFoundError(
        "Missing dependency 'httpx'. Install with: pip install httpx"
    ) from exc

from endpoints import BASE_URL
from .utils import append_log_line, default_http_log_path, format_bytes, get_logger, truncate_text

BASE_URL_ENV = "ZENCLOUD_BASE_URL"


class OperationFailed(RuntimeError):
    """A call to the file server failed: transport error, non-2xx status or unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorageClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        http_log_path: Optional[str] = None,
    ):
        base_url = base_url or os.getenv(BASE_URL_ENV) or BASE_URL
        self.base_url = base_url.rstrip('/')
        # None disables httpx's default 5s timeout: requests may wait indefinitely.
        self.timeout = timeout
        self.logger = get_logger('zencloud')
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)
        self.http_log_path = http_log_path or default_http_log_path()

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = path if path.startswith('http') else f"{self.base_url}{path}"
        params = kwargs.get("params")
        self.logger.debug('HTTP %s %s params=%s', method, url, params)
        if "files" in kwargs:
            names = [part[0] if isinstance(part, tuple) else "-" for part in kwargs["files"].values()]
            self._log_line(f"{method} {url} params={params} files={names}")
        else:
            self._log_line(f"{method} {url} params={params}")
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self._log_line(f"{method} {url} transport_error={exc!r}")
            raise OperationFailed(f"{method} {path} failed: {exc}") from exc
        self._log_line(f"{method} {url} status={resp.status_code} response={self._describe_body(resp)}")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = truncate_text(resp.text.strip(), 200) or resp.reason_phrase
            raise OperationFailed(
                f"{method} {path} returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
            ) from exc
        return resp

    def _describe_body(self, resp: httpx.Response) -> str:
        content_type = resp.headers.get("content-type", "")
        if "json" in content_type or content_type.startswith("text/"):
            try:
                return truncate_text(json.dumps(resp.json(), ensure_ascii=True))
            except ValueError:
                return truncate_text(resp.text or "")
        return f"<{format_bytes(len(resp.content))} {content_type or 'binary'}>"

    def _log_line(self, line: str) -> None:
        try:
            append_log_line(self.http_log_path, line)
        except OSError as exc:
            self.logger.debug('HTTP log write failed path=%s exc=%s', self.http_log_path, exc)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StorageClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

import logging
import os
from datetime import datetime
from typing import Optional

DEBUG_ENV = "ZENCLOUD_DEBUG"
HTTP_LOG_ENV = "ZENCLOUD_HTTP_LOG"


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) in ("1", "true", "TRUE")


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    # Only the top-level "zencloud" logger gets a handler; children propagate to it.
    package_logger = logging.getLogger(name.split('.')[0])
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(levelname)s %(message)s')
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if env_flag(DEBUG_ENV) else logging.INFO)
    return logger


def default_http_log_path() -> str:
    return os.getenv(HTTP_LOG_ENV) or os.path.join(os.getcwd(), "zencloud_http.log")


def append_log_line(path: str, line: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    safe_line = line.rstrip("\n")
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"[{timestamp}] {safe_line}\n")


def truncate_text(text: Optional[str], limit: int = 2000) -> str:
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated {len(text) - limit} chars]"


def format_bytes(num: int) -> str:
    step = 1024.0
    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(num)
    for unit in units:
        if size < step:
            return f"{size:.2f}{unit}"
        size /= step
    return f"{size:.2f}PB"

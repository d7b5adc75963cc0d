import faulthandler
import logging
import os
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from ..client import StorageClient
from ..utils import append_log_line, env_flag, get_logger
from .qt_app import MainWindow

FAULTHANDLER_ENV = "ZENCLOUD_FAULTHANDLER"
FAULT_LOG_ENV = "ZENCLOUD_FAULT_LOG"


def enable_faulthandler(logger: logging.Logger) -> Optional[str]:
    if not env_flag(FAULTHANDLER_ENV, "1"):
        return None
    fault_log = os.getenv(FAULT_LOG_ENV) or os.path.join(os.getcwd(), "zencloud_fault.log")
    try:
        # Left open for the life of the process: faulthandler writes to it on a crash.
        fh = open(fault_log, "a", buffering=1, encoding="utf-8")
    except OSError as exc:
        logger.info("Fault log unavailable (%s): %s", fault_log, exc)
        return None
    faulthandler.enable(file=fh, all_threads=True)
    append_log_line(fault_log, "faulthandler enabled")
    return fault_log


def main(argv: Optional[List[str]] = None) -> int:
    logger = get_logger("zencloud.qt")
    fault_log = enable_faulthandler(logger)
    if fault_log:
        logger.debug("Faulthandler -> %s", fault_log)

    app = QApplication(sys.argv if argv is None else argv)
    app.setApplicationName("zencloud")
    client = StorageClient()
    logger.info("zencloud GUI using %s (HTTP log: %s)", client.base_url, client.http_log_path)
    win = MainWindow(client=client)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())

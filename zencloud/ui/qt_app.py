from typing import Any, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow, QPushButton, QVBoxLayout, QWidget

from ..client import StorageClient
from ..session import EventBus, FileActions, FileListStore
from ..utils import get_logger
from .threads import TaskRunner
from .views.file_list_panel import FileListPanel
from .views.upload_panel import UploadPanel


class MainWindow(QMainWindow):
    def __init__(self, client: Optional[StorageClient] = None, runner: Optional[Any] = None) -> None:
        super().__init__()
        self.setWindowTitle("zencloud")
        self.resize(900, 640)
        self.logger = get_logger("zencloud.qt")

        self.client = client or StorageClient()
        self._runner = runner or TaskRunner()
        self.bus = EventBus()
        self.store = FileListStore(self.client, self.bus, self._runner)
        self.actions = FileActions(self.client, self.bus, self._runner)

        central = QWidget(self)
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)
        self.upload_panel = UploadPanel(self.actions, status_cb=self._set_status)
        self.file_list = FileListPanel(self.actions, status_cb=self._set_status)
        root.addWidget(self.upload_panel)
        root.addWidget(self.file_list, 1)
        self.setCentralWidget(central)

        self.store.add_listener(self.file_list.render)
        self._build_menu()
        for btn in self.findChildren(QPushButton):
            btn.setCursor(Qt.PointingHandCursor)

        self.statusBar().showMessage(f"Server: {self.client.base_url}")
        self.refresh()

    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("Files")
        act_refresh = QAction("Refresh", self)
        act_refresh.setShortcuts(QKeySequence.StandardKey.Refresh)
        act_refresh.setStatusTip("Reload the file list from the server")
        act_refresh.triggered.connect(self.refresh)
        menu.addAction(act_refresh)

    def refresh(self) -> None:
        self._set_status("Loading files...")
        self.store.refresh()

    def _set_status(self, text: str) -> None:
        self.statusBar().showMessage(text)

    def closeEvent(self, event) -> None:
        self.store.close()
        if isinstance(self._runner, TaskRunner) and self._runner.pending:
            self._runner.wait(2000)
        self.client.close()
        super().closeEvent(event)

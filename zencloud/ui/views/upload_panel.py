import os
from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...models import UploadResult
from ...session import FileActions, error_message


class UploadPanel(QFrame):
    def __init__(
        self,
        actions: FileActions,
        status_cb: Optional[Callable[[str], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._actions = actions
        self._status = status_cb or (lambda _msg: None)
        self._path: Optional[str] = None
        self._result: Optional[UploadResult] = None

        self.setObjectName("uploadPanel")
        self.setStyleSheet(
            "#uploadPanel { background: #ffffff; border-radius: 10px; border: 1px solid #e6e6e6; }"
        )

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)

        title = QLabel("Upload File")
        title.setStyleSheet("font-weight: 600; color: #111111;")
        root.addWidget(title)

        file_row = QHBoxLayout()
        self.file_btn = QPushButton("Choose file")
        self.file_btn.setCursor(Qt.PointingHandCursor)
        self.file_btn.clicked.connect(self._choose_file)
        self.file_label = QLabel("No file selected")
        self.file_label.setStyleSheet("color: #666666;")
        self.file_label.setWordWrap(True)
        self.upload_btn = QPushButton("Upload")
        self.upload_btn.setCursor(Qt.PointingHandCursor)
        self.upload_btn.setStyleSheet("background: #1d6fd6; color: #ffffff;")
        self.upload_btn.clicked.connect(self.handle_upload)
        file_row.addWidget(self.file_btn)
        file_row.addWidget(self.file_label, 1)
        file_row.addWidget(self.upload_btn)
        root.addLayout(file_row)

        self.result_label = QLabel("")
        self.result_label.setStyleSheet("color: #1b7f3b;")
        self.result_label.hide()
        root.addWidget(self.result_label)

    @property
    def selected_path(self) -> Optional[str]:
        return self._path

    @property
    def last_result(self) -> Optional[UploadResult]:
        return self._result

    def set_selected_path(self, path: Optional[str]) -> None:
        self._path = path or None
        self.file_label.setText(self._path or "No file selected")

    def _choose_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select file to upload")
        if not path:
            return
        self.set_selected_path(path)

    def _set_busy(self, busy: bool) -> None:
        self.upload_btn.setEnabled(not busy)
        self.file_btn.setEnabled(not busy)

    def handle_upload(self) -> None:
        if not self._path:
            return
        path = self._path
        self._set_busy(True)
        self._status(f"Uploading {os.path.basename(path)}...")
        self._actions.upload(path, on_success=self._on_uploaded, on_error=self._on_failed)

    def _on_uploaded(self, result: UploadResult) -> None:
        self._result = result
        self.set_selected_path(None)
        self.result_label.setText(f"Upload Successful!\nID: {result.id}")
        self.result_label.show()
        self._set_busy(False)
        self._status(f"Upload ok (id={result.id})")

    def _on_failed(self, exc: Exception) -> None:
        self._set_busy(False)
        message = error_message(exc)
        self._status(f"Upload failed: {message}")
        box = QMessageBox(
            QMessageBox.Icon.Warning,
            "Upload",
            f"Error uploading file: {message}",
            QMessageBox.StandardButton.Ok,
            self,
        )
        box.setAttribute(Qt.WA_DeleteOnClose, True)
        box.open()

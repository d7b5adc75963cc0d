from typing import Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from ...models import FileRecord
from ...session import Failed, FileActions, Loading, ViewState, error_message


class FileRow(QFrame):
    def __init__(
        self,
        record: FileRecord,
        on_download: Callable[[FileRecord], None],
        on_delete: Callable[[FileRecord], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.record = record

        self.setObjectName("fileRow")
        self.setStyleSheet(
            "#fileRow { background: #ffffff; border-radius: 10px; border: 1px solid #e6e6e6; }"
        )

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(12)

        self.name_label = QLabel(record.filename)
        self.name_label.setStyleSheet("font-weight: 600; color: #111111;")
        self.name_label.setWordWrap(True)
        layout.addWidget(self.name_label, 1)

        if record.upload_date:
            date_label = QLabel(record.upload_date)
            date_label.setStyleSheet("color: #444444;")
            layout.addWidget(date_label)

        self.download_btn = QPushButton("Download")
        self.download_btn.setStyleSheet("background: #1d6fd6; color: #ffffff;")
        self.download_btn.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
        self.download_btn.setCursor(Qt.PointingHandCursor)
        self.download_btn.clicked.connect(lambda: on_download(self.record))
        self.delete_btn = QPushButton("Delete")
        self.delete_btn.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
        self.delete_btn.setCursor(Qt.PointingHandCursor)
        self.delete_btn.clicked.connect(lambda: on_delete(self.record))
        layout.addWidget(self.download_btn)
        layout.addWidget(self.delete_btn)


class FileListPanel(QWidget):
    def __init__(
        self,
        actions: FileActions,
        status_cb: Optional[Callable[[str], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._actions = actions
        self._status = status_cb or (lambda _msg: None)
        self._rows: List[FileRow] = []

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(8)

        self.title_label = QLabel("Files on Server")
        self.title_label.setStyleSheet("font-weight: 600; color: #111111;")
        root.addWidget(self.title_label)

        self.message_label = QLabel("Loading files...")
        self.message_label.setStyleSheet("color: #666666;")
        self.message_label.setWordWrap(True)
        root.addWidget(self.message_label)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        container = QWidget()
        self.list_layout = QVBoxLayout(container)
        self.list_layout.setSpacing(10)
        self.list_layout.addStretch(1)
        self.scroll.setWidget(container)
        root.addWidget(self.scroll, 1)

        self.render(Loading())

    @property
    def rows(self) -> List[FileRow]:
        return list(self._rows)

    def render(self, state: ViewState) -> None:
        self._clear_rows()
        if isinstance(state, Loading):
            self._show_message("Loading files...")
            return
        if isinstance(state, Failed):
            self._show_message(f"Error: {state.message}", error=True)
            self._status(f"Error: {state.message}")
            return
        if not state.files:
            self._show_message("No files found.", title=True)
            return

        self.title_label.show()
        self.message_label.hide()
        self.scroll.show()
        for record in state.files:
            row = FileRow(record, on_download=self.handle_download, on_delete=self.handle_delete)
            self._rows.append(row)
            self.list_layout.insertWidget(self.list_layout.count() - 1, row)
        self._status(f"{len(state.files)} file(s) loaded.")

    def _show_message(self, text: str, error: bool = False, title: bool = False) -> None:
        self.title_label.setVisible(title)
        self.scroll.hide()
        self.message_label.setStyleSheet("color: #b3261e;" if error else "color: #666666;")
        self.message_label.setText(text)
        self.message_label.show()

    def _clear_rows(self) -> None:
        while self.list_layout.count() > 1:
            item = self.list_layout.takeAt(0)
            widget = item.widget()
            if widget:
                widget.deleteLater()
        self._rows = []

    def handle_download(self, record: FileRecord) -> None:
        dest, _ = QFileDialog.getSaveFileName(self, "Save file as", record.filename)
        if not dest:
            return
        self._status(f"Downloading {record.filename}...")
        self._actions.download(
            record,
            dest,
            on_success=lambda saved: self._status(f"Downloaded to {saved}"),
            on_error=lambda exc: self._alert("Download", f"Error downloading file: {error_message(exc)}"),
        )

    def handle_delete(self, record: FileRecord) -> None:
        self._status(f"Deleting {record.filename}...")
        self._actions.delete(
            record,
            on_success=lambda _record: self._status("Deleted"),
            on_error=lambda exc: self._alert("Delete", f"Error deleting file: {error_message(exc)}"),
        )

    def _alert(self, title: str, text: str) -> None:
        self._status(text)
        QMessageBox.warning(self, title, text)

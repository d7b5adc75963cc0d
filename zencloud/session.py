"""Client-side view of the server's file list.

``FileListStore`` owns the snapshot and exposes it as one of three states
(``Loading``, ``Failed`` or ``Ready``). ``FileActions`` performs uploads,
downloads and deletes; a successful mutation publishes a ``Mutated`` event on
the shared ``EventBus`` and the store answers it with a refresh.

Work is handed to a runner exposing ``run(fn, on_result, on_error,
on_finished)``: the Qt ``TaskRunner`` in the GUI, ``InlineRunner`` in the CLI
and in tests.
"""
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from .api import delete_file, download_file, list_files, save_download, upload_file
from .client import StorageClient
from .models import FileRecord, UploadResult
from .utils import get_logger


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Failed:
    message: str


@dataclass(frozen=True)
class Ready:
    files: Tuple[FileRecord, ...] = ()


ViewState = Union[Loading, Failed, Ready]


@dataclass(frozen=True)
class Mutated:
    kind: str
    file_id: str


def error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def describe(state: ViewState) -> List[str]:
    if isinstance(state, Loading):
        return ["Loading files..."]
    if isinstance(state, Failed):
        return [f"Error: {state.message}"]
    if not state.files:
        return ["No files found."]
    return [f"{record.id}\t{record.filename}" for record in state.files]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: List[Callable[[Any], None]] = []

    def subscribe(self, fn: Callable[[Any], None]) -> Callable[[], None]:
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    def emit(self, event: Any) -> None:
        for fn in list(self._subscribers):
            fn(event)


class InlineRunner:
    """Runs each task immediately on the calling thread."""

    def run(
        self,
        fn: Callable[[], Any],
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        try:
            result = fn()
        except Exception as exc:
            if on_error is None:
                raise
            on_error(exc)
        else:
            if on_result:
                on_result(result)
        finally:
            if on_finished:
                on_finished()


class FileListStore:
    def __init__(self, client: StorageClient, bus: EventBus, runner: Any) -> None:
        self._client = client
        self._runner = runner
        self._state: ViewState = Loading()
        self._files: Tuple[FileRecord, ...] = ()
        self._seq = 0
        self._listeners: List[Callable[[ViewState], None]] = []
        self.logger = get_logger("zencloud.session")
        self._unsubscribe = bus.subscribe(self._on_event)

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def files(self) -> Tuple[FileRecord, ...]:
        """Last successfully fetched snapshot, kept even while a fetch has failed."""
        return self._files

    def add_listener(self, fn: Callable[[ViewState], None]) -> Callable[[], None]:
        self._listeners.append(fn)

        def remove() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)

        return remove

    def refresh(self) -> int:
        self._seq += 1
        seq = self._seq
        self.logger.debug("Refresh #%s", seq)
        self._set_state(Loading())
        self._runner.run(
            partial(list_files, self._client),
            on_result=partial(self._apply_files, seq),
            on_error=partial(self._apply_error, seq),
        )
        return seq

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()

    def _on_event(self, event: Any) -> None:
        if isinstance(event, Mutated):
            self.logger.info("%s id=%s, refreshing file list", event.kind, event.file_id)
            self.refresh()

    def _is_stale(self, seq: int) -> bool:
        if seq != self._seq:
            self.logger.debug("Dropping stale response #%s (latest #%s)", seq, self._seq)
            return True
        return False

    def _apply_files(self, seq: int, files: List[FileRecord]) -> None:
        if self._is_stale(seq):
            return
        self._files = tuple(files)
        self._set_state(Ready(self._files))

    def _apply_error(self, seq: int, exc: Exception) -> None:
        if self._is_stale(seq):
            return
        self.logger.warning("Listing files failed: %s", exc)
        self._set_state(Failed(error_message(exc)))

    def _set_state(self, state: ViewState) -> None:
        self._state = state
        for fn in list(self._listeners):
            fn(state)


class FileActions:
    def __init__(self, client: StorageClient, bus: EventBus, runner: Any) -> None:
        self._client = client
        self._bus = bus
        self._runner = runner
        self.logger = get_logger("zencloud.session")

    def upload(
        self,
        path: Union[str, Path],
        name: Optional[str] = None,
        on_success: Optional[Callable[[UploadResult], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        def done(result: UploadResult) -> None:
            self.logger.info("Uploaded %s id=%s", path, result.id)
            if on_success:
                on_success(result)
            self._bus.emit(Mutated("upload", result.id))

        def err(exc: Exception) -> None:
            self.logger.warning("Upload of %s failed: %s", path, exc)
            if on_error:
                on_error(exc)

        self._runner.run(partial(upload_file, self._client, path, name), on_result=done, on_error=err)

    def download(
        self,
        record: FileRecord,
        dest: Union[str, Path],
        on_success: Optional[Callable[[Path], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        def work() -> Path:
            downloaded = download_file(self._client, record.id, record.filename or None)
            return save_download(downloaded, dest)

        def done(saved: Path) -> None:
            self.logger.info("Downloaded id=%s to %s", record.id, saved)
            if on_success:
                on_success(saved)

        def err(exc: Exception) -> None:
            self.logger.warning("Download of id=%s failed: %s", record.id, exc)
            if on_error:
                on_error(exc)

        self._runner.run(work, on_result=done, on_error=err)

    def delete(
        self,
        record: FileRecord,
        on_success: Optional[Callable[[FileRecord], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        def done(_: Any) -> None:
            self.logger.info("Deleted id=%s", record.id)
            if on_success:
                on_success(record)
            self._bus.emit(Mutated("delete", record.id))

        def err(exc: Exception) -> None:
            self.logger.warning("Delete of id=%s failed: %s", record.id, exc)
            if on_error:
                on_error(exc)

        self._runner.run(partial(delete_file, self._client, record.id), on_result=done, on_error=err)

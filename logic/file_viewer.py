"""Ordering, selection and clipboard handling for the generated-files viewer.

The viewer is toolkit independent. The front end passes in a clipboard
function and a scheduler with Tk's ``after``/``after_cancel`` interface (the
root window itself works), and re-renders from ``state`` whenever a
listener fires.
"""
import posixpath
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from logging_bus import emit
from logic.file_generator import WIRING_FILENAME
from state import ProjectFile

PLACEHOLDER = "No file selected."
COPY_RESET_MS = 2000

ENTRY_POINT_EXTENSIONS = (".ino",)
HEADER_EXTENSIONS = (".h", ".hpp")
SOURCE_EXTENSIONS = (".cpp", ".c")


class Scheduler(Protocol):
    def after(self, ms: int, func: Callable[[], None]): ...

    def after_cancel(self, handle) -> None: ...


def file_rank(filename: str) -> int:
    base = posixpath.basename(filename).lower()
    ext = posixpath.splitext(base)[1]
    if ext in ENTRY_POINT_EXTENSIONS:
        return 0
    if base == WIRING_FILENAME:
        return 1
    if ext in HEADER_EXTENSIONS:
        return 2
    if ext in SOURCE_EXTENSIONS:
        return 3
    return 4


def order_files(files: Iterable[ProjectFile]) -> Tuple[ProjectFile, ...]:
    """Entry point, wiring diagram, headers, sources, then the rest."""
    return tuple(sorted(files, key=lambda f: (file_rank(f.filename), f.filename)))


@dataclass(frozen=True)
class ViewerState:
    files: Tuple[ProjectFile, ...] = ()
    active: Optional[str] = None
    copied: bool = False

    @property
    def filenames(self) -> List[str]:
        return [f.filename for f in self.files]

    @property
    def active_file(self) -> Optional[ProjectFile]:
        for f in self.files:
            if f.filename == self.active:
                return f
        return None

    @property
    def content(self) -> str:
        active = self.active_file
        return active.content if active is not None else PLACEHOLDER


class FileViewer:
    def __init__(
        self,
        clipboard: Optional[Callable[[str], None]] = None,
        scheduler: Optional[Scheduler] = None,
        highlighter: Optional[Callable[[ProjectFile], None]] = None,
        copy_reset_ms: int = COPY_RESET_MS,
    ):
        self.clipboard = clipboard
        self.scheduler = scheduler
        self.highlighter = highlighter
        self.copy_reset_ms = copy_reset_ms
        self.state = ViewerState()
        self._listeners: List[Callable[[ViewerState], None]] = []
        self._reset_handle = None

    def subscribe(self, callback: Callable[[ViewerState], None]) -> None:
        self._listeners.append(callback)

    def present(self, files: Iterable[ProjectFile]) -> ViewerState:
        ordered = order_files(files)
        self._cancel_reset()
        self.state = ViewerState(
            files=ordered,
            active=ordered[0].filename if ordered else None,
        )
        emit("INFO", "VIEWER", "Presenting files", files=self.state.filenames)
        self._changed(content_changed=True)
        return self.state

    def clear(self) -> ViewerState:
        """Drop the current files; pending copy acknowledgements are cancelled."""
        return self.present(())

    def select(self, filename: str) -> ViewerState:
        if filename not in self.state.filenames:
            emit("WARN", "VIEWER", "Unknown file selected", filename=filename)
            return self.state
        if filename == self.state.active:
            return self.state
        self._cancel_reset()
        self.state = replace(self.state, active=filename, copied=False)
        self._changed(content_changed=True)
        return self.state

    def copy_active(self) -> bool:
        active = self.state.active_file
        if active is None or self.clipboard is None:
            return False
        self.clipboard(active.content)
        self._cancel_reset()
        self.state = replace(self.state, copied=True)
        if self.scheduler is not None:
            self._reset_handle = self.scheduler.after(self.copy_reset_ms, self._reset_copied)
        emit("INFO", "VIEWER", "Copied to clipboard", filename=active.filename, chars=len(active.content))
        self._changed()
        return True

    def _reset_copied(self) -> None:
        self._reset_handle = None
        if self.state.copied:
            self.state = replace(self.state, copied=False)
            self._changed()

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None and self.scheduler is not None:
            self.scheduler.after_cancel(self._reset_handle)
        self._reset_handle = None

    def _changed(self, content_changed: bool = False) -> None:
        for cb in list(self._listeners):
            cb(self.state)
        active = self.state.active_file
        if content_changed and active is not None and self.highlighter is not None:
            try:
                self.highlighter(active)
            except Exception as e:
                emit("WARN", "VIEWER", "Highlighting failed", filename=active.filename, error=str(e))


__all__ = [
    "FileViewer",
    "ViewerState",
    "Scheduler",
    "PLACEHOLDER",
    "COPY_RESET_MS",
    "file_rank",
    "order_files",
]

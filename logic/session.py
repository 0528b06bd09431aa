"""Session controller: prompt, history and the generate/download state machine.

States are derived from ``SessionState``::

    Idle -> Loading -> Success | Failure -> Loading -> ...

Only this controller writes ``SessionState``. Generation runs through an
injected runner so the front end can move the network call off the UI thread
while tests and the CLI run it inline.
"""
from typing import Callable, List, Optional

from errors import GenerationError, PackagingError
from logging_bus import emit
from logic.archive import ArchivePackager
from logic.file_generator import BLANK_PROMPT_MESSAGE
from logic.file_viewer import FileViewer
from state import GeneratedProject, Phase, PromptHistory, SessionState

NO_FILES_MESSAGE = "The model did not return any files. Please try refining your prompt."
UNEXPECTED_MESSAGE = "An unknown error occurred. Check the activity log for details."

Job = Callable[[], GeneratedProject]
Runner = Callable[[Job, Callable[[GeneratedProject], None], Callable[[Exception], None]], None]


def run_inline(job: Job, on_success, on_failure) -> None:
    """Run a generation job synchronously on the calling thread."""
    try:
        result = job()
    except Exception as exc:
        on_failure(exc)
        return
    on_success(result)


class SessionController:
    def __init__(
        self,
        client,
        packager: Optional[ArchivePackager] = None,
        viewer: Optional[FileViewer] = None,
        runner: Runner = run_inline,
        notify_error: Optional[Callable[[str, str], None]] = None,
        history_limit: int = 5,
    ):
        self.client = client
        self.packager = packager
        self.viewer = viewer
        self.runner = runner
        self.notify_error = notify_error
        self.state = SessionState(history=PromptHistory(display_limit=history_limit))
        self._listeners: List[Callable[[SessionState], None]] = []
        self._submission = 0
        self._pending: Optional[int] = None

    # --- Observation ---
    def subscribe(self, callback: Callable[[SessionState], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb(self.state)

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def visible_history(self) -> List[str]:
        return self.state.history.visible()

    @property
    def can_download(self) -> bool:
        return (
            self.packager is not None
            and self.phase is Phase.SUCCESS
            and bool(self.state.generating_prompt)
        )

    # --- Prompt editing ---
    def set_prompt(self, text: str) -> None:
        self.state.prompt_text = text

    def select_history(self, entry: str) -> None:
        self.state.prompt_text = entry
        self._notify()

    # --- Generation ---
    def submit(self) -> bool:
        """Start generating from the current prompt.

        Returns ``False`` when the submission was rejected: a request is
        already in flight or the prompt is blank.
        """
        if self.state.is_loading:
            emit("WARN", "GENERATE", "Submission ignored while a request is in flight")
            return False

        prompt = self.state.prompt_text
        if not prompt.strip():
            emit("WARN", "GENERATE", "Blank prompt rejected")
            self.state.current_project = None
            self.state.generating_prompt = None
            self.state.last_error = BLANK_PROMPT_MESSAGE
            self._present(None)
            self._notify()
            return False

        self.state.last_error = None
        self.state.current_project = None
        self.state.generating_prompt = None
        self.state.history.record(prompt)
        self.state.is_loading = True
        self._submission += 1
        token = self._submission
        self._pending = token
        self._present(None)
        self._notify()
        emit("INFO", "GENERATE", "Generation started", submission=token, prompt_chars=len(prompt))

        self.runner(
            lambda: self.client.generate(prompt),
            lambda project: self._on_generated(token, prompt, project),
            lambda exc: self._on_failed(token, exc),
        )
        return True

    def _settle(self, token: int) -> bool:
        if token != self._pending:
            emit("WARN", "GENERATE", "Discarding stale completion", submission=token)
            return False
        self._pending = None
        self.state.is_loading = False
        return True

    def _on_generated(self, token: int, prompt: str, project: Optional[GeneratedProject]) -> None:
        if not self._settle(token):
            return
        if project is None or not project.files:
            self.state.last_error = NO_FILES_MESSAGE
            emit("WARN", "GENERATE", "Generation returned no files", submission=token)
        else:
            self.state.current_project = project
            self.state.generating_prompt = prompt
            emit("INFO", "GENERATE", "Generation finished", submission=token, project=project.project_name)
        self._present(self.state.current_project)
        self._notify()

    def _on_failed(self, token: int, exc: Exception) -> None:
        if not self._settle(token):
            return
        if isinstance(exc, GenerationError) and str(exc):
            self.state.last_error = str(exc)
        else:
            self.state.last_error = UNEXPECTED_MESSAGE
        emit(
            "ERROR",
            "GENERATE",
            "Generation failed",
            submission=token,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        self._present(None)
        self._notify()

    def _present(self, project: Optional[GeneratedProject]) -> None:
        if self.viewer is None:
            return
        if project is None:
            self.viewer.clear()
        else:
            self.viewer.present(project.files)

    # --- Download ---
    def download(self) -> Optional[str]:
        """Package the current project; inert unless a project was generated."""
        if not self.can_download:
            emit("INFO", "ARCHIVE", "Download requested without a generated project")
            return None
        project = self.state.current_project
        try:
            return self.packager.package(project.files, project.project_name, self.state.generating_prompt)
        except PackagingError as exc:
            emit("ERROR", "ARCHIVE", "Download failed", error=str(exc))
            if self.notify_error is not None:
                self.notify_error("Download failed", str(exc))
            return None


__all__ = ["SessionController", "run_inline", "NO_FILES_MESSAGE", "UNEXPECTED_MESSAGE"]

import io
import zipfile

from errors import PackagingError, TransportError
from logic.archive import ArchivePackager, ZipArchiveBuilder
from logic.file_generator import BLANK_PROMPT_MESSAGE
from logic.file_viewer import FileViewer
from logic.session import NO_FILES_MESSAGE, UNEXPECTED_MESSAGE, SessionController
from state import GeneratedProject, Phase, ProjectFile

PROJECT = GeneratedProject(
    "blinky",
    (ProjectFile("Led.cpp", "cpp"), ProjectFile("blinky.ino", "ino"), ProjectFile("wiring.txt", "w")),
)


class StubClient:
    def __init__(self, result=PROJECT):
        self.result = result
        self.calls = []
        self.model = "stub"

    def generate(self, prompt):
        self.calls.append(prompt)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class DeferredRunner:
    """Holds jobs until the test finishes them, like an in-flight request."""

    def __init__(self):
        self.jobs = []

    def __call__(self, job, on_success, on_failure):
        self.jobs.append((job, on_success, on_failure))

    def finish(self):
        job, on_success, on_failure = self.jobs.pop(0)
        try:
            result = job()
        except Exception as e:
            on_failure(e)
            return
        on_success(result)


class MemorySaver:
    def __init__(self):
        self.saved = {}

    def save(self, data, suggested_name):
        self.saved[suggested_name] = data
        return suggested_name


def make_controller(result=PROJECT, **kwargs):
    client = StubClient(result)
    kwargs.setdefault("packager", ArchivePackager(ZipArchiveBuilder(), MemorySaver()))
    controller = SessionController(client, **kwargs)
    return controller, client


def submit(controller, prompt):
    controller.set_prompt(prompt)
    return controller.submit()


def test_starts_idle():
    controller, _ = make_controller()
    assert controller.phase is Phase.IDLE
    assert controller.can_download is False


def test_blank_prompt_is_rejected_without_a_call():
    controller, client = make_controller()
    for prompt in ("", "   ", "\n"):
        assert submit(controller, prompt) is False
        assert controller.state.last_error == BLANK_PROMPT_MESSAGE
        assert controller.phase is Phase.FAILURE
    assert client.calls == []
    assert controller.visible_history() == []


def test_successful_generation_stores_project_and_prompt():
    viewer = FileViewer()
    controller, client = make_controller(viewer=viewer)
    assert submit(controller, "blink it") is True
    assert client.calls == ["blink it"]
    assert controller.phase is Phase.SUCCESS
    assert controller.state.current_project == PROJECT
    assert controller.state.generating_prompt == "blink it"
    assert controller.state.last_error is None
    assert viewer.state.filenames == ["blinky.ino", "wiring.txt", "Led.cpp"]
    assert viewer.state.active == "blinky.ino"


def test_history_moves_duplicates_to_front():
    controller, _ = make_controller()
    for prompt in ("A", "B", "A"):
        submit(controller, prompt)
    assert controller.visible_history() == ["A", "B"]


def test_history_display_is_capped_but_retained():
    controller, _ = make_controller(history_limit=5)
    for i in range(7):
        submit(controller, f"prompt {i}")
    assert controller.visible_history() == [f"prompt {i}" for i in (6, 5, 4, 3, 2)]
    assert len(controller.state.history.entries) == 7


def test_selecting_history_only_rewrites_prompt():
    controller, client = make_controller()
    submit(controller, "A")
    submit(controller, "B")
    controller.select_history("A")
    assert controller.state.prompt_text == "A"
    assert controller.visible_history() == ["B", "A"]
    assert client.calls == ["A", "B"]
    assert controller.state.generating_prompt == "B"


def test_transport_failure_is_reported_and_recoverable():
    controller, client = make_controller(result=TransportError("Could not reach the model service."))
    viewer = FileViewer()
    controller.viewer = viewer
    assert submit(controller, "x") is True
    assert controller.phase is Phase.FAILURE
    assert controller.state.last_error == "Could not reach the model service."
    assert controller.state.current_project is None
    assert viewer.state.files == ()

    client.result = PROJECT
    submit(controller, "x")
    assert controller.phase is Phase.SUCCESS


def test_zero_files_is_a_failure():
    controller, _ = make_controller(result=GeneratedProject("empty", ()))
    submit(controller, "x")
    assert controller.phase is Phase.FAILURE
    assert controller.state.last_error == NO_FILES_MESSAGE
    assert controller.state.current_project is None


def test_unexpected_exception_does_not_escape():
    controller, _ = make_controller(result=KeyError("boom"))
    submit(controller, "x")
    assert controller.phase is Phase.FAILURE
    assert controller.state.last_error == UNEXPECTED_MESSAGE


def test_new_submission_clears_previous_result():
    runner = DeferredRunner()
    controller, _ = make_controller(runner=runner)
    submit(controller, "first")
    runner.finish()
    assert controller.phase is Phase.SUCCESS

    submit(controller, "second")
    assert controller.phase is Phase.LOADING
    assert controller.state.current_project is None
    assert controller.state.generating_prompt is None
    assert controller.can_download is False


def test_resubmitting_while_loading_starts_no_second_request():
    runner = DeferredRunner()
    controller, client = make_controller(runner=runner)
    updates = []
    controller.subscribe(lambda s: updates.append(s.current_project))

    assert submit(controller, "one") is True
    assert submit(controller, "two") is False
    assert len(runner.jobs) == 1

    runner.finish()
    assert client.calls == ["one"]
    assert [p for p in updates if p is not None] == [PROJECT]
    assert controller.visible_history() == ["one"]


def test_editing_prompt_during_generation_keeps_provenance():
    runner = DeferredRunner()
    controller, _ = make_controller(runner=runner)
    submit(controller, "original prompt")
    controller.set_prompt("edited while waiting")
    runner.finish()
    assert controller.state.generating_prompt == "original prompt"
    assert controller.state.prompt_text == "edited while waiting"


def test_download_is_inert_without_a_project():
    saver = MemorySaver()
    controller, _ = make_controller(packager=ArchivePackager(ZipArchiveBuilder(), saver))
    assert controller.download() is None
    submit(controller, " ")
    assert controller.download() is None
    assert saver.saved == {}


def test_download_packages_project_with_generating_prompt():
    saver = MemorySaver()
    controller, _ = make_controller(packager=ArchivePackager(ZipArchiveBuilder(), saver))
    submit(controller, "make it blink")
    controller.set_prompt("something else")
    assert controller.download() == "blinky.zip"
    with zipfile.ZipFile(io.BytesIO(saver.saved["blinky.zip"])) as zf:
        assert zf.read("blinky/prompt.txt").decode() == "make it blink"
        assert zf.read("blinky/blinky.ino").decode() == "ino"


def test_packaging_failure_is_reported_and_project_kept():
    class FailingPackager:
        def package(self, files, project_name, prompt):
            raise PackagingError("An error occurred while creating the ZIP file.")

    notices = []
    controller, _ = make_controller(
        packager=FailingPackager(),
        notify_error=lambda title, msg: notices.append((title, msg)),
    )
    submit(controller, "blink")
    assert controller.download() is None
    assert notices == [("Download failed", "An error occurred while creating the ZIP file.")]
    assert controller.phase is Phase.SUCCESS
    assert controller.state.current_project == PROJECT

from logic.file_viewer import PLACEHOLDER, FileViewer, order_files
from state import ProjectFile


class FakeScheduler:
    def __init__(self):
        self.pending = {}
        self._next = 0

    def after(self, ms, func):
        self._next += 1
        self.pending[self._next] = (ms, func)
        return self._next

    def after_cancel(self, handle):
        self.pending.pop(handle, None)

    def fire_all(self):
        for handle, (_ms, func) in list(self.pending.items()):
            self.pending.pop(handle)
            func()


def files(*names):
    return [ProjectFile(n, f"// {n}\n") for n in names]


def make_viewer(**kwargs):
    copied = []
    scheduler = FakeScheduler()
    viewer = FileViewer(clipboard=copied.append, scheduler=scheduler, **kwargs)
    return viewer, copied, scheduler


def test_display_order():
    ordered = order_files(files("main.ino", "Sensor.cpp", "Sensor.h", "wiring.txt"))
    assert [f.filename for f in ordered] == ["main.ino", "wiring.txt", "Sensor.h", "Sensor.cpp"]


def test_wiring_match_is_case_insensitive_and_ties_are_lexicographic():
    ordered = order_files(files("notes.md", "b.h", "Wiring.TXT", "a.h", "x.c", "app.ino"))
    assert [f.filename for f in ordered] == ["app.ino", "Wiring.TXT", "a.h", "b.h", "x.c", "notes.md"]


def test_first_file_becomes_active_on_every_new_set():
    viewer, _, _ = make_viewer()
    viewer.present(files("Sensor.h", "main.ino"))
    assert viewer.state.active == "main.ino"
    viewer.select("Sensor.h")
    viewer.present(files("other.ino", "Sensor.h"))
    assert viewer.state.active == "other.ino"


def test_empty_set_is_a_valid_empty_state():
    viewer, copied, _ = make_viewer()
    state = viewer.present([])
    assert state.active is None
    assert state.content == PLACEHOLDER
    assert viewer.copy_active() is False
    assert copied == []


def test_select_switches_content_and_ignores_unknown_names():
    viewer, _, _ = make_viewer()
    viewer.present(files("main.ino", "Sensor.h"))
    viewer.select("Sensor.h")
    assert viewer.state.content == "// Sensor.h\n"
    viewer.select("missing.cpp")
    assert viewer.state.active == "Sensor.h"


def test_copy_is_verbatim_and_resets_after_delay():
    viewer, copied, scheduler = make_viewer()
    content = "void loop() {\r\n\tdelay(200); // µs ✓\n}\n\n"
    viewer.present([ProjectFile("main.ino", content)])
    assert viewer.copy_active() is True
    assert copied == [content]
    assert viewer.state.copied is True
    assert [ms for ms, _ in scheduler.pending.values()] == [2000]
    scheduler.fire_all()
    assert viewer.state.copied is False


def test_switching_files_resets_copied_immediately():
    viewer, _, scheduler = make_viewer()
    viewer.present(files("main.ino", "Sensor.h"))
    viewer.copy_active()
    viewer.select("Sensor.h")
    assert viewer.state.copied is False
    assert scheduler.pending == {}


def test_repeated_copy_restarts_the_timer():
    viewer, copied, scheduler = make_viewer(copy_reset_ms=500)
    viewer.present(files("main.ino"))
    viewer.copy_active()
    viewer.copy_active()
    assert len(copied) == 2
    assert len(scheduler.pending) == 1
    assert [ms for ms, _ in scheduler.pending.values()] == [500]


def test_listeners_and_highlighter_follow_content_changes():
    highlighted = []
    seen = []
    viewer, _, _ = make_viewer(highlighter=lambda f: highlighted.append(f.filename))
    viewer.subscribe(lambda s: seen.append((s.active, s.copied)))
    viewer.present(files("main.ino", "a.h"))
    viewer.select("a.h")
    viewer.copy_active()
    assert highlighted == ["main.ino", "a.h"]
    assert seen == [("main.ino", False), ("a.h", False), ("a.h", True)]


def test_failing_highlighter_does_not_break_the_viewer():
    def broken(_f):
        raise RuntimeError("no lexer")

    viewer, _, _ = make_viewer(highlighter=broken)
    state = viewer.present(files("main.ino"))
    assert state.active == "main.ino"


def test_clear_empties_viewer_and_cancels_copy_reset():
    viewer, _, scheduler = make_viewer()
    viewer.present(files("main.ino"))
    viewer.copy_active()
    state = viewer.clear()
    assert state.files == ()
    assert state.copied is False
    assert state.content == PLACEHOLDER
    assert scheduler.pending == {}

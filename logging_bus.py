"""Process-wide activity log.

Events are queued by ``emit`` from any thread and fanned out by a daemon
dispatcher to subscribers (the activity console), a bounded ring buffer and an
optional JSON-lines file.
"""
import json
import queue
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

LEVELS = ("INFO", "WARN", "ERROR")
KINDS = ("GENERATE", "NETWORK", "VIEWER", "ARCHIVE", "SYSTEM")


@dataclass
class LogEvent:
    ts: float
    level: str
    kind: str
    msg: str
    meta: Dict[str, Any]


_listeners: List[Callable[[LogEvent], None]] = []
_q: "queue.Queue[LogEvent]" = queue.Queue()
_verbose = True
_level_filter: Dict[str, bool] = {lvl: True for lvl in LEVELS}
_kind_filter: Dict[str, bool] = {kind: True for kind in KINDS}
_ring: List[LogEvent] = []
_ring_limit = 2000
_started = False

_file_path: Optional[str] = None
_file_q: "queue.Queue[LogEvent]" = queue.Queue()


def emit(level: str, kind: str, msg: str, **meta: Any) -> None:
    _level_filter.setdefault(level, True)
    _kind_filter.setdefault(kind, True)
    if not (_level_filter[level] and _kind_filter[kind]):
        return
    # quiet mode keeps warnings, errors and lifecycle messages
    if not _verbose and level == "INFO" and kind != "SYSTEM":
        return
    _q.put(LogEvent(time.time(), level, kind, msg, meta))


def subscribe(callback: Callable[[LogEvent], None]) -> None:
    _listeners.append(callback)


def unsubscribe(callback: Callable[[LogEvent], None]) -> None:
    if callback in _listeners:
        _listeners.remove(callback)


def _dispatch(evt: LogEvent) -> None:
    _ring.append(evt)
    if len(_ring) > _ring_limit:
        del _ring[0 : len(_ring) - _ring_limit]
    for cb in list(_listeners):
        try:
            cb(evt)
        except Exception:
            # a broken subscriber must not stop the dispatcher
            continue
    if _file_path:
        _file_q.put(evt)


def _dispatch_loop() -> None:
    while True:
        evt = _q.get()
        try:
            _dispatch(evt)
        finally:
            _q.task_done()


def _file_loop() -> None:
    fp = None
    current = None
    while True:
        evt = _file_q.get()
        if _file_path != current and fp is not None:
            fp.close()
            fp = None
        current = _file_path
        try:
            if current:
                if fp is None:
                    fp = open(current, "a", encoding="utf-8")
                fp.write(json.dumps(asdict(evt), ensure_ascii=False, default=str) + "\n")
                fp.flush()
        except OSError:
            fp = None
            current = None
        finally:
            _file_q.task_done()


def flush() -> None:
    """Block until queued events have reached subscribers and the log file.

    The dispatcher threads are daemons, so short-lived entry points call this
    before exiting.
    """
    if not _started:
        return
    _q.join()
    _file_q.join()


def start_dispatcher() -> None:
    global _started
    if _started:
        return
    _started = True
    threading.Thread(target=_dispatch_loop, name="log-dispatch", daemon=True).start()
    threading.Thread(target=_file_loop, name="log-file", daemon=True).start()


def set_verbose(v: bool) -> None:
    global _verbose
    _verbose = v


def set_log_level_filter(levels: Dict[str, bool]) -> None:
    _level_filter.update(levels)


def set_kind_filter(kinds: Dict[str, bool]) -> None:
    _kind_filter.update(kinds)


def set_file_logger(path: Optional[str]) -> None:
    global _file_path
    _file_path = path


def snapshot() -> List[LogEvent]:
    return list(_ring)


__all__ = [
    "LogEvent",
    "LEVELS",
    "KINDS",
    "emit",
    "subscribe",
    "unsubscribe",
    "flush",
    "start_dispatcher",
    "set_verbose",
    "set_log_level_filter",
    "set_kind_filter",
    "set_file_logger",
    "snapshot",
]

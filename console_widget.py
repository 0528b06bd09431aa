import tkinter as tk
from datetime import datetime
from tkinter import filedialog, messagebox
from tkinter import ttk
from typing import Dict

from logging_bus import KINDS, LogEvent, set_kind_filter, set_log_level_filter, snapshot, subscribe


class ActivityConsole(tk.Frame):
    """Live view of the activity log, hosted as a notebook tab."""

    def __init__(self, notebook: ttk.Notebook):
        super().__init__(notebook)
        self.notebook = notebook
        self.paused = False
        self.last_ts = 0.0
        self._build_ui()
        for evt in snapshot():
            self._append(evt)

        def on_evt(evt):
            if self.paused:
                return
            # called on the dispatcher thread
            self.after(0, lambda e=evt: self._append(e))

        subscribe(on_evt)

    def _build_ui(self) -> None:
        tb = tk.Frame(self)
        tb.pack(fill="x")
        self.level_vars: Dict[str, tk.BooleanVar] = {}
        for lvl in ("INFO", "WARN", "ERROR"):
            v = tk.BooleanVar(value=True)
            self.level_vars[lvl] = v
            tk.Checkbutton(tb, text=lvl.title(), variable=v, command=self._on_levels).pack(side="left")

        self.kind_vars: Dict[str, tk.BooleanVar] = {}
        for k in KINDS:
            v = tk.BooleanVar(value=True)
            self.kind_vars[k] = v
            tk.Checkbutton(tb, text=k.title(), variable=v, command=self._on_kinds).pack(side="left")

        self.pause_btn = tk.Button(tb, text="Pause", command=self._toggle_pause)
        self.pause_btn.pack(side="right")
        tk.Button(tb, text="Copy", command=self._copy).pack(side="right")
        tk.Button(tb, text="Clear", command=self._clear).pack(side="right")
        tk.Button(tb, text="Save…", command=self._save).pack(side="right")

        self.text = tk.Text(self, wrap="word", height=12, state="disabled")
        scroll = tk.Scrollbar(self, orient="vertical", command=self.text.yview)
        self.text.configure(yscrollcommand=scroll.set)
        self.text.pack(side="left", fill="both", expand=True)
        scroll.pack(side="right", fill="y")
        self.text.tag_config("WARN", foreground="orange")
        self.text.tag_config("ERROR", foreground="red")

    def _fmt(self, evt: LogEvent) -> str:
        ts = datetime.fromtimestamp(evt.ts).strftime("%H:%M:%S")
        meta = " ".join(f"{k}={v}" for k, v in evt.meta.items())
        return f"[{ts}] {evt.level:<5} {evt.kind:<8} {evt.msg} {meta}\n"

    def _append(self, evt: LogEvent) -> None:
        self.last_ts = evt.ts
        self.text.configure(state="normal")
        self.text.insert("end", self._fmt(evt), evt.level)
        self.text.see("end")
        self.text.configure(state="disabled")

    def _toggle_pause(self) -> None:
        self.paused = not self.paused
        self.pause_btn.config(text="Resume" if self.paused else "Pause")
        if not self.paused:
            for evt in snapshot():
                if evt.ts > self.last_ts:
                    self._append(evt)

    def _copy(self) -> None:
        self.clipboard_clear()
        self.clipboard_append(self.text.get("1.0", "end-1c"))

    def _clear(self) -> None:
        self.text.configure(state="normal")
        self.text.delete("1.0", "end")
        self.text.configure(state="disabled")

    def _save(self) -> None:
        path = filedialog.asksaveasfilename(
            defaultextension=".log", filetypes=[("Log", "*.log"), ("Text", "*.txt")]
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.text.get("1.0", "end-1c"))
        except OSError as e:
            messagebox.showerror("Save failed", str(e))

    def _on_levels(self) -> None:
        set_log_level_filter({lvl: v.get() for lvl, v in self.level_vars.items()})

    def _on_kinds(self) -> None:
        set_kind_filter({k: v.get() for k, v in self.kind_vars.items()})

    def show(self) -> None:
        self.notebook.add(self, text="Activity")

    def hide(self) -> None:
        self.notebook.hide(self)


__all__ = ["ActivityConsole"]

import threading
import tkinter as tk
from tkinter import filedialog
from typing import Optional

from logging_bus import emit
from logic.file_viewer import ViewerState
from services.generation_client import estimate_prompt_tokens
from state import Phase

IDLE_MESSAGE = 'Your generated Arduino project files\nwill appear here.'
LOADING_MESSAGE = 'Generating project…'


def make_threaded_runner(app):
    """Run generation jobs on a worker thread and finish them on the Tk loop."""
    def runner(job, on_success, on_failure):
        def worker():
            try:
                result = job()
            except Exception as e:
                app.after(0, lambda err=e: on_failure(err))
                return
            app.after(0, lambda: on_success(result))

        threading.Thread(target=worker, name='generate', daemon=True).start()

    return runner


def make_clipboard(app):
    def copy(text: str) -> None:
        app.clipboard_clear()
        app.clipboard_append(text)
        app.update_idletasks()

    return copy


class DialogFileSaver:
    """Asks where to save the archive with a native save dialog."""

    def __init__(self, parent):
        self.parent = parent

    def save(self, data: bytes, suggested_name: str) -> Optional[str]:
        path = filedialog.asksaveasfilename(
            parent=self.parent,
            initialfile=suggested_name,
            defaultextension='.zip',
            filetypes=[('ZIP archive', '*.zip')],
        )
        if not path:
            return None
        with open(path, 'wb') as f:
            f.write(data)
        return path


class UIEvents:
    def __init__(self, ctx, controller, viewer, prompt_widgets, files_widgets, status_bar, refresh_history):
        self.ctx = ctx
        self.controller = controller
        self.viewer = viewer
        self.prompt_widgets = prompt_widgets
        self.files_widgets = files_widgets
        self.status_bar = status_bar
        self.refresh_history = refresh_history
        self._shown_files = None
        self._shown_active = None

        prompt_widgets['generate_btn'].config(command=self.generate)
        prompt_widgets['prompt_entry'].bind('<KeyRelease>', self.on_prompt_edit)
        prompt_widgets['prompt_entry'].bind('<Control-Return>', self._generate_shortcut)
        files_widgets['copy_btn'].config(command=self.copy_active)
        files_widgets['download_btn'].config(command=self.download)
        controller.subscribe(lambda _state: self.render_session())
        viewer.subscribe(self.render_viewer)

    # --- Prompt handling ---
    def _prompt_text(self) -> str:
        # Text always appends a trailing newline
        return self.prompt_widgets['prompt_entry'].get('1.0', 'end-1c')

    def on_prompt_edit(self, _event=None):
        text = self._prompt_text()
        self.controller.set_prompt(text)
        tokens = estimate_prompt_tokens(text)
        self.prompt_widgets['token_var'].set(f"Estimated prompt tokens: {tokens}")
        self._update_generate_btn()

    def generate(self):
        self.controller.set_prompt(self._prompt_text())
        if self.controller.submit():
            emit('INFO', 'SYSTEM', 'Generate clicked', model=self.controller.client.model)

    def _generate_shortcut(self, _event=None):
        self.generate()
        return 'break'

    def select_history(self, entry: str):
        if self.controller.state.is_loading:
            return
        self.controller.select_history(entry)
        entry_widget = self.prompt_widgets['prompt_entry']
        entry_widget.delete('1.0', tk.END)
        entry_widget.insert('1.0', self.controller.state.prompt_text)
        self.on_prompt_edit()

    # --- Viewer ---
    def copy_active(self):
        if self.viewer.copy_active():
            self.status_bar.set_status(f"📋 Copied {self.viewer.state.active}")

    def select_file(self, filename: str):
        self.viewer.select(filename)

    def render_viewer(self, vstate: ViewerState):
        fw = self.files_widgets
        if vstate.files != self._shown_files:
            fw['set_tabs'](vstate.filenames, self.select_file)
            self._shown_files = vstate.files
            self._shown_active = None
        fw['active_var'].set(vstate.active or '')
        if vstate.files and vstate.active != self._shown_active:
            fw['show_text'](vstate.content)
            self._shown_active = vstate.active
        fw['copy_btn'].config(
            text='✅ Copied!' if vstate.copied else '📋 Copy',
            state='normal' if vstate.active_file is not None else 'disabled',
        )

    # --- Session ---
    def _update_generate_btn(self):
        loading = self.controller.state.is_loading
        has_text = bool(self.controller.state.prompt_text.strip())
        self.prompt_widgets['generate_btn'].config(
            text='Generating…' if loading else '⚡ Generate Project',
            state='disabled' if loading or not has_text else 'normal',
        )

    def _show_message(self, text: str):
        self.files_widgets['show_text'](text)
        # the next viewer render must redraw the code
        self._shown_files = None
        self._shown_active = None

    def render_session(self):
        state = self.controller.state
        phase = state.phase
        fw = self.files_widgets
        self.prompt_widgets['prompt_entry'].config(state='disabled' if phase is Phase.LOADING else 'normal')
        self._update_generate_btn()
        self.refresh_history(self.controller.visible_history())

        if phase is Phase.SUCCESS:
            name = state.current_project.project_name
            fw['project_var'].set(f"2. Generated Code: {name}")
            fw['download_btn'].config(text=f"💾 Download {name}.zip", state='normal')
            self.status_bar.set_status('✅ Done.')
            self.status_bar.update_usage(self.controller.client.usage)
            return

        fw['project_var'].set('2. Generated Code')
        fw['download_btn'].config(text='💾 Download', state='disabled')
        if phase is Phase.LOADING:
            self._show_message(LOADING_MESSAGE)
            self.status_bar.set_status('Thinking…')
        elif phase is Phase.FAILURE:
            self._show_message(f"Generation Failed\n\n{state.last_error}")
            self.status_bar.set_status(f"⚠️ {state.last_error}")
            # a rejected answer may still have cost tokens
            self.status_bar.update_usage(self.controller.client.usage)
        else:
            self._show_message(IDLE_MESSAGE)
            self.status_bar.set_status('Ready')

    # --- Download ---
    def download(self):
        path = self.controller.download()
        if path:
            self.status_bar.set_status(f"✅ Saved {path}")


__all__ = ['UIEvents', 'DialogFileSaver', 'make_threaded_runner', 'make_clipboard']

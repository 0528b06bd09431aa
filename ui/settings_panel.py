import tkinter as tk
from tkinter import filedialog

from ttkbootstrap import Style

from logging_bus import emit, set_file_logger, set_verbose
from services.generation_client import MODELS


class MenuToolTip:
    """Simple tooltip for Tkinter Menu items."""

    def __init__(self, menu: tk.Menu, descriptions: dict[int, str]):
        self.menu = menu
        self.descriptions = descriptions
        self.tip = None
        menu.bind("<Motion>", self._on_motion)
        menu.bind("<Leave>", lambda _e: self._hide())

    def _on_motion(self, event: tk.Event) -> None:
        index = self.menu.index(f"@{event.y}")
        text = self.descriptions.get(index) if index is not None else None
        if text:
            self._show(text, event.x_root + 10, event.y_root + 10)
        else:
            self._hide()

    def _show(self, text: str, x: int, y: int) -> None:
        self._hide()
        self.tip = tw = tk.Toplevel(self.menu)
        tw.wm_overrideredirect(True)
        tw.wm_geometry(f"+{x}+{y}")
        tk.Label(tw, text=text, background="#ffffe0", relief="solid", borderwidth=1).pack()

    def _hide(self) -> None:
        if self.tip is not None:
            self.tip.destroy()
            self.tip = None


def create_settings_panel(ctx, root, style: Style, client, console=None):
    settings_btn = tk.Button(root, text='⚙️')
    settings_menu = tk.Menu(root, tearoff=False)
    tooltips: dict[int, str] = {}

    model_choice = tk.StringVar(value=ctx.settings.get('model'))
    verbose = tk.BooleanVar(value=ctx.settings.get('verbose', True))
    show_console = tk.BooleanVar(value=ctx.settings.get('activity_console_visible', True))
    theme_choice = tk.StringVar(value=ctx.settings.get('theme', 'darkly'))

    def _apply_model():
        ctx.settings['model'] = model_choice.get()
        client.model = model_choice.get()
        emit('INFO', 'SYSTEM', 'Model changed', model=client.model)

    model_menu = tk.Menu(settings_menu, tearoff=False)
    for name in MODELS:
        model_menu.add_radiobutton(label=name, value=name, variable=model_choice, command=_apply_model)
    settings_menu.add_cascade(label='Model', menu=model_menu)
    tooltips[settings_menu.index('end')] = 'Model used for the next generation.'

    def _apply_verbose():
        ctx.settings['verbose'] = verbose.get()
        set_verbose(verbose.get())

    settings_menu.add_checkbutton(label='Verbose activity log', variable=verbose, command=_apply_verbose)
    tooltips[settings_menu.index('end')] = 'Show informational events, not only warnings and errors.'

    def _apply_console():
        ctx.settings['activity_console_visible'] = show_console.get()
        if console is None:
            return
        if show_console.get():
            console.show()
        else:
            console.hide()

    if console is not None:
        settings_menu.add_checkbutton(label='Show activity tab', variable=show_console, command=_apply_console)
        tooltips[settings_menu.index('end')] = 'Show or hide the activity log tab.'

    def _choose_log_file():
        path = filedialog.asksaveasfilename(
            defaultextension=".jsonl",
            filetypes=[("JSON Lines", "*.jsonl"), ("All", "*.*")],
        )
        ctx.settings['activity_log_file'] = path or None
        set_file_logger(path or None)

    settings_menu.add_command(label='Activity log file…', command=_choose_log_file)
    tooltips[settings_menu.index('end')] = 'Append activity events to a JSON lines file. Cancel to stop.'

    theme_menu = tk.Menu(settings_menu, tearoff=False)
    for theme in ['darkly', 'flatly']:
        theme_menu.add_radiobutton(label=theme, value=theme, variable=theme_choice)
    settings_menu.add_cascade(label='Theme', menu=theme_menu)
    tooltips[settings_menu.index('end')] = 'Switch the application theme.'

    def change_theme(*_):
        style.theme_use(theme_choice.get())
        ctx.settings['theme'] = theme_choice.get()
    theme_choice.trace_add('write', change_theme)

    def show_menu(event=None):
        settings_menu.tk_popup(settings_btn.winfo_rootx(), settings_btn.winfo_rooty() + settings_btn.winfo_height())

    settings_btn.config(command=show_menu)
    MenuToolTip(settings_menu, tooltips)
    return settings_btn


__all__ = ['create_settings_panel']

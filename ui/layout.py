import tkinter as tk
from tkinter import messagebox, ttk

from ttkbootstrap import Style

from console_widget import ActivityConsole
from logic.archive import ArchivePackager, ZipArchiveBuilder
from logic.file_viewer import FileViewer
from logic.session import SessionController
from services.generation_client import GenerationClient
from ui.events import DialogFileSaver, UIEvents, make_clipboard, make_threaded_runner
from ui.highlight import make_highlighter
from ui.settings_panel import create_settings_panel
from ui.status_bar import StatusBar
from ui.tabs.files_tab import create_tab as create_files_tab
from ui.tabs.history_tab import create_tab as create_history_tab
from ui.tabs.prompt_tab import create_tab as create_prompt_tab


def launch_ui(ctx):
    app = tk.Tk()
    app.title('Arduino Sketch Assist')
    app.geometry('1100x700')
    style = Style(ctx.settings.get('theme', 'darkly'))

    status_bar = StatusBar(app)

    header = ttk.Frame(app, padding=(10, 10, 10, 0))
    header.pack(fill='x')
    ttk.Label(header, text='Arduino Code Generator', font=('TkDefaultFont', 14, 'bold')).pack(side='left')

    # Main layout
    main_frame = ttk.Frame(app)
    main_frame.pack(fill='both', expand=True, padx=10, pady=10)
    content_pane = ttk.Panedwindow(main_frame, orient='horizontal')
    content_pane.pack(fill='both', expand=True)
    left_panel = ttk.Frame(content_pane)
    content_pane.add(left_panel, weight=2)
    right_tabs = ttk.Notebook(content_pane)
    content_pane.add(right_tabs, weight=3)

    # Panels
    prompt_widgets = create_prompt_tab(left_panel)
    prompt_widgets['frame'].pack(fill='both', expand=True)
    events = None
    hist_frame, refresh_history = create_history_tab(left_panel, lambda entry: events.select_history(entry))
    hist_frame.pack(fill='x', pady=(10, 0))
    files_widgets = create_files_tab(right_tabs)
    right_tabs.add(files_widgets['frame'], text='Generated Files')
    console = ActivityConsole(right_tabs)
    console.show()
    if not ctx.settings.get('activity_console_visible', True):
        console.hide()

    # Core
    client = GenerationClient(ctx.api_key, model=ctx.model, timeout=ctx.timeout)
    viewer = FileViewer(
        clipboard=make_clipboard(app),
        scheduler=app,
        highlighter=make_highlighter(files_widgets['code_text']),
        copy_reset_ms=ctx.settings.get('copy_reset_ms', 2000),
    )
    packager = ArchivePackager(ZipArchiveBuilder(), DialogFileSaver(app))
    controller = SessionController(
        client,
        packager,
        viewer,
        runner=make_threaded_runner(app),
        notify_error=lambda title, msg: messagebox.showerror(title, msg, parent=app),
        history_limit=ctx.settings.get('history_display_limit', 5),
    )

    events = UIEvents(ctx, controller, viewer, prompt_widgets, files_widgets, status_bar, refresh_history)
    settings_btn = create_settings_panel(ctx, header, style, client, console)
    settings_btn.pack(side='right')

    status_bar.update_usage(client.usage)
    events.render_session()
    prompt_widgets['prompt_entry'].focus_set()
    app.mainloop()


__all__ = ['launch_ui']

import tkinter as tk
from tkinter import ttk
from typing import Callable, List


def create_tab(parent):
    frame = ttk.Frame(parent, padding=10)

    header = ttk.Frame(frame)
    header.pack(fill='x')
    project_var = tk.StringVar(value='2. Generated Code')
    ttk.Label(header, textvariable=project_var).pack(side='left')
    copy_btn = ttk.Button(header, text='📋 Copy', state='disabled')
    copy_btn.pack(side='right')

    tab_bar = ttk.Frame(frame)
    tab_bar.pack(fill='x', pady=(8, 4))
    active_var = tk.StringVar(value='')

    text_container = ttk.Frame(frame)
    text_container.pack(fill='both', expand=True)
    code_text = tk.Text(text_container, wrap='none', font='TkFixedFont', state='disabled')
    yscroll = ttk.Scrollbar(text_container, orient='vertical', command=code_text.yview)
    xscroll = ttk.Scrollbar(text_container, orient='horizontal', command=code_text.xview)
    code_text.configure(yscrollcommand=yscroll.set, xscrollcommand=xscroll.set)
    yscroll.pack(side='right', fill='y')
    xscroll.pack(side='bottom', fill='x')
    code_text.pack(side='left', fill='both', expand=True)

    download_btn = ttk.Button(frame, text='💾 Download', state='disabled')
    download_btn.pack(fill='x', pady=(8, 0))

    def set_tabs(filenames: List[str], on_select: Callable[[str], None]):
        for widget in tab_bar.winfo_children():
            widget.destroy()
        for name in filenames:
            ttk.Radiobutton(
                tab_bar,
                text=name,
                value=name,
                variable=active_var,
                style='Toolbutton',
                command=lambda n=name: on_select(n),
            ).pack(side='left', padx=1)

    def show_text(text: str):
        code_text.configure(state='normal')
        code_text.delete('1.0', tk.END)
        code_text.insert('1.0', text)
        code_text.configure(state='disabled')

    return {
        'frame': frame,
        'project_var': project_var,
        'active_var': active_var,
        'code_text': code_text,
        'copy_btn': copy_btn,
        'download_btn': download_btn,
        'set_tabs': set_tabs,
        'show_text': show_text,
    }


__all__ = ['create_tab']

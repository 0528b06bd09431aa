import tkinter as tk
from tkinter import ttk
from typing import Callable, List


def _one_line(text: str, width: int = 70) -> str:
    flat = ' '.join(text.split())
    return flat if len(flat) <= width else flat[: width - 1] + '…'


def create_tab(parent, on_select: Callable[[str], None]):
    frame = ttk.LabelFrame(parent, text='Recent Prompts', padding=10)
    listbox = tk.Listbox(frame, height=5, activestyle='none', exportselection=False)
    listbox.pack(fill='both', expand=True)
    entries: List[str] = []

    def refresh(items: List[str]):
        entries[:] = items
        listbox.delete(0, tk.END)
        for item in items:
            listbox.insert(tk.END, _one_line(item))

    def _on_pick(_event=None):
        sel = listbox.curselection()
        if sel and sel[0] < len(entries):
            on_select(entries[sel[0]])

    listbox.bind('<<ListboxSelect>>', _on_pick)
    return frame, refresh


__all__ = ['create_tab']

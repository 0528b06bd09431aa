import tkinter as tk

from state import UsageTotals


class StatusBar:
    def __init__(self, root):
        self.status_var = tk.StringVar(value='Ready')
        self.usage_var = tk.StringVar()
        frame = tk.Frame(root)
        frame.pack(side='bottom', fill='x')
        tk.Label(frame, textvariable=self.status_var).pack(side='left', padx=10)
        tk.Label(frame, textvariable=self.usage_var).pack(side='right', padx=10)

    def set_status(self, text: str):
        self.status_var.set(text)

    def update_usage(self, usage: UsageTotals):
        self.usage_var.set(
            f"Last: {usage.last_tokens}t (${usage.last_cost:.4f}) | "
            f"Session: {usage.session_tokens}t (${usage.session_cost:.4f})"
        )


__all__ = ['StatusBar']

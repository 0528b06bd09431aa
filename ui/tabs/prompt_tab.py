import tkinter as tk
from tkinter import ttk

EXAMPLE_PROMPT = (
    "Example: Create a project for an Arduino Uno that blinks the built-in LED (pin 13), "
    "200ms on and 800ms off. Put the blinking logic in a separate 'LedManager' class with "
    "on(), off() and blink(onMs, offMs) methods."
)


def create_tab(parent):
    frame = ttk.Frame(parent)

    prompt_frame = ttk.LabelFrame(frame, text='1. Describe Your Project', padding=10)
    prompt_frame.pack(fill='both', expand=True)
    ttk.Label(prompt_frame, text=EXAMPLE_PROMPT, wraplength=380, justify='left').pack(fill='x', pady=(0, 6))

    text_container = ttk.Frame(prompt_frame)
    text_container.pack(fill='both', expand=True)
    prompt_entry = tk.Text(text_container, height=14, wrap='word', undo=True)
    scroll = ttk.Scrollbar(text_container, orient='vertical', command=prompt_entry.yview)
    prompt_entry.configure(yscrollcommand=scroll.set)
    prompt_entry.pack(side='left', fill='both', expand=True)
    scroll.pack(side='right', fill='y')

    option_frame = ttk.Frame(prompt_frame, padding=(0, 8, 0, 0))
    option_frame.pack(fill='x')
    generate_btn = ttk.Button(option_frame, text='⚡ Generate Project', state='disabled')
    generate_btn.pack(side='left')

    token_var = tk.StringVar(value='Estimated prompt tokens: 0')
    ttk.Label(option_frame, textvariable=token_var).pack(side='right')

    return {
        'frame': frame,
        'prompt_entry': prompt_entry,
        'generate_btn': generate_btn,
        'token_var': token_var,
    }


__all__ = ['create_tab', 'EXAMPLE_PROMPT']

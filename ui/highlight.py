"""Lightweight Arduino/C++ highlighting for the read-only code view."""
import re
import tkinter as tk

from state import ProjectFile

CODE_EXTENSIONS = ('.ino', '.h', '.hpp', '.c', '.cpp')

KEYWORDS = (
    'void', 'int', 'long', 'unsigned', 'float', 'double', 'char', 'bool', 'byte', 'const',
    'static', 'class', 'struct', 'public', 'private', 'protected', 'return', 'if', 'else',
    'for', 'while', 'do', 'switch', 'case', 'break', 'continue', 'true', 'false', 'new',
    'delete', 'this', 'uint8_t', 'uint16_t', 'uint32_t', 'int16_t', 'int32_t', 'String',
)

# later entries win where patterns overlap
PATTERNS = [
    ('keyword', re.compile(r'\b(?:' + '|'.join(KEYWORDS) + r')\b')),
    ('number', re.compile(r'\b\d+(?:\.\d+)?[uUlLfF]*\b')),
    ('preproc', re.compile(r'^[ \t]*#\w+', re.MULTILINE)),
    ('string', re.compile(r'"(?:\\.|[^"\\\n])*"')),
    ('comment', re.compile(r'//[^\n]*|/\*.*?\*/', re.DOTALL)),
]

COLORS = {
    'keyword': '#569cd6',
    'number': '#b5cea8',
    'preproc': '#c586c0',
    'string': '#ce9178',
    'comment': '#6a9955',
}


def make_highlighter(text_widget: tk.Text):
    for tag, color in COLORS.items():
        text_widget.tag_configure(tag, foreground=color)

    def highlight(item: ProjectFile) -> None:
        for tag in COLORS:
            text_widget.tag_remove(tag, '1.0', tk.END)
        if not item.filename.lower().endswith(CODE_EXTENSIONS):
            return
        content = text_widget.get('1.0', 'end-1c')
        for tag, pattern in PATTERNS:
            for m in pattern.finditer(content):
                text_widget.tag_add(tag, f'1.0+{m.start()}c', f'1.0+{m.end()}c')
        for tag, _ in PATTERNS:
            text_widget.tag_raise(tag)

    return highlight


__all__ = ['make_highlighter']

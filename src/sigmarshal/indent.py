from __future__ import annotations


def indent(text: str, level: int = 1, *, char: str = "\t") -> str:
    """Re-indent every non-empty line of `text` by `level` indentation steps."""
    if level <= 0:
        return text
    prefix = char * level
    lines = text.splitlines(keepends=True)
    return "".join(prefix + line if line.strip() else line for line in lines)

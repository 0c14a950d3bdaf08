from __future__ import annotations

from .indent import indent
from .ir import (
    AppendBasic,
    Assign,
    Blank,
    Block,
    CloseContainer,
    Comment,
    Declare,
    FieldRead,
    Loop,
    OpenContainer,
    Recovery,
    Statement,
)
from .variables import declaration


def render(block: Block, *, indent_char: str = "\t") -> str:
    """Serialize a statement block to C source text."""
    lines: list[str] = []
    for stmt in block:
        lines.extend(_render_statement(stmt, indent_char))
    return "\n".join(lines) + "\n"


def _render_statement(stmt: Statement, ch: str) -> list[str]:
    if isinstance(stmt, Comment):
        return [f"/* {stmt.text} */"]
    if isinstance(stmt, Blank):
        return [""]
    if isinstance(stmt, Recovery):
        return indent(stmt.code, 1, char=ch).rstrip("\n").split("\n")
    if isinstance(stmt, AppendBasic):
        return _checked(
            f"dbus_message_iter_append_basic (&{stmt.iter_name}, {stmt.type_const}, &{stmt.value})",
            stmt.recovery,
            ch,
        )
    if isinstance(stmt, OpenContainer):
        sig = f'"{stmt.signature}"' if stmt.signature is not None else "NULL"
        return _checked(
            f"dbus_message_iter_open_container (&{stmt.iter_name}, {stmt.type_const}, {sig}, &{stmt.sub_iter})",
            stmt.recovery,
            ch,
        )
    if isinstance(stmt, CloseContainer):
        return _checked(
            f"dbus_message_iter_close_container (&{stmt.iter_name}, &{stmt.sub_iter})",
            stmt.recovery,
            ch,
        )
    if isinstance(stmt, Declare):
        return [declaration(stmt.type, stmt.name) + ";"]
    if isinstance(stmt, Assign):
        return [f"{stmt.target} = {stmt.array}[{stmt.index}];"]
    if isinstance(stmt, FieldRead):
        return [f"{stmt.target} = {stmt.source}->{stmt.field};"]
    if isinstance(stmt, Loop):
        i = stmt.index
        if stmt.counted:
            header = f"for (size_t {i} = 0; {i} < {stmt.length}; {i}++) {{"
        else:
            header = f"for (size_t {i} = 0; {stmt.array}[{i}]; {i}++) {{"
        body = render(stmt.body, indent_char=ch)
        return [header, *indent(body, 1, char=ch).rstrip("\n").split("\n"), "}"]
    raise AssertionError(f"unexpected statement: {stmt!r}")


def _checked(call: str, recovery: Recovery, ch: str) -> list[str]:
    return [f"if (! {call}) {{", *_render_statement(recovery, ch), "}"]

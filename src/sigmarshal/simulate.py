"""Run generated marshalling code against Python values.

`MessageWriter` stands in for the libdbus message iterator API: it records
appended values and opened containers, and can be told to report an
allocation failure on a given operation. `run` interprets a statement block
with a variable environment, so the semantics of a generated fragment can be
checked without compiling any C.

Native values are laid out the way generated code expects them: arrays are
Python lists (NULL-terminated with a trailing None unless the element type is
fixed), structures are dicts keyed by field path (`item0`, `item1_len`, ...).
`bind` builds that layout from natural Python values (lists, dicts, tuples).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import RecoveryExit
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
)
from .marshal import marshal
from .signature import ArrayType, BasicType, DictEntryType, Node, StructType
from .typemap import TypeMapper
from .variables import ELEMENT, LEN, VarList, VarName, item


@dataclass
class WriterIter:
    type_const: str | None
    signature: str | None = None
    items: list[Any] = field(default_factory=list)
    open: bool = True


class MessageWriter:
    def __init__(self, *, fail_at: int | None = None) -> None:
        # fail_at is the 1-based writer operation that reports out of memory.
        self.root = WriterIter(None)
        self.fail_at = fail_at
        self.ops = 0

    def _alloc(self) -> bool:
        self.ops += 1
        return self.fail_at is None or self.ops != self.fail_at

    def append_basic(self, it: WriterIter, type_const: str, value: Any) -> bool:
        if not it.open:
            raise AssertionError("append to a closed container")
        if not self._alloc():
            return False
        it.items.append(value)
        return True

    def open_container(self, it: WriterIter, type_const: str, signature: str | None) -> WriterIter | None:
        if not it.open:
            raise AssertionError("open inside a closed container")
        if not self._alloc():
            return None
        sub = WriterIter(type_const, signature)
        it.items.append(sub)
        return sub

    def close_container(self, it: WriterIter, sub: WriterIter) -> bool:
        if not sub.open:
            raise AssertionError("container closed twice")
        if not self._alloc():
            return False
        sub.open = False
        return True

    def values(self) -> list[Any]:
        """Return the message body as plain lists, ready for MessagePack."""
        return [_plain(v) for v in self.root.items]


def _plain(v: Any) -> Any:
    if isinstance(v, WriterIter):
        if v.open:
            raise AssertionError(f"container {v.type_const} was never closed")
        return [_plain(x) for x in v.items]
    return v


def run(block: Block, env: dict[VarName, Any], writer: MessageWriter) -> None:
    """Execute `block`, reading and writing variables in `env`.

    Raises `RecoveryExit` when an operation fails and the recovery code runs.
    """
    for stmt in block:
        if isinstance(stmt, (Comment, Blank)):
            continue
        if isinstance(stmt, Declare):
            env[stmt.name] = None
        elif isinstance(stmt, AppendBasic):
            if not writer.append_basic(env[stmt.iter_name], stmt.type_const, env[stmt.value]):
                _recover(stmt.recovery)
        elif isinstance(stmt, OpenContainer):
            sub = writer.open_container(env[stmt.iter_name], stmt.type_const, stmt.signature)
            if sub is None:
                _recover(stmt.recovery)
            env[stmt.sub_iter] = sub
        elif isinstance(stmt, CloseContainer):
            if not writer.close_container(env[stmt.iter_name], env[stmt.sub_iter]):
                _recover(stmt.recovery)
        elif isinstance(stmt, Assign):
            env[stmt.target] = env[stmt.array][env[stmt.index]]
        elif isinstance(stmt, FieldRead):
            env[stmt.target] = env[stmt.source][stmt.field]
        elif isinstance(stmt, Loop):
            env[stmt.index] = 0
            while _loop_continues(stmt, env):
                run(stmt.body, env, writer)
                env[stmt.index] += 1
        elif isinstance(stmt, Recovery):
            _recover(stmt)
        else:
            raise AssertionError(f"unexpected statement: {stmt!r}")


def _loop_continues(loop: Loop, env: dict[VarName, Any]) -> bool:
    i = env[loop.index]
    if loop.length is not None:
        return i < env[loop.length]
    return env[loop.array][i] is not None


def _recover(recovery: Recovery) -> None:
    raise RecoveryExit(recovery.code)


def simulate(
    block: Block,
    inputs: dict[VarName, Any],
    *,
    iter_name: str = "iter",
    writer: MessageWriter | None = None,
) -> MessageWriter:
    writer = writer or MessageWriter()
    env = dict(inputs)
    env[VarName(iter_name)] = writer.root
    run(block, env, writer)
    return writer


def bind(node: Node, name: VarName | str, value: Any, *, mapper: TypeMapper | None = None) -> dict[VarName, Any]:
    """Lay out a natural Python value as the inputs marshalling code expects."""
    if isinstance(name, str):
        name = VarName(name)
    mapper = mapper or TypeMapper()

    if isinstance(node, BasicType):
        return {name: value}

    if isinstance(node, ArrayType):
        element = node.element
        element_name = name.child(ELEMENT)
        items = list(value.items()) if isinstance(element, DictEntryType) else list(value)
        bound = [bind(element, element_name, x, mapper=mapper) for x in items]

        inputs = VarList()
        marshal(node, "iter", name, "", inputs, VarList(), mapper=mapper)
        out: dict[VarName, Any] = {}
        for var in inputs:
            if element.is_fixed and var.name == name.child(LEN):
                out[var.name] = len(items)
                continue
            source = var.name.rebase(name, element_name)
            column = [b[source] for b in bound]
            if not element.is_fixed:
                column.append(None)
            out[var.name] = column
        return out

    if isinstance(node, (StructType, DictEntryType)):
        members = tuple(value)
        if len(members) != len(node.children):
            raise ValueError(f"expected {len(node.children)} members for {node.signature}, got {len(members)}")
        fields: dict[str, Any] = {}
        for k, (member, v) in enumerate(zip(node.children, members)):
            for var_name, x in bind(member, name.child(item(k)), v, mapper=mapper).items():
                fields[var_name.member_of(name)] = x
        return {name: fields}

    raise AssertionError(f"unexpected signature node: {node!r}")


def from_wire(node: Node, value: Any) -> Any:
    """Convert a message value written by `MessageWriter` back to natural Python."""
    if isinstance(node, BasicType):
        return value
    if isinstance(node, ArrayType):
        if isinstance(node.element, DictEntryType):
            return dict(from_wire(node.element, x) for x in value)
        return [from_wire(node.element, x) for x in value]
    if isinstance(node, (StructType, DictEntryType)):
        return tuple(from_wire(m, x) for m, x in zip(node.children, value))
    raise AssertionError(f"unexpected signature node: {node!r}")

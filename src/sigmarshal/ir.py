"""Statement nodes for generated marshalling code.

Fragments are immutable tuples of statements; they are only turned into C
text by `sigmarshal.render`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .variables import VarName


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Blank:
    pass


@dataclass(frozen=True)
class Recovery:
    # Caller-supplied code run when the writer reports an allocation failure.
    # Never inspected; it must not fall through.
    code: str


@dataclass(frozen=True)
class AppendBasic:
    iter_name: VarName
    type_const: str
    value: VarName
    recovery: Recovery


@dataclass(frozen=True)
class OpenContainer:
    iter_name: VarName
    type_const: str
    signature: str | None  # element signature, arrays only
    sub_iter: VarName
    recovery: Recovery


@dataclass(frozen=True)
class CloseContainer:
    iter_name: VarName
    sub_iter: VarName
    recovery: Recovery


@dataclass(frozen=True)
class Declare:
    type: str
    name: VarName


@dataclass(frozen=True)
class Assign:
    # target = array[index];
    target: VarName
    array: VarName
    index: VarName


@dataclass(frozen=True)
class FieldRead:
    # target = source->field;
    target: VarName
    source: VarName
    field: str


@dataclass(frozen=True)
class Loop:
    index: VarName
    array: VarName
    # Counted loop when set; otherwise runs until array[index] is NULL.
    length: VarName | None
    body: "Block"

    @property
    def counted(self) -> bool:
        return self.length is not None


Statement = Union[
    Comment,
    Blank,
    Recovery,
    AppendBasic,
    OpenContainer,
    CloseContainer,
    Declare,
    Assign,
    FieldRead,
    Loop,
]
Block = tuple[Statement, ...]


def walk(block: Block):
    """Yield every statement of `block`, descending into loop bodies."""
    for stmt in block:
        yield stmt
        if isinstance(stmt, Loop):
            yield from walk(stmt.body)
        elif isinstance(stmt, (AppendBasic, OpenContainer, CloseContainer)):
            yield stmt.recovery

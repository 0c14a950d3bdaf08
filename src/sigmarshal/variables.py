"""Structured variable names and owned variable lists.

A generated variable is named by the caller's base name plus a path of typed
segments (`foo_element_len` is `foo` + ELEMENT + LEN), so renaming across a
loop or struct boundary is a structural prefix swap rather than a string
operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(frozen=True)
class Segment:
    kind: str  # element | len | iter | index | item
    index: int | None = None

    @property
    def text(self) -> str:
        if self.kind == "item":
            return f"_item{self.index}"
        if self.kind == "index":
            return "_i"
        return f"_{self.kind}"


ELEMENT = Segment("element")
LEN = Segment("len")
ITER = Segment("iter")
INDEX = Segment("index")


def item(k: int) -> Segment:
    return Segment("item", k)


@dataclass(frozen=True)
class VarName:
    base: str
    path: tuple[Segment, ...] = ()

    def __str__(self) -> str:
        return self.base + "".join(s.text for s in self.path)

    def child(self, *segments: Segment) -> "VarName":
        return VarName(self.base, self.path + segments)

    def startswith(self, prefix: "VarName") -> bool:
        n = len(prefix.path)
        return self.base == prefix.base and self.path[:n] == prefix.path

    def suffix(self, prefix: "VarName") -> tuple[Segment, ...]:
        if not self.startswith(prefix):
            raise AssertionError(f"{self} is not derived from {prefix}")
        return self.path[len(prefix.path) :]

    def rebase(self, old: "VarName", new: "VarName") -> "VarName":
        """Replace the `old` prefix of this name with `new`."""
        return new.child(*self.suffix(old))

    def member_of(self, aggregate: "VarName") -> str:
        """Field path of this name inside `aggregate`, e.g. `item1_len`."""
        suffix = self.suffix(aggregate)
        if not suffix:
            raise AssertionError(f"{self} is the aggregate itself")
        return "".join(s.text for s in suffix)[1:]


@dataclass(eq=True)
class TypeVar:
    type: str
    name: VarName
    owner: "VarList | None" = field(default=None, compare=False, repr=False)

    def declaration(self) -> str:
        return declaration(self.type, self.name)


def declaration(c_type: str, name: VarName) -> str:
    if c_type.endswith("*"):
        return f"{c_type}{name}"
    return f"{c_type} {name}"


class VarList:
    """Ordered list of variables, each owned by exactly one list at a time."""

    def __init__(self) -> None:
        self._vars: list[TypeVar] = []

    def __iter__(self) -> Iterator[TypeVar]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def __getitem__(self, index: int) -> TypeVar:
        return self._vars[index]

    def __repr__(self) -> str:
        return f"VarList({self.pairs()!r})"

    def add(self, var: TypeVar) -> TypeVar:
        if var.owner is not None:
            raise AssertionError(f"{var.name} is already owned by another list")
        if any(v.name == var.name for v in self._vars):
            raise AssertionError(f"duplicate variable name {var.name}")
        var.owner = self
        self._vars.append(var)
        return var

    def transfer(self, var: TypeVar, other: "VarList") -> None:
        """Move ownership of `var` from this list to the end of `other`."""
        if var.owner is not self:
            raise AssertionError(f"{var.name} is not owned by this list")
        for i, v in enumerate(self._vars):
            if v is var:
                del self._vars[i]
                break
        var.owner = None
        other.add(var)

    def transfer_all(self, other: "VarList") -> None:
        for var in self:
            self.transfer(var, other)

    def names(self) -> list[str]:
        return [str(v.name) for v in self._vars]

    def pairs(self) -> list[tuple[str, str]]:
        return [(v.type, str(v.name)) for v in self._vars]

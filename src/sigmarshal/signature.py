"""D-Bus type signatures parsed into an immutable tree of nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import SignatureError

MAX_SIGNATURE_LENGTH = 255
MAX_ARRAY_DEPTH = 32
MAX_STRUCT_DEPTH = 32

FIXED_CODES = frozenset("ybnqiuxtdh")
STRING_CODES = frozenset("sog")
BASIC_CODES = FIXED_CODES | STRING_CODES


@dataclass(frozen=True)
class BasicType:
    code: str

    @property
    def signature(self) -> str:
        return self.code

    @property
    def is_fixed(self) -> bool:
        return self.code in FIXED_CODES

    @property
    def children(self) -> tuple["Node", ...]:
        return ()


@dataclass(frozen=True)
class ArrayType:
    element: "Node"

    @property
    def signature(self) -> str:
        return "a" + self.element.signature

    @property
    def is_fixed(self) -> bool:
        return False

    @property
    def children(self) -> tuple["Node", ...]:
        return (self.element,)


@dataclass(frozen=True)
class StructType:
    members: tuple["Node", ...]

    @property
    def signature(self) -> str:
        return "(" + "".join(m.signature for m in self.members) + ")"

    @property
    def is_fixed(self) -> bool:
        return False

    @property
    def children(self) -> tuple["Node", ...]:
        return self.members


@dataclass(frozen=True)
class DictEntryType:
    key: BasicType
    value: "Node"

    @property
    def signature(self) -> str:
        return "{" + self.key.signature + self.value.signature + "}"

    @property
    def is_fixed(self) -> bool:
        return False

    @property
    def children(self) -> tuple["Node", ...]:
        return (self.key, self.value)


@dataclass(frozen=True)
class VariantType:
    @property
    def signature(self) -> str:
        return "v"

    @property
    def is_fixed(self) -> bool:
        return False

    @property
    def children(self) -> tuple["Node", ...]:
        return ()


Node = Union[BasicType, ArrayType, StructType, DictEntryType, VariantType]


def parse(text: str) -> Node:
    """Parse a signature holding exactly one complete type."""
    nodes = parse_many(text)
    if len(nodes) != 1:
        raise SignatureError(
            f"expected a single complete type, got {len(nodes)}", 0 if not nodes else len(nodes[0].signature)
        )
    return nodes[0]


def parse_many(text: str) -> list[Node]:
    """Parse a signature holding zero or more complete types (e.g. a method's arguments)."""
    if len(text) > MAX_SIGNATURE_LENGTH:
        raise SignatureError(f"signature longer than {MAX_SIGNATURE_LENGTH} characters", MAX_SIGNATURE_LENGTH)
    nodes: list[Node] = []
    i = 0
    while i < len(text):
        node, i = _parse_one(text, i, arrays=0, structs=0)
        nodes.append(node)
    return nodes


def contains_variant(node: Node) -> bool:
    if isinstance(node, VariantType):
        return True
    return any(contains_variant(c) for c in node.children)


def _parse_one(text: str, i: int, *, arrays: int, structs: int) -> tuple[Node, int]:
    if i >= len(text):
        raise SignatureError("unexpected end of signature", i)
    ch = text[i]

    if ch in BASIC_CODES:
        return BasicType(ch), i + 1

    if ch == "v":
        return VariantType(), i + 1

    if ch == "a":
        if arrays + 1 > MAX_ARRAY_DEPTH:
            raise SignatureError("array nesting too deep", i)
        if text.startswith("{", i + 1):
            entry, j = _parse_dict_entry(text, i + 1, arrays=arrays + 1, structs=structs)
            return ArrayType(entry), j
        element, j = _parse_one(text, i + 1, arrays=arrays + 1, structs=structs)
        return ArrayType(element), j

    if ch == "(":
        if structs + 1 > MAX_STRUCT_DEPTH:
            raise SignatureError("structure nesting too deep", i)
        members: list[Node] = []
        j = i + 1
        while True:
            if j >= len(text):
                raise SignatureError("unterminated structure", i)
            if text[j] == ")":
                break
            member, j = _parse_one(text, j, arrays=arrays, structs=structs + 1)
            members.append(member)
        if not members:
            raise SignatureError("empty structure", i)
        return StructType(tuple(members)), j + 1

    if ch == "{":
        raise SignatureError("dict entry outside of an array", i)

    if ch in ")}":
        raise SignatureError(f"unexpected {ch!r}", i)

    raise SignatureError(f"unknown type code {ch!r}", i)


def _parse_dict_entry(text: str, i: int, *, arrays: int, structs: int) -> tuple[DictEntryType, int]:
    if structs + 1 > MAX_STRUCT_DEPTH:
        raise SignatureError("structure nesting too deep", i)
    j = i + 1
    if j >= len(text) or text[j] == "}":
        raise SignatureError("dict entry must have a key and a value", i)
    key, j = _parse_one(text, j, arrays=arrays, structs=structs + 1)
    if not isinstance(key, BasicType):
        raise SignatureError("dict entry key must be a basic type", i + 1)
    if j >= len(text) or text[j] == "}":
        raise SignatureError("dict entry must have a key and a value", i)
    value, j = _parse_one(text, j, arrays=arrays, structs=structs + 1)
    if j >= len(text):
        raise SignatureError("unterminated dict entry", i)
    if text[j] != "}":
        raise SignatureError("dict entry must have exactly two members", j)
    return DictEntryType(key, value), j + 1

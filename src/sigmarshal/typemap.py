from __future__ import annotations

from .config import MarshalOptions
from .errors import UnsupportedTypeError
from .signature import ArrayType, BasicType, DictEntryType, Node, StructType, VariantType

_C_TYPES = {
    "y": "uint8_t",
    "b": "int",
    "n": "int16_t",
    "q": "uint16_t",
    "i": "int32_t",
    "u": "uint32_t",
    "x": "int64_t",
    "t": "uint64_t",
    "d": "double",
    "h": "int",
    "s": "char *",
    "o": "char *",
    "g": "char *",
}

_BASIC_CONSTS = {
    "y": "DBUS_TYPE_BYTE",
    "b": "DBUS_TYPE_BOOLEAN",
    "n": "DBUS_TYPE_INT16",
    "q": "DBUS_TYPE_UINT16",
    "i": "DBUS_TYPE_INT32",
    "u": "DBUS_TYPE_UINT32",
    "x": "DBUS_TYPE_INT64",
    "t": "DBUS_TYPE_UINT64",
    "d": "DBUS_TYPE_DOUBLE",
    "h": "DBUS_TYPE_UNIX_FD",
    "s": "DBUS_TYPE_STRING",
    "o": "DBUS_TYPE_OBJECT_PATH",
    "g": "DBUS_TYPE_SIGNATURE",
}

_MANGLE = str.maketrans({"(": "r", ")": "_", "{": "e", "}": "_"})


def to_const(c_type: str) -> str:
    """Qualify the pointed-to value of a pointer type as const.

    Non-pointer types are returned unchanged since they are copied by value.
    `char *` becomes `const char *` and `const char **` becomes
    `const char * const *`.
    """
    t = c_type.strip()
    if not t.endswith("*"):
        return t
    head = t[:-1].rstrip()
    if head.endswith("*"):
        return f"{head} const *"
    if head.endswith(" const") or head.startswith("const "):
        return t
    return f"const {t}"


def to_pointer(c_type: str) -> str:
    t = c_type.strip()
    if t.endswith("*"):
        return t + "*"
    return t + " *"


class TypeMapper:
    """Map signature nodes to C type names and D-Bus type constants."""

    def __init__(self, options: MarshalOptions | None = None) -> None:
        self.options = options or MarshalOptions()

    def type_of(self, node: Node) -> str:
        if isinstance(node, BasicType):
            return _C_TYPES[node.code]
        if isinstance(node, ArrayType):
            return to_pointer(self.type_of(node.element))
        if isinstance(node, (StructType, DictEntryType)):
            return to_pointer(f"struct {self.struct_name(node)}")
        raise UnsupportedTypeError(f"no C type for signature {node.signature!r}")

    def type_const(self, node: Node) -> str:
        if isinstance(node, BasicType):
            return _BASIC_CONSTS[node.code]
        if isinstance(node, ArrayType):
            return "DBUS_TYPE_ARRAY"
        if isinstance(node, StructType):
            return "DBUS_TYPE_STRUCT"
        if isinstance(node, DictEntryType):
            return "DBUS_TYPE_DICT_ENTRY"
        if isinstance(node, VariantType):
            return "DBUS_TYPE_VARIANT"
        raise AssertionError(f"unexpected signature node: {node!r}")

    def struct_name(self, node: StructType | DictEntryType) -> str:
        override = self.options.struct_names.get(node.signature)
        if override:
            return override
        inner = node.signature[1:-1].translate(_MANGLE)
        if isinstance(node, DictEntryType):
            return f"{self.options.struct_prefix}_entry_{inner}"
        return f"{self.options.struct_prefix}_{inner}"

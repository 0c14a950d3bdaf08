"""sigmarshal: generate C code marshalling native values into D-Bus messages."""

from __future__ import annotations

from . import errors, signature
from .config import MarshalOptions
from .marshal import MarshalResult, generate, marshal

__all__ = [
    "MarshalOptions",
    "MarshalResult",
    "errors",
    "generate",
    "marshal",
    "signature",
]

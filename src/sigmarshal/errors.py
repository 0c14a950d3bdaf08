"""Domain-specific errors for sigmarshal."""

from __future__ import annotations


class SigMarshalError(Exception):
    """Base error for sigmarshal."""


class SignatureError(SigMarshalError):
    """Raised when a D-Bus type signature cannot be parsed."""

    def __init__(self, message: str, index: int) -> None:
        super().__init__(message)
        self.index = index


class UnsupportedTypeError(SigMarshalError):
    """Raised when a well-formed signature contains a type the generator does not marshal."""


class EnvelopeDecodeError(SigMarshalError):
    """Raised when a result envelope cannot be decoded from MessagePack."""


class RecoveryExit(SigMarshalError):
    """Raised when simulated code reaches the caller's error-recovery block."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code

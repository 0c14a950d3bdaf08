"""MessagePack envelope handing a marshal result to an output assembler (v0)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import msgpack

from .errors import EnvelopeDecodeError
from .marshal import MarshalResult

ENVELOPE_VERSION = 0


@dataclass(frozen=True)
class Envelope:
    signature: str
    code: str
    inputs: list[tuple[str, str]]
    locals: list[tuple[str, str]]


def encode_result(result: MarshalResult) -> bytes:
    payload = {
        "v": ENVELOPE_VERSION,
        "signature": result.signature,
        "code": result.code,
        "inputs": [list(p) for p in result.inputs.pairs()],
        "locals": [list(p) for p in result.locals.pairs()],
    }
    return msgpack.packb(payload, use_bin_type=True)


def decode_result(payload: bytes) -> Envelope:
    try:
        obj = msgpack.unpackb(payload, raw=False)
    except Exception as e:  # noqa: BLE001 - boundary decoding error
        raise EnvelopeDecodeError(str(e)) from e

    if not isinstance(obj, dict) or "code" not in obj:
        raise EnvelopeDecodeError("invalid result envelope")
    if obj.get("v") != ENVELOPE_VERSION:
        raise EnvelopeDecodeError(f"unsupported envelope version: {obj.get('v')!r}")

    code = obj.get("code")
    signature = obj.get("signature")
    if not isinstance(code, str) or not isinstance(signature, str):
        raise EnvelopeDecodeError("invalid result envelope")

    return Envelope(
        signature=signature,
        code=code,
        inputs=_vars(obj.get("inputs"), "inputs"),
        locals=_vars(obj.get("locals"), "locals"),
    )


def _vars(raw: Any, what: str) -> list[tuple[str, str]]:
    if not isinstance(raw, list):
        raise EnvelopeDecodeError(f"invalid {what} list")
    out: list[tuple[str, str]] = []
    for entry in raw:
        if not (isinstance(entry, list) and len(entry) == 2 and all(isinstance(x, str) for x in entry)):
            raise EnvelopeDecodeError(f"invalid {what} entry: {entry!r}")
        out.append((entry[0], entry[1]))
    return out

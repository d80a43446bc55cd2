"""JSON text encoding for wire messages.

Wire messages are plain dicts; this module turns them into JSON text and back.
Byte strings are carried as base64 text under their `bytes` key, the same way
the JSON mapping of a protocol message carries them.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from exprlang import WireMessage
from exprlang.errors import WireFormatError


def _encode_bytes(obj: Any) -> Any:
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if k == "bytes" and isinstance(v, (bytes, bytearray)):
                out[k] = base64.b64encode(bytes(v)).decode("ascii")
            else:
                out[k] = _encode_bytes(v)
        return out
    if isinstance(obj, list):
        return [_encode_bytes(v) for v in obj]
    return obj


def _decode_bytes(obj: Any) -> Any:
    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if k == "bytes" and isinstance(v, str):
                try:
                    out[k] = base64.b64decode(v, validate=True)
                except ValueError as err:
                    raise WireFormatError(f"invalid base64 bytes value {v!r}") from err
            else:
                out[k] = _decode_bytes(v)
        return out
    if isinstance(obj, list):
        return [_decode_bytes(v) for v in obj]
    return obj


def dumps(msg: WireMessage, indent: int | None = 2) -> str:
    return json.dumps(_encode_bytes(msg), indent=indent, sort_keys=True)


def loads(text: str) -> WireMessage:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as err:
        raise WireFormatError(f"invalid wire JSON: {err}") from err
    if not isinstance(raw, dict):
        raise WireFormatError(f"wire JSON must hold an object, got {type(raw).__name__}")
    return _decode_bytes(raw)

"""
waterrights_core.codec
----------------------
Reversible encoding for the sensitive numeric fields (volume, price).

    encode(100)      -> "FHE-MTAw"
    decode("FHE-MTAw") -> 100.0
    decode("3.14")   -> 3.14        (legacy / unmarked values)

This is at-rest obfuscation, NOT encryption: there is no key, and anyone who
reads the stored value can decode it. Confidentiality would need a
key-management layer in front of this codec.
"""

from __future__ import annotations
import binascii, math
from typing import Optional, Union

from .constants import ENCODED_MARKER
from .errors import DecodeError
from .logger import get_logger
from .utils import b64d, b64e

log = get_logger("WR.Codec")

Number = Union[int, float]


def _render(value: Number) -> str:
    # Match the number text other clients write: 100 -> "100", not "100.0".
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(float(value))


def _parse(text: str) -> float:
    # float() also takes "nan", "inf" and "1_000"; none of those are amounts.
    if "_" in text:
        raise DecodeError(f"not a number: {text[:32]!r}")
    try:
        value = float(text.strip())
    except ValueError:
        raise DecodeError(f"not a number: {text[:32]!r}")
    if not math.isfinite(value):
        raise DecodeError(f"not a finite number: {text[:32]!r}")
    return value


class EncryptionCodec:
    marker = ENCODED_MARKER

    @staticmethod
    def encode(value: Number) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"cannot encode non-finite value {value!r}")
        return ENCODED_MARKER + b64e(_render(value).encode("utf-8"))

    @staticmethod
    def decode(data: str) -> float:
        if not isinstance(data, str):
            raise DecodeError(f"expected an encoded string, got {type(data).__name__}")
        if not data.startswith(ENCODED_MARKER):
            return _parse(data)
        body = data[len(ENCODED_MARKER):]
        try:
            text = b64d(body).decode("utf-8")
        except (binascii.Error, ValueError):
            raise DecodeError(f"malformed encoded payload: {data[:32]!r}")
        return _parse(text)

    @classmethod
    def try_decode(cls, data) -> Optional[float]:
        try:
            return cls.decode(data)
        except DecodeError as e:
            log.warning(f"[CODEC] skipping undecodable field: {e}")
            return None

    @staticmethod
    def is_encoded(data) -> bool:
        return isinstance(data, str) and data.startswith(ENCODED_MARKER)

"""
waterrights_core.utils
----------------------
Small helpers for record ids, epoch timestamps, base64 and canonical JSON.
"""

from __future__ import annotations
import base64, json, secrets, string, time
from typing import Any

from .constants import RECORD_ID_PREFIX

_BASE36 = string.digits + string.ascii_lowercase


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"), validate=True)


def now_epoch() -> int:
    return int(time.time())


def new_record_id() -> str:
    # water-<epoch ms>-<4 base36 chars>
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{RECORD_ID_PREFIX}{int(time.time() * 1000)}-{suffix}"


def to_json_bytes(obj: Any) -> bytes:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def from_json_bytes(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))

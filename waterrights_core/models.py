# waterrights_core/models.py
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional
import json, math

from .errors import InvalidTransition, TransientReadError
from .utils import to_json_bytes

# Declared by other clients for a future listing-review step. Nothing in this
# package assigns it; stored records carrying it are skipped on read.
RESERVED_STATUSES = frozenset({"pending"})


class RightStatus(str, Enum):
    """available -> traded, once. traded is terminal."""
    AVAILABLE = "available"
    TRADED = "traded"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RightStatus":
        if value is None or value == "":
            return cls.AVAILABLE  # records written before status existed
        if not isinstance(value, str):
            raise TransientReadError(f"status must be a string, got {type(value).__name__}")
        if value in RESERVED_STATUSES:
            raise TransientReadError(f"reserved status {value!r} is not handled")
        try:
            return cls(value)
        except ValueError:
            raise TransientReadError(f"unknown status {value!r}")


@dataclass(frozen=True)
class WaterRight:
    """
    One listing as stored under RECORD_KEY_PREFIX + id.

    encoded_volume / encoded_price are codec strings; use EncryptionCodec
    (or the reveal protocol) to read the numbers.
    """
    id: str
    encoded_volume: str
    encoded_price: str
    timestamp: int
    owner: str
    location: str
    status: RightStatus = RightStatus.AVAILABLE
    new_owner: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.status is RightStatus.AVAILABLE

    def traded(self, new_owner: str) -> "WaterRight":
        if self.status is RightStatus.TRADED:
            raise InvalidTransition(f"{self.id} is already traded")
        return replace(self, status=RightStatus.TRADED, new_owner=new_owner)

    # ---- wire shape ----

    def to_payload(self) -> Dict[str, Any]:
        d = {
            "volume": self.encoded_volume,
            "price": self.encoded_price,
            "timestamp": self.timestamp,
            "owner": self.owner,
            "location": self.location,
            "status": self.status.value,
        }
        if self.new_owner is not None:
            d["newOwner"] = self.new_owner
        return d

    def to_bytes(self) -> bytes:
        return to_json_bytes(self.to_payload())

    @classmethod
    def from_payload(cls, right_id: str, data: Any) -> "WaterRight":
        if not isinstance(data, dict):
            raise TransientReadError(f"record {right_id} is not an object")
        try:
            volume = data["volume"]
            price = data["price"]
            timestamp = data["timestamp"]
        except KeyError as e:
            raise TransientReadError(f"record {right_id} missing field {e}")
        if not isinstance(volume, str) or not isinstance(price, str):
            raise TransientReadError(f"record {right_id} has non-string encoded fields")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)) \
                or (isinstance(timestamp, float) and not math.isfinite(timestamp)):
            raise TransientReadError(f"record {right_id} has bad timestamp {timestamp!r}")
        new_owner = data.get("newOwner")
        return cls(
            id=right_id,
            encoded_volume=volume,
            encoded_price=price,
            timestamp=int(timestamp),
            owner=str(data.get("owner") or ""),
            location=str(data.get("location") or ""),
            status=RightStatus.parse(data.get("status")),
            new_owner=str(new_owner) if new_owner is not None else None,
        )

    @classmethod
    def from_bytes(cls, right_id: str, raw: bytes) -> "WaterRight":
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransientReadError(f"record {right_id} is not valid JSON: {e}")
        return cls.from_payload(right_id, data)

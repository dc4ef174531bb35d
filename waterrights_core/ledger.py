"""
waterrights_core.ledger
-----------------------
User actions against the store: list a new right, trade one, reload the
market. Each action is a short sequential chain of substrate calls and ends
in an ActionResult the caller can render; substrate failures never escape
as exceptions.

Creation writes the record first and the index second (register()). If the
second write fails the record is an orphan until register() is called again;
re-registering is safe because the index skips ids it already holds.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import math

from .codec import EncryptionCodec
from .constants import MSG_NOT_CONNECTED, MSG_NOT_FOUND, MSG_REJECTED, RECORD_KEY_PREFIX
from .errors import InvalidTransition, LedgerError, SubstrateUnavailable, is_rejection
from .index import KeyIndex, KeyIndexManager
from .logger import get_logger
from .models import RightStatus, WaterRight
from .storage.provider import KeyValueSubstrate
from .store import RecordStore
from .utils import new_record_id, now_epoch

log = get_logger("WR.Ledger")


class ActionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ActionResult:
    status: ActionStatus
    message: str
    kind: Optional[str] = None          # error class name on failure
    record_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ActionStatus.SUCCESS

    @classmethod
    def pending(cls, message: str, record_id: Optional[str] = None) -> "ActionResult":
        return cls(ActionStatus.PENDING, message, record_id=record_id)


@dataclass
class ConsistencyReport:
    orphans: List[str] = field(default_factory=list)    # stored, not indexed
    dangling: List[str] = field(default_factory=list)   # indexed, not readable

    @property
    def clean(self) -> bool:
        return not self.orphans and not self.dangling


def _failure(prefix: str, exc: BaseException, record_id: Optional[str] = None) -> ActionResult:
    if is_rejection(exc):
        return ActionResult(ActionStatus.ERROR, MSG_REJECTED, kind="SignerRejected", record_id=record_id)
    return ActionResult(ActionStatus.ERROR, f"{prefix}: {str(exc) or 'Unknown error'}",
                        kind=type(exc).__name__, record_id=record_id)


class RightsLedger:
    def __init__(self, substrate: KeyValueSubstrate, index: Optional[KeyIndex] = None,
                 codec=EncryptionCodec):
        self.substrate = substrate
        self.index = index if index is not None else KeyIndexManager(substrate)
        self.store = RecordStore(substrate)
        self.codec = codec

    def register(self, record: WaterRight) -> None:
        """Write the record, then index it. Safe to call again after a failure."""
        self.store.put(record)
        self.index.append(record.id)

    def create(self, location: str, volume: float, price: float, owner: Optional[str]) -> ActionResult:
        if not owner:
            return ActionResult(ActionStatus.ERROR, MSG_NOT_CONNECTED, kind="NotConnected")
        location = (location or "").strip()
        if not location:
            return ActionResult(ActionStatus.ERROR, "Submission failed: location is required", kind="ValueError")
        for name, value in (("volume", volume), ("price", price)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value < 0:
                return ActionResult(ActionStatus.ERROR,
                                    f"Submission failed: {name} must be a non-negative number",
                                    kind="ValueError")

        record = WaterRight(
            id=new_record_id(),
            encoded_volume=self.codec.encode(volume),
            encoded_price=self.codec.encode(price),
            timestamp=now_epoch(),
            owner=owner,
            location=location,
            status=RightStatus.AVAILABLE,
        )
        try:
            self.register(record)
        except LedgerError as e:
            log.error(f"[LEDGER] create {record.id} failed: {e}")
            return _failure("Submission failed", e, record.id)
        log.info(f"[LEDGER] listed {record.id} at {location!r}")
        return ActionResult(ActionStatus.SUCCESS, "Water rights submitted", record_id=record.id)

    def trade(self, right_id: str, new_owner: Optional[str]) -> ActionResult:
        if not new_owner:
            return ActionResult(ActionStatus.ERROR, MSG_NOT_CONNECTED, kind="NotConnected", record_id=right_id)
        if not self.substrate.is_available():
            return ActionResult(ActionStatus.ERROR, "Trade failed: substrate unavailable",
                                kind="SubstrateUnavailable", record_id=right_id)
        current = self.store.get(right_id)
        if current is None:
            return ActionResult(ActionStatus.ERROR, f"Trade failed: {MSG_NOT_FOUND}",
                                kind="NotFound", record_id=right_id)
        try:
            self.store.put(current.traded(new_owner))
        except InvalidTransition as e:
            return ActionResult(ActionStatus.ERROR, f"Trade failed: {e}",
                                kind="InvalidTransition", record_id=right_id)
        except LedgerError as e:
            log.error(f"[LEDGER] trade {right_id} failed: {e}")
            return _failure("Trade failed", e, right_id)
        log.info(f"[LEDGER] traded {right_id} to {new_owner}")
        return ActionResult(ActionStatus.SUCCESS, "Water rights traded", record_id=right_id)

    def refresh(self) -> List[WaterRight]:
        return self.store.load_all(self.index)

    def audit(self) -> ConsistencyReport:
        """
        Compare stored record keys with the index. Needs a substrate that can
        scan keys (list_keys); others report dangling ids only.
        """
        indexed = self.index.load()
        dangling = [i for i in indexed if self.store.get(i) is None]
        orphans: List[str] = []
        list_keys = getattr(self.substrate, "list_keys", None)
        if list_keys is not None:
            known = set(indexed)
            try:
                stored = [k[len(RECORD_KEY_PREFIX):] for k in list_keys(RECORD_KEY_PREFIX)]
            except SubstrateUnavailable as e:
                log.error(f"[LEDGER] audit key scan failed: {e}")
                stored = []
            orphans = [i for i in stored if i not in known]
        report = ConsistencyReport(orphans=orphans, dangling=dangling)
        if not report.clean:
            log.warning(f"[LEDGER] audit: {len(orphans)} orphan(s), {len(dangling)} dangling id(s)")
        return report

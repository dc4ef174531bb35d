# waterrights_core/store.py
from __future__ import annotations
from typing import List, Optional

from .constants import RECORD_KEY_PREFIX
from .errors import SubstrateUnavailable, TransientReadError
from .index import KeyIndex
from .logger import get_logger
from .models import WaterRight
from .storage.provider import KeyValueSubstrate

log = get_logger("WR.Store")


def record_key(right_id: str) -> str:
    return f"{RECORD_KEY_PREFIX}{right_id}"


class RecordStore:
    """
    Reads and writes individual records. Knows nothing about the index:
    callers that create records must also append to a KeyIndex.
    """

    def __init__(self, substrate: KeyValueSubstrate):
        self.substrate = substrate

    def get(self, right_id: str) -> Optional[WaterRight]:
        try:
            raw = self.substrate.get_data(record_key(right_id))
        except SubstrateUnavailable as e:
            log.error(f"[STORE] error loading {right_id}: {e}")
            return None
        if not raw:
            return None
        try:
            return WaterRight.from_bytes(right_id, raw)
        except TransientReadError as e:
            log.error(f"[STORE] error parsing {right_id}: {e}")
            return None

    def put(self, record: WaterRight) -> str:
        """Whole-value replace. Returns the substrate confirmation."""
        confirmation = self.substrate.set_data(record_key(record.id), record.to_bytes())
        log.info(f"[STORE] wrote {record.id} status={record.status.value}")
        return confirmation

    def load_all(self, index: KeyIndex) -> List[WaterRight]:
        """Every indexed record that can be read, newest first."""
        if not self.substrate.is_available():
            log.warning("[STORE] substrate unavailable, nothing loaded")
            return []
        rights = []
        seen = set()
        for right_id in index.load():
            if right_id in seen:
                continue
            seen.add(right_id)
            rec = self.get(right_id)
            if rec is None:
                log.warning(f"[STORE] skipping dangling id {right_id}")
                continue
            rights.append(rec)
        rights.sort(key=lambda r: r.timestamp, reverse=True)
        return rights

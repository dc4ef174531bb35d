"""
waterrights_core.index
----------------------
The key index: one JSON list of record ids stored under INDEX_KEY. It is the
only way to enumerate records.

The index and the records are written independently, so the substrate can
hold orphan records (written, never indexed) and dangling ids (indexed,
record missing). Readers tolerate both.

append() is read-modify-write on the whole list. Two clients appending at the
same time race and one id can be lost (last writer wins). KeyIndex is the seam
for replacing this with a transactional implementation.
"""

from __future__ import annotations
import json
from typing import List

from .constants import INDEX_KEY
from .errors import SubstrateUnavailable
from .logger import get_logger
from .storage.provider import KeyValueSubstrate
from .utils import to_json_bytes

log = get_logger("WR.Index")


class KeyIndex:
    """Interface every index implementation provides to RecordStore and RightsLedger."""

    def load(self) -> List[str]:
        raise NotImplementedError

    def append(self, right_id: str) -> None:
        raise NotImplementedError


class KeyIndexManager(KeyIndex):
    def __init__(self, substrate: KeyValueSubstrate, key: str = INDEX_KEY):
        self.substrate = substrate
        self.key = key

    def _read(self) -> List[str]:
        """
        Current ids. Raises SubstrateUnavailable when the substrate cannot be
        read; an unparseable value is logged and read as empty.
        """
        if not self.substrate.is_available():
            raise SubstrateUnavailable("substrate unavailable")
        raw = self.substrate.get_data(self.key)
        if not raw:
            return []
        try:
            text = raw.decode("utf-8")
            if text.strip() == "":
                return []
            ids = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            log.error(f"[INDEX] error parsing {self.key}: {e}")
            return []
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            log.error(f"[INDEX] {self.key} is not a list of ids, ignoring")
            return []
        return ids

    def load(self) -> List[str]:
        try:
            return self._read()
        except SubstrateUnavailable as e:
            log.warning(f"[INDEX] {e}, returning empty index")
            return []

    def append(self, right_id: str) -> None:
        """
        Add `right_id` to the index. Re-appending an id already present is a
        no-op, so a failed registration can simply be retried.

        Refuses to write (SubstrateUnavailable) when the current index cannot
        be read, rather than replacing it with a one-element list. Write
        errors (WriteFailed, SignerRejected) propagate.
        """
        ids = self._read()
        if right_id in ids:
            log.info(f"[INDEX] {right_id} already indexed")
            return
        ids.append(right_id)
        self.substrate.set_data(self.key, to_json_bytes(ids))
        log.info(f"[INDEX] appended {right_id} (size={len(ids)})")

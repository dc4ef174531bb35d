"""
WaterRights Core Package
========================
Indexed encoded-record store behind the water-rights marketplace.

Provides:
- Reversible field codec for volume / price (at-rest obfuscation only)
- Key index + record store over a remote key-value substrate
- Signed-attestation reveal protocol
- Pure aggregation over the loaded market
"""

from .codec import EncryptionCodec
from .index import KeyIndex, KeyIndexManager
from .models import RightStatus, WaterRight
from .store import RecordStore
from .ledger import ActionResult, RightsLedger
from .reveal import AttestationParams, RevealProtocol, RevealState
from .aggregator import MarketplaceAggregator

__all__ = [
    "EncryptionCodec",
    "KeyIndex",
    "KeyIndexManager",
    "RightStatus",
    "WaterRight",
    "RecordStore",
    "ActionResult",
    "RightsLedger",
    "AttestationParams",
    "RevealProtocol",
    "RevealState",
    "MarketplaceAggregator",
]

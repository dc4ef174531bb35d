"""
waterrights_core.config
-----------------------
Runtime settings. Resolution order for every field: explicit dict override,
then WATERRIGHTS_* environment variable, then the default below.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import os

from .constants import DEFAULT_DURATION_DAYS


@dataclass
class LedgerConfig:
    substrate: str = "memory"            # memory | sqlite | http
    db_path: str = "db/water_rights.db"
    rpc_url: str = "http://localhost:8545"
    rpc_timeout: float = 10.0            # seconds, per remote call
    signer_timeout: float = 120.0        # seconds, wait for a signature
    reveal_delay: float = 0.0            # seconds, simulated decode latency
    contract_address: str = ""
    chain_id: int = 0
    duration_days: int = DEFAULT_DURATION_DAYS

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None) -> "LedgerConfig":
        overrides = overrides or {}

        def pick(field_name: str, env: str, default, cast=str):
            if overrides.get(field_name) is not None:
                return cast(overrides[field_name])
            raw = os.getenv(env)
            if raw is None or raw == "":
                return default
            try:
                return cast(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env}: {raw!r}")

        return cls(
            substrate=pick("substrate", "WATERRIGHTS_SUBSTRATE", cls.substrate).lower(),
            db_path=pick("db_path", "WATERRIGHTS_DB_PATH", cls.db_path),
            rpc_url=pick("rpc_url", "WATERRIGHTS_RPC_URL", cls.rpc_url),
            rpc_timeout=pick("rpc_timeout", "WATERRIGHTS_RPC_TIMEOUT", cls.rpc_timeout, float),
            signer_timeout=pick("signer_timeout", "WATERRIGHTS_SIGNER_TIMEOUT", cls.signer_timeout, float),
            reveal_delay=pick("reveal_delay", "WATERRIGHTS_REVEAL_DELAY", cls.reveal_delay, float),
            contract_address=pick("contract_address", "WATERRIGHTS_CONTRACT_ADDRESS", cls.contract_address),
            chain_id=pick("chain_id", "WATERRIGHTS_CHAIN_ID", cls.chain_id, _parse_chain_id),
            duration_days=pick("duration_days", "WATERRIGHTS_DURATION_DAYS", cls.duration_days, int),
        )


def _parse_chain_id(value) -> int:
    # wallets report chain ids as hex strings ("0xaa36a7")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)

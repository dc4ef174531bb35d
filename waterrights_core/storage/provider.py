# waterrights_core/storage/provider.py
from __future__ import annotations


class KeyValueSubstrate:
    """
    Remote key-value substrate contract.

    Values are opaque bytes. get_data() returns b"" for an absent key.
    set_data() replaces the whole value and returns a confirmation string
    once the write is accepted; it raises WriteFailed or SignerRejected
    otherwise. Reads on an unreachable substrate raise SubstrateUnavailable.
    """
    name: str = "base"

    def is_available(self) -> bool:
        raise NotImplementedError

    def get_data(self, key: str) -> bytes:
        raise NotImplementedError

    def set_data(self, key: str, value: bytes) -> str:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok" if self.is_available() else "unavailable", "substrate": self.name}

    def close(self) -> None:
        return

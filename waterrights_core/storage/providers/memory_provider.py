from typing import Dict
from waterrights_core.errors import SubstrateUnavailable
from waterrights_core.storage.provider import KeyValueSubstrate


class InMemorySubstrate(KeyValueSubstrate):
    name = "memory"

    def __init__(self, available: bool = True):
        self.data: Dict[str, bytes] = {}
        self.available = available
        self.writes = 0

    def is_available(self) -> bool:
        return self.available

    def get_data(self, key: str) -> bytes:
        if not self.available:
            raise SubstrateUnavailable("memory substrate is offline")
        return self.data.get(key, b"")

    def set_data(self, key: str, value: bytes) -> str:
        if not self.available:
            raise SubstrateUnavailable("memory substrate is offline")
        self.data[key] = bytes(value)
        self.writes += 1
        return f"mem-{self.writes}"

    def list_keys(self, prefix: str = ""):
        return sorted(k for k in self.data if k.startswith(prefix))

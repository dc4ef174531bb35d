# waterrights_core/storage/__init__.py

from .provider import KeyValueSubstrate
from .providers.memory_provider import InMemorySubstrate
from .providers.sqlite_provider import SQLiteSubstrate
from .providers.http_provider import HTTPSubstrate
from waterrights_core.config import LedgerConfig


def load_substrate(config: LedgerConfig | dict | None = None) -> KeyValueSubstrate:
    """
    Factory resolver for the key-value substrate.

        - memory (default)
        - sqlite
        - http   (JSON-RPC gateway)
    """
    if not isinstance(config, LedgerConfig):
        config = LedgerConfig.from_env(config)

    if config.substrate == "memory":
        return InMemorySubstrate()

    if config.substrate == "sqlite":
        return SQLiteSubstrate(config.db_path)

    if config.substrate == "http":
        return HTTPSubstrate(config.rpc_url, timeout=config.rpc_timeout)

    raise ValueError(f"Unknown substrate: {config.substrate}")


__all__ = [
    "KeyValueSubstrate",
    "InMemorySubstrate",
    "SQLiteSubstrate",
    "HTTPSubstrate",
    "load_substrate",
]

from __future__ import annotations
from typing import List
import sqlite3, os
from waterrights_core.errors import SubstrateUnavailable, WriteFailed
from waterrights_core.storage.provider import KeyValueSubstrate
from waterrights_core.utils import now_epoch


class SQLiteSubstrate(KeyValueSubstrate):
    """Local stand-in for the remote substrate; one row per key, whole-value replace."""
    name = "sqlite"

    def __init__(self, path="db/water_rights.db"):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.path = path
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._init()

    def _init(self) -> None:
        self.db.execute("""CREATE TABLE IF NOT EXISTS kv(
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL,
            updated_at INTEGER NOT NULL
        )""")
        self.db.commit()

    def is_available(self) -> bool:
        try:
            self.db.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False

    def get_data(self, key: str) -> bytes:
        try:
            cur = self.db.execute("SELECT value FROM kv WHERE key=?", (key,))
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise SubstrateUnavailable(f"sqlite read failed: {e}")
        if not row:
            return b""
        return bytes(row[0])

    def set_data(self, key: str, value: bytes) -> str:
        try:
            cur = self.db.execute(
                "INSERT INTO kv(key,value,updated_at) VALUES(?,?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (key, sqlite3.Binary(bytes(value)), now_epoch())
            )
            self.db.commit()
        except sqlite3.Error as e:
            raise WriteFailed(f"sqlite write failed: {e}")
        return f"sqlite-{cur.lastrowid}"

    def list_keys(self, prefix: str = "") -> List[str]:
        """Raw key scan. Used by consistency audits to find orphan records."""
        try:
            cur = self.db.execute(
                "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix)
            )
            return [r[0] for r in cur.fetchall()]
        except sqlite3.Error as e:
            raise SubstrateUnavailable(f"sqlite key scan failed: {e}")

    def close(self):
        self.db.close()

import pytest
import requests
from waterrights_core.config import LedgerConfig
from waterrights_core.errors import SignerRejected, SubstrateUnavailable, WriteFailed
from waterrights_core.index import KeyIndexManager
from waterrights_core.ledger import RightsLedger
from waterrights_core.storage import (
    HTTPSubstrate, InMemorySubstrate, SQLiteSubstrate, load_substrate,
)
from waterrights_core.store import RecordStore


def test_sqlite_roundtrip(tmp_path):
    s = SQLiteSubstrate(str(tmp_path / "kv.db"))
    assert s.is_available()
    assert s.get_data("missing") == b""
    s.set_data("k", b"v1")
    s.set_data("k", b"v2")  # whole-value replace
    assert s.get_data("k") == b"v2"
    assert s.healthz() == {"status": "ok", "substrate": "sqlite"}


def test_sqlite_schema_exists(tmp_path):
    s = SQLiteSubstrate(str(tmp_path / "kv.db"))
    cols = [row[1] for row in s.db.execute("PRAGMA table_info(kv)").fetchall()]
    for col in ("key", "value", "updated_at"):
        assert col in cols


def test_sqlite_persists_across_connections(tmp_path):
    path = str(tmp_path / "kv.db")
    ledger = RightsLedger(SQLiteSubstrate(path))
    rid = ledger.create("Basin A", 100, 0.01, owner="0xa").record_id
    ledger.substrate.close()

    reopened = RightsLedger(SQLiteSubstrate(path))
    assert [r.id for r in reopened.refresh()] == [rid]
    assert reopened.substrate.list_keys("water_right_") == [f"water_right_{rid}"]


def test_memory_offline_raises():
    s = InMemorySubstrate(available=False)
    assert s.healthz()["status"] == "unavailable"
    with pytest.raises(SubstrateUnavailable):
        s.get_data("k")


class FakeResponse:
    def __init__(self, body, status=200):
        self._body = body
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._body


@pytest.fixture
def rpc(monkeypatch):
    """Route HTTPSubstrate calls into a dict-backed fake gateway."""
    store = {}
    calls = []
    behaviour = {"error": None, "down": False, "raw": {}}

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((json["method"], json["params"], timeout, headers))
        if behaviour["down"]:
            raise requests.exceptions.ConnectionError("connection refused")
        if json["method"] == "getData" and json["params"][0] in behaviour["raw"]:
            return FakeResponse(behaviour["raw"][json["params"][0]])
        if behaviour["error"]:
            return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "error": behaviour["error"]})
        method, params = json["method"], json["params"]
        if method == "isAvailable":
            result = True
        elif method == "getData":
            result = store.get(params[0], "0x")
        else:
            store[params[0]] = params[1]
            result = "0xtxhash"
        return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "result": result})

    monkeypatch.setattr(requests, "post", fake_post)
    return store, calls, behaviour


def test_http_roundtrip_hex_encoded(rpc):
    store, calls, _ = rpc
    s = HTTPSubstrate("http://gw.local/", timeout=2.5)
    assert s.is_available()
    assert s.set_data("k", b"hi") == "0xtxhash"
    assert store["k"] == "0x6869"
    assert s.get_data("k") == b"hi"
    assert s.get_data("missing") == b""
    assert all(c[2] == 2.5 for c in calls)


def test_http_grant_header(rpc):
    _, calls, _ = rpc
    s = HTTPSubstrate("http://gw.local", grant="tok")
    s.get_data("k")
    assert calls[-1][3]["Authorization"] == "Bearer tok"


def test_http_down_means_unavailable(rpc):
    _, _, behaviour = rpc
    behaviour["down"] = True
    s = HTTPSubstrate("http://gw.local")
    assert s.is_available() is False
    with pytest.raises(SubstrateUnavailable):
        s.get_data("k")
    assert RightsLedger(s).refresh() == []


def test_http_write_errors_classified(rpc):
    _, _, behaviour = rpc
    s = HTTPSubstrate("http://gw.local")
    behaviour["error"] = {"code": 4001, "message": "User rejected the request."}
    with pytest.raises(SignerRejected):
        s.set_data("k", b"v")
    behaviour["error"] = {"code": -32000, "message": "execution reverted"}
    with pytest.raises(WriteFailed):
        s.set_data("k", b"v")


def test_load_substrate_modes(tmp_path, monkeypatch):
    monkeypatch.delenv("WATERRIGHTS_SUBSTRATE", raising=False)
    assert isinstance(load_substrate(), InMemorySubstrate)

    monkeypatch.setenv("WATERRIGHTS_SUBSTRATE", "sqlite")
    monkeypatch.setenv("WATERRIGHTS_DB_PATH", str(tmp_path / "env.db"))
    assert isinstance(load_substrate(), SQLiteSubstrate)

    assert isinstance(load_substrate({"substrate": "http"}), HTTPSubstrate)
    assert isinstance(load_substrate(LedgerConfig(substrate="memory")), InMemorySubstrate)

    with pytest.raises(ValueError):
        load_substrate({"substrate": "redis"})


@pytest.mark.parametrize("reply", [
    {"jsonrpc": "2.0", "id": 1, "result": 12345},
    {"jsonrpc": "2.0", "id": 1, "result": ["0x00"]},
    None,
    ["0x7b7d"],
    {"jsonrpc": "2.0", "id": 1, "error": "boom"},
])
def test_http_malformed_reply_does_not_break_load(rpc, reply):
    _, _, behaviour = rpc
    s = HTTPSubstrate("http://gw.local")
    s.set_data("water_rights_keys", b'["water-1-aaaa"]')
    behaviour["raw"]["water_right_water-1-aaaa"] = reply
    assert KeyIndexManager(s).load() == ["water-1-aaaa"]
    with pytest.raises(SubstrateUnavailable):
        s.get_data("water_right_water-1-aaaa")
    assert RecordStore(s).load_all(KeyIndexManager(s)) == []


def test_sqlite_key_scan_error_is_unavailable(tmp_path):
    s = SQLiteSubstrate(str(tmp_path / "kv.db"))
    s.close()
    with pytest.raises(SubstrateUnavailable):
        s.list_keys("water_right_")


def test_audit_survives_failed_key_scan(tmp_path):
    s = SQLiteSubstrate(str(tmp_path / "kv.db"))
    ledger = RightsLedger(s)
    ledger.create("Basin A", 1, 1, owner="0xa")

    def broken_scan(prefix=""):
        raise SubstrateUnavailable("disk I/O error")

    s.list_keys = broken_scan
    report = ledger.audit()
    assert report.orphans == [] and report.dangling == []

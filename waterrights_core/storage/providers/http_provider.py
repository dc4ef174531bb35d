# waterrights_core/storage/providers/http_provider.py
import requests
from typing import Any, List, Optional
from waterrights_core.errors import SignerRejected, SubstrateUnavailable, WriteFailed, is_rejection
from waterrights_core.logger import get_logger
from waterrights_core.storage.provider import KeyValueSubstrate

log = get_logger("WR.Substrate.HTTP")


class RPCError(Exception):
    """RPC call answered with an error object."""
    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC Error {code}: {message}")


class HTTPSubstrate(KeyValueSubstrate):
    """
    JSON-RPC 2.0 client for a remote key-value gateway.

    Methods on the wire:
      isAvailable()            -> bool
      getData(key)             -> "0x<hex>"  ("0x" when absent)
      setData(key, "0x<hex>")  -> confirmation (tx hash)

    Every call is bounded by `timeout` seconds.
    """
    name = "http"

    def __init__(self, base_url: str, timeout: float = 10.0, grant: Optional[str] = None):
        self.url = base_url.rstrip("/")
        self.timeout = timeout
        self._grant = grant
        self._id = 0

    def set_grant(self, grant: str):
        self._grant = grant

    def _call(self, method: str, params: List[Any] = None) -> Any:
        self._id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._id,
            "method": method,
            "params": params or [],
        }
        headers = {"Content-Type": "application/json"}
        if self._grant:
            headers["Authorization"] = f"Bearer {self._grant}"

        log.debug(f"[RPC] → {self.url} | method={method}")
        try:
            res = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            res.raise_for_status()
            body = res.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise SubstrateUnavailable(f"{method} failed: {e}")

        if not isinstance(body, dict):
            raise SubstrateUnavailable(f"{method} returned a non-object reply")
        if body.get("error"):
            err = body["error"]
            if not isinstance(err, dict):
                raise RPCError(-1, str(err))
            raise RPCError(err.get("code", -1), err.get("message", "unknown error"))
        return body.get("result")

    def is_available(self) -> bool:
        try:
            return bool(self._call("isAvailable"))
        except (SubstrateUnavailable, RPCError) as e:
            log.warning(f"[RPC] liveness probe failed: {e}")
            return False

    def get_data(self, key: str) -> bytes:
        try:
            result = self._call("getData", [key])
        except RPCError as e:
            raise SubstrateUnavailable(str(e))
        if not result:
            return b""
        if not isinstance(result, str):
            raise SubstrateUnavailable(f"getData({key}) returned {type(result).__name__}, expected hex string")
        text = result[2:] if result.startswith("0x") else result
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise SubstrateUnavailable(f"getData({key}) returned non-hex data")

    def set_data(self, key: str, value: bytes) -> str:
        try:
            result = self._call("setData", [key, "0x" + bytes(value).hex()])
        except (RPCError, SubstrateUnavailable) as e:
            if is_rejection(e):
                raise SignerRejected(str(e))
            raise WriteFailed(str(e))
        log.info(f"[RPC] setData {key} confirmed {result}")
        return str(result)

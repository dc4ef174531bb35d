"""
waterrights_core.reveal
-----------------------
Signature-gated reveal of a record's volume and price.

    IDLE -> AWAITING_SIGNATURE -> DECRYPTING -> REVEALED
                               +-> FAILED

The user signs a five-line attestation naming an ephemeral public key, the
contract, the chain and a validity window. Only after the signer returns do
we decode the fields. Revealed numbers live on the protocol object only and
are dropped by clear().
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import secrets, time

from .codec import EncryptionCodec
from .config import LedgerConfig
from .constants import DEFAULT_DURATION_DAYS, PUBLIC_KEY_HEX_LEN
from .crypto import Signer
from .errors import DecodeError, is_rejection
from .logger import get_logger
from .utils import now_epoch

log = get_logger("WR.Reveal")


class RevealState(str, Enum):
    IDLE = "idle"
    AWAITING_SIGNATURE = "awaiting_signature"
    DECRYPTING = "decrypting"
    REVEALED = "revealed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RevealState.REVEALED, RevealState.FAILED)


# failure classifications carried on RevealResult.error_kind
SIGNER_REJECTED = "SignerRejected"
SIGNER_TIMEOUT = "SignerTimeout"
SIGNER_ERROR = "SignerError"
DECODE_ERROR = "DecodeError"


def generate_public_key() -> str:
    return "0x" + secrets.token_hex(PUBLIC_KEY_HEX_LEN // 2)


@dataclass(frozen=True)
class AttestationParams:
    public_key: str
    contract_address: str
    chain_id: int
    start_timestamp: int
    duration_days: int = DEFAULT_DURATION_DAYS

    def message(self) -> str:
        # Field order and spelling are what the user signs; keep stable.
        return "\n".join([
            f"publickey:{self.public_key}",
            f"contractAddresses:{self.contract_address}",
            f"contractsChainId:{self.chain_id}",
            f"startTimestamp:{self.start_timestamp}",
            f"durationDays:{self.duration_days}",
        ])

    def expires_at(self) -> int:
        return self.start_timestamp + self.duration_days * 86400

    @classmethod
    def fresh(cls, contract_address: str, chain_id: int,
              duration_days: int = DEFAULT_DURATION_DAYS) -> "AttestationParams":
        return cls(
            public_key=generate_public_key(),
            contract_address=contract_address,
            chain_id=chain_id,
            start_timestamp=now_epoch(),
            duration_days=duration_days,
        )

    @classmethod
    def from_config(cls, config: LedgerConfig) -> "AttestationParams":
        return cls.fresh(config.contract_address, config.chain_id, config.duration_days)


@dataclass
class RevealResult:
    state: RevealState
    volume: Optional[float] = None
    price: Optional[float] = None
    signature: Optional[str] = None
    error_kind: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.state is RevealState.REVEALED


class RevealProtocol:
    def __init__(self, signer: Signer, params: AttestationParams, codec=EncryptionCodec,
                 signer_timeout: float = 120.0, delay: float = 0.0,
                 on_state: Optional[Callable[[RevealState], None]] = None):
        self.signer = signer
        self.params = params
        self.codec = codec
        self.signer_timeout = signer_timeout
        self.delay = delay
        self.on_state = on_state
        self._state = RevealState.IDLE
        self.volume: Optional[float] = None
        self.price: Optional[float] = None
        self.signature: Optional[str] = None

    @classmethod
    def from_config(cls, signer: Signer, config: LedgerConfig, **kw) -> "RevealProtocol":
        return cls(signer, AttestationParams.from_config(config),
                   signer_timeout=config.signer_timeout, delay=config.reveal_delay, **kw)

    @property
    def state(self) -> RevealState:
        return self._state

    @property
    def revealed(self) -> bool:
        return self._state is RevealState.REVEALED

    def _enter(self, state: RevealState) -> None:
        log.debug(f"[REVEAL] {self._state.value} -> {state.value}")
        self._state = state
        if self.on_state:
            self.on_state(state)

    def _fail(self, kind: str, message: str) -> RevealResult:
        self._enter(RevealState.FAILED)
        log.warning(f"[REVEAL] failed ({kind}): {message}")
        return RevealResult(RevealState.FAILED, error_kind=kind, message=message)

    def _await_signature(self, message: str) -> str:
        pool = ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(self.signer.sign_message, message)
            return future.result(timeout=self.signer_timeout)
        finally:
            # never block on a signer that is still waiting for the user
            pool.shutdown(wait=False, cancel_futures=True)

    def reveal(self, encoded_volume: str, encoded_price: str) -> RevealResult:
        if self._state is not RevealState.IDLE:
            raise RuntimeError(f"reveal already {self._state.value}; call clear() first")

        self._enter(RevealState.AWAITING_SIGNATURE)
        try:
            signature = self._await_signature(self.params.message())
        except FutureTimeout:
            return self._fail(SIGNER_TIMEOUT, f"no signature within {self.signer_timeout}s")
        except Exception as e:
            if is_rejection(e):
                return self._fail(SIGNER_REJECTED, "Signature rejected by user")
            return self._fail(SIGNER_ERROR, f"Decryption failed: {e}")

        self.signature = signature
        self._enter(RevealState.DECRYPTING)
        if self.delay > 0:
            time.sleep(self.delay)
        try:
            volume = self.codec.decode(encoded_volume)
            price = self.codec.decode(encoded_price)
        except DecodeError as e:
            return self._fail(DECODE_ERROR, str(e))

        self.volume, self.price = volume, price
        self._enter(RevealState.REVEALED)
        return RevealResult(RevealState.REVEALED, volume=volume, price=price, signature=signature)

    def clear(self) -> None:
        """Forget revealed values and return to IDLE (closing the detail view)."""
        self.volume = None
        self.price = None
        self.signature = None
        if self._state is not RevealState.IDLE:
            self._enter(RevealState.IDLE)

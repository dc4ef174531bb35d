"""
waterrights_core.crypto
-----------------------
Signers for the reveal attestation.

- Signer: interface the reveal protocol waits on (a wallet in production)
- Ed25519Signer: local signer backed by `cryptography`, for services and tests
- verify_attestation(): check a hex signature against the attestation text

Signatures and keys travel as 0x-prefixed hex, the way wallets report them.
"""

from __future__ import annotations
from typing import Optional, Tuple
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import SignerRejected


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


def _unhex(s: str) -> bytes:
    return bytes.fromhex(s[2:] if s.startswith("0x") else s)


# --------- Ed25519 (sign/verify) ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()


def ed25519_sign(priv_raw: bytes, data: bytes) -> bytes:
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
    return sk.sign(data)


def ed25519_verify(pub_raw: bytes, sig: bytes, data: bytes) -> bool:
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(pub_raw).verify(sig, data)
        return True
    except (InvalidSignature, ValueError):
        return False


def verify_attestation(pub_hex: str, signature_hex: str, message: str) -> bool:
    try:
        pub, sig = _unhex(pub_hex), _unhex(signature_hex)
    except ValueError:
        return False
    return ed25519_verify(pub, sig, message.encode("utf-8"))


# --------- Signers ----------
class Signer:
    """Signs the exact attestation text. Raises SignerRejected when the user declines."""

    def sign_message(self, message: str) -> str:
        raise NotImplementedError


class Ed25519Signer(Signer):
    def __init__(self, priv_raw: Optional[bytes] = None):
        if priv_raw is None:
            priv_raw, _ = ed25519_generate()
        self._priv = priv_raw
        sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
        self.public_key_hex = _hex(sk.public_key().public_bytes_raw())

    def sign_message(self, message: str) -> str:
        return _hex(ed25519_sign(self._priv, message.encode("utf-8")))


class RejectingSigner(Signer):
    """Declines every request, like a user pressing "reject" in the wallet."""

    def sign_message(self, message: str) -> str:
        raise SignerRejected("User rejected the request.")

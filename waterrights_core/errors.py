from __future__ import annotations


class LedgerError(Exception):
    pass


class TransientReadError(LedgerError):
    """Stored index or record value could not be read back."""


class SubstrateUnavailable(LedgerError):
    pass


class DecodeError(LedgerError, ValueError):
    pass


class SignerRejected(LedgerError):
    """The user (or the external signer) declined a write or signature."""


class WriteFailed(LedgerError):
    pass


class InvalidTransition(LedgerError):
    pass


def is_rejection(exc: BaseException) -> bool:
    """Wallets report rejection through the error text rather than a type."""
    if isinstance(exc, SignerRejected):
        return True
    return "user rejected" in str(exc).lower()

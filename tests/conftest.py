import pytest
from waterrights_core.errors import SignerRejected, WriteFailed
from waterrights_core.ledger import RightsLedger
from waterrights_core.storage import InMemorySubstrate


class FlakySubstrate(InMemorySubstrate):
    """In-memory substrate that refuses writes to selected keys."""

    def __init__(self, fail_keys=(), reject=False):
        super().__init__()
        self.fail_keys = set(fail_keys)
        self.reject = reject

    def set_data(self, key, value):
        if key in self.fail_keys:
            if self.reject:
                raise SignerRejected("MetaMask Tx Signature: User rejected transaction")
            raise WriteFailed("execution reverted")
        return super().set_data(key, value)


@pytest.fixture
def substrate():
    return InMemorySubstrate()


@pytest.fixture
def ledger(substrate):
    return RightsLedger(substrate)

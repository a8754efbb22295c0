import pytest

from nija_wallet.vault.config import KdfParams
from nija_wallet.vault.crypto import CryptoProvider
from nija_wallet.vault.record import seal_secret

TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
RECIPIENT = "0x70997970c51812dc3a010c7d01b50e20d17dc79c"

# Minimum allowed rounds, for tests that do not exercise the default KDF.
FAST_KDF = KdfParams(iterations=1000)


class CountingRandom:
    """Deterministic random source: call N returns N repeated ``size`` times."""

    def __init__(self):
        self.calls = 0

    def __call__(self, size: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * size


@pytest.fixture
def counting_provider():
    return CryptoProvider(random_source=CountingRandom())


@pytest.fixture(scope="session")
def mnemonic_vault():
    """Vault sealing the test mnemonic under 'correctpw' with default KDF."""
    return seal_secret(TEST_MNEMONIC, "correctpw")


@pytest.fixture
def eth_request():
    return {
        "chain": "ethereum",
        "chain_id": 1,
        "nonce": 0,
        "to": RECIPIENT,
        "value": 10**18,
        "gas": 21000,
        "max_fee_per_gas": 30 * 10**9,
        "max_priority_fee_per_gas": 10**9,
    }

"""
Tests for the vault crypto core.

Tests cover:
- PBKDF2 key derivation determinism and parameters
- AES-GCM round-trip, including empty plaintext
- Wrong key and tamper detection on ciphertext, IV and tag
- Fresh IV on every encrypt call
- Injected random sources and unavailable primitives
"""
import os

import pytest
from cryptography.exceptions import UnsupportedAlgorithm

from nija_wallet.exceptions import AuthenticationFailed, CryptoUnavailable, FormatError
from nija_wallet.vault import crypto
from nija_wallet.vault.config import KdfParams
from nija_wallet.vault.crypto import CryptoProvider, IV_SIZE, TAG_SIZE

from .conftest import CountingRandom, FAST_KDF


# --- Test Fixtures ---

@pytest.fixture
def provider():
    return CryptoProvider()


@pytest.fixture
def salt():
    return bytes(range(16))


@pytest.fixture
def key(provider, salt):
    return provider.derive_key("correctpw", salt, FAST_KDF)


def _flip(data: bytes, index: int, bit: int = 0) -> bytes:
    mutated = bytearray(data)
    mutated[index] ^= 1 << bit
    return bytes(mutated)


# --- Test Key Derivation ---

class TestKeyDerivation:
    """Tests for password key derivation."""

    def test_derive_is_deterministic(self, provider, salt):
        """Test identical inputs give identical key bytes."""
        first = provider.derive_key("correctpw", salt)
        second = provider.derive_key("correctpw", salt)
        assert first == second
        assert len(first) == 32

    def test_different_passwords_give_different_keys(self, provider, salt):
        """Test keys differ across passwords."""
        assert provider.derive_key("pw-one", salt, FAST_KDF) != provider.derive_key(
            "pw-two", salt, FAST_KDF
        )

    def test_different_salts_give_different_keys(self, provider, salt):
        """Test keys differ across salts."""
        other = bytes(reversed(salt))
        assert provider.derive_key("pw", salt, FAST_KDF) != provider.derive_key(
            "pw", other, FAST_KDF
        )

    def test_params_change_key(self, provider, salt):
        """Test iteration count and hash are part of the derivation."""
        base = provider.derive_key("pw", salt, FAST_KDF)
        assert base != provider.derive_key("pw", salt, KdfParams(iterations=2000))
        assert base != provider.derive_key(
            "pw", salt, KdfParams(iterations=1000, hash="sha512")
        )

    def test_default_params(self):
        """Test default parameters are PBKDF2-SHA256 with 100000 rounds."""
        assert crypto.DEFAULT_KDF.iterations == 100_000
        assert crypto.DEFAULT_KDF.hash == "sha256"
        assert crypto.DEFAULT_KDF.length == 32

    def test_salt_must_be_16_bytes(self, provider):
        """Test a short salt is rejected."""
        with pytest.raises(FormatError):
            provider.derive_key("pw", b"short", FAST_KDF)

    def test_unsupported_algorithm_is_crypto_unavailable(self, provider, salt, monkeypatch):
        """Test missing backend support surfaces as CryptoUnavailable."""
        def unavailable(*args, **kwargs):
            raise UnsupportedAlgorithm("no PBKDF2 here")

        monkeypatch.setattr(crypto, "PBKDF2HMAC", unavailable)
        with pytest.raises(CryptoUnavailable):
            provider.derive_key("pw", salt, FAST_KDF)

    def test_module_level_helper(self, salt):
        """Test module helper uses the default provider."""
        assert crypto.derive_key("pw", salt, FAST_KDF) == CryptoProvider().derive_key(
            "pw", salt, FAST_KDF
        )


# --- Test Authenticated Cipher ---

class TestAuthenticatedCipher:
    """Tests for AES-256-GCM encrypt/decrypt."""

    def test_round_trip(self, provider, key):
        """Test decrypt(encrypt(m)) == m."""
        plaintext = b"seed phrase bytes"
        ciphertext, iv = provider.encrypt(plaintext, key)
        assert provider.decrypt(ciphertext, iv, key) == plaintext

    def test_ciphertext_carries_tag(self, provider, key):
        """Test the 16-byte tag is appended to the ciphertext."""
        ciphertext, iv = provider.encrypt(b"abc", key)
        assert len(iv) == IV_SIZE
        assert len(ciphertext) == 3 + TAG_SIZE

    def test_empty_plaintext(self, provider, key):
        """Test zero-length plaintext is not special-cased."""
        ciphertext, iv = provider.encrypt(b"", key)
        assert len(ciphertext) == TAG_SIZE
        assert provider.decrypt(ciphertext, iv, key) == b""

    def test_accepts_bytearray_key(self, provider, key):
        """Test a mutable key buffer works."""
        ciphertext, iv = provider.encrypt(b"data", bytearray(key))
        assert provider.decrypt(ciphertext, iv, bytearray(key)) == b"data"

    def test_wrong_password_fails(self, provider, salt):
        """Test a key from another password fails authentication."""
        good = provider.derive_key("correctpw", salt, FAST_KDF)
        bad = provider.derive_key("wrongpw", salt, FAST_KDF)
        ciphertext, iv = provider.encrypt(b"secret", good)
        with pytest.raises(AuthenticationFailed):
            provider.decrypt(ciphertext, iv, bad)

    def test_error_message_does_not_leak(self, provider, key):
        """Test the failure message is generic."""
        ciphertext, iv = provider.encrypt(b"my secret words", key)
        with pytest.raises(AuthenticationFailed) as exc:
            provider.decrypt(_flip(ciphertext, 0), iv, key)
        assert str(exc.value) == "incorrect password or corrupted data"
        assert "secret" not in str(exc.value)

    def test_every_ciphertext_byte_is_authenticated(self, provider, key):
        """Test flipping any single bit of payload or tag fails."""
        ciphertext, iv = provider.encrypt(b"0123456789", key)
        for index in range(len(ciphertext)):
            for bit in (0, 7):
                with pytest.raises(AuthenticationFailed):
                    provider.decrypt(_flip(ciphertext, index, bit), iv, key)

    def test_tag_tamper_fails(self, provider, key):
        """Test flipping a bit of the trailing tag fails."""
        ciphertext, iv = provider.encrypt(b"payload", key)
        with pytest.raises(AuthenticationFailed):
            provider.decrypt(_flip(ciphertext, len(ciphertext) - 1, 3), iv, key)

    def test_iv_tamper_fails(self, provider, key):
        """Test flipping any IV bit fails."""
        ciphertext, iv = provider.encrypt(b"payload", key)
        for index in range(IV_SIZE):
            with pytest.raises(AuthenticationFailed):
                provider.decrypt(ciphertext, _flip(iv, index, 5), key)

    def test_truncated_ciphertext_fails(self, provider, key):
        """Test ciphertext shorter than the tag fails authentication."""
        with pytest.raises(AuthenticationFailed):
            provider.decrypt(b"\x00" * (TAG_SIZE - 1), os.urandom(IV_SIZE), key)

    def test_wrong_iv_length(self, provider, key):
        """Test an IV of the wrong size is a format error."""
        ciphertext, _ = provider.encrypt(b"payload", key)
        with pytest.raises(FormatError):
            provider.decrypt(ciphertext, b"\x00" * 16, key)


# --- Test Randomness ---

class TestRandomness:
    """Tests for IV generation and injected random sources."""

    def test_iv_unique_across_calls(self, provider, key):
        """Test successive encryptions never reuse an IV."""
        ivs = {provider.encrypt(b"same", key)[1] for _ in range(500)}
        assert len(ivs) == 500

    def test_same_plaintext_differs(self, provider, key):
        """Test identical plaintexts produce different ciphertexts."""
        first, _ = provider.encrypt(b"same", key)
        second, _ = provider.encrypt(b"same", key)
        assert first != second

    def test_fixed_random_source(self, key):
        """Test an injected source pins the IV and draws once per call."""
        source = CountingRandom()
        provider = CryptoProvider(random_source=source)
        _, iv1 = provider.encrypt(b"x", key)
        _, iv2 = provider.encrypt(b"x", key)
        assert iv1 == b"\x01" * IV_SIZE
        assert iv2 == b"\x02" * IV_SIZE
        assert source.calls == 2

    def test_new_salt_size(self, counting_provider):
        """Test salts are 16 bytes from the provider source."""
        assert counting_provider.new_salt() == b"\x01" * 16

    def test_short_random_source_is_crypto_unavailable(self, key):
        """Test a broken random source is rejected."""
        provider = CryptoProvider(random_source=lambda n: b"\x00")
        with pytest.raises(CryptoUnavailable):
            provider.encrypt(b"x", key)

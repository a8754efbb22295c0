"""
Tests for vault configuration.

Tests cover:
- Defaults and validation of VaultConfig fields
- Loading from environment variables
- KDF parameter model
"""
import pytest
from pydantic import ValidationError

from nija_wallet.vault.config import KdfParams, VaultConfig


class TestVaultConfig:
    """Tests for VaultConfig."""

    def test_defaults(self):
        """Test default settings."""
        config = VaultConfig()
        assert config.kdf_iterations == 100_000
        assert config.kdf_hash == "sha256"
        assert config.eth_derivation_path == "m/44'/60'/0'/0/0"
        assert config.sol_derivation_path == "m/44'/501'/0'/0'"
        assert config.api_port == 5177

    def test_kdf_params(self):
        """Test kdf_params mirrors the configured values."""
        assert VaultConfig(kdf_iterations=5000).kdf_params() == KdfParams(iterations=5000)

    @pytest.mark.parametrize("kwargs", [
        {"kdf_iterations": 10},
        {"kdf_iterations": 10**9},
        {"kdf_hash": "md5"},
        {"eth_derivation_path": "44/60/0"},
        {"sol_derivation_path": "m/44'/501'/0'/0"},
        {"api_port": 0},
    ])
    def test_invalid_values(self, kwargs):
        """Test invalid settings are rejected."""
        with pytest.raises(ValidationError):
            VaultConfig(**kwargs)

    def test_from_env(self, monkeypatch):
        """Test overrides are read from the environment."""
        monkeypatch.setenv("NIJA_VAULT_KDF_ITERATIONS", "250000")
        monkeypatch.setenv("NIJA_VAULT_KDF_HASH", "sha512")
        monkeypatch.setenv("NIJA_WALLET_API_PORT", "8080")
        config = VaultConfig.from_env()
        assert config.kdf_iterations == 250_000
        assert config.kdf_hash == "sha512"
        assert config.api_port == 8080

    def test_from_env_defaults(self, monkeypatch):
        """Test missing variables fall back to defaults."""
        for name in (
            "NIJA_VAULT_KDF_ITERATIONS", "NIJA_VAULT_KDF_HASH",
            "NIJA_WALLET_API_HOST", "NIJA_WALLET_API_PORT",
        ):
            monkeypatch.delenv(name, raising=False)
        assert VaultConfig.from_env() == VaultConfig()

    def test_from_env_not_integer(self, monkeypatch):
        """Test a non-integer iteration count is rejected."""
        monkeypatch.setenv("NIJA_VAULT_KDF_ITERATIONS", "lots")
        with pytest.raises(ValueError, match="NIJA_VAULT_KDF_ITERATIONS"):
            VaultConfig.from_env()


class TestKdfParams:
    """Tests for KdfParams."""

    def test_frozen(self):
        """Test parameters are immutable."""
        params = KdfParams()
        with pytest.raises(ValidationError):
            params.iterations = 1

    def test_rejects_unknown_fields(self):
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            KdfParams(memory_cost=65536)

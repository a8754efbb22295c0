"""
Vault Password Rotation — Re-encryption of a vault under a new password.

Opens the vault with the current password and seals the same plaintext
under the new password (or under new KDF parameters) with a fresh salt and
IV. Vaults are immutable: the caller persists the returned vault in place
of the old one.

Security Note:
    Plaintext exists in memory only during re-encryption and is held in a
    zeroed-on-release buffer. Never log plaintext or ciphertext values.
"""
import logging
from collections.abc import Iterable

from ..secret import SecretBuffer
from .config import KdfParams
from .crypto import CryptoProvider, default_provider
from .record import EncryptedVault, open_vault, seal_secret

logger = logging.getLogger("nija_wallet.vault")


def rotate_password(
    vault: EncryptedVault,
    old_password: str,
    new_password: str | None = None,
    params: KdfParams | None = None,
    provider: CryptoProvider | None = None,
) -> EncryptedVault:
    """Re-encrypt a vault under a new password and/or KDF parameters.

    Args:
        vault: Current vault.
        old_password: Password the vault is sealed with.
        new_password: Replacement password; ``None`` keeps the old one
            (useful for upgrading the iteration count).
        params: KDF parameters for the new vault; defaults to the old
            vault's parameters.
        provider: Crypto capability, defaults to the module provider.

    Returns:
        A new EncryptedVault with fresh salt and IV.

    Raises:
        AuthenticationFailed: If ``old_password`` does not open the vault.
    """
    provider = provider or default_provider
    target_password = old_password if new_password is None else new_password
    target_params = params or vault.kdf

    with SecretBuffer(open_vault(vault, old_password, provider)) as plaintext:
        rotated = seal_secret(
            plaintext.data, target_password, target_params, provider,
        )

    logger.info(
        "Vault rotated: password_changed=%s kdf=pbkdf2-%s/%d -> pbkdf2-%s/%d",
        new_password is not None,
        vault.kdf.hash, vault.kdf.iterations,
        target_params.hash, target_params.iterations,
    )
    return rotated


def upgrade_vaults(
    vaults: Iterable[EncryptedVault],
    password: str,
    params: KdfParams,
    provider: CryptoProvider | None = None,
) -> dict:
    """Re-seal a batch of vaults that share one password with new KDF params.

    Vaults already at ``params`` are skipped. A vault that fails to open is
    counted as an error and left out of the result.

    Args:
        vaults: Vaults to upgrade.
        password: Password all vaults are sealed with.
        params: Target KDF parameters.
        provider: Crypto capability, defaults to the module provider.

    Returns:
        Stats dict with keys: total, rotated, errors, skipped, vaults
        (the list of upgraded or skipped vaults, in input order).
    """
    stats = {"total": 0, "rotated": 0, "errors": 0, "skipped": 0, "vaults": []}
    for index, vault in enumerate(vaults):
        stats["total"] += 1
        if vault.kdf == params:
            stats["skipped"] += 1
            stats["vaults"].append(vault)
            continue
        try:
            stats["vaults"].append(
                rotate_password(vault, password, params=params, provider=provider)
            )
            stats["rotated"] += 1
        except Exception as err:
            logger.error("Error upgrading vault index=%d: %s", index, err)
            stats["errors"] += 1

    logger.info(
        "Vault upgrade complete: total=%d rotated=%d skipped=%d errors=%d",
        stats["total"], stats["rotated"], stats["skipped"], stats["errors"],
    )
    return stats

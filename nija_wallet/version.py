"""Nija Wallet Meta information.
   Nija Wallet Vault protects wallet secrets at rest and signs
   transactions with them without ever persisting plaintext.
"""
__title__ = 'nija_wallet'
__description__ = (
   'Password-based encryption of wallet secrets and a signing '
   'boundary for Ethereum and Solana transactions.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2025 Nija Wallet'
__author__ = 'Nija Wallet Team'
__author_email__ = 'dev@nijawallet.io'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/nijawallet/nija-wallet-vault'

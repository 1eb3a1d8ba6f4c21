"""
SolanaClientSigner - Solana client signer implementation
"""

import logging

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from x402_multichain.signers.client.base import ClientSigner
from x402_multichain.types import ChainKind

logger = logging.getLogger(__name__)


class SolanaClientSigner(ClientSigner):
    """Solana client signer backed by a solders Keypair"""

    chain = ChainKind.SOLANA

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair
        logger.info(f"SolanaClientSigner initialized: address={self.get_address()}")

    @classmethod
    def from_base58(cls, private_key: str) -> "SolanaClientSigner":
        """Create signer from a base58-encoded 64-byte keypair."""
        return cls(Keypair.from_base58_string(private_key.strip()))

    @classmethod
    def from_bytes(cls, raw: bytes) -> "SolanaClientSigner":
        """Create signer from 64 raw keypair bytes (secret || public)."""
        return cls(Keypair.from_bytes(raw))

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    def get_address(self) -> str:
        return str(self._keypair.pubkey())

    def sign_message(self, message: bytes) -> Signature:
        """Ed25519 signature over raw message bytes"""
        return self._keypair.sign_message(message)

"""
Client Signers
"""

from x402_multichain.signers.client.base import ClientSigner
from x402_multichain.signers.client.evm_signer import EvmClientSigner
from x402_multichain.signers.client.solana_signer import SolanaClientSigner

__all__ = ["ClientSigner", "EvmClientSigner", "SolanaClientSigner"]

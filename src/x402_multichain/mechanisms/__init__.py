"""
x402 Mechanisms - Payment mechanisms for different chains

Structure:
    _base/           - ABC interfaces (ClientMechanism)
    evm/exact/       - EIP-3009 TransferWithAuthorization signing
    solana/exact/    - partially-signed SPL TransferChecked transactions
"""

from x402_multichain.mechanisms._base import ClientMechanism
from x402_multichain.mechanisms.evm import ExactEvmClientMechanism
from x402_multichain.mechanisms.solana import ExactSolanaClientMechanism

__all__ = [
    "ClientMechanism",
    "ExactEvmClientMechanism",
    "ExactSolanaClientMechanism",
]

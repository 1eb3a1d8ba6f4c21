"""
Solana "exact" payment scheme mechanisms.
"""

from x402_multichain.mechanisms.solana.exact.client import ExactSolanaClientMechanism

__all__ = ["ExactSolanaClientMechanism"]

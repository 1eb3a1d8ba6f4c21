"""
Solana payment mechanisms
"""

from x402_multichain.mechanisms.solana.exact import ExactSolanaClientMechanism

__all__ = ["ExactSolanaClientMechanism"]

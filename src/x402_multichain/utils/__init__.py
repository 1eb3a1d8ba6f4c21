"""
X402 Utility Functions
"""

from x402_multichain.utils.solana_client import create_async_solana_client

__all__ = ["create_async_solana_client"]

"""
Mechanism base interfaces
"""

from x402_multichain.mechanisms._base.client import ClientMechanism

__all__ = ["ClientMechanism"]

"""
EVM payment mechanisms
"""

from x402_multichain.mechanisms.evm.exact import ExactEvmClientMechanism

__all__ = ["ExactEvmClientMechanism"]

"""
EVM "exact" payment scheme mechanisms.
"""

from x402_multichain.mechanisms.evm.exact.client import ExactEvmClientMechanism
from x402_multichain.mechanisms.evm.exact.types import (
    SCHEME_EXACT,
    TRANSFER_AUTH_EIP712_TYPES,
    TRANSFER_AUTH_PRIMARY_TYPE,
    build_eip712_domain,
    build_eip712_message,
    create_nonce,
    create_validity_window,
)

__all__ = [
    "ExactEvmClientMechanism",
    "SCHEME_EXACT",
    "TRANSFER_AUTH_EIP712_TYPES",
    "TRANSFER_AUTH_PRIMARY_TYPE",
    "build_eip712_domain",
    "build_eip712_message",
    "create_nonce",
    "create_validity_window",
]

"""
EIP-712 definitions and helpers for the EVM exact mechanism.
"""

import secrets
import time
from typing import Any

from x402_multichain.encoding import hex_to_bytes
from x402_multichain.types import Authorization

SCHEME_EXACT = "exact"

# Default validity period (5 minutes)
DEFAULT_TIMEOUT_SECONDS = 300

# EIP-712 domain fallback when the requirement carries no token metadata
DEFAULT_TOKEN_NAME = "USDC"
DEFAULT_TOKEN_VERSION = "2"


# ---------------------------------------------------------------------------
# EIP-712 type definitions for TransferWithAuthorization
# ---------------------------------------------------------------------------

TRANSFER_AUTH_EIP712_TYPES = {
    "TransferWithAuthorization": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}

TRANSFER_AUTH_PRIMARY_TYPE = "TransferWithAuthorization"


def build_eip712_message(auth: Authorization) -> dict[str, Any]:
    """Build EIP-712 message dict from authorization."""
    return {
        "from": auth.from_address,
        "to": auth.to,
        "value": int(auth.value),
        "validAfter": int(auth.valid_after),
        "validBefore": int(auth.valid_before),
        "nonce": hex_to_bytes(auth.nonce or ""),
    }


def build_eip712_domain(
    token_name: str,
    token_version: str,
    chain_id: int,
    verifying_contract: str,
) -> dict[str, Any]:
    """Build EIP-712 domain dict for exact."""
    return {
        "name": token_name,
        "version": token_version,
        "chainId": chain_id,
        "verifyingContract": verifying_contract,
    }


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------


def create_nonce() -> str:
    """Generate a random 32-byte nonce (0x-prefixed hex)."""
    return "0x" + secrets.token_hex(32)


def create_validity_window(
    timeout_seconds: int | None = None,
    valid_after: int = 0,
) -> tuple[int, int]:
    """Create (validAfter, validBefore) timestamps.

    validBefore is now + timeout, with DEFAULT_TIMEOUT_SECONDS when the
    server gave no (or a zero) timeout.
    """
    timeout = timeout_seconds or DEFAULT_TIMEOUT_SECONDS
    return valid_after, int(time.time()) + timeout

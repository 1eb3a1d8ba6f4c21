"""
x402 Client SDK
"""

from x402_multichain.clients.flow import (
    FlowContext,
    FlowState,
    PaymentFlow,
    PaymentOutcome,
)
from x402_multichain.clients.selection import (
    SelectedOption,
    find_evm_option,
    find_solana_option,
    select_payment_option,
)
from x402_multichain.clients.x402_http_client import X402HttpClient, create_http_client

__all__ = [
    "FlowContext",
    "FlowState",
    "PaymentFlow",
    "PaymentOutcome",
    "SelectedOption",
    "X402HttpClient",
    "create_http_client",
    "find_evm_option",
    "find_solana_option",
    "select_payment_option",
]

"""
x402-multichain - x402 payment client for EVM and Solana

Negotiates 402 Payment Required responses (protocol v1 and v2), signs
EIP-3009 authorizations on EVM chains or partially-signed SPL transfers on
Solana, and retries the request with the payment attached.
"""

__version__ = "0.1.0"

from x402_multichain.clients import (
    FlowContext,
    FlowState,
    PaymentOutcome,
    X402HttpClient,
    create_http_client,
    select_payment_option,
)
from x402_multichain.codec import (
    build_and_encode_payload,
    parse_payment_required,
    parse_payment_response,
)
from x402_multichain.exceptions import (
    AmountExceedsCap,
    ConfigurationError,
    ConnectivityError,
    InvalidAddress,
    InvalidAmount,
    KeyLoadError,
    LedgerLookupError,
    NoSupportedOption,
    PaymentRejected,
    ProtocolError,
    SigningError,
    UnexpectedStatusError,
    UnsupportedNetworkError,
    X402Error,
)
from x402_multichain.signers.client import EvmClientSigner, SolanaClientSigner
from x402_multichain.types import (
    Authorization,
    ChainKind,
    PaymentRequired,
    PaymentRequirements,
    ResourceInfo,
    SettleResponse,
    SignResult,
)

__all__ = [
    "__version__",
    # Types
    "Authorization",
    "ChainKind",
    "PaymentRequired",
    "PaymentRequirements",
    "ResourceInfo",
    "SettleResponse",
    "SignResult",
    # Codec
    "build_and_encode_payload",
    "parse_payment_required",
    "parse_payment_response",
    # Client
    "FlowContext",
    "FlowState",
    "PaymentOutcome",
    "X402HttpClient",
    "create_http_client",
    "select_payment_option",
    # Signers
    "EvmClientSigner",
    "SolanaClientSigner",
    # Exceptions
    "X402Error",
    "ProtocolError",
    "NoSupportedOption",
    "AmountExceedsCap",
    "SigningError",
    "InvalidAmount",
    "InvalidAddress",
    "LedgerLookupError",
    "PaymentRejected",
    "ConnectivityError",
    "UnexpectedStatusError",
    "ConfigurationError",
    "UnsupportedNetworkError",
    "KeyLoadError",
]

"""
x402 custom exception hierarchy
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from x402_multichain.clients.flow import FlowContext


class X402Error(Exception):
    """x402 base exception

    ``context`` is attached by the payment flow before the error leaves it,
    so callers can tell how far the attempt got.
    """

    context: "FlowContext | None" = None


class ProtocolError(X402Error):
    """Malformed or missing x402 payload (bad base64, bad JSON, wrong shape)"""

    pass


class NoSupportedOption(X402Error):
    """No payment option matches the credentials the caller holds"""

    def __init__(self, message: str, hint: str | None = None):
        self.hint = hint
        super().__init__(message)


class AmountExceedsCap(X402Error):
    """Requested amount is above the caller's safety cap"""

    def __init__(self, amount: int, cap: int):
        self.amount = amount
        self.cap = cap
        super().__init__(f"payment amount {amount} exceeds maximum {cap}")


class SigningError(X402Error):
    """Signature or transaction creation failed"""

    pass


class InvalidAmount(SigningError):
    """Amount is not a valid integer for the target chain"""

    pass


class InvalidAddress(SigningError):
    """Address could not be parsed"""

    pass


class LedgerLookupError(SigningError):
    """A read against the ledger needed to build the transaction failed"""

    pass


class PaymentRejected(X402Error):
    """Server refused the request after a signed payment was attached"""

    def __init__(
        self,
        status_code: int,
        reason: str = "",
        settlement: Any = None,
        response: Any = None,
    ):
        self.status_code = status_code
        self.settlement = settlement
        self.response = response
        message = f"Payment failed: {status_code}"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class ConnectivityError(X402Error):
    """Network-level failure during the initial request or the paid retry"""

    def __init__(self, message: str, after_signature: bool = False):
        self.after_signature = after_signature
        super().__init__(message)


class UnexpectedStatusError(X402Error):
    """Initial response was neither 200 nor 402"""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"expected 402 Payment Required, got {status_code}")


class ConfigurationError(X402Error):
    """Configuration-related error"""

    pass


class UnsupportedNetworkError(ConfigurationError):
    """Unsupported network"""

    pass


class KeyLoadError(X402Error):
    """Private key could not be loaded"""

    pass

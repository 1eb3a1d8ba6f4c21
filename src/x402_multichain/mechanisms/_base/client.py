"""
Client mechanism base interface
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from x402_multichain.types import ChainKind, PaymentRequirements, SignResult

if TYPE_CHECKING:
    from x402_multichain.signers.client.base import ClientSigner


class ClientMechanism(ABC):
    """
    Abstract base class for client payment mechanisms.

    Responsible for turning one payment option into a signed authorization
    for a specific chain family.
    """

    chain: ChainKind

    @abstractmethod
    def scheme(self) -> str:
        """Get the payment scheme name"""
        pass

    @abstractmethod
    def get_signer(self) -> "ClientSigner":
        """Return the signer used by this mechanism"""
        pass

    @abstractmethod
    async def sign(self, requirements: PaymentRequirements) -> SignResult:
        """
        Produce the signature artifact and authorization for *requirements*.

        Signing failures are deterministic for a given input and are never
        retried.

        Args:
            requirements: The payment option chosen by the selector

        Returns:
            SignResult with chain-specific signature encoding
        """
        pass

    async def aclose(self) -> None:
        """Release network clients the mechanism created; injected ones are left open"""
        pass

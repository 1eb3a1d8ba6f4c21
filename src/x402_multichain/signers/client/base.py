"""
Client signer base interface
"""

from abc import ABC, abstractmethod

from x402_multichain.types import ChainKind


class ClientSigner(ABC):
    """
    Abstract base class for client signers.

    Holds the caller's key material for one chain family. Payment
    mechanisms use it to produce signatures; it never talks to the network.
    """

    chain: ChainKind

    @abstractmethod
    def get_address(self) -> str:
        """Get the signer's account address"""
        pass

"""
EvmClientSigner - EVM client signer implementation
"""

import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from x402_multichain.exceptions import SigningError
from x402_multichain.signers.client.base import ClientSigner
from x402_multichain.signers.utils import eip712_domain_type_from_keys
from x402_multichain.types import ChainKind

logger = logging.getLogger(__name__)


class EvmClientSigner(ClientSigner):
    """EVM client signer implementation using eth_account"""

    chain = ChainKind.EVM

    def __init__(self, private_key: str) -> None:
        private_key = private_key.strip()
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        self._private_key = private_key
        self._address = self._derive_address(private_key)
        logger.debug("EvmClientSigner initialized", extra={"address": self._address})

    @classmethod
    def from_private_key(cls, private_key: str) -> "EvmClientSigner":
        """Create signer from private key."""
        return cls(private_key)

    @staticmethod
    def _derive_address(private_key: str) -> str:
        """Derive EVM address from private key"""
        return Account.from_key(private_key).address

    def get_address(self) -> str:
        return self._address

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, Any],
        message: dict[str, Any],
        primary_type: str,
    ) -> str:
        """Sign EIP-712 typed data.

        The digest is keccak256(0x1901 || domainSeparator || hashStruct(message)).

        Returns:
            0x-prefixed 65-byte signature with v in {27, 28}
        """
        try:
            full_data = {
                "types": {"EIP712Domain": eip712_domain_type_from_keys(domain), **types},
                "domain": domain,
                "primaryType": primary_type,
                "message": message,
            }

            encoded = encode_typed_data(full_message=full_data)
            signed = Account.sign_message(encoded, private_key=self._private_key)
        except Exception as e:
            raise SigningError(f"failed to sign typed data: {e}") from e

        signature = bytearray(signed.signature)
        if signature[64] < 27:
            signature[64] += 27
        return "0x" + bytes(signature).hex()

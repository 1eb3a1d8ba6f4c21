"""
ExactEvmClientMechanism - EIP-3009 TransferWithAuthorization signing for EVM.
"""

import logging

from x402_multichain.config import NetworkConfig
from x402_multichain.mechanisms._base.client import ClientMechanism
from x402_multichain.mechanisms.evm.exact.types import (
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_VERSION,
    SCHEME_EXACT,
    TRANSFER_AUTH_EIP712_TYPES,
    TRANSFER_AUTH_PRIMARY_TYPE,
    build_eip712_domain,
    build_eip712_message,
    create_nonce,
    create_validity_window,
)
from x402_multichain.signers.client.evm_signer import EvmClientSigner
from x402_multichain.types import Authorization, ChainKind, PaymentRequirements, SignResult

logger = logging.getLogger(__name__)


class ExactEvmClientMechanism(ClientMechanism):
    """TransferWithAuthorization client mechanism for EVM.

    The signed authorization lets a facilitator move the tokens on the
    payer's behalf and pay the gas itself.
    """

    chain = ChainKind.EVM

    def __init__(self, signer: EvmClientSigner) -> None:
        self._signer = signer

    def scheme(self) -> str:
        return SCHEME_EXACT

    def get_signer(self) -> EvmClientSigner:
        return self._signer

    async def sign(
        self,
        requirements: PaymentRequirements,
        valid_after: int = 0,
        valid_before: int | None = None,
    ) -> SignResult:
        """Sign an EIP-3009 authorization for *requirements*.

        Args:
            requirements: Selected EVM payment option
            valid_after: Override for the start of the validity window
            valid_before: Override for the end of the validity window

        Raises:
            InvalidAmount: amount is not a base-10 integer
            UnsupportedNetworkError: chain id cannot be derived from the network
            SigningError: the key failed to sign
        """
        nonce = create_nonce()
        valid_after, default_before = create_validity_window(
            requirements.max_timeout_seconds, valid_after
        )
        if valid_before is None:
            valid_before = default_before

        value = requirements.amount_int()
        chain_id = NetworkConfig.get_chain_id(requirements.network)

        token_name = requirements.get_extra_string("name") or DEFAULT_TOKEN_NAME
        token_version = requirements.get_extra_string("version") or DEFAULT_TOKEN_VERSION

        from_addr = self._signer.get_address()
        authorization = Authorization(
            **{
                "from": from_addr,
                "to": requirements.pay_to,
                "value": str(value),
                "validAfter": str(valid_after),
                "validBefore": str(valid_before),
                "nonce": nonce,
            }
        )

        domain = build_eip712_domain(token_name, token_version, chain_id, requirements.asset)
        message = build_eip712_message(authorization)

        logger.info(
            "[EXACT] Signing TransferWithAuthorization: from=%s, to=%s, value=%s, token=%s, "
            "chainId=%d",
            from_addr,
            requirements.pay_to,
            value,
            requirements.asset,
            chain_id,
        )

        signature = await self._signer.sign_typed_data(
            domain=domain,
            types=TRANSFER_AUTH_EIP712_TYPES,
            message=message,
            primary_type=TRANSFER_AUTH_PRIMARY_TYPE,
        )

        return SignResult(
            signature=signature,
            authorization=authorization,
            display_nonce=nonce,
            chain=ChainKind.EVM,
        )

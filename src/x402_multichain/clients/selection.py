"""
Payment option selection.

The choice is driven by which key material the caller holds, never by
price or position: the client can only pay on a chain it can sign for.
"""

import logging
from dataclasses import dataclass

from x402_multichain.config import NetworkConfig
from x402_multichain.exceptions import NoSupportedOption
from x402_multichain.types import ChainKind, PaymentRequired, PaymentRequirements

logger = logging.getLogger(__name__)

SUPPORTED_SCHEME = "exact"


@dataclass(frozen=True)
class SelectedOption:
    """The single requirement the flow will pay, and the chain it lives on"""

    requirement: PaymentRequirements
    chain: ChainKind


def find_evm_option(accepts: list[PaymentRequirements]) -> PaymentRequirements | None:
    """First "exact" requirement on an EVM network, or None"""
    for req in accepts:
        if req.scheme == SUPPORTED_SCHEME and NetworkConfig.is_evm_network(req.network):
            return req
    return None


def find_solana_option(accepts: list[PaymentRequirements]) -> PaymentRequirements | None:
    """First "exact" requirement on a Solana network, or None"""
    for req in accepts:
        if req.scheme == SUPPORTED_SCHEME and NetworkConfig.is_solana_network(req.network):
            return req
    return None


def select_payment_option(
    payment_required: PaymentRequired,
    has_solana_key: bool,
) -> SelectedOption:
    """Pick exactly one requirement for the credentials at hand.

    Args:
        payment_required: Parsed 402 payload
        has_solana_key: Whether the caller supplied a Solana keypair

    Returns:
        SelectedOption with the requirement and its chain

    Raises:
        NoSupportedOption: no requirement matches the held credentials
    """
    evm_req = find_evm_option(payment_required.accepts)
    solana_req = find_solana_option(payment_required.accepts)

    if has_solana_key:
        if solana_req is not None:
            logger.info(f"Selected Solana option: network={solana_req.network}")
            return SelectedOption(requirement=solana_req, chain=ChainKind.SOLANA)
        if evm_req is not None:
            raise NoSupportedOption(
                "endpoint does not accept Solana payments, but a Solana keypair was provided",
                hint="use an EVM private key for this endpoint",
            )
    else:
        if evm_req is not None:
            logger.info(f"Selected EVM option: network={evm_req.network}")
            return SelectedOption(requirement=evm_req, chain=ChainKind.EVM)
        if solana_req is not None:
            raise NoSupportedOption(
                "endpoint only accepts Solana payments (supply a Solana keypair)",
                hint="supply a Solana keypair",
            )

    networks = ", ".join(f"{r.scheme}/{r.network}" for r in payment_required.accepts)
    logger.warning("No supported payment option among: %s", networks)
    raise NoSupportedOption(
        "no supported payment options found",
        hint=f"offered options: {networks}",
    )

"""
Shared AsyncClient factory for Solana RPC.

Centralizes solana-py AsyncClient initialization for the networks x402
servers advertise.
"""

import logging

from solana.rpc.async_api import AsyncClient

from x402_multichain.config import NetworkConfig

logger = logging.getLogger(__name__)


def create_async_solana_client(network: str, rpc_url: str | None = None) -> AsyncClient:
    """Create an AsyncClient for the given network.

    Args:
        network: Solana network identifier (CAIP-2 or bare name)
        rpc_url: Explicit endpoint; overrides the network lookup

    Returns:
        solana.rpc.async_api.AsyncClient instance
    """
    endpoint = rpc_url or NetworkConfig.get_solana_rpc_url(network)
    logger.info("Creating Solana AsyncClient for network=%s (%s)", network, endpoint)
    return AsyncClient(endpoint)

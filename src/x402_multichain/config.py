"""
X402 Network Configuration
Centralized network identifiers, chain IDs and RPC endpoints
"""

import os
from typing import Dict

from x402_multichain.exceptions import UnsupportedNetworkError

EVM_PREFIX = "eip155:"
SOLANA_PREFIX = "solana:"


class NetworkConfig:
    """Network identifiers for the EVM and Solana payment flows"""

    # Solana CAIP-2 identifiers (genesis hash prefix)
    SOLANA_MAINNET = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"
    SOLANA_DEVNET = "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
    SOLANA_TESTNET = "solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z"

    # v1 servers may send bare names instead of eip155:<chainId>
    EVM_NETWORK_CHAIN_IDS: Dict[str, int] = {
        # Mainnets
        "ethereum": 1,
        "mainnet": 1,
        "base": 8453,
        "polygon": 137,
        "arbitrum": 42161,
        "optimism": 10,
        "avalanche": 43114,
        "bsc": 56,
        # Testnets
        "sepolia": 11155111,
        "goerli": 5,
        "base-sepolia": 84532,
        "base_sepolia": 84532,
        "basesepolia": 84532,
        "mumbai": 80001,
    }

    SOLANA_NETWORK_ALIASES: Dict[str, str] = {
        "solana": SOLANA_MAINNET,
        "solana-mainnet": SOLANA_MAINNET,
        "solana-mainnet-beta": SOLANA_MAINNET,
        "mainnet-beta": SOLANA_MAINNET,
        "solana-devnet": SOLANA_DEVNET,
        "devnet": SOLANA_DEVNET,
        "solana-testnet": SOLANA_TESTNET,
        "testnet": SOLANA_TESTNET,
    }

    SOLANA_RPC_URLS: Dict[str, str] = {
        SOLANA_MAINNET: "https://api.mainnet-beta.solana.com",
        SOLANA_DEVNET: "https://api.devnet.solana.com",
        SOLANA_TESTNET: "https://api.testnet.solana.com",
    }

    @classmethod
    def is_evm_network(cls, network: str) -> bool:
        """True for eip155:<ref> identifiers and known bare EVM names"""
        if network.startswith(EVM_PREFIX) and len(network) > len(EVM_PREFIX):
            return True
        return network in cls.EVM_NETWORK_CHAIN_IDS

    @classmethod
    def is_solana_network(cls, network: str) -> bool:
        """True for solana:<ref> identifiers and known bare Solana names"""
        if network.startswith(SOLANA_PREFIX) and len(network) > len(SOLANA_PREFIX):
            return True
        return network in cls.SOLANA_NETWORK_ALIASES

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        """Get EVM chain ID for network

        Args:
            network: Network identifier (e.g., "eip155:8453", "base")

        Returns:
            Chain ID as integer

        Raises:
            UnsupportedNetworkError: If network is not a known EVM network
        """
        if network.startswith(EVM_PREFIX):
            reference = network[len(EVM_PREFIX) :]
            if not (reference.isascii() and reference.isdigit()) or int(reference) == 0:
                raise UnsupportedNetworkError(f"invalid chain ID in network {network}")
            return int(reference)

        chain_id = cls.EVM_NETWORK_CHAIN_IDS.get(network)
        if chain_id is None:
            raise UnsupportedNetworkError(f"unknown network: {network}")
        return chain_id

    @classmethod
    def normalize_solana_network(cls, network: str) -> str:
        """Map a bare Solana name to its CAIP-2 identifier; unknown names pass through"""
        if network.startswith(SOLANA_PREFIX):
            return network
        return cls.SOLANA_NETWORK_ALIASES.get(network, network)

    @classmethod
    def get_solana_rpc_url(cls, network: str) -> str:
        """Get RPC URL for a Solana network.

        X402_SOLANA_RPC_URL overrides the built-in endpoints. Unknown
        networks fall back to mainnet.
        """
        override = os.getenv("X402_SOLANA_RPC_URL")
        if override:
            return override
        normalized = cls.normalize_solana_network(network)
        return cls.SOLANA_RPC_URLS.get(normalized, cls.SOLANA_RPC_URLS[cls.SOLANA_MAINNET])

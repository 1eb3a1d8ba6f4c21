"""
Pytest configuration and shared fixtures
"""

import pytest

USDC_BASE_SEPOLIA = "0x036cbd53842c5426634e7929541ec2318f3dcf7e"
MERCHANT_ADDRESS = "0x209693bc6afc0c5328ba36faf03c514ef312287c"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mock_evm_private_key():
    """EVM private key for tests"""
    return "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


@pytest.fixture
def evm_payment_requirements():
    """EVM payment requirements for tests"""
    from x402_multichain.types import PaymentRequirements

    return PaymentRequirements(
        scheme="exact",
        network="eip155:84532",
        amount="1000000",
        asset=USDC_BASE_SEPOLIA,
        payTo=MERCHANT_ADDRESS,
        maxTimeoutSeconds=60,
        extra={"name": "USDC", "version": "2"},
    )


@pytest.fixture
def solana_keypair():
    from solders.keypair import Keypair

    return Keypair()


@pytest.fixture
def fee_payer_keypair():
    from solders.keypair import Keypair

    return Keypair()

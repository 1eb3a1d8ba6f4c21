import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from solders.keypair import Keypair

from x402_multichain.exceptions import SigningError
from x402_multichain.signers.client import EvmClientSigner, SolanaClientSigner
from x402_multichain.signers.utils import eip712_domain_type_from_keys
from x402_multichain.types import ChainKind

PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"

MAIL_TYPES = {
    "Mail": [
        {"name": "contents", "type": "string"},
    ],
}


def test_evm_signer_from_private_key():
    """Test creating EVM signer from private key"""
    signer = EvmClientSigner.from_private_key(PRIVATE_KEY)

    assert signer.chain == ChainKind.EVM
    assert signer.get_address() == Account.from_key(PRIVATE_KEY).address
    assert len(signer.get_address()) == 42


def test_evm_signer_without_0x_prefix():
    """Test EVM signer adding 0x prefix when missing"""
    signer = EvmClientSigner.from_private_key(PRIVATE_KEY[2:] + "\n")

    assert signer.get_address() == Account.from_key(PRIVATE_KEY).address


@pytest.mark.anyio
async def test_evm_sign_typed_data_recovers_to_signer():
    signer = EvmClientSigner(PRIVATE_KEY)
    domain = {"name": "Test", "version": "1", "chainId": 1}
    message = {"contents": "hello"}

    signature = await signer.sign_typed_data(domain, MAIL_TYPES, message, "Mail")

    assert signature.startswith("0x")
    assert len(signature) == 132
    assert int(signature[-2:], 16) in (27, 28)

    encoded = encode_typed_data(
        full_message={
            "types": {"EIP712Domain": eip712_domain_type_from_keys(domain), **MAIL_TYPES},
            "domain": domain,
            "primaryType": "Mail",
            "message": message,
        }
    )
    assert Account.recover_message(encoded, signature=signature) == signer.get_address()


@pytest.mark.anyio
async def test_evm_sign_typed_data_failure_wrapped():
    signer = EvmClientSigner(PRIVATE_KEY)
    domain = {"name": "Test", "verifyingContract": "0xnot-an-address"}
    with pytest.raises(SigningError, match="failed to sign typed data") as exc_info:
        await signer.sign_typed_data(domain, MAIL_TYPES, {"contents": "hello"}, "Mail")
    assert exc_info.value.__cause__ is not None


def test_domain_type_order():
    domain = {"verifyingContract": "0x0", "chainId": 1, "name": "USDC", "version": "2"}
    assert [f["name"] for f in eip712_domain_type_from_keys(domain)] == [
        "name",
        "version",
        "chainId",
        "verifyingContract",
    ]


def test_solana_signer_from_bytes():
    keypair = Keypair()
    signer = SolanaClientSigner.from_bytes(bytes(keypair))

    assert signer.chain == ChainKind.SOLANA
    assert signer.pubkey() == keypair.pubkey()
    assert signer.get_address() == str(keypair.pubkey())


def test_solana_signer_from_base58():
    keypair = Keypair()
    signer = SolanaClientSigner.from_base58(str(keypair))
    assert signer.pubkey() == keypair.pubkey()


def test_solana_sign_message_verifies():
    signer = SolanaClientSigner(Keypair())
    sig = signer.sign_message(b"payload")
    assert sig.verify(signer.pubkey(), b"payload")

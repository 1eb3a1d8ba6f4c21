"""
ExactSolanaClientMechanism - partially-signed SPL token transfers for Solana.

The client builds and signs the transfer as token owner; the fee payer
named by the server (the facilitator) co-signs and submits it later.
"""

import base64
import logging
from typing import Any

from solana.rpc.commitment import Finalized
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from x402_multichain.config import NetworkConfig
from x402_multichain.exceptions import InvalidAddress, InvalidAmount, LedgerLookupError, SigningError
from x402_multichain.mechanisms._base.client import ClientMechanism
from x402_multichain.mechanisms.solana.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ADDRESS,
    COMPUTE_BUDGET_PROGRAM_ADDRESS,
    DEFAULT_COMPUTE_UNIT_LIMIT,
    DEFAULT_COMPUTE_UNIT_PRICE_MICROLAMPORTS,
    MAX_U64,
    MINT_DECIMALS_OFFSET,
    SCHEME_EXACT,
    SET_COMPUTE_UNIT_LIMIT_DISCRIMINATOR,
    SET_COMPUTE_UNIT_PRICE_DISCRIMINATOR,
    SYSTEM_PROGRAM_ADDRESS,
    TOKEN_2022_PROGRAM_ADDRESS,
    TOKEN_PROGRAM_ADDRESS,
    TRANSFER_CHECKED_DISCRIMINATOR,
)
from x402_multichain.signers.client.solana_signer import SolanaClientSigner
from x402_multichain.types import Authorization, ChainKind, PaymentRequirements, SignResult
from x402_multichain.utils.solana_client import create_async_solana_client

logger = logging.getLogger(__name__)

# Versioned (v0) messages are signed with this prefix byte
_MESSAGE_V0_PREFIX = bytes([0x80])


def parse_pubkey(value: str, label: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except Exception as e:
        raise InvalidAddress(f"invalid {label} address: {value!r}") from e


def parse_u64(value: str) -> int:
    if not value or not (value.isascii() and value.isdigit()):
        raise InvalidAmount(f"invalid amount: {value!r}")
    amount = int(value)
    if amount > MAX_U64:
        raise InvalidAmount(f"amount {value} overflows u64")
    return amount


def derive_ata(owner: Pubkey, mint: Pubkey, token_program: Pubkey) -> Pubkey:
    """Associated token account for (owner, mint) under *token_program*"""
    ata, _ = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ADDRESS),
    )
    return ata


def create_ata_instruction(
    funder: Pubkey,
    ata: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey,
) -> Instruction:
    """Associated Token Account ``Create`` instruction (empty data)"""
    return Instruction(
        program_id=Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ADDRESS),
        accounts=[
            AccountMeta(funder, is_signer=True, is_writable=True),
            AccountMeta(ata, is_signer=False, is_writable=True),
            AccountMeta(owner, is_signer=False, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(Pubkey.from_string(SYSTEM_PROGRAM_ADDRESS), is_signer=False, is_writable=False),
            AccountMeta(token_program, is_signer=False, is_writable=False),
        ],
        data=b"",
    )


def set_compute_unit_limit_instruction(units: int) -> Instruction:
    # Data: [2 (discriminator), u32 units (little-endian)]
    return Instruction(
        program_id=Pubkey.from_string(COMPUTE_BUDGET_PROGRAM_ADDRESS),
        accounts=[],
        data=bytes([SET_COMPUTE_UNIT_LIMIT_DISCRIMINATOR]) + units.to_bytes(4, "little"),
    )


def set_compute_unit_price_instruction(micro_lamports: int) -> Instruction:
    # Data: [3 (discriminator), u64 microLamports (little-endian)]
    return Instruction(
        program_id=Pubkey.from_string(COMPUTE_BUDGET_PROGRAM_ADDRESS),
        accounts=[],
        data=bytes([SET_COMPUTE_UNIT_PRICE_DISCRIMINATOR]) + micro_lamports.to_bytes(8, "little"),
    )


def transfer_checked_instruction(
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int,
    token_program: Pubkey,
) -> Instruction:
    # Data: [12 (discriminator), u64 amount (little-endian), u8 decimals]
    return Instruction(
        program_id=token_program,
        accounts=[
            AccountMeta(source, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(destination, is_signer=False, is_writable=True),
            AccountMeta(owner, is_signer=True, is_writable=False),
        ],
        data=bytes([TRANSFER_CHECKED_DISCRIMINATOR])
        + amount.to_bytes(8, "little")
        + bytes([decimals]),
    )


class ExactSolanaClientMechanism(ClientMechanism):
    """SPL TransferChecked client mechanism for Solana.

    Network reads (mint info, destination account, latest blockhash) run
    one after another against a single RPC client.
    """

    chain = ChainKind.SOLANA

    def __init__(
        self,
        signer: SolanaClientSigner,
        rpc_client: Any = None,
        rpc_url: str | None = None,
    ) -> None:
        self._signer = signer
        self._rpc_client = rpc_client
        self._rpc_url = rpc_url
        # Keyed by normalized network; only clients created here are closed
        self._async_rpc_clients: dict[str, Any] = {}

    def scheme(self) -> str:
        return SCHEME_EXACT

    def get_signer(self) -> SolanaClientSigner:
        return self._signer

    def _get_client(self, network: str) -> Any:
        if self._rpc_client is not None:
            return self._rpc_client

        net = NetworkConfig.normalize_solana_network(network)
        if net not in self._async_rpc_clients:
            self._async_rpc_clients[net] = create_async_solana_client(net, self._rpc_url)
        return self._async_rpc_clients[net]

    async def aclose(self) -> None:
        """Close the RPC clients this mechanism created"""
        clients = list(self._async_rpc_clients.values())
        self._async_rpc_clients.clear()
        for client in clients:
            await client.close()

    async def sign(self, requirements: PaymentRequirements) -> SignResult:
        """Build and partially sign the transfer transaction.

        Raises:
            InvalidAddress: payee, mint or fee payer is not a valid pubkey
            InvalidAmount: amount is not a u64
            LedgerLookupError: mint lookup, account lookup or blockhash fetch failed
            SigningError: the transaction could not be signed or serialized
        """
        owner = self._signer.pubkey()
        payee = parse_pubkey(requirements.pay_to, "recipient")
        mint = parse_pubkey(requirements.asset, "token mint")

        fee_payer_str = requirements.get_extra_string("feePayer")
        if not fee_payer_str:
            raise InvalidAddress("feePayer is required in requirements.extra for Solana payments")
        fee_payer = parse_pubkey(fee_payer_str, "fee payer")

        amount = parse_u64(requirements.get_amount())

        client = self._get_client(requirements.network)
        token_program, decimals = await self._fetch_mint(client, mint)

        source_ata = derive_ata(owner, mint, token_program)
        dest_ata = derive_ata(payee, mint, token_program)

        instructions: list[Instruction] = []
        if not await self._account_exists(client, dest_ata):
            logger.info("Destination token account %s missing, fee payer will create it", dest_ata)
            instructions.append(
                create_ata_instruction(fee_payer, dest_ata, payee, mint, token_program)
            )
        instructions.extend(
            [
                set_compute_unit_limit_instruction(DEFAULT_COMPUTE_UNIT_LIMIT),
                set_compute_unit_price_instruction(DEFAULT_COMPUTE_UNIT_PRICE_MICROLAMPORTS),
                transfer_checked_instruction(
                    source_ata, mint, dest_ata, owner, amount, decimals, token_program
                ),
            ]
        )

        blockhash, last_valid_block_height = await self._fetch_blockhash(client)

        logger.info(
            "[EXACT] Building SPL transfer: from=%s, to=%s, amount=%d, mint=%s, feePayer=%s",
            owner,
            payee,
            amount,
            mint,
            fee_payer,
        )

        try:
            message = MessageV0.try_compile(
                payer=fee_payer,
                instructions=instructions,
                address_lookup_table_accounts=[],
                recent_blockhash=blockhash,
            )
            tx = self._partially_sign(message, owner)
            tx_base64 = base64.b64encode(bytes(tx)).decode("utf-8")
        except SigningError:
            raise
        except Exception as e:
            raise SigningError(f"failed to build transaction: {e}") from e

        authorization = Authorization(
            **{
                "from": str(owner),
                "to": requirements.pay_to,
                "value": str(amount),
                "validAfter": "0",
                "validBefore": str(last_valid_block_height),
                "reference_block": base64.b64encode(bytes(blockhash)).decode("utf-8"),
            }
        )
        return SignResult(
            signature=tx_base64,
            authorization=authorization,
            display_nonce=str(blockhash),
            chain=ChainKind.SOLANA,
        )

    def _partially_sign(self, message: MessageV0, owner: Pubkey) -> VersionedTransaction:
        """Fill only the owner's signature slot; the fee payer slot stays zeroed"""
        num_signers = message.header.num_required_signatures
        signer_keys = list(message.account_keys[:num_signers])
        if owner not in signer_keys:
            raise SigningError(f"token owner {owner} is not a required signer")

        signatures = [Signature.default()] * num_signers
        signatures[signer_keys.index(owner)] = self._signer.sign_message(
            _MESSAGE_V0_PREFIX + bytes(message)
        )
        return VersionedTransaction.populate(message, signatures)

    async def _fetch_mint(self, client: Any, mint: Pubkey) -> tuple[Pubkey, int]:
        """Return (token program, decimals) for *mint*"""
        try:
            resp = await client.get_account_info(mint)
        except Exception as e:
            raise LedgerLookupError(f"failed to fetch token mint {mint}: {e}") from e

        account = resp.value
        if account is None:
            raise LedgerLookupError(f"token mint not found: {mint}")

        owner = str(account.owner)
        if owner not in (TOKEN_PROGRAM_ADDRESS, TOKEN_2022_PROGRAM_ADDRESS):
            raise LedgerLookupError(f"unknown token program for mint {mint}: {owner}")

        data = bytes(account.data)
        if len(data) <= MINT_DECIMALS_OFFSET:
            raise LedgerLookupError(f"account {mint} is not a token mint")
        return Pubkey.from_string(owner), data[MINT_DECIMALS_OFFSET]

    async def _account_exists(self, client: Any, address: Pubkey) -> bool:
        try:
            resp = await client.get_account_info(address)
        except Exception as e:
            raise LedgerLookupError(f"failed to fetch account {address}: {e}") from e
        return resp.value is not None

    async def _fetch_blockhash(self, client: Any) -> tuple[Hash, int]:
        try:
            resp = await client.get_latest_blockhash(Finalized)
        except Exception as e:
            raise LedgerLookupError(f"failed to get recent blockhash: {e}") from e
        return resp.value.blockhash, resp.value.last_valid_block_height

"""
X402HttpClient - HTTP client adapter with automatic 402 payment handling
"""

import asyncio
import logging
from typing import Any, Callable

import httpx

from x402_multichain.clients.flow import FlowState, PaymentFlow, PaymentOutcome
from x402_multichain.clients.selection import select_payment_option
from x402_multichain.codec import (
    PROTOCOL_V1,
    ParseResult,
    encode_sign_result,
    parse_payment_required,
    parse_payment_response,
)
from x402_multichain.exceptions import (
    AmountExceedsCap,
    ConfigurationError,
    ConnectivityError,
    NoSupportedOption,
    PaymentRejected,
    ProtocolError,
    UnexpectedStatusError,
    X402Error,
)
from x402_multichain.mechanisms._base.client import ClientMechanism
from x402_multichain.mechanisms.evm.exact.client import ExactEvmClientMechanism
from x402_multichain.mechanisms.solana.exact.client import ExactSolanaClientMechanism
from x402_multichain.signers.client.evm_signer import EvmClientSigner
from x402_multichain.signers.client.solana_signer import SolanaClientSigner
from x402_multichain.types import ChainKind, PaymentRequirements, ResourceInfo, SettleResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_REDIRECTS = 10


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Build the httpx.AsyncClient used for paid requests"""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        headers=headers,
    )


def _parse_cap(max_amount: int | str | None) -> int | None:
    if max_amount is None:
        return None
    if isinstance(max_amount, int):
        cap = max_amount
    elif max_amount.isascii() and max_amount.isdigit():
        cap = int(max_amount)
    else:
        raise ConfigurationError(f"invalid max amount: {max_amount!r}")
    if cap < 0:
        raise ConfigurationError(f"invalid max amount: {max_amount!r}")
    return cap


class X402HttpClient:
    """
    HTTP client adapter with automatic 402 payment handling.

    Wraps httpx.AsyncClient: sends the request, negotiates on 402, signs
    with the signer for the selected chain and retries once with the
    payment header attached.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        evm_signer: EvmClientSigner | None = None,
        solana_signer: SolanaClientSigner | None = None,
        solana_rpc_client: Any = None,
        max_amount: int | str | None = None,
        on_interrupt: Callable[[str], None] | None = None,
    ) -> None:
        """
        Initialize HTTP client adapter.

        Args:
            http_client: httpx.AsyncClient instance
            evm_signer: Signer for EVM payment options (optional)
            solana_signer: Signer for Solana payment options (optional)
            solana_rpc_client: Solana AsyncClient; created per network when omitted
            max_amount: Safety cap in the token's base units (optional)
            on_interrupt: Called with the interrupt message when the flow is cancelled
        """
        self._http_client = http_client
        self._max_amount = _parse_cap(max_amount)
        self._on_interrupt = on_interrupt
        self._mechanisms: dict[ChainKind, ClientMechanism] = {}
        if evm_signer is not None:
            self._mechanisms[ChainKind.EVM] = ExactEvmClientMechanism(evm_signer)
        if solana_signer is not None:
            self._mechanisms[ChainKind.SOLANA] = ExactSolanaClientMechanism(
                solana_signer, rpc_client=solana_rpc_client
            )

    async def aclose(self) -> None:
        """Close the RPC clients held by the payment mechanisms.

        The wrapped httpx.AsyncClient belongs to the caller and stays open.
        """
        for mechanism in self._mechanisms.values():
            await mechanism.aclose()

    @property
    def has_solana_key(self) -> bool:
        return ChainKind.SOLANA in self._mechanisms

    async def request_with_payment(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        content: bytes | str | None = None,
        dry_run: bool = False,
    ) -> PaymentOutcome:
        """
        Make HTTP request with automatic 402 payment handling.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            headers: Request headers, reused unchanged on the paid retry
            content: Request body, reused unchanged on the paid retry
            dry_run: Stop after selection without signing anything

        Returns:
            PaymentOutcome in state SUCCESS or DRY_RUN

        Raises:
            X402Error: any failure; ``error.context`` describes how far the
                attempt got
        """
        flow = PaymentFlow(method, url, headers, content)
        try:
            return await self._run(flow, dry_run)
        except X402Error as e:
            if flow.can_transition(FlowState.FAILED):
                flow.transition(FlowState.FAILED)
            if e.context is None:
                e.context = flow.snapshot()
            logger.error(f"Payment flow ended in {flow.state.value}: {e}")
            raise
        except (asyncio.CancelledError, KeyboardInterrupt):
            message = flow.interrupt_message()
            if flow.payment_may_be_submitted:
                logger.warning(message)
            else:
                logger.info(message)
            if self._on_interrupt is not None:
                self._on_interrupt(message)
            raise
        except Exception:
            if flow.can_transition(FlowState.FAILED):
                flow.transition(FlowState.FAILED)
            logger.error(f"Payment flow aborted in {flow.state.value}", exc_info=True)
            raise

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        dry_run: bool = False,
    ) -> PaymentOutcome:
        """GET request with payment handling"""
        return await self.request_with_payment("GET", url, headers=headers, dry_run=dry_run)

    async def post(
        self,
        url: str,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
        dry_run: bool = False,
    ) -> PaymentOutcome:
        """POST request with payment handling"""
        return await self.request_with_payment(
            "POST", url, headers=headers, content=content, dry_run=dry_run
        )

    async def _run(self, flow: PaymentFlow, dry_run: bool) -> PaymentOutcome:
        logger.info(f"Making {flow.method} request to {flow.url}")
        response = await self._send(flow, flow.headers)
        logger.info(f"Received response: status={response.status_code}")

        if response.status_code == 200:
            flow.transition(FlowState.SUCCESS)
            return PaymentOutcome(
                state=FlowState.SUCCESS,
                message="no payment required",
                response=response,
                flow=flow,
            )
        if response.status_code != 402:
            raise UnexpectedStatusError(response.status_code)

        logger.info("Received 402 Payment Required, processing payment...")
        flow.transition(FlowState.NEGOTIATING)
        parsed = parse_payment_required(response)
        flow.record_negotiation(parsed.protocol_version)

        flow.transition(FlowState.SELECTING)
        selected = select_payment_option(parsed.payment_required, self.has_solana_key)
        flow.record_selection(selected)
        requirement = selected.requirement
        self._check_cap(requirement)

        if dry_run:
            flow.transition(FlowState.DRY_RUN)
            logger.info("Dry run - no payment will be made")
            return PaymentOutcome(
                state=FlowState.DRY_RUN,
                message="dry run, no payment was made",
                protocol_version=parsed.protocol_version,
                payment_required=parsed.payment_required,
                requirement=requirement,
                chain=selected.chain,
                response=response,
                flow=flow,
            )

        mechanism = self._mechanisms.get(selected.chain)
        if mechanism is None:
            raise NoSupportedOption(
                f"no {selected.chain.value} signer configured",
                hint=f"supply a {selected.chain.value} key to pay this endpoint",
            )

        flow.transition(FlowState.SIGNING)
        sign_result = await mechanism.sign(requirement)
        flow.record_signature(sign_result)

        header_name, header_value = encode_sign_result(
            parsed.protocol_version,
            self._resource_for(parsed, flow.url),
            requirement,
            sign_result,
        )

        # Latch before the header is attached
        flow.transition(FlowState.RETRYING)
        retry_headers = dict(flow.headers)
        retry_headers[header_name] = header_value
        logger.info(f"Retrying request with {header_name} header")
        retry_response = await self._send(flow, retry_headers)
        logger.info(f"Received retry response: status={retry_response.status_code}")

        flow.transition(FlowState.VERIFYING)
        settlement = self._read_settlement(retry_response, parsed.protocol_version)

        if retry_response.status_code != 200:
            flow.transition(FlowState.REJECTED)
            raise PaymentRejected(
                retry_response.status_code,
                reason=retry_response.reason_phrase,
                settlement=settlement,
                response=retry_response,
            )

        flow.transition(FlowState.SUCCESS)
        if settlement is not None and settlement.transaction:
            logger.info(f"Payment settled: transaction={settlement.transaction}")
        return PaymentOutcome(
            state=FlowState.SUCCESS,
            message="payment accepted",
            protocol_version=parsed.protocol_version,
            payment_required=parsed.payment_required,
            requirement=requirement,
            chain=selected.chain,
            sign_result=sign_result,
            settlement=settlement,
            response=retry_response,
            flow=flow,
        )

    async def _send(self, flow: PaymentFlow, headers: dict[str, str]) -> httpx.Response:
        try:
            return await self._http_client.request(
                flow.method,
                flow.url,
                headers=headers,
                content=flow.content,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            stage = "retry" if flow.payment_may_be_submitted else "initial"
            raise ConnectivityError(
                f"{stage} request to {flow.url} failed: {e}",
                after_signature=flow.payment_may_be_submitted,
            ) from e

    def _check_cap(self, requirement: PaymentRequirements) -> None:
        if self._max_amount is None:
            return
        amount = requirement.amount_int()
        if amount > self._max_amount:
            raise AmountExceedsCap(amount, self._max_amount)

    @staticmethod
    def _resource_for(parsed: ParseResult, url: str) -> ResourceInfo:
        # v1 carries no top-level resource; describe the requested URL instead
        resource = parsed.payment_required.resource
        if parsed.protocol_version == PROTOCOL_V1 or resource is None:
            return ResourceInfo(url=url)
        return resource

    @staticmethod
    def _read_settlement(response: httpx.Response, version: int) -> SettleResponse | None:
        try:
            return parse_payment_response(response, version)
        except ProtocolError as e:
            logger.warning(f"Ignoring malformed settlement header: {e}")
            return None

"""
Payment flow state machine.

One PaymentFlow tracks a single paid request from the first send to the
settled (or refused) retry. Entering RETRYING is the point of no return:
from then on the payment may have reached the server, and the flow can
only move forward.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from x402_multichain.clients.selection import SelectedOption
from x402_multichain.types import (
    ChainKind,
    PaymentRequired,
    PaymentRequirements,
    SettleResponse,
    SignResult,
)

logger = logging.getLogger(__name__)

NO_PAYMENT_MESSAGE = "Cancelled by user. No payment was made."
PAYMENT_IN_FLIGHT_MESSAGE = (
    "Warning: Payment signature was already sent to the server. "
    "The payment may still be processed. Check your wallet balance."
)


class FlowState(str, Enum):
    """States of a single payment attempt"""

    REQUESTING = "requesting"
    NEGOTIATING = "negotiating"
    SELECTING = "selecting"
    SIGNING = "signing"
    RETRYING = "retrying"
    VERIFYING = "verifying"
    SUCCESS = "success"
    REJECTED = "rejected"
    FAILED = "failed"
    DRY_RUN = "dry_run"


TRANSITIONS: dict[FlowState, frozenset[FlowState]] = {
    FlowState.REQUESTING: frozenset({FlowState.NEGOTIATING, FlowState.SUCCESS, FlowState.FAILED}),
    FlowState.NEGOTIATING: frozenset({FlowState.SELECTING, FlowState.FAILED}),
    FlowState.SELECTING: frozenset({FlowState.SIGNING, FlowState.DRY_RUN, FlowState.FAILED}),
    FlowState.SIGNING: frozenset({FlowState.RETRYING, FlowState.FAILED}),
    # Past the latch: FAILED here means the retry never got a response
    FlowState.RETRYING: frozenset({FlowState.VERIFYING, FlowState.FAILED}),
    FlowState.VERIFYING: frozenset({FlowState.SUCCESS, FlowState.REJECTED}),
    FlowState.SUCCESS: frozenset(),
    FlowState.REJECTED: frozenset(),
    FlowState.FAILED: frozenset(),
    FlowState.DRY_RUN: frozenset(),
}

TERMINAL_STATES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


@dataclass(frozen=True)
class FlowContext:
    """Where a payment attempt stood when it stopped"""

    state: FlowState
    requirement: PaymentRequirements | None = None
    chain: ChainKind | None = None
    protocol_version: int | None = None
    signature_produced: bool = False
    payment_may_be_submitted: bool = False


class PaymentFlow:
    """A single payment attempt and its request parameters.

    The retry reuses ``method``, ``url``, ``headers`` and ``content``
    exactly as recorded here.
    """

    def __init__(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        content: bytes | str | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        self.content = content

        self._state = FlowState.REQUESTING
        self._history: list[FlowState] = [FlowState.REQUESTING]
        self._submitted = False

        self.protocol_version: int | None = None
        self.requirement: PaymentRequirements | None = None
        self.chain: ChainKind | None = None
        self.sign_result: SignResult | None = None

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def history(self) -> list[FlowState]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def signature_produced(self) -> bool:
        return self.sign_result is not None

    @property
    def payment_may_be_submitted(self) -> bool:
        """True once RETRYING has been entered; never resets"""
        return self._submitted

    def can_transition(self, target: FlowState) -> bool:
        return target in TRANSITIONS[self._state]

    def transition(self, target: FlowState) -> None:
        """Move to *target*.

        Raises:
            RuntimeError: the move is not in the transition table
        """
        if not self.can_transition(target):
            raise RuntimeError(f"illegal flow transition: {self._state.value} -> {target.value}")
        logger.debug("Flow %s -> %s", self._state.value, target.value)
        if target == FlowState.RETRYING:
            self._submitted = True
        self._state = target
        self._history.append(target)

    def record_negotiation(self, protocol_version: int) -> None:
        self.protocol_version = protocol_version

    def record_selection(self, selected: SelectedOption) -> None:
        self.requirement = selected.requirement
        self.chain = selected.chain

    def record_signature(self, sign_result: SignResult) -> None:
        self.sign_result = sign_result

    def interrupt_message(self) -> str:
        """What to tell the user if the flow is cancelled right now"""
        if self._submitted:
            return PAYMENT_IN_FLIGHT_MESSAGE
        return NO_PAYMENT_MESSAGE

    def snapshot(self) -> FlowContext:
        return FlowContext(
            state=self._state,
            requirement=self.requirement,
            chain=self.chain,
            protocol_version=self.protocol_version,
            signature_produced=self.signature_produced,
            payment_may_be_submitted=self._submitted,
        )


@dataclass
class PaymentOutcome:
    """Result of a completed payment flow (SUCCESS or DRY_RUN)"""

    state: FlowState
    message: str = ""
    protocol_version: int | None = None
    payment_required: PaymentRequired | None = None
    requirement: PaymentRequirements | None = None
    chain: ChainKind | None = None
    sign_result: SignResult | None = None
    settlement: SettleResponse | None = None
    response: Any = None
    flow: PaymentFlow | None = field(default=None, repr=False)

    @property
    def paid(self) -> bool:
        return self.state == FlowState.SUCCESS and self.sign_result is not None

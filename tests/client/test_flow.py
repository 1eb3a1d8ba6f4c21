"""
PaymentFlow state machine tests
"""

import pytest

from x402_multichain.clients.flow import (
    NO_PAYMENT_MESSAGE,
    PAYMENT_IN_FLIGHT_MESSAGE,
    TERMINAL_STATES,
    TRANSITIONS,
    FlowState,
    PaymentFlow,
)
from x402_multichain.clients.selection import SelectedOption
from x402_multichain.types import ChainKind, PaymentRequirements


def _advance(flow: PaymentFlow, *states: FlowState) -> None:
    for state in states:
        flow.transition(state)


def test_initial_state():
    flow = PaymentFlow("get", "https://x", {"A": "1"}, b"body")
    assert flow.state == FlowState.REQUESTING
    assert flow.method == "GET"
    assert flow.headers == {"A": "1"}
    assert flow.content == b"body"
    assert not flow.payment_may_be_submitted
    assert flow.interrupt_message() == NO_PAYMENT_MESSAGE


def test_headers_copied():
    headers = {"A": "1"}
    flow = PaymentFlow("GET", "https://x", headers)
    headers["B"] = "2"
    assert "B" not in flow.headers


def test_illegal_transition():
    flow = PaymentFlow("GET", "https://x")
    with pytest.raises(RuntimeError, match="illegal flow transition"):
        flow.transition(FlowState.SIGNING)


def test_latch_set_on_retrying():
    flow = PaymentFlow("GET", "https://x")
    _advance(flow, FlowState.NEGOTIATING, FlowState.SELECTING, FlowState.SIGNING)
    assert flow.interrupt_message() == NO_PAYMENT_MESSAGE

    flow.transition(FlowState.RETRYING)

    assert flow.payment_may_be_submitted
    assert flow.interrupt_message() == PAYMENT_IN_FLIGHT_MESSAGE


def test_latch_never_resets():
    flow = PaymentFlow("GET", "https://x")
    _advance(
        flow,
        FlowState.NEGOTIATING,
        FlowState.SELECTING,
        FlowState.SIGNING,
        FlowState.RETRYING,
        FlowState.FAILED,
    )
    assert flow.is_terminal
    assert flow.payment_may_be_submitted
    assert flow.snapshot().payment_may_be_submitted


@pytest.mark.parametrize(
    "target",
    [FlowState.REQUESTING, FlowState.NEGOTIATING, FlowState.SELECTING, FlowState.SIGNING, FlowState.DRY_RUN],
)
def test_no_way_back_after_latch(target):
    flow = PaymentFlow("GET", "https://x")
    _advance(flow, FlowState.NEGOTIATING, FlowState.SELECTING, FlowState.SIGNING, FlowState.RETRYING)
    with pytest.raises(RuntimeError):
        flow.transition(target)


def test_verifying_exits():
    assert TRANSITIONS[FlowState.VERIFYING] == {FlowState.SUCCESS, FlowState.REJECTED}


def test_terminal_states():
    assert TERMINAL_STATES == {
        FlowState.SUCCESS,
        FlowState.REJECTED,
        FlowState.FAILED,
        FlowState.DRY_RUN,
    }


def test_snapshot_records_progress():
    flow = PaymentFlow("GET", "https://x")
    requirement = PaymentRequirements(scheme="exact", network="base", amount="1")
    _advance(flow, FlowState.NEGOTIATING)
    flow.record_negotiation(2)
    flow.transition(FlowState.SELECTING)
    flow.record_selection(SelectedOption(requirement=requirement, chain=ChainKind.EVM))

    context = flow.snapshot()

    assert context.state == FlowState.SELECTING
    assert context.protocol_version == 2
    assert context.requirement is requirement
    assert context.chain == ChainKind.EVM
    assert context.signature_produced is False

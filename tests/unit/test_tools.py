"""Unit tests for tool-call dispatch"""

import json
import pytest
from negotiation_gateway.domain.exceptions import UnknownToolError
from negotiation_gateway.domain.models import NegotiationState
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.domain.tools import dispatch_tool_call, parse_tool_arguments


@pytest.mark.parametrize("raw", [None, "", "{not json", "[1, 2]", "42", '"text"'])
def test_parse_tool_arguments_malformed_is_empty(raw):
    assert parse_tool_arguments(raw) == {}


def test_parse_tool_arguments_object():
    assert parse_tool_arguments('{"frequency": "monthly"}') == {"frequency": "monthly"}


def test_dispatch_evaluate(engine: NegotiationEngine, state: NegotiationState):
    arguments = json.dumps(
        {"proposedAmount": 50, "frequency": "monthly", "termLength": 12, "debtAmount": 2400}
    )
    decision = dispatch_tool_call(engine, state, "evaluatePaymentProposal", arguments)

    assert decision.outcome == "countered"
    assert decision.response.plans[0].amount == 240


def test_dispatch_ignores_debt_in_arguments(engine: NegotiationEngine, state: NegotiationState):
    # the model claims a 600 debt; the session says 2400
    arguments = json.dumps({"proposedAmount": 50, "frequency": "monthly", "termLength": 12, "debtAmount": 600})
    decision = dispatch_tool_call(engine, state, "evaluatePaymentProposal", arguments)

    assert decision.response.plans[0].total_amount == 2400


def test_dispatch_malformed_arguments_fall_back(engine: NegotiationEngine, state: NegotiationState):
    decision = dispatch_tool_call(engine, state, "evaluatePaymentProposal", "{oops")

    assert decision.outcome == "fallback"
    assert decision.response.plans[0].term_length == 6


def test_dispatch_coerces_string_numbers(engine: NegotiationEngine, state: NegotiationState):
    arguments = json.dumps({"amount": "240", "frequency": "monthly", "termLength": "10", "message": "Deal?"})
    decision = dispatch_tool_call(engine, state, "suggestPaymentPlan", arguments)

    assert decision.outcome == "accepted"
    assert decision.response.message == "Deal?"


def test_dispatch_finalize(engine: NegotiationEngine, state: NegotiationState):
    arguments = json.dumps(
        {
            "frequency": "monthly",
            "amount": 240,
            "termLength": 10,
            "totalAmount": 2400,
            "userDetails": {"name": "Sam"},
        }
    )
    decision = dispatch_tool_call(engine, state, "finalizePlan", arguments)

    assert decision.outcome == "finalized"
    assert decision.response.final_plan.payment_link.endswith("termPaymentAmount=240")


def test_dispatch_plan_options_leaves_stage(engine: NegotiationEngine, state: NegotiationState):
    arguments = json.dumps({"canPayNow": True, "immediatePaymentAmount": 400})
    decision = dispatch_tool_call(engine, state, "suggestPaymentPlans", arguments)

    assert decision.outcome == "options"
    assert decision.state.stage == 0
    assert all(plan.total_amount == 2000 for plan in decision.response.plans)


def test_dispatch_unknown_tool(engine: NegotiationEngine, state: NegotiationState):
    with pytest.raises(UnknownToolError):
        dispatch_tool_call(engine, state, "wireMoney", "{}")

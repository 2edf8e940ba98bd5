"""Dispatch of orchestrator tool calls onto the negotiation engine"""

import json
import logging
from typing import Any, Callable, Dict

from negotiation_gateway.domain.exceptions import UnknownToolError
from negotiation_gateway.domain.models import ChatResponse, Decision, NegotiationState, PlanProposal
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.domain.plan_options import suggest_plan_options


def parse_tool_arguments(raw_arguments: str | None) -> Dict[str, Any]:
    """
    Decode a tool call's JSON argument string.

    Malformed or non-object JSON yields an empty payload so validation
    downstream can answer with a corrective plan instead of failing the turn.
    """
    if not raw_arguments:
        return {}
    try:
        payload = json.loads(raw_arguments)
    except (json.JSONDecodeError, TypeError) as e:
        logging.warning(f"Failed to parse tool arguments: {e}")
        return {}
    if not isinstance(payload, dict):
        logging.warning(f"Tool arguments are not an object: {type(payload).__name__}")
        return {}
    return payload


def coerce_float(value: Any) -> float:
    """Best-effort number; anything unusable becomes 0 and fails validation later"""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def coerce_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def proposal_from_arguments(payload: Dict[str, Any], amount_key: str = "amount") -> PlanProposal:
    total = payload.get("totalAmount")
    return PlanProposal(
        frequency=str(payload.get("frequency") or ""),
        amount=coerce_float(payload.get(amount_key)),
        term_length=coerce_int(payload.get("termLength")),
        total_amount=coerce_float(total) if total is not None else None,
    )


def _evaluate(engine: NegotiationEngine, state: NegotiationState, payload: Dict[str, Any]) -> Decision:
    return engine.evaluate_and_negotiate(
        state,
        proposal_from_arguments(payload, amount_key="proposedAmount"),
        situation_text=str(payload.get("userFinancialContext") or ""),
    )


def _suggest(engine: NegotiationEngine, state: NegotiationState, payload: Dict[str, Any]) -> Decision:
    return engine.suggest_plan(
        state,
        proposal_from_arguments(payload),
        situation_text=str(payload.get("financialSituation") or ""),
        message=str(payload.get("message") or ""),
    )


def _finalize(engine: NegotiationEngine, state: NegotiationState, payload: Dict[str, Any]) -> Decision:
    user_details = payload.get("userDetails")
    return engine.finalize_plan(
        state,
        proposal_from_arguments(payload),
        user_details=user_details if isinstance(user_details, dict) else None,
        message=str(payload.get("message") or ""),
    )


def _options(engine: NegotiationEngine, state: NegotiationState, payload: Dict[str, Any]) -> Decision:
    immediate = coerce_float(payload.get("immediatePaymentAmount")) if payload.get("canPayNow") else 0.0
    plans = suggest_plan_options(
        state.debt_amount,
        user_income=coerce_float(payload.get("userIncome")),
        immediate_payment=immediate,
        rates=engine.policy.rates,
    )
    return Decision(
        response=ChatResponse(
            message="Here are a few ways to resolve your balance.",
            display_kind="paymentPlans",
            plans=plans,
        ),
        state=state,
        outcome="options",
    )


# Tool names as registered with the text-completion service
TOOLS: Dict[str, Callable[[NegotiationEngine, NegotiationState, Dict[str, Any]], Decision]] = {
    "evaluatePaymentProposal": _evaluate,
    "suggestPaymentPlan": _suggest,
    "finalizePlan": _finalize,
    "suggestPaymentPlans": _options,
}


def dispatch_tool_call(
    engine: NegotiationEngine,
    state: NegotiationState,
    name: str,
    raw_arguments: str | None,
) -> Decision:
    """
    Run one tool call against the engine.

    The debt always comes from the conversation state; a debtAmount in the
    arguments is ignored.

    Raises:
        UnknownToolError: If no tool is registered under `name`
    """
    handler = TOOLS.get(name)
    if handler is None:
        raise UnknownToolError(f"Unknown tool: {name}")
    return handler(engine, state, parse_tool_arguments(raw_arguments))

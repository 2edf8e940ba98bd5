"""Sanitization boundary for assistant-authored text that mentions plan numbers"""

from dataclasses import dataclass
from typing import Union

from negotiation_gateway.domain.models import Decision, NegotiationState
from negotiation_gateway.domain.negotiation import NegotiationEngine
from negotiation_gateway.domain.offer_extractor import extract


@dataclass(frozen=True)
class PassThrough:
    """Text contained no plan; show it as written"""

    text: str


@dataclass(frozen=True)
class Replacement:
    """Text contained a plan; show the validated decision instead"""

    decision: Decision


InterceptResult = Union[PassThrough, Replacement]


def intercept_implicit_payment_offers(
    engine: NegotiationEngine,
    state: NegotiationState,
    raw_text: str,
    debt_amount: float | None = None,
) -> InterceptResult:
    """
    Re-validate any payment plan the text generator wrote into prose.

    A plan found in the text is routed through suggest_plan with the original
    text as the display message, so invented numbers never reach the user
    unchecked. Text without a plan passes through and the state is unchanged.
    """
    debt = state.debt_amount if debt_amount is None else debt_amount

    result = extract(raw_text, debt)
    if not result.found:
        return PassThrough(text=raw_text)

    decision = engine.suggest_plan(
        state,
        result.plan,
        debt_amount=debt,
        message=raw_text,
    )
    return Replacement(decision=decision)

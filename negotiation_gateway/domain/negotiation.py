"""Negotiation decision engine - validates, corrects and finalizes payment plans"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from negotiation_gateway.config import Settings, settings as default_settings
from negotiation_gateway.domain.installments import covers_debt, reconcile_term, split_installments
from negotiation_gateway.domain.minimum_payment import minimum_payment
from negotiation_gateway.domain.models import (
    FREQUENCIES,
    ChatResponse,
    Decision,
    FallbackApplied,
    FinalPaymentPlan,
    NegotiationState,
    PaymentPlan,
    PlanProposal,
    ProposalCheck,
    ValidProposal,
)
from negotiation_gateway.utils.formatting import describe_term, format_money, format_number


@dataclass(frozen=True)
class NegotiationPolicy:
    """Tunable constants behind the negotiation rules"""

    rates: Dict[str, float] = field(
        default_factory=lambda: {"monthly": 0.08, "biweekly": 0.04, "weekly": 0.02}
    )
    early_stage_limit: int = 2
    hardship_keywords: Tuple[str, ...] = ("hardship", "laid off", "medical", "difficult")
    fallback_term_length: int = 6
    evaluate_counter_multiplier: float = 1.25
    hardship_counter_multiplier: float = 1.10
    suggest_floor_multiplier: float = 1.5
    suggest_hardship_multiplier: float = 1.2
    payment_link_domain: str = "collectwise.com"

    @classmethod
    def from_settings(cls, config: Settings) -> "NegotiationPolicy":
        return cls(
            rates={
                "monthly": config.monthly_rate,
                "biweekly": config.biweekly_rate,
                "weekly": config.weekly_rate,
            },
            early_stage_limit=config.early_stage_limit,
            hardship_keywords=tuple(config.hardship_keywords),
            fallback_term_length=config.fallback_term_length,
            evaluate_counter_multiplier=config.evaluate_counter_multiplier,
            hardship_counter_multiplier=config.hardship_counter_multiplier,
            suggest_floor_multiplier=config.suggest_floor_multiplier,
            suggest_hardship_multiplier=config.suggest_hardship_multiplier,
            payment_link_domain=config.payment_link_domain,
        )


def _is_positive(value: Any) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value > 0


def check_proposal(proposal: PlanProposal) -> ProposalCheck:
    """Separate usable proposals from ones that need the default plan"""
    if proposal.frequency not in FREQUENCIES:
        return FallbackApplied(reason=f"unknown frequency '{proposal.frequency}'")
    if not _is_positive(proposal.amount):
        return FallbackApplied(reason="non-positive amount")
    if not _is_positive(proposal.term_length) or proposal.term_length < 1:
        return FallbackApplied(reason="non-positive term length")

    total = proposal.total_amount
    if not _is_positive(total):
        total = proposal.amount * proposal.term_length
    return ValidProposal(
        plan=PaymentPlan(
            frequency=proposal.frequency,
            amount=proposal.amount,
            term_length=proposal.term_length,
            total_amount=total,
        )
    )


def build_payment_link(domain: str, term_length: int, total_amount: float, amount: float) -> str:
    return (
        f"{domain}/payments?termLength={term_length}"
        f"&totalDebtAmount={format_number(total_amount)}"
        f"&termPaymentAmount={format_number(amount)}"
    )


def _scaled(min_payment: float, multiplier: float) -> int:
    return math.ceil(round(min_payment * multiplier, 6))


def _pays_exactly(amount: float, term_length: int, debt_amount: float) -> bool:
    return math.isclose(amount * term_length, debt_amount, rel_tol=0.0, abs_tol=1e-9)


class NegotiationEngine:
    """
    Deterministic rules applied to every plan that reaches the user.

    Each entry point takes the conversation's current NegotiationState and
    returns a Decision holding the response and the next state. The input
    state is never mutated.
    """

    def __init__(self, policy: Optional[NegotiationPolicy] = None):
        self.policy = policy or NegotiationPolicy.from_settings(default_settings)

    def minimum_payment(self, frequency: str, debt_amount: float) -> int:
        return minimum_payment(frequency, debt_amount, self.policy.rates)

    def is_hardship(self, situation_text: str | None) -> bool:
        text = (situation_text or "").lower()
        return any(keyword in text for keyword in self.policy.hardship_keywords)

    def evaluate_and_negotiate(
        self,
        state: NegotiationState,
        proposal: PlanProposal,
        debt_amount: float | None = None,
        situation_text: str = "",
    ) -> Decision:
        """
        Judge a plan the user proposed.

        Order of checks:
        1. Unusable proposal → default plan
        2. Doesn't cover the debt → raise the amount (if under the floor) or the term
        3. Covers but under the floor → counter above the floor, softer on hardship
        4. Covers with overshoot → trim the term
        5. Exact and above the floor → accept
        """
        debt = state.debt_amount if debt_amount is None else debt_amount

        check = check_proposal(proposal)
        if isinstance(check, FallbackApplied):
            return self._fallback(state, debt, check.reason)

        plan = check.plan
        min_payment = self.minimum_payment(plan.frequency, debt)

        if not covers_debt(plan.amount, plan.term_length, debt):
            if plan.amount < min_payment:
                counter_amount = _scaled(min_payment, self.policy.evaluate_counter_multiplier)
                term_length = reconcile_term(counter_amount, debt)
                system_message = (
                    f"That plan only covers {format_money(plan.amount * plan.term_length)} of the "
                    f"{format_money(debt)} balance, and the payment is below what we can accept. "
                    f"We can offer {format_money(counter_amount)} {plan.frequency} instead."
                )
            else:
                term_length = reconcile_term(plan.amount, debt)
                system_message = (
                    f"To cover the full {format_money(debt)} balance at {format_money(plan.amount)} "
                    f"{plan.frequency}, the plan needs to run {describe_term(plan.frequency, term_length)}."
                )
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        if plan.amount < min_payment:
            if self.is_hardship(situation_text):
                multiplier = self.policy.hardship_counter_multiplier
                lead = "We understand things are difficult right now."
            else:
                multiplier = self.policy.evaluate_counter_multiplier
                lead = "That payment is lower than we can accept."
            counter_amount = _scaled(min_payment, multiplier)
            term_length = reconcile_term(counter_amount, debt)
            system_message = f"{lead} Could you manage {format_money(counter_amount)} {plan.frequency}?"
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        if not _pays_exactly(plan.amount, plan.term_length, debt):
            term_length = reconcile_term(plan.amount, debt)
            system_message = (
                f"At {format_money(plan.amount)} {plan.frequency} the balance is paid off in "
                f"{describe_term(plan.frequency, term_length)}, so we've shortened the plan."
            )
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        accepted = PaymentPlan(
            frequency=plan.frequency,
            amount=plan.amount,
            term_length=plan.term_length,
            total_amount=debt,
        )
        return Decision(
            response=ChatResponse(
                message=(
                    f"{format_money(plan.amount)} {plan.frequency} for "
                    f"{describe_term(plan.frequency, plan.term_length)} works. Shall we confirm it?"
                ),
                display_kind="paymentPlans",
                plans=[accepted],
            ),
            state=state.advance(),
            outcome="accepted",
        )

    def suggest_plan(
        self,
        state: NegotiationState,
        proposal: PlanProposal,
        debt_amount: float | None = None,
        situation_text: str = "",
        message: str = "",
    ) -> Decision:
        """
        Validate a plan the assistant wants to put forward.

        The amount is kept whenever only the term is wrong. Under-floor and
        hardship escalation apply only while stage < early_stage_limit;
        after that finalize_plan is the last line of defense.

        The caller's message is shown only when the plan stands. A counter
        replaces it with the engine's own wording, final-payment note included.
        """
        debt = state.debt_amount if debt_amount is None else debt_amount
        caller_message = message or None

        check = check_proposal(proposal)
        if isinstance(check, FallbackApplied):
            return self._fallback(state, debt, check.reason)

        plan = check.plan
        min_payment = self.minimum_payment(plan.frequency, debt)
        early = state.stage < self.policy.early_stage_limit

        if not _pays_exactly(plan.amount, plan.term_length, debt):
            term_length = reconcile_term(plan.amount, debt)
            system_message = (
                f"At {format_money(plan.amount)} {plan.frequency}, covering the "
                f"{format_money(debt)} balance takes {describe_term(plan.frequency, term_length)}."
            )
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        if plan.amount < min_payment and early:
            counter_amount = _scaled(min_payment, self.policy.suggest_floor_multiplier)
            term_length = reconcile_term(counter_amount, debt)
            system_message = (
                f"How about {format_money(counter_amount)} {plan.frequency}? That clears the "
                f"balance in {describe_term(plan.frequency, term_length)}."
            )
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        if self.is_hardship(situation_text) and early:
            counter_amount = _scaled(min_payment, self.policy.suggest_hardship_multiplier)
            term_length = reconcile_term(counter_amount, debt)
            system_message = (
                f"Given your situation, we can do {format_money(counter_amount)} {plan.frequency} "
                f"for {describe_term(plan.frequency, term_length)}."
            )
            return self._counter(state, system_message, plan.frequency, term_length, debt)

        accepted = PaymentPlan(
            frequency=plan.frequency,
            amount=plan.amount,
            term_length=plan.term_length,
            total_amount=debt,
        )
        return Decision(
            response=ChatResponse(
                message=caller_message
                or (
                    f"Here's a plan: {format_money(plan.amount)} {plan.frequency} for "
                    f"{describe_term(plan.frequency, plan.term_length)}."
                ),
                display_kind="paymentPlans",
                plans=[accepted],
            ),
            state=state.advance(),
            outcome="accepted",
        )

    def finalize_plan(
        self,
        state: NegotiationState,
        plan: PlanProposal,
        user_details: Optional[Dict[str, Any]] = None,
        message: str = "",
    ) -> Decision:
        """
        Turn an agreed plan into a final agreement with a payment link.

        The minimum-payment floor is checked against the plan's own total
        with no stage allowance. An under-floor plan is refused and a
        corrected plan returned instead; the stage is left alone. Success
        resets the stage to 0.
        """
        total = plan.total_amount if _is_positive(plan.total_amount) else state.debt_amount

        check = check_proposal(
            PlanProposal(
                frequency=plan.frequency,
                amount=plan.amount,
                term_length=plan.term_length,
                total_amount=total,
            )
        )
        if isinstance(check, FallbackApplied):
            corrected = self._floor_plan("monthly", total)
            return Decision(
                response=ChatResponse(
                    message=(
                        "We couldn't finalize that plan as submitted. The closest plan we can set up is "
                        f"{format_money(corrected.amount)} monthly for "
                        f"{describe_term('monthly', corrected.term_length)}."
                    ),
                    display_kind="paymentPlans",
                    plans=[corrected],
                ),
                state=state,
                outcome="fallback",
                fallback_reason=check.reason,
            )

        agreed = check.plan
        min_payment = self.minimum_payment(agreed.frequency, agreed.total_amount)

        if agreed.amount < min_payment:
            corrected = self._floor_plan(agreed.frequency, agreed.total_amount)
            return Decision(
                response=ChatResponse(
                    message=(
                        f"We can't finalize {format_money(agreed.amount)} {agreed.frequency}; the minimum "
                        f"{agreed.frequency} payment on {format_money(agreed.total_amount)} is "
                        f"{format_money(min_payment)}. At that amount the plan runs "
                        f"{describe_term(agreed.frequency, corrected.term_length)}."
                    ),
                    display_kind="paymentPlans",
                    plans=[corrected],
                ),
                state=state,
                outcome="refused",
            )

        final_plan = FinalPaymentPlan(
            frequency=agreed.frequency,
            amount=agreed.amount,
            term_length=agreed.term_length,
            total_amount=agreed.total_amount,
            payment_link=build_payment_link(
                self.policy.payment_link_domain,
                agreed.term_length,
                agreed.total_amount,
                agreed.amount,
            ),
        )

        name = (user_details or {}).get("name")
        default_message = "Your payment plan is confirmed. Use the link below to set up your first payment."
        if name:
            default_message = f"Thank you, {name}! {default_message}"

        return Decision(
            response=ChatResponse(
                message=message or default_message,
                display_kind="finalPlan",
                final_plan=final_plan,
            ),
            state=state.reset(),
            outcome="finalized",
        )

    def _floor_plan(self, frequency: str, total_amount: float) -> PaymentPlan:
        min_payment = self.minimum_payment(frequency, total_amount)
        return PaymentPlan(
            frequency=frequency,
            amount=min_payment,
            term_length=reconcile_term(min_payment, total_amount),
            total_amount=total_amount,
        )

    def _fallback(self, state: NegotiationState, debt_amount: float, reason: str) -> Decision:
        term_length = self.policy.fallback_term_length
        system_message = (
            "Let's start from a standard plan: "
            f"{describe_term('monthly', term_length)} covering the {format_money(debt_amount)} balance."
        )
        response, next_state = self.build_counter_offer(
            state, system_message, "monthly", term_length, debt_amount
        )
        return Decision(response=response, state=next_state, outcome="fallback", fallback_reason=reason)

    def _counter(
        self,
        state: NegotiationState,
        system_message: str,
        frequency: str,
        term_length: int,
        total_amount: float,
        caller_message: str | None = None,
    ) -> Decision:
        response, next_state = self.build_counter_offer(
            state, system_message, frequency, term_length, total_amount, caller_message
        )
        return Decision(response=response, state=next_state, outcome="countered")

    def build_counter_offer(
        self,
        state: NegotiationState,
        system_message: str,
        frequency: str,
        term_length: int,
        total_amount: float,
        caller_message: str | None = None,
    ) -> Tuple[ChatResponse, NegotiationState]:
        """
        Shared counter-offer construction.

        The displayed per-term amount is the regular installment; when the
        last installment differs and the caller did not author its own
        message, the system message discloses the final payment. Advances
        the stage by one.
        """
        regular_amount, final_amount = split_installments(total_amount, term_length)

        message = system_message
        if final_amount != regular_amount and caller_message is None:
            message += (
                f" That's {format_money(regular_amount)} per payment, with a final payment of "
                f"{format_money(final_amount)}."
            )

        plan = PaymentPlan(
            frequency=frequency,
            amount=regular_amount,
            term_length=term_length,
            total_amount=total_amount,
        )
        response = ChatResponse(message=message, display_kind="paymentPlans", plans=[plan])
        return response, state.advance()

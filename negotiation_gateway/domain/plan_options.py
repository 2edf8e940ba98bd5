"""Starter menu of payment plans for a debt"""

import math
from typing import Dict, List, Optional

from negotiation_gateway.domain.installments import reconcile_term
from negotiation_gateway.domain.minimum_payment import minimum_payment
from negotiation_gateway.domain.models import PaymentPlan

WEEKLY_OPTION_CEILING = 2000
MAX_INCOME_BASED_TERMS = 12


def _option(frequency: str, amount: float, term_length: int, total: float, rates: Optional[Dict[str, float]]) -> PaymentPlan:
    # Options never undercut the floor, so any of them can be finalized as offered
    floor = minimum_payment(frequency, total, rates)
    if amount < floor:
        amount = floor
        term_length = reconcile_term(amount, total)
    return PaymentPlan(frequency=frequency, amount=amount, term_length=term_length, total_amount=total)


def suggest_plan_options(
    debt_amount: float,
    user_income: float = 0,
    immediate_payment: float = 0,
    rates: Optional[Dict[str, float]] = None,
) -> List[PaymentPlan]:
    """
    Build a handful of plans to open the negotiation with.

    Options:
    - 3 monthly payments
    - 6 monthly payments
    - Income-based monthly plan (only when income is known; capped at 12
      terms, with the amount raised to cover the balance if the cap bites)
    - 12 biweekly payments
    - 16 weekly payments (only for balances up to $2000)

    Any immediate payment is taken off the balance first.
    """
    remaining = debt_amount - max(immediate_payment, 0)
    if remaining <= 0:
        return []

    plans = [
        _option("monthly", math.ceil(remaining / 3), 3, remaining, rates),
        _option("monthly", math.ceil(remaining / 6), 6, remaining, rates),
    ]

    if user_income > 0:
        affordability = min(0.2, remaining / (user_income * 6))
        preferred = min(user_income * affordability, remaining / 3)
        amount = math.ceil(round(preferred, 6))
        term_length = min(reconcile_term(amount, remaining), MAX_INCOME_BASED_TERMS)
        amount = max(amount, math.ceil(remaining / term_length))
        plans.append(_option("monthly", amount, term_length, remaining, rates))

    plans.append(_option("biweekly", math.ceil(remaining / 12), 12, remaining, rates))

    if remaining <= WEEKLY_OPTION_CEILING:
        plans.append(_option("weekly", math.ceil(remaining / 16), 16, remaining, rates))

    return plans

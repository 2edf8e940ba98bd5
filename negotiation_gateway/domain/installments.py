"""Plan arithmetic: debt coverage, term reconciliation and installment splitting"""

import math
from datetime import date
from typing import List, Tuple

from negotiation_gateway.domain.exceptions import InvalidPlanError
from negotiation_gateway.domain.models import Installment, PaymentPlan
from negotiation_gateway.utils.date_utils import advance_by_frequency

# Ten years of weekly payments
MAX_SCHEDULED_INSTALLMENTS = 520


def covers_debt(amount: float, term_length: int, debt_amount: float) -> bool:
    """True when the plan pays at least the full debt"""
    return amount * term_length >= debt_amount


def reconcile_term(amount: float, debt_amount: float) -> int:
    """
    Number of terms needed at `amount` per term to cover the debt.

    Used whenever the amount is accepted but the term has to move so the
    product covers the debt.
    """
    if amount <= 0:
        raise InvalidPlanError(f"Cannot reconcile term for amount {amount}")
    return math.ceil(round(debt_amount / amount, 9))


def split_installments(total_amount: float, term_length: int) -> Tuple[float, float]:
    """
    Split a total into `term_length` installments.

    Every installment but the last is floor(total / term); the last absorbs
    the remainder so the installments always sum to the total exactly.

    Example:
        1000 over 3 → regular 333, final 334
    """
    if term_length < 1:
        raise InvalidPlanError(f"Cannot split over {term_length} terms")

    regular_amount = math.floor(total_amount / term_length)
    final_amount = total_amount - regular_amount * (term_length - 1)
    return regular_amount, final_amount


def generate_installment_schedule(plan: PaymentPlan, start_date: date | None = None) -> List[Installment]:
    """
    Dated repayment schedule for an agreed plan.

    Requirements:
    - One installment per term, spaced by the plan frequency
      (7 days, 14 days, or one calendar month)
    - Every installment but the last is the agreed per-term amount
    - Last installment is whatever remains of the total

    Plans that can't be laid out that way get no schedule: terms beyond
    MAX_SCHEDULED_INSTALLMENTS, or a plan whose earlier installments
    already pay the whole total.

    Args:
        plan: Plan to lay out
        start_date: First due date (default: one interval from today)

    Returns:
        List of Installment objects with due dates and amounts
    """
    if plan.term_length < 1 or plan.total_amount <= 0 or plan.amount <= 0:
        return []
    if plan.term_length > MAX_SCHEDULED_INSTALLMENTS:
        return []

    final_amount = plan.total_amount - plan.amount * (plan.term_length - 1)
    if final_amount <= 0:
        return []

    if start_date is None:
        start_date = advance_by_frequency(date.today(), plan.frequency, 1)

    installments = []
    for i in range(plan.term_length):
        due_date = advance_by_frequency(start_date, plan.frequency, i)
        amount = final_amount if i == plan.term_length - 1 else plan.amount
        installments.append(Installment(due_date=due_date, amount=amount))

    return installments

"""Detection of payment plans embedded in free-form text"""

import re
from dataclasses import dataclass
from typing import Optional

from negotiation_gateway.domain.installments import reconcile_term
from negotiation_gateway.domain.models import PlanProposal

AMOUNT_PATTERN = re.compile(r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)(\.\d{1,2})?")
FREQUENCY_PATTERN = re.compile(r"\b(bi-?weekly|weekly|monthly)\b", re.IGNORECASE)
TERM_PATTERN = re.compile(
    r"\b(?:for|over)\s+(\d+)\s+(?:weeks?|months?|payments?|installments?)\b",
    re.IGNORECASE,
)


@dataclass
class ExtractionResult:
    found: bool
    plan: Optional[PlanProposal] = None


def _parse_amount(text: str) -> Optional[float]:
    match = AMOUNT_PATTERN.search(text)
    if not match:
        return None
    whole, cents = match.groups()
    value = float(whole.replace(",", "") + (cents or ""))
    return int(value) if value.is_integer() else value


def _parse_frequency(text: str) -> Optional[str]:
    match = FREQUENCY_PATTERN.search(text)
    if not match:
        return None
    return match.group(1).lower().replace("-", "")


def extract(text: str, debt_amount: float) -> ExtractionResult:
    """
    Pull a candidate payment plan out of free text.

    Needs both a dollar amount and a frequency keyword. A missing
    "for/over N weeks|months|payments|installments" phrase defaults the term
    to whatever covers the debt at the extracted amount.

    Example:
        "I can do $300 monthly for 6 months" → monthly, 300, 6 terms
    """
    if not text:
        return ExtractionResult(found=False)

    amount = _parse_amount(text)
    frequency = _parse_frequency(text)
    if amount is None or amount <= 0 or frequency is None:
        return ExtractionResult(found=False)

    term_match = TERM_PATTERN.search(text)
    if term_match:
        term_length = int(term_match.group(1))
    else:
        term_length = reconcile_term(amount, debt_amount)

    return ExtractionResult(
        found=True,
        plan=PlanProposal(
            frequency=frequency,
            amount=amount,
            term_length=term_length,
            total_amount=amount * term_length,
        ),
    )

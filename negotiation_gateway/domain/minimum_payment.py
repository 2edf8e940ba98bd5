"""Minimum per-term payment floor"""

import math
from typing import Dict, Optional

from negotiation_gateway.config import settings


def default_rates() -> Dict[str, float]:
    return {
        "monthly": settings.monthly_rate,
        "biweekly": settings.biweekly_rate,
        "weekly": settings.weekly_rate,
    }


def minimum_payment(frequency: str, debt_amount: float, rates: Optional[Dict[str, float]] = None) -> int:
    """
    Smallest acceptable per-term payment for a debt.

    Rates (share of the debt per term):
    - monthly: 8%
    - biweekly: 4%
    - weekly: 2%

    Unknown frequencies use the monthly rate. The result is rounded up to
    the next whole currency unit.
    """
    rates = rates or default_rates()
    rate = rates.get(frequency, rates["monthly"])
    # round() strips float noise such as 2400 * 0.07 == 168.00000000000003
    return math.ceil(round(debt_amount * rate, 6))

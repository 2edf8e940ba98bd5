"""Unit tests for the starter plan menu"""

from negotiation_gateway.domain.minimum_payment import minimum_payment
from negotiation_gateway.domain.plan_options import suggest_plan_options


def test_plan_options_default_menu():
    plans = suggest_plan_options(2400)

    assert [(p.frequency, p.term_length) for p in plans] == [
        ("monthly", 3),
        ("monthly", 6),
        ("biweekly", 12),
    ]
    assert plans[0].amount == 800
    assert plans[1].amount == 400
    assert plans[2].amount == 200
    assert all(p.total_amount == 2400 for p in plans)


def test_plan_options_small_balance_adds_weekly():
    plans = suggest_plan_options(1600)

    weekly = plans[-1]
    assert (weekly.frequency, weekly.amount, weekly.term_length) == ("weekly", 100, 16)


def test_plan_options_income_based_plan():
    plans = suggest_plan_options(2400, user_income=3000)

    # affordability min(0.2, 2400 / 18000) = 0.1333 → $400 monthly for 6 months
    income_plan = plans[2]
    assert income_plan.frequency == "monthly"
    assert income_plan.amount == 400
    assert income_plan.term_length == 6


def test_plan_options_immediate_payment_reduces_balance():
    plans = suggest_plan_options(2400, immediate_payment=600)

    assert all(p.total_amount == 1800 for p in plans)
    assert plans[0].amount == 600


def test_plan_options_never_below_floor():
    for debt in (500, 2400, 10000):
        for plan in suggest_plan_options(debt, user_income=800):
            assert plan.amount >= minimum_payment(plan.frequency, plan.total_amount)
            assert plan.amount * plan.term_length >= plan.total_amount


def test_plan_options_nothing_left_to_pay():
    assert suggest_plan_options(500, immediate_payment=500) == []

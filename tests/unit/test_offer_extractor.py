"""Unit tests for implicit offer extraction"""

from negotiation_gateway.domain.offer_extractor import extract


def test_extract_full_offer():
    result = extract("I can do $300 monthly for 6 months", 2400)

    assert result.found is True
    assert result.plan.frequency == "monthly"
    assert result.plan.amount == 300
    assert result.plan.term_length == 6
    assert result.plan.total_amount == 1800


def test_extract_no_offer():
    result = extract("I cannot pay anything right now", 2400)

    assert result.found is False
    assert result.plan is None


def test_extract_defaults_term_to_cover_debt():
    result = extract("How about $250 monthly?", 2400)

    assert result.found is True
    assert result.plan.term_length == 10  # ceil(2400 / 250)


def test_extract_thousands_separator_and_cents():
    result = extract("We could set up $1,200.50 biweekly over 2 payments", 2400)

    assert result.plan.amount == 1200.5
    assert result.plan.frequency == "biweekly"
    assert result.plan.term_length == 2


def test_extract_hyphenated_biweekly_case_insensitive():
    result = extract("Pay $100 Bi-Weekly for 24 Installments", 2400)

    assert result.plan.frequency == "biweekly"
    assert result.plan.term_length == 24


def test_extract_weekly_not_confused_with_biweekly():
    result = extract("$50 weekly over 48 weeks", 2400)

    assert result.plan.frequency == "weekly"
    assert result.plan.term_length == 48


def test_extract_needs_frequency():
    assert extract("I can pay $300", 2400).found is False


def test_extract_needs_dollar_amount():
    assert extract("monthly payments for 6 months", 2400).found is False


def test_extract_ignores_zero_amount():
    assert extract("$0 monthly", 2400).found is False


def test_extract_empty_text():
    assert extract("", 2400).found is False

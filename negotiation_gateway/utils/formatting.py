"""Number and plan text formatting"""

TERM_UNITS = {"weekly": "week", "biweekly": "biweekly payment", "monthly": "month"}


def format_number(value: float) -> str:
    """Render a number the way the payment service expects: 300, not 300.0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_money(value: float) -> str:
    if isinstance(value, float) and not value.is_integer():
        return f"${value:,.2f}"
    return f"${int(value):,}"


def describe_term(frequency: str, term_length: int) -> str:
    """'10 months', '1 week', '12 biweekly payments'"""
    unit = TERM_UNITS.get(frequency, "payment")
    return f"{term_length} {unit}{'' if term_length == 1 else 's'}"

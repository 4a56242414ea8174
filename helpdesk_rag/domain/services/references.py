"""Human-facing reference numbers (cancellation ids, refund ids, tickets)."""

from datetime import datetime


def mint_reference(prefix: str, now: datetime, digits: int = 6) -> str:
    """``PREFIX-<last n digits of epoch millis>``; unique enough for support tickets."""
    millis = str(int(now.timestamp() * 1000))
    return f"{prefix}-{millis[-digits:]}"


def format_amount(amount: float, currency: str = "₹") -> str:
    if float(amount).is_integer():
        return f"{currency}{int(amount):,}"
    return f"{currency}{amount:,.2f}"

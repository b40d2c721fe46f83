"""Rupee amounts are kept to two decimal places (paise)."""
from app.core.config import settings


def round_money(amount: float) -> float:
    return round(amount, 2)


def format_money(amount: float) -> str:
    return f"{settings.currency_prefix}{amount:,.2f}"

"""Calendar arithmetic shared by reports, expenditures and pending bills.

Every range is half-open: ``start <= d < end``. A financial year ``N`` runs
from 1 April of ``N`` up to (not including) 1 April of ``N + 1``.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import List, Tuple

FY_START_MONTH = 4

MONTH_NAMES = list(calendar.month_name)[1:]


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime(day.year, day.month, day.day)
    return start, start + timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def financial_year_of(day: date) -> int:
    """Jan-Mar belong to the financial year that started the previous April."""
    return day.year - 1 if day.month < FY_START_MONTH else day.year


def financial_year_label(financial_year: int) -> str:
    """2024 -> "2024-25"."""
    return f"{financial_year}-{str(financial_year + 1)[-2:]}"


def financial_year_months(financial_year: int) -> List[Tuple[int, int]]:
    """The twelve (year, month) pairs of a financial year, April first."""
    months = []
    for offset in range(12):
        month = (FY_START_MONTH - 1 + offset) % 12 + 1
        year = financial_year if month >= FY_START_MONTH else financial_year + 1
        months.append((year, month))
    return months


def financial_year_bounds(financial_year: int) -> Tuple[datetime, datetime]:
    return datetime(financial_year, FY_START_MONTH, 1), datetime(financial_year + 1, FY_START_MONTH, 1)


def parse_month(value: str) -> Tuple[int, int]:
    """Parse "YYYY-MM"; raises ValueError on anything else."""
    year_str, _, month_str = value.partition("-")
    year, month = int(year_str), int(month_str)
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {value}")
    return year, month


def in_range(value: datetime, start: datetime, end: datetime) -> bool:
    return start <= value < end

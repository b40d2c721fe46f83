from datetime import date
from typing import Dict, List, Optional, Tuple

from app.core.exceptions import DatabaseError
from app.core.logging import logger
from app.models.models import FinancialYearMonth, FinancialYearSummary
from app.repositories.store import Store
from app.services import periods


def get_current_financial_year(today: Optional[date] = None) -> int:
    return periods.financial_year_of(today or date.today())


def get_financial_year_summary(store: Store, financial_year: int) -> FinancialYearSummary:
    """Expenditure per month from April ``financial_year`` to March of the next year."""
    months = periods.financial_year_months(financial_year)
    try:
        rows = store.expenditures.list_for_months(months)
    except Exception as e:
        logger.error("Failed to fetch financial year %s summary: %s", financial_year, e)
        raise DatabaseError("Failed to fetch financial year summary")

    totals: Dict[Tuple[int, int], float] = {key: 0.0 for key in months}
    for row in rows:
        key = (row["year"], row["month"])
        if key in totals:
            totals[key] += row["amount"]

    breakdown = [
        FinancialYearMonth(month=month, year=year, month_name=periods.month_name(month), amount=totals[(year, month)])
        for year, month in months
    ]
    return FinancialYearSummary(
        financial_year=periods.financial_year_label(financial_year),
        total_amount=sum(totals.values()),
        monthly_breakdown=breakdown,
    )


def get_available_financial_years(store: Store) -> List[int]:
    try:
        years = store.expenditures.distinct_years()
    except Exception as e:
        logger.error("Failed to fetch available financial years: %s", e)
        raise DatabaseError("Failed to fetch available financial years")

    # Jan-Mar of a calendar year belong to the previous financial year
    financial_years = set()
    for year in years:
        financial_years.add(year)
        if year > 2000:
            financial_years.add(year - 1)
    return sorted(financial_years, reverse=True)

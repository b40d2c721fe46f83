"""Daily, monthly, yearly and financial-year profit reports.

Each report loads its period once and builds the breakdown by re-filtering
those rows per sub-period. ``total_sales`` counts only what customers have
actually paid and ``total_purchases`` only what suppliers have been paid.
"""
from datetime import date
from typing import Any, Dict, Iterable, List

from app.core.exceptions import BadRequestError, DatabaseError
from app.core.logging import logger
from app.models.models import (
    DailyReport,
    FinancialYearReport,
    MonthlyReport,
    PaidBill,
    ReportTotals,
    YearlyReport,
)
from app.repositories.store import Store
from app.services import periods

Rows = List[Dict[str, Any]]


def summarize(sales: Rows, expenditures: Rows, purchases: Rows) -> Dict[str, Any]:
    total_sales = sum(s["total_amount"] - s["balance_amount"] for s in sales)
    total_expenditures = sum(e["amount"] for e in expenditures)
    total_purchases = sum(p["paid_amount"] for p in purchases)
    return ReportTotals(
        total_sales=total_sales,
        total_expenditures=total_expenditures,
        total_purchases=total_purchases,
        remaining_supplier_amount=sum(p["total"] - p["paid_amount"] for p in purchases),
        remaining_customer_amount=sum(s["balance_amount"] for s in sales),
        profit=total_sales - total_expenditures - total_purchases,
        sales_count=len(sales),
        expenditures_count=len(expenditures),
        purchases_count=len(purchases),
    ).model_dump()


def _has_activity(totals: Dict[str, Any]) -> bool:
    return totals["total_sales"] > 0 or totals["total_expenditures"] > 0 or totals["total_purchases"] > 0


def _within(rows: Iterable[Dict[str, Any]], key: str, start, end) -> Rows:
    return [r for r in rows if periods.in_range(r[key], start, end)]


def _check_month(month: int) -> None:
    if month < 1 or month > 12:
        raise BadRequestError("Invalid month (must be between 1 and 12)")


def _paid_bills(sales: Rows, start, end) -> List[PaidBill]:
    bills = []
    for sale in sales:
        payments = _within(sale.get("payment_history") or [], "date", start, end)
        if not payments:
            continue
        bills.append(
            PaidBill(
                id=sale["id"],
                customer_name=sale["customer_name"],
                total_amount=sale["total_amount"],
                paid_amount=sum(p["amount"] for p in payments),
                payment_type=payments[0]["payment_type"] or sale["payment_type"],
                date=sale["date"],
            )
        )
    return bills


def get_daily_report(store: Store, day: date) -> DailyReport:
    start, end = periods.day_bounds(day)
    try:
        sales = store.sales.list_between(start, end)
        paid_sales = store.sales.list_paid_between(start, end)
        expenditures = store.expenditures.list_between(start, end)
        purchases = store.purchases.list_between(start, end)
    except Exception as e:
        logger.error("Failed to fetch daily report for %s: %s", day, e)
        raise DatabaseError("Failed to fetch daily report")

    report = DailyReport(
        date=day,
        paid_bills_today=_paid_bills(paid_sales, start, end),
        **summarize(sales, expenditures, purchases),
    )
    logger.info("Daily report %s | sales=%s profit=%s", day, report.total_sales, report.profit)
    return report


def get_monthly_report(store: Store, year: int, month: int) -> MonthlyReport:
    _check_month(month)
    start, end = periods.month_bounds(year, month)
    try:
        sales = store.sales.list_between(start, end)
        expenditures = store.expenditures.list(year=year, month=month)
        purchases = store.purchases.list_between(start, end)
    except Exception as e:
        logger.error("Failed to fetch monthly report for %s-%s: %s", year, month, e)
        raise DatabaseError("Failed to fetch monthly report")

    daily = []
    for day_number in range(1, periods.days_in_month(year, month) + 1):
        day = date(year, month, day_number)
        day_start, day_end = periods.day_bounds(day)
        totals = summarize(
            _within(sales, "date", day_start, day_end),
            [e for e in expenditures if e["date"].day == day_number],
            _within(purchases, "date", day_start, day_end),
        )
        if _has_activity(totals):
            daily.append(DailyReport(date=day, **totals))

    return MonthlyReport(
        month=month,
        year=year,
        month_name=periods.month_name(month),
        daily_breakdown=daily,
        **summarize(sales, expenditures, purchases),
    )


def get_yearly_report(store: Store, year: int) -> YearlyReport:
    start, end = periods.year_bounds(year)
    try:
        sales = store.sales.list_between(start, end)
        expenditures = store.expenditures.list(year=year)
        purchases = store.purchases.list_between(start, end)
    except Exception as e:
        logger.error("Failed to fetch yearly report for %s: %s", year, e)
        raise DatabaseError("Failed to fetch yearly report")

    monthly = []
    for month in range(1, 13):
        month_start, month_end = periods.month_bounds(year, month)
        totals = summarize(
            _within(sales, "date", month_start, month_end),
            [e for e in expenditures if e["month"] == month],
            _within(purchases, "date", month_start, month_end),
        )
        if _has_activity(totals):
            monthly.append(MonthlyReport(month=month, year=year, month_name=periods.month_name(month), **totals))

    return YearlyReport(year=year, monthly_breakdown=monthly, **summarize(sales, expenditures, purchases))


def get_financial_year_report(store: Store, financial_year: int) -> FinancialYearReport:
    """April ``financial_year`` to March ``financial_year + 1``, every month listed."""
    start, end = periods.financial_year_bounds(financial_year)
    months = periods.financial_year_months(financial_year)
    try:
        sales = store.sales.list_between(start, end)
        expenditures = store.expenditures.list_for_months(months)
        purchases = store.purchases.list_between(start, end)
    except Exception as e:
        logger.error("Failed to fetch financial year report for %s: %s", financial_year, e)
        raise DatabaseError("Failed to fetch financial year report")

    monthly = []
    for year, month in months:
        month_start, month_end = periods.month_bounds(year, month)
        totals = summarize(
            _within(sales, "date", month_start, month_end),
            [e for e in expenditures if e["year"] == year and e["month"] == month],
            _within(purchases, "date", month_start, month_end),
        )
        monthly.append(MonthlyReport(month=month, year=year, month_name=periods.month_name(month), **totals))

    report = FinancialYearReport(
        financial_year=periods.financial_year_label(financial_year),
        monthly_breakdown=monthly,
        **summarize(sales, expenditures, purchases),
    )
    logger.info(
        "Financial year report %s | sales=%s expenditures=%s purchases=%s profit=%s",
        report.financial_year,
        report.total_sales,
        report.total_expenditures,
        report.total_purchases,
        report.profit,
    )
    return report

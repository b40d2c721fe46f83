from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List

from app.core.exceptions import BadRequestError, DatabaseError, NotFoundError
from app.core.logging import logger
from app.models.models import (
    CategoryTotal,
    DeletedRecord,
    Expenditure,
    ExpenditureCreate,
    ExpenditureMonth,
    ExpenditureUpdate,
    MonthlyTotal,
)
from app.repositories.store import Store


def _check_category(category) -> str:
    if not category or not category.strip():
        raise BadRequestError("Category is required and cannot be empty")
    return category.strip()


def _check_amount(amount) -> float:
    if amount is None:
        raise BadRequestError("Amount must be a number")
    if amount < 1:
        raise BadRequestError("Amount must be at least 1")
    return amount


def _check_period(year: int, month: int) -> None:
    if not year or year < 2000 or year > 2100:
        raise BadRequestError("Invalid year")
    if not month or month < 1 or month > 12:
        raise BadRequestError("Invalid month (must be between 1 and 12)")


def _dated(data: Dict[str, Any], when: datetime) -> Dict[str, Any]:
    # year/month are kept alongside the date for month filters
    return {**data, "date": when, "year": when.year, "month": when.month}


def create_expenditure(store: Store, payload: ExpenditureCreate) -> Expenditure:
    category = _check_category(payload.category)
    amount = _check_amount(payload.amount)
    data = _dated(
        {"category": category, "amount": amount, "notes": (payload.notes or "").strip()},
        payload.date or datetime.now(),
    )
    try:
        row = store.expenditures.create(data)
    except Exception as e:
        logger.error("Failed to create expenditure: %s", e)
        raise DatabaseError("Failed to create expenditure")
    logger.info("Expenditure %s created | category=%s amount=%s", row["id"], category, amount)
    return Expenditure(**row)


def get_expenditures_by_month(store: Store, year: int, month: int) -> ExpenditureMonth:
    _check_period(year, month)
    try:
        rows = store.expenditures.list(year=year, month=month)
    except Exception as e:
        logger.error("Failed to fetch expenditures for %s-%s: %s", year, month, e)
        raise DatabaseError("Failed to fetch expenditures")
    return ExpenditureMonth(
        expenditures=[Expenditure(**r) for r in rows],
        total_amount=sum(r["amount"] for r in rows),
    )


def get_all_expenditures(store: Store) -> List[Expenditure]:
    try:
        rows = store.expenditures.list()
    except Exception as e:
        logger.error("Failed to fetch all expenditures: %s", e)
        raise DatabaseError("Failed to fetch expenditures")
    return [Expenditure(**r) for r in rows]


def get_expenditure(store: Store, expenditure_id: int) -> Expenditure:
    try:
        row = store.expenditures.get(expenditure_id)
    except Exception as e:
        logger.error("Failed to fetch expenditure %s: %s", expenditure_id, e)
        raise DatabaseError("Failed to fetch expenditure")
    if row is None:
        raise NotFoundError("Expenditure not found")
    return Expenditure(**row)


def update_expenditure(store: Store, expenditure_id: int, payload: ExpenditureUpdate) -> Expenditure:
    fields = payload.model_dump(exclude_unset=True)
    data: Dict[str, Any] = {}
    if fields.get("category") is not None:
        data["category"] = _check_category(fields["category"])
    if fields.get("amount") is not None:
        data["amount"] = _check_amount(fields["amount"])
    if fields.get("notes") is not None:
        data["notes"] = fields["notes"].strip()
    if fields.get("date") is not None:
        data = _dated(data, fields["date"])

    if not data:
        return get_expenditure(store, expenditure_id)

    try:
        row = store.expenditures.update(expenditure_id, data)
    except Exception as e:
        logger.error("Failed to update expenditure %s: %s", expenditure_id, e)
        raise DatabaseError("Failed to update expenditure")
    if row is None:
        raise NotFoundError("Expenditure not found")
    logger.info("Expenditure %s updated | fields=%s", expenditure_id, sorted(data))
    return Expenditure(**row)


def delete_expenditure(store: Store, expenditure_id: int) -> DeletedRecord:
    try:
        deleted = store.expenditures.delete(expenditure_id)
    except Exception as e:
        logger.error("Failed to delete expenditure %s: %s", expenditure_id, e)
        raise DatabaseError("Failed to delete expenditure")
    if not deleted:
        raise NotFoundError("Expenditure not found")
    logger.info("Expenditure %s deleted", expenditure_id)
    return DeletedRecord(id=expenditure_id)


def get_monthly_total(store: Store, year: int, month: int) -> MonthlyTotal:
    try:
        rows = store.expenditures.list(year=year, month=month)
    except Exception as e:
        logger.error("Failed to calculate monthly total for %s-%s: %s", year, month, e)
        raise DatabaseError("Failed to calculate monthly total")
    return MonthlyTotal(total_amount=sum(r["amount"] for r in rows))


def get_expenditures_by_category(store: Store, year: int, month: int) -> List[CategoryTotal]:
    try:
        rows = store.expenditures.list(year=year, month=month)
    except Exception as e:
        logger.error("Failed to fetch category summary for %s-%s: %s", year, month, e)
        raise DatabaseError("Failed to fetch category summary")

    by_category: "OrderedDict[str, CategoryTotal]" = OrderedDict()
    for row in rows:
        entry = by_category.setdefault(
            row["category"], CategoryTotal(category=row["category"], total_amount=0, count=0)
        )
        entry.total_amount += row["amount"]
        entry.count += 1
    return list(by_category.values())


def get_available_years(store: Store) -> List[int]:
    try:
        years = store.expenditures.distinct_years()
    except Exception as e:
        logger.error("Failed to fetch available years: %s", e)
        raise DatabaseError("Failed to fetch available years")
    return sorted(years, reverse=True)

from datetime import datetime

import pytest

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.models import ExpenditureCreate, ExpenditureUpdate
from app.services import expenditures as service


def _spend(store, category, amount, when, notes=None):
    return service.create_expenditure(store, ExpenditureCreate(category=category, amount=amount, date=when, notes=notes))


def test_create_derives_year_and_month(store):
    expense = _spend(store, " Rent ", 15000, datetime(2024, 11, 3, 10), notes=" November ")
    assert expense.category == "Rent"
    assert expense.notes == "November"
    assert (expense.year, expense.month) == (2024, 11)


def test_create_defaults_date_to_now(store):
    before = datetime.now()
    expense = service.create_expenditure(store, ExpenditureCreate(category="Tea", amount=40))
    assert expense.date >= before
    assert (expense.year, expense.month) == (expense.date.year, expense.date.month)


@pytest.mark.parametrize(
    "category, amount, message",
    [
        ("", 100, "Category is required and cannot be empty"),
        ("   ", 100, "Category is required and cannot be empty"),
        ("Rent", 0.5, "Amount must be at least 1"),
    ],
)
def test_create_validation(store, category, amount, message):
    with pytest.raises(BadRequestError, match=message):
        service.create_expenditure(store, ExpenditureCreate(category=category, amount=amount))


def test_by_month_and_totals(store):
    _spend(store, "Rent", 15000, datetime(2024, 5, 1))
    _spend(store, "Electricity", 2200, datetime(2024, 5, 9))
    _spend(store, "Rent", 500, datetime(2024, 5, 20))
    _spend(store, "Rent", 15000, datetime(2024, 6, 1))

    month = service.get_expenditures_by_month(store, 2024, 5)
    assert month.total_amount == 17700
    assert [e.amount for e in month.expenditures] == [500, 2200, 15000]

    assert service.get_monthly_total(store, 2024, 5).total_amount == 17700
    categories = {c.category: (c.total_amount, c.count) for c in service.get_expenditures_by_category(store, 2024, 5)}
    assert categories == {"Rent": (15500, 2), "Electricity": (2200, 1)}


@pytest.mark.parametrize(
    "year, month, message",
    [(1999, 5, "Invalid year"), (2101, 5, "Invalid year"), (2024, 0, "Invalid month"), (2024, 13, "Invalid month")],
)
def test_by_month_validation(store, year, month, message):
    with pytest.raises(BadRequestError, match=message):
        service.get_expenditures_by_month(store, year, month)


def test_update_fields_individually(store):
    expense = _spend(store, "Rent", 15000, datetime(2024, 5, 1))

    updated = service.update_expenditure(store, expense.id, ExpenditureUpdate(amount=16000))
    assert updated.amount == 16000
    assert updated.category == "Rent"

    moved = service.update_expenditure(store, expense.id, ExpenditureUpdate(date=datetime(2025, 1, 15)))
    assert (moved.year, moved.month) == (2025, 1)

    with pytest.raises(BadRequestError, match="Amount must be at least 1"):
        service.update_expenditure(store, expense.id, ExpenditureUpdate(amount=0))
    with pytest.raises(BadRequestError, match="Category is required"):
        service.update_expenditure(store, expense.id, ExpenditureUpdate(category=" "))


def test_update_missing(store):
    with pytest.raises(NotFoundError, match="Expenditure not found"):
        service.update_expenditure(store, 8, ExpenditureUpdate(amount=10))


def test_delete(store):
    expense = _spend(store, "Rent", 15000, datetime(2024, 5, 1))
    assert service.delete_expenditure(store, expense.id).id == expense.id
    with pytest.raises(NotFoundError):
        service.get_expenditure(store, expense.id)
    with pytest.raises(NotFoundError):
        service.delete_expenditure(store, expense.id)


def test_available_years_descending(store):
    for year in (2023, 2025, 2024, 2025):
        _spend(store, "Rent", 100, datetime(year, 2, 1))
    assert service.get_available_years(store) == [2025, 2024, 2023]
    assert len(service.get_all_expenditures(store)) == 4

# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - No Postgres: every test runs against MemoryStore, an in-memory
#   stand-in with the same methods, filters and ordering as the
#   repositories in app/repositories
# - The API client gets the same store through dependency_overrides
# - Rows are copied on the way in and out, like a real round trip
# - Stock never goes below zero, as schema.sql enforces
# ---------------------------------------------------------------------

from copy import deepcopy
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from psycopg2 import errors as pg_errors

from app.core.exceptions import ConflictError
from app.main import app
from app.repositories.products import DUPLICATE_NAME
from app.repositories.store import Store, get_store


def _in_range(value: datetime, start: Optional[datetime], end: Optional[datetime], inclusive_end=False) -> bool:
    if start is not None and value < start:
        return False
    if end is not None and (value > end if inclusive_end else value >= end):
        return False
    return True


def _newest_first(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: (r[key], r["id"]), reverse=True)


def _oldest_first(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: (r[key], r["id"]))


class _Table:
    def __init__(self, defaults: Dict[str, Any], stamps=("created_at", "updated_at")):
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.defaults = defaults
        self.stamps = stamps
        self._next_id = 1

    def insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now()
        row = {**deepcopy(self.defaults), **deepcopy(data), "id": self._next_id}
        for stamp in self.stamps:
            row.setdefault(stamp, now)
        self.rows[row["id"]] = row
        self._next_id += 1
        return row

    def patch(self, row_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = self.rows.get(row_id)
        if row is None:
            return None
        row.update(deepcopy(data))
        if "updated_at" in self.stamps:
            row["updated_at"] = datetime.now()
        return row

    def all(self) -> List[Dict[str, Any]]:
        return list(self.rows.values())


class MemoryProducts:
    def __init__(self):
        self.table = _Table(
            {"category": "", "purchase_price": 0, "selling_price": 0, "stock": 0, "supplier_name": ""}
        )

    def list(self, search=None, category=None):
        rows = self.table.all()
        if search:
            needle = search.lower()
            rows = [r for r in rows if needle in r["name"].lower() or needle in r["supplier_name"].lower()]
        if category:
            rows = [r for r in rows if r["category"].lower() == category.lower()]
        return deepcopy(_newest_first(rows, "created_at"))

    def search(self, query, limit=10):
        rows = [r for r in self.table.all() if query.lower() in r["name"].lower()]
        return deepcopy(sorted(rows, key=lambda r: r["name"])[:limit])

    def get(self, product_id):
        return deepcopy(self.table.rows.get(product_id))

    def find_by_name(self, name, exclude_id=None):
        for row in self.table.all():
            if row["name"].lower() == name.lower() and row["id"] != exclude_id:
                return deepcopy(row)
        return None

    def create(self, data):
        if self.find_by_name(data["name"]) is not None:
            raise ConflictError(DUPLICATE_NAME)
        return deepcopy(self.table.insert(data))

    def update(self, product_id, data):
        if "name" in data and self.find_by_name(data["name"], exclude_id=product_id) is not None:
            raise ConflictError(DUPLICATE_NAME)
        return deepcopy(self.table.patch(product_id, data))

    def delete(self, product_id):
        return self.table.rows.pop(product_id, None) is not None

    def adjust_stock(self, product_id, delta):
        row = self.table.rows.get(product_id)
        if row is None:
            return None
        if row["stock"] + delta < 0:
            # CHECK (stock >= 0) in schema.sql
            raise pg_errors.CheckViolation('new row for relation "products" violates check constraint')
        return deepcopy(self.table.patch(product_id, {"stock": row["stock"] + delta}))

    def count(self):
        return len(self.table.rows)

    def count_low_stock(self, threshold):
        return len([r for r in self.table.all() if r["stock"] <= threshold])

    def list_low_stock(self, threshold, limit):
        rows = [r for r in self.table.all() if r["stock"] <= threshold]
        return deepcopy(sorted(rows, key=lambda r: (r["stock"], r["id"]))[:limit])


class MemoryPurchases:
    def __init__(self, products: MemoryProducts):
        self.products = products
        self.table = _Table({"status": "PAID", "initial_payment": 0, "paid_amount": 0})

    def _with_product(self, row):
        if row is None:
            return None
        product = self.products.table.rows.get(row["product_id"])
        return {**deepcopy(row), "product_name": product["name"] if product else "Unknown"}

    def list(self, status=None, product_id=None):
        rows = self.table.all()
        if status:
            rows = [r for r in rows if r["status"] == status]
        if product_id is not None:
            rows = [r for r in rows if r["product_id"] == product_id]
        return [self._with_product(r) for r in _newest_first(rows, "date")]

    def list_between(self, start, end):
        rows = [r for r in self.table.all() if _in_range(r["date"], start, end)]
        return [self._with_product(r) for r in _oldest_first(rows, "date")]

    def get(self, purchase_id):
        return self._with_product(self.table.rows.get(purchase_id))

    def create(self, data):
        data = {"date": datetime.now(), **data}
        return self._with_product(self.table.insert(data))

    def update(self, purchase_id, data):
        return self._with_product(self.table.patch(purchase_id, data))

    def count_for_product(self, product_id):
        return len([r for r in self.table.all() if r["product_id"] == product_id])

    def total_quantity_for_product(self, product_id):
        return sum(r["quantity"] for r in self.table.all() if r["product_id"] == product_id)

    def pending_total(self):
        return float(sum(r["total"] - r["paid_amount"] for r in self.table.all() if r["status"] == "PENDING"))


class MemoryPayments:
    def __init__(self):
        self.table = _Table({"payment_method": None, "notes": None}, stamps=("created_at",))

    def create(self, data):
        return deepcopy(self.table.insert(data))

    def get(self, payment_id):
        return deepcopy(self.table.rows.get(payment_id))

    def delete(self, payment_id):
        return self.table.rows.pop(payment_id, None) is not None

    def list_for_purchase(self, purchase_id):
        rows = [r for r in self.table.all() if r["purchase_id"] == purchase_id]
        return deepcopy(_newest_first(rows, "payment_date"))

    def list_for_product(self, product_id):
        rows = [r for r in self.table.all() if r["product_id"] == product_id]
        return deepcopy(_newest_first(rows, "payment_date"))


class MemorySales:
    def __init__(self):
        self.table = _Table(
            {
                "initial_payment": 0,
                "balance_amount": 0,
                "serial_number": "",
                "items": [],
                "payment_history": [],
            }
        )

    def create(self, data):
        data = {"date": datetime.now(), **data}
        return deepcopy(self.table.insert(data))

    def get(self, sale_id):
        return deepcopy(self.table.rows.get(sale_id))

    def update(self, sale_id, data):
        return deepcopy(self.table.patch(sale_id, data))

    def list(self, status=None, start=None, end=None):
        rows = [r for r in self.table.all() if _in_range(r["date"], start, end, inclusive_end=True)]
        if status:
            rows = [r for r in rows if r["status"] == status]
        return deepcopy(_newest_first(rows, "date"))

    def list_between(self, start, end):
        rows = [r for r in self.table.all() if _in_range(r["date"], start, end)]
        return deepcopy(_oldest_first(rows, "date"))

    def list_paid_between(self, start, end):
        rows = [
            r
            for r in self.table.all()
            if any(_in_range(p["date"], start, end) for p in r["payment_history"])
        ]
        return deepcopy(_newest_first(rows, "date"))

    def recent(self, limit):
        return deepcopy(_newest_first(self.table.all(), "date")[:limit])

    def count(self, status=None, start=None, end=None):
        rows = [r for r in self.table.all() if _in_range(r["date"], start, end)]
        if status:
            rows = [r for r in rows if r["status"] == status]
        return len(rows)

    def sum_total(self, start, end):
        return float(sum(r["total_amount"] for r in self.table.all() if _in_range(r["date"], start, end)))


class MemoryExpenditures:
    def __init__(self):
        self.table = _Table({"notes": ""})

    def create(self, data):
        return deepcopy(self.table.insert(data))

    def get(self, expenditure_id):
        return deepcopy(self.table.rows.get(expenditure_id))

    def update(self, expenditure_id, data):
        return deepcopy(self.table.patch(expenditure_id, data))

    def delete(self, expenditure_id):
        return self.table.rows.pop(expenditure_id, None) is not None

    def list(self, year=None, month=None):
        rows = self.table.all()
        if year is not None:
            rows = [r for r in rows if r["year"] == year]
        if month is not None:
            rows = [r for r in rows if r["month"] == month]
        return deepcopy(_newest_first(rows, "date"))

    def list_for_months(self, months):
        wanted = set(months)
        rows = [r for r in self.table.all() if (r["year"], r["month"]) in wanted]
        return deepcopy(sorted(rows, key=lambda r: (r["year"], r["month"], r["date"])))

    def list_between(self, start, end):
        rows = [r for r in self.table.all() if _in_range(r["date"], start, end)]
        return deepcopy(_oldest_first(rows, "date"))

    def recent(self, limit):
        return deepcopy(_newest_first(self.table.all(), "date")[:limit])

    def sum_for_month(self, year, month):
        return float(sum(r["amount"] for r in self.table.all() if r["year"] == year and r["month"] == month))

    def distinct_years(self):
        return sorted({r["year"] for r in self.table.all()}, reverse=True)


class MemoryStore(Store):
    def __init__(self):
        products = MemoryProducts()
        super().__init__(
            products=products,
            purchases=MemoryPurchases(products),
            payments=MemoryPayments(),
            sales=MemorySales(),
            expenditures=MemoryExpenditures(),
        )


# ---------- Fixtures ----------
@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def add_product(store):
    """Insert a product row directly and return it."""

    def _add(name="Teak Sofa", stock=10, purchase_price=8000.0, selling_price=12000.0, **extra):
        return store.products.create(
            {
                "name": name,
                "stock": stock,
                "purchase_price": purchase_price,
                "selling_price": selling_price,
                **extra,
            }
        )

    return _add

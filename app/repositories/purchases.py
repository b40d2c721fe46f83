from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.database import pg_cursor, rows_to_dicts, first_or_none

COLUMNS = (
    "product_id",
    "quantity",
    "price_per_unit",
    "total",
    "supplier_name",
    "status",
    "initial_payment",
    "paid_amount",
    "date",
)

# Purchases are always read together with the product name
SELECT_WITH_PRODUCT = (
    "SELECT pu.*, COALESCE(p.name, 'Unknown') AS product_name "
    "FROM purchases pu LEFT JOIN products p ON p.id = pu.product_id"
)


class PurchaseRepository:
    def list(self, status: Optional[str] = None, product_id: Optional[int] = None) -> List[Dict[str, Any]]:
        where = []
        params: List[Any] = []
        if status:
            where.append("pu.status = %s")
            params.append(status)
        if product_id is not None:
            where.append("pu.product_id = %s")
            params.append(product_id)

        sql = SELECT_WITH_PRODUCT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY pu.date DESC, pu.id DESC"

        with pg_cursor() as cur:
            cur.execute(sql, params)
            return rows_to_dicts(cur)

    def list_between(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """Purchases dated in the half-open range [start, end)."""
        with pg_cursor() as cur:
            cur.execute(
                SELECT_WITH_PRODUCT + " WHERE pu.date >= %s AND pu.date < %s ORDER BY pu.date ASC, pu.id ASC",
                (start, end),
            )
            return rows_to_dicts(cur)

    def get(self, purchase_id: int) -> Optional[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(SELECT_WITH_PRODUCT + " WHERE pu.id = %s", (purchase_id,))
            return first_or_none(cur)

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        columns = [c for c in COLUMNS if c in data]
        placeholders = ",".join(["%s"] * len(columns))
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"INSERT INTO purchases ({','.join(columns)}) VALUES ({placeholders}) RETURNING id",
                [data[c] for c in columns],
            )
            (purchase_id,) = cur.fetchone()
        return self.get(purchase_id)

    def update(self, purchase_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {k: v for k, v in data.items() if k in COLUMNS}
        fields["updated_at"] = datetime.now()
        set_clauses = ", ".join([f"{k} = %s" for k in fields.keys()])
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"UPDATE purchases SET {set_clauses} WHERE id = %s RETURNING id",
                list(fields.values()) + [purchase_id],
            )
            if cur.fetchone() is None:
                return None
        return self.get(purchase_id)

    def count_for_product(self, product_id: int) -> int:
        with pg_cursor() as cur:
            cur.execute("SELECT COUNT(*) FROM purchases WHERE product_id = %s", (product_id,))
            (total,) = cur.fetchone()
            return total

    def total_quantity_for_product(self, product_id: int) -> int:
        with pg_cursor() as cur:
            cur.execute("SELECT COALESCE(SUM(quantity),0) FROM purchases WHERE product_id = %s", (product_id,))
            (total,) = cur.fetchone()
            return int(total)

    def pending_total(self) -> float:
        with pg_cursor() as cur:
            cur.execute("SELECT COALESCE(SUM(total - paid_amount),0) FROM purchases WHERE status = 'PENDING'")
            (total,) = cur.fetchone()
            return float(total)

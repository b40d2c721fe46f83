from typing import Any, Dict, List, Optional

from app.core.database import pg_cursor, rows_to_dicts, first_or_none

COLUMNS = ("purchase_id", "product_id", "amount", "payment_date", "payment_method", "notes")


class PaymentRepository:
    """Supplier payments recorded against purchases."""

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        columns = [c for c in COLUMNS if c in data]
        placeholders = ",".join(["%s"] * len(columns))
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"INSERT INTO payments ({','.join(columns)}) VALUES ({placeholders}) RETURNING *",
                [data[c] for c in columns],
            )
            return first_or_none(cur)

    def get(self, payment_id: int) -> Optional[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM payments WHERE id = %s", (payment_id,))
            return first_or_none(cur)

    def delete(self, payment_id: int) -> bool:
        with pg_cursor(commit=True) as cur:
            cur.execute("DELETE FROM payments WHERE id = %s RETURNING id", (payment_id,))
            return cur.fetchone() is not None

    def list_for_purchase(self, purchase_id: int) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM payments WHERE purchase_id = %s ORDER BY payment_date DESC, id DESC",
                (purchase_id,),
            )
            return rows_to_dicts(cur)

    def list_for_product(self, product_id: int) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM payments WHERE product_id = %s ORDER BY payment_date DESC, id DESC",
                (product_id,),
            )
            return rows_to_dicts(cur)

from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg2 import errors as pg_errors

from app.core.database import pg_cursor, rows_to_dicts, first_or_none
from app.core.exceptions import ConflictError

DUPLICATE_NAME = "A product with this name already exists"
HAS_PURCHASE_HISTORY = "Cannot delete product with purchase history. Consider archiving instead."

COLUMNS = ("name", "category", "purchase_price", "selling_price", "stock", "supplier_name")


class ProductRepository:
    """Product rows. Names are unique case-insensitively (see schema.sql)."""

    def list(self, search: Optional[str] = None, category: Optional[str] = None) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM products"
        clauses = []
        params: List[Any] = []

        if search:
            clauses.append("(name ILIKE %s OR supplier_name ILIKE %s)")
            like = f"%{search}%"
            params.extend([like, like])

        if category:
            clauses.append("category ILIKE %s")
            params.append(category)

        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC, id DESC"

        with pg_cursor() as cur:
            cur.execute(sql, params)
            return rows_to_dicts(cur)

    def search(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM products WHERE name ILIKE %s ORDER BY name ASC LIMIT %s",
                (f"%{query}%", limit),
            )
            return rows_to_dicts(cur)

    def get(self, product_id: int) -> Optional[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM products WHERE id = %s", (product_id,))
            return first_or_none(cur)

    def find_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[Dict[str, Any]]:
        sql = "SELECT * FROM products WHERE LOWER(name) = LOWER(%s)"
        params: List[Any] = [name]
        if exclude_id is not None:
            sql += " AND id <> %s"
            params.append(exclude_id)
        with pg_cursor() as cur:
            cur.execute(sql + " LIMIT 1", params)
            return first_or_none(cur)

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        columns = [c for c in COLUMNS if c in data]
        placeholders = ",".join(["%s"] * len(columns))
        sql = f"INSERT INTO products ({','.join(columns)}) VALUES ({placeholders}) RETURNING *"
        try:
            with pg_cursor(commit=True) as cur:
                cur.execute(sql, [data[c] for c in columns])
                return first_or_none(cur)
        except pg_errors.UniqueViolation:
            raise ConflictError(DUPLICATE_NAME)

    def update(self, product_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {k: v for k, v in data.items() if k in COLUMNS}
        fields["updated_at"] = datetime.now()
        set_clauses = ", ".join([f"{k} = %s" for k in fields.keys()])
        params = list(fields.values()) + [product_id]
        try:
            with pg_cursor(commit=True) as cur:
                cur.execute(f"UPDATE products SET {set_clauses} WHERE id = %s RETURNING *", params)
                return first_or_none(cur)
        except pg_errors.UniqueViolation:
            raise ConflictError(DUPLICATE_NAME)

    def delete(self, product_id: int) -> bool:
        try:
            with pg_cursor(commit=True) as cur:
                cur.execute("DELETE FROM products WHERE id = %s RETURNING id", (product_id,))
                return cur.fetchone() is not None
        except pg_errors.ForeignKeyViolation:
            raise ConflictError(HAS_PURCHASE_HISTORY)

    def adjust_stock(self, product_id: int, delta: int) -> Optional[Dict[str, Any]]:
        with pg_cursor(commit=True) as cur:
            cur.execute(
                "UPDATE products SET stock = stock + %s, updated_at = %s WHERE id = %s RETURNING *",
                (delta, datetime.now(), product_id),
            )
            return first_or_none(cur)

    def count(self) -> int:
        with pg_cursor() as cur:
            cur.execute("SELECT COUNT(*) FROM products")
            (total,) = cur.fetchone()
            return total

    def count_low_stock(self, threshold: int) -> int:
        with pg_cursor() as cur:
            cur.execute("SELECT COUNT(*) FROM products WHERE stock <= %s", (threshold,))
            (total,) = cur.fetchone()
            return total

    def list_low_stock(self, threshold: int, limit: int) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM products WHERE stock <= %s ORDER BY stock ASC, id ASC LIMIT %s",
                (threshold, limit),
            )
            return rows_to_dicts(cur)

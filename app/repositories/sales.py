from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from app.core.database import pg_cursor, rows_to_dicts, first_or_none

COLUMNS = (
    "date",
    "customer_name",
    "payment_type",
    "status",
    "total_amount",
    "initial_payment",
    "balance_amount",
    "serial_number",
    "items",
    "payment_history",
)


def _encode_history(history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {**entry, "date": entry["date"].isoformat() if isinstance(entry["date"], datetime) else entry["date"]}
        for entry in history
    ]


def _decode(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """JSONB payment dates come back as ISO strings."""
    if row is None:
        return None
    row["items"] = row.get("items") or []
    row["payment_history"] = [
        {**entry, "date": datetime.fromisoformat(entry["date"]) if isinstance(entry["date"], str) else entry["date"]}
        for entry in (row.get("payment_history") or [])
    ]
    return row


def _to_params(data: Dict[str, Any]) -> Dict[str, Any]:
    fields = {k: v for k, v in data.items() if k in COLUMNS}
    if "items" in fields:
        fields["items"] = Json(fields["items"])
    if "payment_history" in fields:
        fields["payment_history"] = Json(_encode_history(fields["payment_history"]))
    return fields


class SaleRepository:
    """Sales with their line items and customer payment history embedded."""

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        fields = _to_params(data)
        placeholders = ",".join(["%s"] * len(fields))
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"INSERT INTO sales ({','.join(fields.keys())}) VALUES ({placeholders}) RETURNING *",
                list(fields.values()),
            )
            return _decode(first_or_none(cur))

    def get(self, sale_id: int) -> Optional[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM sales WHERE id = %s", (sale_id,))
            return _decode(first_or_none(cur))

    def update(self, sale_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = _to_params(data)
        fields["updated_at"] = datetime.now()
        set_clauses = ", ".join([f"{k} = %s" for k in fields.keys()])
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"UPDATE sales SET {set_clauses} WHERE id = %s RETURNING *",
                list(fields.values()) + [sale_id],
            )
            return _decode(first_or_none(cur))

    def list(
        self,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Sales filtered by status and an inclusive date range, newest first."""
        where = []
        params: List[Any] = []
        if status:
            where.append("status = %s")
            params.append(status)
        if start:
            where.append("date >= %s")
            params.append(start)
        if end:
            where.append("date <= %s")
            params.append(end)

        sql = "SELECT * FROM sales"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date DESC, id DESC"

        with pg_cursor() as cur:
            cur.execute(sql, params)
            return [_decode(r) for r in rows_to_dicts(cur)]

    def list_between(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """Sales dated in the half-open range [start, end)."""
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM sales WHERE date >= %s AND date < %s ORDER BY date ASC, id ASC",
                (start, end),
            )
            return [_decode(r) for r in rows_to_dicts(cur)]

    def list_paid_between(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """Sales that received at least one payment in [start, end)."""
        with pg_cursor() as cur:
            cur.execute(
                """
                SELECT * FROM sales s
                WHERE EXISTS (
                    SELECT 1 FROM jsonb_array_elements(s.payment_history) ph
                    WHERE (ph->>'date')::timestamp >= %s AND (ph->>'date')::timestamp < %s
                )
                ORDER BY s.date DESC, s.id DESC
                """,
                (start, end),
            )
            return [_decode(r) for r in rows_to_dicts(cur)]

    def recent(self, limit: int) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM sales ORDER BY date DESC, id DESC LIMIT %s", (limit,))
            return [_decode(r) for r in rows_to_dicts(cur)]

    def count(
        self,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Count sales; start is inclusive and end exclusive."""
        where = []
        params: List[Any] = []
        if status:
            where.append("status = %s")
            params.append(status)
        if start:
            where.append("date >= %s")
            params.append(start)
        if end:
            where.append("date < %s")
            params.append(end)
        sql = "SELECT COUNT(*) FROM sales"
        if where:
            sql += " WHERE " + " AND ".join(where)
        with pg_cursor() as cur:
            cur.execute(sql, params)
            (total,) = cur.fetchone()
            return total

    def sum_total(self, start: datetime, end: datetime) -> float:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT COALESCE(SUM(total_amount),0) FROM sales WHERE date >= %s AND date < %s",
                (start, end),
            )
            (total,) = cur.fetchone()
            return float(total)

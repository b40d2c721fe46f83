from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.core.database import pg_cursor, rows_to_dicts, first_or_none

COLUMNS = ("category", "amount", "notes", "date", "year", "month")


class ExpenditureRepository:
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        columns = [c for c in COLUMNS if c in data]
        placeholders = ",".join(["%s"] * len(columns))
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"INSERT INTO expenditures ({','.join(columns)}) VALUES ({placeholders}) RETURNING *",
                [data[c] for c in columns],
            )
            return first_or_none(cur)

    def get(self, expenditure_id: int) -> Optional[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM expenditures WHERE id = %s", (expenditure_id,))
            return first_or_none(cur)

    def update(self, expenditure_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {k: v for k, v in data.items() if k in COLUMNS}
        fields["updated_at"] = datetime.now()
        set_clauses = ", ".join([f"{k} = %s" for k in fields.keys()])
        with pg_cursor(commit=True) as cur:
            cur.execute(
                f"UPDATE expenditures SET {set_clauses} WHERE id = %s RETURNING *",
                list(fields.values()) + [expenditure_id],
            )
            return first_or_none(cur)

    def delete(self, expenditure_id: int) -> bool:
        with pg_cursor(commit=True) as cur:
            cur.execute("DELETE FROM expenditures WHERE id = %s RETURNING id", (expenditure_id,))
            return cur.fetchone() is not None

    def list(self, year: Optional[int] = None, month: Optional[int] = None) -> List[Dict[str, Any]]:
        where = []
        params: List[Any] = []
        if year is not None:
            where.append("year = %s")
            params.append(year)
        if month is not None:
            where.append("month = %s")
            params.append(month)
        sql = "SELECT * FROM expenditures"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date DESC, id DESC"
        with pg_cursor() as cur:
            cur.execute(sql, params)
            return rows_to_dicts(cur)

    def list_for_months(self, months: Iterable[Tuple[int, int]]) -> List[Dict[str, Any]]:
        """Expenditures whose (year, month) is one of ``months``."""
        pairs = list(months)
        if not pairs:
            return []
        clauses = " OR ".join(["(year = %s AND month = %s)"] * len(pairs))
        params = [v for pair in pairs for v in pair]
        with pg_cursor() as cur:
            cur.execute(
                f"SELECT * FROM expenditures WHERE {clauses} ORDER BY year ASC, month ASC, date ASC",
                params,
            )
            return rows_to_dicts(cur)

    def list_between(self, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT * FROM expenditures WHERE date >= %s AND date < %s ORDER BY date ASC, id ASC",
                (start, end),
            )
            return rows_to_dicts(cur)

    def recent(self, limit: int) -> List[Dict[str, Any]]:
        with pg_cursor() as cur:
            cur.execute("SELECT * FROM expenditures ORDER BY date DESC, id DESC LIMIT %s", (limit,))
            return rows_to_dicts(cur)

    def sum_for_month(self, year: int, month: int) -> float:
        with pg_cursor() as cur:
            cur.execute(
                "SELECT COALESCE(SUM(amount),0) FROM expenditures WHERE year = %s AND month = %s",
                (year, month),
            )
            (total,) = cur.fetchone()
            return float(total)

    def distinct_years(self) -> List[int]:
        with pg_cursor() as cur:
            cur.execute("SELECT DISTINCT year FROM expenditures ORDER BY year DESC")
            return [r[0] for r in cur.fetchall()]

from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.exceptions import AppError, BadRequestError, DatabaseError, NotFoundError
from app.core.logging import logger
from app.models.models import (
    PaymentStatus,
    PendingBills,
    PendingBillsStats,
    Purchase,
    PurchaseCreate,
    SupplierPending,
)
from app.repositories.store import Store
from app.services import periods
from app.services.money import round_money


def to_purchase(row: Dict[str, Any]) -> Purchase:
    return Purchase(**{**row, "pending_amount": round_money(row["total"] - row["paid_amount"])})


def _load(store: Store, purchase_id: int) -> Dict[str, Any]:
    try:
        row = store.purchases.get(purchase_id)
    except Exception as e:
        logger.error("Failed to fetch purchase %s: %s", purchase_id, e)
        raise DatabaseError("Failed to fetch purchase")
    if row is None:
        raise NotFoundError("Purchase not found")
    return row


def add_purchase(store: Store, payload: PurchaseCreate) -> Purchase:
    """Record a stock-in from a supplier and add the quantity to stock.

    A pending purchase starts with ``paid_amount = initial_payment``; the
    initial payment is not compared against the total.
    """
    if payload.quantity <= 0:
        raise BadRequestError("Quantity must be greater than 0")
    if payload.price_per_unit < 0:
        raise BadRequestError("Price per unit must be 0 or greater")
    if payload.initial_payment < 0:
        raise BadRequestError("Initial payment cannot be negative")

    try:
        product = store.products.get(payload.product_id)
    except Exception as e:
        logger.error("Failed to fetch product %s for purchase: %s", payload.product_id, e)
        raise DatabaseError("Failed to add purchase")
    if product is None:
        raise NotFoundError("Product not found")

    supplier_name = (payload.supplier_name or "").strip() or product.get("supplier_name") or "Unknown"
    total = round_money(payload.quantity * payload.price_per_unit)
    if payload.is_pending:
        status = PaymentStatus.PENDING
        initial_payment = round_money(payload.initial_payment)
        paid_amount = initial_payment
        if initial_payment >= total:
            logger.warning(
                "Pending purchase already covered by its initial payment | product=%s initial=%s total=%s",
                payload.product_id,
                initial_payment,
                total,
            )
    else:
        status = PaymentStatus.PAID
        initial_payment = 0.0
        paid_amount = total

    try:
        row = store.purchases.create(
            {
                "product_id": payload.product_id,
                "quantity": payload.quantity,
                "price_per_unit": payload.price_per_unit,
                "total": total,
                "supplier_name": supplier_name,
                "status": status.value,
                "initial_payment": initial_payment,
                "paid_amount": paid_amount,
                "date": datetime.now(),
            }
        )
        # Stock goes up whether or not the supplier has been paid
        store.products.adjust_stock(payload.product_id, payload.quantity)
    except Exception as e:
        logger.error("Failed to add purchase for product %s: %s", payload.product_id, e)
        raise DatabaseError("Failed to add purchase")

    logger.info(
        "Purchase %s added | product=%s qty=%s total=%s status=%s",
        row["id"],
        payload.product_id,
        payload.quantity,
        total,
        status.value,
    )
    return to_purchase(row)


def get_purchases(store: Store, status: Optional[PaymentStatus] = None) -> List[Purchase]:
    try:
        rows = store.purchases.list(status=status.value if status else None)
    except Exception as e:
        logger.error("Failed to fetch purchases: %s", e)
        raise DatabaseError("Failed to fetch purchases")
    return [to_purchase(r) for r in rows]


def get_purchases_by_product(store: Store, product_id: int) -> List[Purchase]:
    try:
        if store.products.get(product_id) is None:
            raise NotFoundError("Product not found")
        rows = store.purchases.list(product_id=product_id)
    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to fetch purchases for product %s: %s", product_id, e)
        raise DatabaseError("Failed to fetch purchases")
    return [to_purchase(r) for r in rows]


def get_total_stock_purchased(store: Store, product_id: int) -> int:
    try:
        return store.purchases.total_quantity_for_product(product_id)
    except Exception as e:
        logger.error("Failed to fetch total stock purchased for %s: %s", product_id, e)
        raise DatabaseError("Failed to fetch total stock purchased")


def get_pending_bills_total(store: Store) -> float:
    try:
        return round_money(store.purchases.pending_total())
    except Exception as e:
        logger.error("Failed to fetch pending bills total: %s", e)
        raise DatabaseError("Failed to fetch pending bills total")


def get_pending_bills(
    store: Store,
    month: Optional[str] = None,
    financial_year: Optional[int] = None,
) -> PendingBills:
    """Unpaid supplier bills, optionally limited to a month ("YYYY-MM") or a financial year."""
    if month and financial_year is not None:
        raise BadRequestError("Filter by month or by financial year, not both")

    start = end = None
    if month:
        try:
            start, end = periods.month_bounds(*periods.parse_month(month))
        except ValueError:
            raise BadRequestError("Invalid month (expected YYYY-MM)")
    elif financial_year is not None:
        start, end = periods.financial_year_bounds(financial_year)

    try:
        rows = store.purchases.list()
    except Exception as e:
        logger.error("Failed to fetch pending bills: %s", e)
        raise DatabaseError("Failed to fetch pending bills")

    bills = [to_purchase(r) for r in rows if round_money(r["total"] - r["paid_amount"]) > 0]
    if start is not None:
        bills = [b for b in bills if periods.in_range(b.date, start, end)]

    total_pending = sum(b.pending_amount for b in bills)
    by_supplier: "OrderedDict[str, SupplierPending]" = OrderedDict()
    for bill in bills:
        name = bill.supplier_name or "-"
        entry = by_supplier.setdefault(name, SupplierPending(supplier_name=name, total_pending=0, count=0))
        entry.total_pending += bill.pending_amount
        entry.count += 1

    stats = PendingBillsStats(
        total_pending=total_pending,
        count=len(bills),
        average_bill=total_pending / len(bills) if bills else 0,
        by_supplier=sorted(by_supplier.values(), key=lambda s: s.total_pending, reverse=True),
    )
    return PendingBills(
        month=month,
        financial_year=periods.financial_year_label(financial_year) if financial_year is not None else None,
        bills=bills,
        stats=stats,
    )


def mark_purchase_as_paid(store: Store, purchase_id: int) -> Purchase:
    """Force a purchase to PAID; payment records are left as they are."""
    purchase = _load(store, purchase_id)
    if purchase["status"] == PaymentStatus.PAID.value:
        raise BadRequestError("Purchase is already marked as paid")

    try:
        row = store.purchases.update(
            purchase_id,
            {"status": PaymentStatus.PAID.value, "paid_amount": purchase["total"]},
        )
    except Exception as e:
        logger.error("Failed to mark purchase %s as paid: %s", purchase_id, e)
        raise DatabaseError("Failed to mark purchase as paid")

    logger.info("Purchase %s marked as paid | total=%s", purchase_id, purchase["total"])
    return to_purchase(row)

from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import BadRequestError, DatabaseError, NotFoundError
from app.core.logging import logger
from app.models.models import (
    PaymentStatus,
    Sale,
    SaleCreate,
    SaleItem,
    SaleItemRequest,
    SalePaymentCreate,
    SalesStats,
)
from app.repositories.store import Store
from app.services.money import round_money

WALK_IN = "Walk-in"


def _load(store: Store, sale_id: int) -> Dict[str, Any]:
    try:
        row = store.sales.get(sale_id)
    except Exception as e:
        logger.error("Failed to fetch sale %s: %s", sale_id, e)
        raise DatabaseError("Failed to fetch sale")
    if row is None:
        raise NotFoundError("Sale not found")
    return row


def validate_and_prepare_item(store: Store, item: SaleItemRequest) -> SaleItem:
    """Price a single cart line at the product's selling price."""
    if not item.product_id or item.quantity < 1:
        raise BadRequestError("Invalid product ID or quantity")
    try:
        product = store.products.get(item.product_id)
    except Exception as e:
        logger.error("Failed to validate product %s: %s", item.product_id, e)
        raise DatabaseError("Failed to validate product")
    if product is None:
        raise NotFoundError("Product not found")
    if item.quantity > product["stock"]:
        raise BadRequestError(f"Insufficient stock. Available: {product['stock']}")

    return SaleItem(
        product_id=product["id"],
        product_name=product["name"],
        quantity=item.quantity,
        price=product["selling_price"],
        subtotal=round_money(item.quantity * product["selling_price"]),
    )


def _prepare_items(store: Store, requested: List[SaleItemRequest]) -> List[SaleItem]:
    """Price every cart line. A product listed on several lines is checked
    against stock with its combined quantity."""
    items = []
    in_cart: Dict[int, int] = {}
    for item in requested:
        try:
            product = store.products.get(item.product_id)
        except Exception as e:
            logger.error("Failed to fetch product %s for sale: %s", item.product_id, e)
            raise DatabaseError("Failed to create sale")
        if product is None:
            raise NotFoundError(f"Product {item.product_id} not found")
        if item.quantity < 1:
            raise BadRequestError(f"Invalid quantity for {product['name']}")
        in_cart[item.product_id] = in_cart.get(item.product_id, 0) + item.quantity
        if in_cart[item.product_id] > product["stock"]:
            raise BadRequestError(f"Insufficient stock for {product['name']}. Available: {product['stock']}")
        items.append(
            SaleItem(
                product_id=product["id"],
                product_name=product["name"],
                quantity=item.quantity,
                price=product["selling_price"],
                subtotal=round_money(item.quantity * product["selling_price"]),
            )
        )
    return items


def create_sale(store: Store, payload: SaleCreate) -> Sale:
    """Bill a customer and take the sold quantities out of stock.

    Every line is checked against stock before the sale is written. Stock is
    decremented afterwards, one product at a time.
    """
    if not payload.items:
        raise BadRequestError("Cart cannot be empty")
    if not payload.payment_type:
        raise BadRequestError("Payment type is required")

    items = _prepare_items(store, payload.items)
    total_amount = round_money(sum(item.subtotal for item in items))
    if total_amount <= 0:
        raise BadRequestError("Total amount must be greater than 0")

    if payload.pending_bill:
        collected = payload.initial_payment or 0
        if collected < 0:
            raise BadRequestError("Initial payment cannot be negative")
        if collected > total_amount:
            raise BadRequestError("Initial payment cannot exceed total amount")
    else:
        collected = total_amount

    balance_amount = round_money(total_amount - collected)
    status = PaymentStatus.PENDING if balance_amount > 0 else PaymentStatus.PAID
    now = datetime.now()
    payment_history = []
    if collected > 0:
        payment_history.append({"date": now, "amount": collected, "payment_type": payload.payment_type.value})

    try:
        row = store.sales.create(
            {
                "date": now,
                "customer_name": (payload.customer_name or "").strip() or WALK_IN,
                "payment_type": payload.payment_type.value,
                "status": status.value,
                "total_amount": total_amount,
                "initial_payment": collected,
                "balance_amount": balance_amount,
                "serial_number": (payload.serial_number or "").strip(),
                "items": [item.model_dump() for item in items],
                "payment_history": payment_history,
            }
        )
    except Exception as e:
        logger.error("Failed to create sale: %s", e)
        raise DatabaseError("Failed to create sale")

    for item in items:
        try:
            store.products.adjust_stock(item.product_id, -item.quantity)
        except Exception as e:
            # The sale stays recorded; stock has to be corrected by hand
            logger.error(
                "Stock decrement failed after sale %s | product=%s qty=%s: %s",
                row["id"],
                item.product_id,
                item.quantity,
                e,
            )

    logger.info(
        "Sale %s created | customer=%s total=%s collected=%s status=%s items=%s",
        row["id"],
        row["customer_name"],
        total_amount,
        collected,
        status.value,
        len(items),
    )
    return Sale(**row)


def get_sales(
    store: Store,
    status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Sale]:
    try:
        rows = store.sales.list(status=status.value if status else None, start=start_date, end=end_date)
    except Exception as e:
        logger.error("Failed to fetch sales: %s", e)
        raise DatabaseError("Failed to fetch sales")
    return [Sale(**r) for r in rows]


def get_sale(store: Store, sale_id: int) -> Sale:
    return Sale(**_load(store, sale_id))


def get_pending_sales(store: Store) -> List[Sale]:
    return get_sales(store, status=PaymentStatus.PENDING)


def make_additional_payment(store: Store, sale_id: int, payload: SalePaymentCreate) -> Sale:
    """Take an installment (EMI) from the customer against the open balance."""
    sale = _load(store, sale_id)
    if sale["status"] == PaymentStatus.PAID.value:
        raise BadRequestError("Sale is already fully paid")
    if payload.amount <= 0:
        raise BadRequestError("Payment amount must be greater than 0")
    balance = round_money(sale["balance_amount"])
    if round_money(payload.amount) > balance:
        raise BadRequestError(f"Payment amount cannot exceed balance of {settings.currency_prefix}{balance}")

    payment_type = payload.payment_type.value if payload.payment_type else sale["payment_type"]
    history = list(sale.get("payment_history") or [])
    history.append({"date": datetime.now(), "amount": payload.amount, "payment_type": payment_type})

    balance_amount = round_money(balance - payload.amount)
    changes = {
        "payment_history": history,
        "initial_payment": round_money(sale["initial_payment"] + payload.amount),
        "balance_amount": balance_amount,
    }
    if balance_amount <= 0:
        changes["status"] = PaymentStatus.PAID.value
        changes["balance_amount"] = 0.0

    try:
        row = store.sales.update(sale_id, changes)
    except Exception as e:
        logger.error("Failed to record payment for sale %s: %s", sale_id, e)
        raise DatabaseError("Failed to make payment")
    if row is None:
        raise DatabaseError("Failed to fetch updated sale")

    logger.info(
        "Sale %s payment | amount=%s type=%s balance=%s status=%s",
        sale_id,
        payload.amount,
        payment_type,
        row["balance_amount"],
        row["status"],
    )
    return Sale(**row)


def mark_sale_as_paid(store: Store, sale_id: int) -> Sale:
    """Flip a sale to PAID. Balance and payment history are not touched."""
    sale = _load(store, sale_id)
    if sale["status"] == PaymentStatus.PAID.value:
        raise BadRequestError("Sale is already paid")

    try:
        row = store.sales.update(sale_id, {"status": PaymentStatus.PAID.value})
    except Exception as e:
        logger.error("Failed to mark sale %s as paid: %s", sale_id, e)
        raise DatabaseError("Failed to update sale")
    if row is None:
        raise DatabaseError("Failed to fetch updated sale")

    if row["balance_amount"] > 0:
        logger.warning("Sale %s marked paid with open balance %s", sale_id, row["balance_amount"])
    return Sale(**row)


def get_sales_stats(store: Store) -> SalesStats:
    try:
        rows = store.sales.list()
    except Exception as e:
        logger.error("Failed to fetch sales statistics: %s", e)
        raise DatabaseError("Failed to fetch statistics")

    stats = SalesStats(total_sales=len(rows), total_revenue=0, paid_sales=0, pending_sales=0, pending_amount=0)
    for row in rows:
        stats.total_revenue += row["total_amount"]
        if row["status"] == PaymentStatus.PAID.value:
            stats.paid_sales += 1
        else:
            stats.pending_sales += 1
            stats.pending_amount += row["total_amount"]
    return stats

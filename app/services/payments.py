from datetime import datetime
from typing import List

from app.core.config import settings
from app.core.exceptions import BadRequestError, DatabaseError, NotFoundError
from app.core.logging import logger
from app.models.models import Payment, PaymentCreate, PaymentStatus
from app.repositories.store import Store
from app.services.money import round_money


def _clean(value):
    if value is None:
        return None
    return value.strip() or None


def add_payment(store: Store, payload: PaymentCreate) -> Payment:
    """Pay a supplier towards a purchase.

    The status only ever moves PENDING -> PAID here, once the paid amount
    reaches the purchase total.
    """
    if not payload.amount or payload.amount <= 0:
        raise BadRequestError("Payment amount must be greater than 0")

    try:
        purchase = store.purchases.get(payload.purchase_id)
    except Exception as e:
        logger.error("Failed to fetch purchase %s for payment: %s", payload.purchase_id, e)
        raise DatabaseError("Failed to add payment")
    if purchase is None:
        raise NotFoundError("Purchase not found")

    total = round_money(purchase["total"])
    paid_amount = round_money(purchase["paid_amount"] + payload.amount)
    if paid_amount > total:
        remaining = round_money(total - purchase["paid_amount"])
        raise BadRequestError(
            f"Payment exceeds purchase amount. Remaining balance: {settings.currency_prefix}{remaining:.2f}"
        )

    changes = {"paid_amount": paid_amount}
    if paid_amount >= total:
        changes["status"] = PaymentStatus.PAID.value

    try:
        row = store.payments.create(
            {
                "purchase_id": purchase["id"],
                "product_id": purchase["product_id"],
                "amount": payload.amount,
                "payment_date": payload.payment_date or datetime.now(),
                "payment_method": _clean(payload.payment_method),
                "notes": _clean(payload.notes),
            }
        )
        store.purchases.update(purchase["id"], changes)
    except Exception as e:
        logger.error("Failed to add payment to purchase %s: %s", payload.purchase_id, e)
        raise DatabaseError("Failed to add payment")

    logger.info(
        "Payment %s added | purchase=%s amount=%s paid=%s/%s",
        row["id"],
        purchase["id"],
        payload.amount,
        paid_amount,
        purchase["total"],
    )
    return Payment(**row)


def get_payments_by_purchase(store: Store, purchase_id: int) -> List[Payment]:
    try:
        rows = store.payments.list_for_purchase(purchase_id)
    except Exception as e:
        logger.error("Failed to get payments for purchase %s: %s", purchase_id, e)
        raise DatabaseError("Failed to get payments")
    return [Payment(**r) for r in rows]


def get_payments_by_product(store: Store, product_id: int) -> List[Payment]:
    try:
        rows = store.payments.list_for_product(product_id)
    except Exception as e:
        logger.error("Failed to get payments for product %s: %s", product_id, e)
        raise DatabaseError("Failed to get payments")
    return [Payment(**r) for r in rows]


def delete_payment(store: Store, payment_id: int) -> None:
    """Remove a supplier payment and take it back off the purchase."""
    try:
        payment = store.payments.get(payment_id)
        purchase = store.purchases.get(payment["purchase_id"]) if payment else None
    except Exception as e:
        logger.error("Failed to load payment %s: %s", payment_id, e)
        raise DatabaseError("Failed to delete payment")
    if payment is None:
        raise NotFoundError("Payment not found")
    if purchase is None:
        raise NotFoundError("Associated purchase not found")

    paid_amount = max(0.0, round_money(purchase["paid_amount"] - payment["amount"]))
    changes = {"paid_amount": paid_amount}
    if paid_amount < round_money(purchase["total"]) and purchase["status"] == PaymentStatus.PAID.value:
        changes["status"] = PaymentStatus.PENDING.value

    try:
        store.purchases.update(purchase["id"], changes)
        store.payments.delete(payment_id)
    except Exception as e:
        logger.error("Failed to delete payment %s: %s", payment_id, e)
        raise DatabaseError("Failed to delete payment")

    logger.info(
        "Payment %s deleted | purchase=%s paid=%s/%s status=%s",
        payment_id,
        purchase["id"],
        paid_amount,
        purchase["total"],
        changes.get("status", purchase["status"]),
    )

from datetime import datetime

import pytest

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.models import PaymentCreate, PaymentStatus, PurchaseCreate
from app.services import payments as service
from app.services.purchases import add_purchase, get_pending_bills, mark_purchase_as_paid


@pytest.fixture()
def pending_purchase(store, add_product):
    sofa = add_product(stock=0)
    # total 3000, nothing paid yet
    return add_purchase(
        store,
        PurchaseCreate(product_id=sofa["id"], quantity=3, price_per_unit=1000, is_pending=True),
    )


def _pay(store, purchase_id, amount, **kw):
    return service.add_payment(store, PaymentCreate(purchase_id=purchase_id, amount=amount, **kw))


def _purchase_row(store, purchase_id):
    return store.purchases.get(purchase_id)


def test_partial_payment_keeps_pending(store, pending_purchase):
    payment = _pay(store, pending_purchase.id, 1000, payment_method=" UPI ", notes="  ")
    row = _purchase_row(store, pending_purchase.id)

    assert payment.product_id == pending_purchase.product_id
    assert payment.payment_method == "UPI"
    assert payment.notes is None
    assert row["paid_amount"] == 1000
    assert row["status"] == PaymentStatus.PENDING.value


def test_full_payment_flips_to_paid(store, pending_purchase):
    _pay(store, pending_purchase.id, 1000)
    _pay(store, pending_purchase.id, 2000)
    row = _purchase_row(store, pending_purchase.id)
    assert row["paid_amount"] == 3000
    assert row["status"] == PaymentStatus.PAID.value


def test_overpayment_is_rejected(store, pending_purchase):
    _pay(store, pending_purchase.id, 2500)
    with pytest.raises(BadRequestError, match=r"Remaining balance: Rs\.500\.00"):
        _pay(store, pending_purchase.id, 600)
    assert _purchase_row(store, pending_purchase.id)["paid_amount"] == 2500
    assert len(service.get_payments_by_purchase(store, pending_purchase.id)) == 1


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_amount(store, pending_purchase, amount):
    with pytest.raises(BadRequestError, match="Payment amount must be greater than 0"):
        _pay(store, pending_purchase.id, amount)


def test_unknown_purchase(store):
    with pytest.raises(NotFoundError, match="Purchase not found"):
        _pay(store, 77, 10)


def test_payments_listed_newest_first(store, pending_purchase):
    _pay(store, pending_purchase.id, 100, payment_date=datetime(2024, 5, 1))
    _pay(store, pending_purchase.id, 200, payment_date=datetime(2024, 6, 1))

    by_purchase = service.get_payments_by_purchase(store, pending_purchase.id)
    by_product = service.get_payments_by_product(store, pending_purchase.product_id)
    assert [p.amount for p in by_purchase] == [200, 100]
    assert [p.amount for p in by_product] == [200, 100]


def test_delete_payment_reverts_paid_to_pending(store, pending_purchase):
    _pay(store, pending_purchase.id, 1000)
    last = _pay(store, pending_purchase.id, 2000)
    assert _purchase_row(store, pending_purchase.id)["status"] == PaymentStatus.PAID.value

    service.delete_payment(store, last.id)
    row = _purchase_row(store, pending_purchase.id)
    assert row["paid_amount"] == 1000
    assert row["status"] == PaymentStatus.PENDING.value
    assert store.payments.get(last.id) is None


def test_delete_payment_never_goes_negative(store, pending_purchase):
    payment = _pay(store, pending_purchase.id, 1000)
    # paid_amount drifted below the payment records
    store.purchases.update(pending_purchase.id, {"paid_amount": 400})

    service.delete_payment(store, payment.id)
    assert _purchase_row(store, pending_purchase.id)["paid_amount"] == 0


def test_delete_payment_after_mark_as_paid(store, pending_purchase):
    payment = _pay(store, pending_purchase.id, 1000)
    mark_purchase_as_paid(store, pending_purchase.id)

    service.delete_payment(store, payment.id)
    row = _purchase_row(store, pending_purchase.id)
    assert row["paid_amount"] == 2000
    assert row["status"] == PaymentStatus.PENDING.value


def test_delete_missing_payment(store):
    with pytest.raises(NotFoundError, match="Payment not found"):
        service.delete_payment(store, 5)


def test_delete_payment_of_missing_purchase(store, pending_purchase):
    payment = _pay(store, pending_purchase.id, 100)
    store.purchases.table.rows.pop(pending_purchase.id)
    with pytest.raises(NotFoundError, match="Associated purchase not found"):
        service.delete_payment(store, payment.id)


def test_paid_amount_stays_within_total(store, pending_purchase):
    ids = [_pay(store, pending_purchase.id, amount).id for amount in (500, 700, 1800)]
    for payment_id in ids:
        service.delete_payment(store, payment_id)
        row = _purchase_row(store, pending_purchase.id)
        assert 0 <= row["paid_amount"] <= row["total"]
        assert (row["status"] == PaymentStatus.PAID.value) == (row["paid_amount"] >= row["total"])


def test_paise_payments_settle_the_bill(store, add_product):
    stool = add_product(name="Stool", stock=0)
    purchase = add_purchase(
        store,
        PurchaseCreate(product_id=stool["id"], quantity=1, price_per_unit=6.45, is_pending=True, initial_payment=0.7),
    )

    _pay(store, purchase.id, 0.2)
    _pay(store, purchase.id, 5.55)

    row = _purchase_row(store, purchase.id)
    assert row["status"] == PaymentStatus.PAID.value
    assert row["paid_amount"] == 6.45
    assert get_pending_bills(store).stats.count == 0

    payment = service.get_payments_by_purchase(store, purchase.id)[0]
    service.delete_payment(store, payment.id)
    row = _purchase_row(store, purchase.id)
    assert row["status"] == PaymentStatus.PENDING.value
    assert row["paid_amount"] == pytest.approx(0.9)

from datetime import datetime, timedelta

import pytest

from app.services import dashboard as service

NOW = datetime(2024, 6, 15, 12, 0)


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=5), "5 min ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=2), "2 hours ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=10), "05/06/2024"),
    ],
)
def test_time_ago(delta, expected):
    assert service.time_ago(NOW - delta, NOW) == expected


def _sale(store, when, total, status="PAID"):
    store.sales.create(
        {
            "date": when,
            "customer_name": "Anita",
            "payment_type": "CASH",
            "status": status,
            "total_amount": total,
            "initial_payment": total,
            "balance_amount": 0,
        }
    )


def test_dashboard_stats(store, add_product):
    add_product(name="Sofa", stock=2)
    add_product(name="Bed", stock=5)
    add_product(name="Chair", stock=6)
    _sale(store, NOW - timedelta(hours=1), 1000)
    _sale(store, NOW - timedelta(days=2), 2000, status="PENDING")
    _sale(store, datetime(2024, 5, 31), 4000)
    store.expenditures.create(
        {"category": "Rent", "amount": 700, "notes": "", "date": NOW, "year": 2024, "month": 6}
    )

    stats = service.get_dashboard_stats(store, now=NOW)
    assert stats.today_sales == 1
    assert stats.total_sales == 3
    assert stats.pending_bills == 1
    assert stats.low_stock == 2
    assert stats.monthly_revenue == 3000
    assert stats.monthly_expenses == 700


def test_recent_activities(store, add_product):
    add_product(name="Sofa", stock=1)
    for hours in range(7):
        _sale(store, NOW - timedelta(hours=hours + 1), 100 * (hours + 1))
    store.expenditures.create(
        {"category": "Tea", "amount": 40, "notes": "", "date": NOW - timedelta(minutes=5), "year": 2024, "month": 6}
    )

    activities = service.get_recent_activities(store, now=NOW)
    assert len(activities) == 7
    assert activities[0].type == "stock"
    assert activities[0].message == "Low stock alert: Sofa (1 left)"
    assert activities[1].type == "expense"
    assert activities[1].time == "5 min ago"
    assert activities[2].message == "New sale to Anita - Rs.100.00"
    assert [a.type for a in activities].count("sale") == 5

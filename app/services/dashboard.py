from datetime import datetime
from typing import List, Optional

from app.core.config import settings
from app.core.exceptions import DatabaseError
from app.core.logging import logger
from app.models.models import DashboardStats, PaymentStatus, RecentActivity
from app.repositories.store import Store
from app.services import periods
from app.services.money import format_money


def time_ago(when: datetime, now: datetime) -> str:
    seconds = (now - when).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return when.strftime("%d/%m/%Y")


def get_dashboard_stats(store: Store, now: Optional[datetime] = None) -> DashboardStats:
    now = now or datetime.now()
    today_start, today_end = periods.day_bounds(now.date())
    month_start, month_end = periods.month_bounds(now.year, now.month)
    logger.info("Computing dashboard statistics for %s", now.date())
    try:
        stats = DashboardStats(
            today_sales=store.sales.count(start=today_start, end=today_end),
            total_sales=store.sales.count(),
            pending_bills=store.sales.count(status=PaymentStatus.PENDING.value),
            low_stock=store.products.count_low_stock(settings.low_stock_threshold),
            monthly_revenue=store.sales.sum_total(month_start, month_end),
            monthly_expenses=store.expenditures.sum_for_month(now.year, now.month),
        )
    except Exception as e:
        logger.error("Failed to compute dashboard stats: %s", e)
        raise DatabaseError("Failed to fetch dashboard stats")
    return stats


def get_recent_activities(store: Store, now: Optional[datetime] = None) -> List[RecentActivity]:
    """Latest sales, expenses and low-stock alerts, newest first, at most ten."""
    now = now or datetime.now()
    try:
        recent_sales = store.sales.recent(5)
        recent_expenses = store.expenditures.recent(3)
        low_stock = store.products.list_low_stock(settings.low_stock_threshold, 3)
    except Exception as e:
        logger.error("Failed to fetch recent activities: %s", e)
        raise DatabaseError("Failed to fetch recent activities")

    activities = []
    for sale in recent_sales:
        activities.append(
            RecentActivity(
                type="sale",
                message=f"New sale to {sale['customer_name']} - {format_money(sale['total_amount'])}",
                time=time_ago(sale["date"], now),
                timestamp=sale["date"],
            )
        )
    for expense in recent_expenses:
        activities.append(
            RecentActivity(
                type="expense",
                message=f"Expense added: {expense['category']} - {format_money(expense['amount'])}",
                time=time_ago(expense["date"], now),
                timestamp=expense["date"],
            )
        )
    for product in low_stock:
        activities.append(
            RecentActivity(
                type="stock",
                message=f"Low stock alert: {product['name']} ({product['stock']} left)",
                time="Recent",
                timestamp=now,
            )
        )

    activities.sort(key=lambda a: a.timestamp, reverse=True)
    return activities[:10]

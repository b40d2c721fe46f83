from fastapi import APIRouter, Depends
from typing import List, Optional
from app.models.models import ActionResponse, PaymentStatus, PendingBills, Purchase, PurchaseCreate
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import purchases as service

router = APIRouter()


@router.get("/", response_model=ActionResponse[List[Purchase]])
async def get_purchases(status: Optional[PaymentStatus] = None, store: Store = Depends(get_store)):
    """Get all purchases, newest first"""
    logger.info("GET /api/purchases | status=%s", status.value if status else None)
    return {"success": True, "data": service.get_purchases(store, status=status)}


@router.post("/", response_model=ActionResponse[Purchase])
async def add_purchase(purchase: PurchaseCreate, store: Store = Depends(get_store)):
    """Record stock bought from a supplier"""
    logger.info(
        "POST /api/purchases | product_id=%s qty=%s price=%s pending=%s",
        purchase.product_id,
        purchase.quantity,
        purchase.price_per_unit,
        purchase.is_pending,
    )
    return {"success": True, "data": service.add_purchase(store, purchase)}


@router.get("/pending-total", response_model=ActionResponse[float])
async def get_pending_bills_total(store: Store = Depends(get_store)):
    logger.info("GET /api/purchases/pending-total")
    return {"success": True, "data": service.get_pending_bills_total(store)}


@router.get("/pending-bills", response_model=ActionResponse[PendingBills])
async def get_pending_bills(
    month: Optional[str] = None,
    financial_year: Optional[int] = None,
    store: Store = Depends(get_store),
):
    """Unpaid supplier bills with per-supplier totals"""
    logger.info("GET /api/purchases/pending-bills | month=%s fy=%s", month, financial_year)
    return {"success": True, "data": service.get_pending_bills(store, month=month, financial_year=financial_year)}


@router.get("/product/{product_id}", response_model=ActionResponse[List[Purchase]])
async def get_purchases_by_product(product_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/purchases/product/%s", product_id)
    return {"success": True, "data": service.get_purchases_by_product(store, product_id)}


@router.get("/product/{product_id}/total-quantity", response_model=ActionResponse[int])
async def get_total_stock_purchased(product_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/purchases/product/%s/total-quantity", product_id)
    return {"success": True, "data": service.get_total_stock_purchased(store, product_id)}


@router.post("/{purchase_id}/mark-paid", response_model=ActionResponse[Purchase])
async def mark_purchase_as_paid(purchase_id: int, store: Store = Depends(get_store)):
    logger.info("POST /api/purchases/%s/mark-paid", purchase_id)
    return {"success": True, "data": service.mark_purchase_as_paid(store, purchase_id)}

from fastapi import APIRouter, Depends
from typing import List
from app.models.models import ActionResponse, Payment, PaymentCreate
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import payments as service

router = APIRouter()


@router.post("/", response_model=ActionResponse[Payment])
async def add_payment(payment: PaymentCreate, store: Store = Depends(get_store)):
    """Pay a supplier against a purchase"""
    logger.info("POST /api/payments | purchase_id=%s amount=%s", payment.purchase_id, payment.amount)
    return {"success": True, "data": service.add_payment(store, payment)}


@router.get("/purchase/{purchase_id}", response_model=ActionResponse[List[Payment]])
async def get_payments_by_purchase(purchase_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/payments/purchase/%s", purchase_id)
    return {"success": True, "data": service.get_payments_by_purchase(store, purchase_id)}


@router.get("/product/{product_id}", response_model=ActionResponse[List[Payment]])
async def get_payments_by_product(product_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/payments/product/%s", product_id)
    return {"success": True, "data": service.get_payments_by_product(store, product_id)}


@router.delete("/{payment_id}", response_model=ActionResponse[None])
async def delete_payment(payment_id: int, store: Store = Depends(get_store)):
    """Remove a payment and take it back off its purchase"""
    logger.info("DELETE /api/payments/%s", payment_id)
    service.delete_payment(store, payment_id)
    return {"success": True}

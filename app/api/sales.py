from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from typing import List, Optional
from app.models.models import (
    ActionResponse,
    PaymentStatus,
    Sale,
    SaleCreate,
    SaleItem,
    SaleItemRequest,
    SalePaymentCreate,
    SalesStats,
)
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import invoices
from app.services import sales as service

router = APIRouter()


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.get("/", response_model=ActionResponse[List[Sale]])
async def get_sales(
    status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    store: Store = Depends(get_store),
):
    """Get sales, newest first"""
    logger.info(
        "GET /api/sales | status=%s start=%s end=%s",
        status.value if status else None,
        start_date,
        end_date,
    )
    return {"success": True, "data": service.get_sales(store, status=status, start_date=start_date, end_date=end_date)}


@router.get("/pending", response_model=ActionResponse[List[Sale]])
async def get_pending_sales(store: Store = Depends(get_store)):
    logger.info("GET /api/sales/pending")
    return {"success": True, "data": service.get_pending_sales(store)}


@router.get("/stats", response_model=ActionResponse[SalesStats])
async def get_sales_stats(store: Store = Depends(get_store)):
    logger.info("GET /api/sales/stats")
    return {"success": True, "data": service.get_sales_stats(store)}


@router.post("/validate-item", response_model=ActionResponse[SaleItem])
async def validate_item(item: SaleItemRequest, store: Store = Depends(get_store)):
    """Price a cart line against current stock"""
    logger.info("POST /api/sales/validate-item | product_id=%s qty=%s", item.product_id, item.quantity)
    return {"success": True, "data": service.validate_and_prepare_item(store, item)}


@router.post("/", response_model=ActionResponse[Sale])
async def create_sale(sale: SaleCreate, store: Store = Depends(get_store)):
    """Create a sale and take its items out of stock"""
    logger.info(
        "POST /api/sales | items=%s payment_type=%s pending=%s",
        len(sale.items),
        sale.payment_type.value,
        sale.pending_bill,
    )
    return {"success": True, "data": service.create_sale(store, sale)}


@router.get("/{sale_id}", response_model=ActionResponse[Sale])
async def get_sale(sale_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/sales/%s", sale_id)
    return {"success": True, "data": service.get_sale(store, sale_id)}


@router.post("/{sale_id}/payments", response_model=ActionResponse[Sale])
async def make_additional_payment(sale_id: int, payment: SalePaymentCreate, store: Store = Depends(get_store)):
    """Record an installment against the sale's balance"""
    logger.info("POST /api/sales/%s/payments | amount=%s", sale_id, payment.amount)
    return {"success": True, "data": service.make_additional_payment(store, sale_id, payment)}


@router.post("/{sale_id}/mark-paid", response_model=ActionResponse[Sale])
async def mark_sale_as_paid(sale_id: int, store: Store = Depends(get_store)):
    logger.info("POST /api/sales/%s/mark-paid", sale_id)
    return {"success": True, "data": service.mark_sale_as_paid(store, sale_id)}


@router.get("/{sale_id}/invoice")
async def get_invoice(sale_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/sales/%s/invoice", sale_id)
    return _pdf(invoices.render_invoice(store, sale_id), f"invoice-{sale_id}.pdf")


@router.get("/{sale_id}/receipts/{payment_index}")
async def get_receipt(sale_id: int, payment_index: int, store: Store = Depends(get_store)):
    logger.info("GET /api/sales/%s/receipts/%s", sale_id, payment_index)
    return _pdf(
        invoices.render_receipt(store, sale_id, payment_index),
        f"receipt-{sale_id}-{payment_index + 1}.pdf",
    )

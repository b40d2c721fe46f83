from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from app.models.models import ActionResponse, Product, ProductCreate, ProductSearchResult, ProductUpdate
from app.core.logging import logger
from app.repositories.store import Store, get_store
from app.services import products as service

router = APIRouter()


@router.get("/", response_model=ActionResponse[List[Product]])
async def get_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    store: Store = Depends(get_store),
):
    """Get all products, newest first"""
    logger.info("GET /api/products | search=%s category=%s", search, category)
    return {"success": True, "data": service.get_products(store, search=search, category=category)}


@router.get("/search", response_model=ActionResponse[List[ProductSearchResult]])
async def search_products(q: str = Query(""), store: Store = Depends(get_store)):
    """Name lookup for the sale cart"""
    logger.info("GET /api/products/search | q=%s", q)
    return {"success": True, "data": service.search_products(store, q)}


@router.get("/{product_id}", response_model=ActionResponse[Product])
async def get_product(product_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/products/%s", product_id)
    return {"success": True, "data": service.get_product(store, product_id)}


@router.get("/{product_id}/stock", response_model=ActionResponse[int])
async def get_product_stock(product_id: int, store: Store = Depends(get_store)):
    logger.info("GET /api/products/%s/stock", product_id)
    return {"success": True, "data": service.get_product_stock(store, product_id)}


@router.post("/", response_model=ActionResponse[Product])
async def create_product(product: ProductCreate, store: Store = Depends(get_store)):
    """Create a new product"""
    logger.info("POST /api/products | name=%s category=%s", product.name, product.category)
    return {"success": True, "data": service.create_product(store, product)}


@router.put("/{product_id}", response_model=ActionResponse[Product])
async def update_product(product_id: int, product: ProductUpdate, store: Store = Depends(get_store)):
    """Update a product"""
    logger.info("PUT /api/products/%s | fields=%s", product_id, sorted(product.model_dump(exclude_unset=True)))
    return {"success": True, "data": service.update_product(store, product_id, product)}


@router.delete("/{product_id}", response_model=ActionResponse[None])
async def delete_product(product_id: int, store: Store = Depends(get_store)):
    """Delete a product that has never been purchased"""
    logger.info("DELETE /api/products/%s", product_id)
    service.delete_product(store, product_id)
    return {"success": True}

from typing import Any, Dict, List, Optional

from app.core.exceptions import AppError, BadRequestError, ConflictError, DatabaseError, NotFoundError
from app.core.logging import logger
from app.models.models import Product, ProductCreate, ProductSearchResult, ProductUpdate
from app.repositories.products import DUPLICATE_NAME, HAS_PURCHASE_HISTORY
from app.repositories.store import Store


def _validate_amounts(data: Dict[str, Any]) -> None:
    if data.get("purchase_price") is not None and data["purchase_price"] < 0:
        raise BadRequestError("Purchase price cannot be negative")
    if data.get("selling_price") is not None and data["selling_price"] < 0:
        raise BadRequestError("Selling price cannot be negative")
    if data.get("stock") is not None and data["stock"] < 0:
        raise BadRequestError("Stock cannot be negative")


def _load(store: Store, product_id: int) -> Dict[str, Any]:
    try:
        row = store.products.get(product_id)
    except Exception as e:
        logger.error("Failed to fetch product %s: %s", product_id, e)
        raise DatabaseError("Failed to fetch product")
    if row is None:
        raise NotFoundError("Product not found")
    return row


def get_products(store: Store, search: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
    try:
        rows = store.products.list(search=search, category=category)
    except Exception as e:
        logger.error("Failed to fetch products: %s", e)
        raise DatabaseError("Failed to fetch products")
    return [Product(**r) for r in rows]


def get_product(store: Store, product_id: int) -> Product:
    return Product(**_load(store, product_id))


def get_product_stock(store: Store, product_id: int) -> int:
    return _load(store, product_id)["stock"]


def search_products(store: Store, query: str) -> List[ProductSearchResult]:
    """Name search used by the billing screen."""
    if not query or len(query) < 2:
        raise BadRequestError("Search query must be at least 2 characters")
    try:
        rows = store.products.search(query, limit=10)
    except Exception as e:
        logger.error("Failed to search products for %r: %s", query, e)
        raise DatabaseError("Failed to search products")
    return [ProductSearchResult(**r) for r in rows]


def create_product(store: Store, payload: ProductCreate) -> Product:
    data = payload.model_dump()
    name = (data.get("name") or "").strip()
    if not name:
        raise BadRequestError("Product name is required")
    _validate_amounts(data)

    data.update(
        name=name,
        category=(data.get("category") or "").strip(),
        supplier_name=(data.get("supplier_name") or "").strip(),
    )
    try:
        if store.products.find_by_name(name) is not None:
            raise ConflictError(DUPLICATE_NAME)
        row = store.products.create(data)
    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to create product: %s", e)
        raise DatabaseError("Failed to create product")

    logger.info("Product created id=%s name=%s", row["id"], row["name"])
    return Product(**row)


def update_product(store: Store, product_id: int, payload: ProductUpdate) -> Product:
    existing = _load(store, product_id)
    data = payload.model_dump(exclude_unset=True)
    data = {k: v for k, v in data.items() if v is not None}

    if "name" in data:
        data["name"] = data["name"].strip()
        if not data["name"]:
            raise BadRequestError("Product name cannot be empty")
    for key in ("category", "supplier_name"):
        if key in data:
            data[key] = data[key].strip()
    _validate_amounts(data)

    if not data:
        return Product(**existing)

    try:
        if "name" in data and data["name"] != existing["name"]:
            if store.products.find_by_name(data["name"], exclude_id=product_id) is not None:
                raise ConflictError(DUPLICATE_NAME)
        row = store.products.update(product_id, data)
    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to update product %s: %s", product_id, e)
        raise DatabaseError("Failed to update product")

    if row is None:
        raise NotFoundError("Product not found")
    logger.info("Product %s updated | fields=%s", product_id, sorted(data))
    return Product(**row)


def delete_product(store: Store, product_id: int) -> None:
    """Products that were ever purchased stay, so history keeps its reference."""
    try:
        if store.purchases.count_for_product(product_id) > 0:
            raise ConflictError(HAS_PURCHASE_HISTORY)
        deleted = store.products.delete(product_id)
    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to delete product %s: %s", product_id, e)
        raise DatabaseError("Failed to delete product")

    if not deleted:
        raise NotFoundError("Product not found")
    logger.info("Product %s deleted", product_id)

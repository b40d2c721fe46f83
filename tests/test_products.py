import pytest

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.models import ProductCreate, ProductUpdate, PurchaseCreate
from app.services import products as service
from app.services.purchases import add_purchase


def test_create_product_trims_and_defaults(store):
    product = service.create_product(store, ProductCreate(name="  Oak Dining Table ", category=" Tables "))
    assert product.name == "Oak Dining Table"
    assert product.category == "Tables"
    assert product.stock == 0
    assert product.selling_price == 0


def test_create_product_requires_name(store):
    with pytest.raises(BadRequestError, match="Product name is required"):
        service.create_product(store, ProductCreate(name="   "))


@pytest.mark.parametrize(
    "field, message",
    [
        ("purchase_price", "Purchase price cannot be negative"),
        ("selling_price", "Selling price cannot be negative"),
        ("stock", "Stock cannot be negative"),
    ],
)
def test_create_product_rejects_negative_amounts(store, field, message):
    with pytest.raises(BadRequestError, match=message):
        service.create_product(store, ProductCreate(name="Chair", **{field: -1}))


def test_duplicate_name_is_case_insensitive(store, add_product):
    add_product(name="Teak Sofa")
    with pytest.raises(ConflictError, match="A product with this name already exists"):
        service.create_product(store, ProductCreate(name="teak sofa"))


def test_update_product_rename_onto_existing_fails(store, add_product):
    add_product(name="Teak Sofa")
    bed = add_product(name="King Bed")
    with pytest.raises(ConflictError):
        service.update_product(store, bed["id"], ProductUpdate(name="TEAK SOFA"))


def test_update_product_empty_name(store, add_product):
    bed = add_product(name="King Bed")
    with pytest.raises(BadRequestError, match="Product name cannot be empty"):
        service.update_product(store, bed["id"], ProductUpdate(name="  "))


def test_update_product_partial(store, add_product):
    bed = add_product(name="King Bed", stock=3)
    updated = service.update_product(store, bed["id"], ProductUpdate(selling_price=25000))
    assert updated.selling_price == 25000
    assert updated.stock == 3
    assert updated.name == "King Bed"


def test_update_missing_product(store):
    with pytest.raises(NotFoundError, match="Product not found"):
        service.update_product(store, 99, ProductUpdate(stock=1))


def test_delete_product_without_purchases(store, add_product):
    bed = add_product(name="King Bed")
    service.delete_product(store, bed["id"])
    assert store.products.get(bed["id"]) is None


def test_delete_product_with_purchase_history_is_refused(store, add_product):
    sofa = add_product(name="Teak Sofa", stock=0)
    add_purchase(store, PurchaseCreate(product_id=sofa["id"], quantity=2, price_per_unit=5000))

    with pytest.raises(ConflictError, match="Cannot delete product with purchase history"):
        service.delete_product(store, sofa["id"])
    assert store.products.get(sofa["id"]) is not None


def test_delete_missing_product(store):
    with pytest.raises(NotFoundError):
        service.delete_product(store, 42)


def test_search_needs_two_characters(store):
    with pytest.raises(BadRequestError, match="at least 2 characters"):
        service.search_products(store, "a")


def test_search_matches_substring_and_caps_results(store, add_product):
    for i in range(12):
        add_product(name=f"Recliner {i:02d}")
    add_product(name="Wardrobe")

    results = service.search_products(store, "RECL")
    assert len(results) == 10
    assert all("Recliner" in r.name for r in results)


def test_get_products_filters_by_category(store, add_product):
    add_product(name="Sofa A", category="Sofas")
    add_product(name="Bed A", category="Beds")
    names = [p.name for p in service.get_products(store, category="sofas")]
    assert names == ["Sofa A"]


def test_get_product_stock(store, add_product):
    bed = add_product(name="King Bed", stock=7)
    assert service.get_product_stock(store, bed["id"]) == 7

from app.repositories.expenditures import ExpenditureRepository
from app.repositories.payments import PaymentRepository
from app.repositories.products import ProductRepository
from app.repositories.purchases import PurchaseRepository
from app.repositories.sales import SaleRepository


class Store:
    """The five collections the services read and write."""

    def __init__(self, products=None, purchases=None, payments=None, sales=None, expenditures=None):
        self.products = products if products is not None else ProductRepository()
        self.purchases = purchases if purchases is not None else PurchaseRepository()
        self.payments = payments if payments is not None else PaymentRepository()
        self.sales = sales if sales is not None else SaleRepository()
        self.expenditures = expenditures if expenditures is not None else ExpenditureRepository()


_store = Store()


def get_store() -> Store:
    """FastAPI dependency; tests override it with an in-memory store."""
    return _store

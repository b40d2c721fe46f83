from datetime import date as date_type, datetime
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel
from enum import Enum

T = TypeVar("T")

class PaymentStatus(str, Enum):
    PAID = "PAID"
    PENDING = "PENDING"

class PaymentType(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"
    OTHER = "OTHER"

# Response envelope shared by every endpoint
class ActionResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

# Product Models
class ProductBase(BaseModel):
    name: str
    category: str = ""
    purchase_price: float = 0
    selling_price: float = 0
    stock: int = 0
    supplier_name: str = ""

class Product(ProductBase):
    id: int
    created_at: datetime
    updated_at: datetime

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    purchase_price: Optional[float] = None
    selling_price: Optional[float] = None
    stock: Optional[int] = None
    supplier_name: Optional[str] = None

class ProductSearchResult(BaseModel):
    id: int
    name: str
    stock: int
    selling_price: float

# Purchase Models
class Purchase(BaseModel):
    id: int
    product_id: int
    product_name: str = "Unknown"
    quantity: int
    price_per_unit: float
    total: float
    supplier_name: str
    status: PaymentStatus
    initial_payment: float = 0
    paid_amount: float = 0
    pending_amount: float = 0
    date: datetime
    created_at: datetime
    updated_at: datetime

class PurchaseCreate(BaseModel):
    product_id: int
    quantity: int
    price_per_unit: float
    supplier_name: Optional[str] = None
    is_pending: bool = False
    initial_payment: float = 0

class SupplierPending(BaseModel):
    supplier_name: str
    total_pending: float
    count: int

class PendingBillsStats(BaseModel):
    total_pending: float
    count: int
    average_bill: float
    by_supplier: List[SupplierPending] = []

class PendingBills(BaseModel):
    month: Optional[str] = None
    financial_year: Optional[str] = None
    bills: List[Purchase]
    stats: PendingBillsStats

# Supplier payment Models
class Payment(BaseModel):
    id: int
    purchase_id: int
    product_id: int
    amount: float
    payment_date: datetime
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

class PaymentCreate(BaseModel):
    purchase_id: int
    amount: float
    payment_date: Optional[datetime] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

# Sale Models
class SaleItem(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: float
    subtotal: float

class PaymentHistoryEntry(BaseModel):
    date: datetime
    amount: float
    payment_type: str

class Sale(BaseModel):
    id: int
    date: datetime
    customer_name: str
    payment_type: PaymentType
    status: PaymentStatus
    total_amount: float
    initial_payment: float = 0
    balance_amount: float = 0
    serial_number: str = ""
    payment_history: List[PaymentHistoryEntry] = []
    items: List[SaleItem] = []
    created_at: datetime
    updated_at: datetime

class SaleItemRequest(BaseModel):
    product_id: int
    quantity: int

class SaleCreate(BaseModel):
    customer_name: Optional[str] = None
    payment_type: PaymentType
    pending_bill: bool = False
    initial_payment: float = 0
    serial_number: Optional[str] = None
    items: List[SaleItemRequest] = []

class SalePaymentCreate(BaseModel):
    amount: float
    payment_type: Optional[PaymentType] = None

class SalesStats(BaseModel):
    total_sales: int
    total_revenue: float
    paid_sales: int
    pending_sales: int
    pending_amount: float

# Expenditure Models
class Expenditure(BaseModel):
    id: int
    category: str
    amount: float
    notes: str = ""
    date: datetime
    year: int
    month: int
    created_at: datetime
    updated_at: datetime

class ExpenditureCreate(BaseModel):
    category: str
    amount: float
    notes: Optional[str] = None
    date: Optional[datetime] = None

class ExpenditureUpdate(BaseModel):
    category: Optional[str] = None
    amount: Optional[float] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None

class ExpenditureMonth(BaseModel):
    expenditures: List[Expenditure]
    total_amount: float

class MonthlyTotal(BaseModel):
    total_amount: float

class CategoryTotal(BaseModel):
    category: str
    total_amount: float
    count: int

class DeletedRecord(BaseModel):
    id: int

# Financial year Models
class FinancialYearMonth(BaseModel):
    month: int
    year: int
    month_name: str
    amount: float

class FinancialYearSummary(BaseModel):
    financial_year: str
    total_amount: float
    monthly_breakdown: List[FinancialYearMonth]

# Report Models
class ReportTotals(BaseModel):
    total_sales: float = 0
    total_expenditures: float = 0
    total_purchases: float = 0
    remaining_supplier_amount: float = 0
    remaining_customer_amount: float = 0
    profit: float = 0
    sales_count: int = 0
    expenditures_count: int = 0
    purchases_count: int = 0

class PaidBill(BaseModel):
    id: int
    customer_name: str
    total_amount: float
    paid_amount: float
    payment_type: str
    date: datetime

class DailyReport(ReportTotals):
    date: date_type
    paid_bills_today: List[PaidBill] = []

class MonthlyReport(ReportTotals):
    month: int
    year: int
    month_name: str
    daily_breakdown: List[DailyReport] = []

class YearlyReport(ReportTotals):
    year: int
    monthly_breakdown: List[MonthlyReport] = []

class FinancialYearReport(ReportTotals):
    financial_year: str
    monthly_breakdown: List[MonthlyReport] = []

# Dashboard Models
class DashboardStats(BaseModel):
    today_sales: int
    total_sales: int
    pending_bills: int
    low_stock: int
    monthly_revenue: float
    monthly_expenses: float

class RecentActivity(BaseModel):
    type: str
    message: str
    time: str
    timestamp: datetime

"""Printable sale invoice and installment receipt (PDF)."""
from io import BytesIO

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.logging import logger
from app.models.models import PaymentHistoryEntry, Sale
from app.repositories.store import Store
from app.services.money import format_money
from app.services.sales import get_sale

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
BLACK = HexColor("#000000")
RED = HexColor("#CC0000")
HEADER_FILL = HexColor("#F5F5F5")


class _Page:
    """Top-down cursor over a reportlab canvas; positions are in mm from the top."""

    def __init__(self, c: canvas.Canvas):
        self.c = c

    def y(self, top_mm: float) -> float:
        return PAGE_HEIGHT - top_mm * mm

    def text(self, x_mm: float, top_mm: float, value: str, *, bold: bool = False, size: int = 11, align: str = "left"):
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        if align == "center":
            self.c.drawCentredString(x_mm * mm, self.y(top_mm), value)
        elif align == "right":
            self.c.drawRightString(x_mm * mm, self.y(top_mm), value)
        else:
            self.c.drawString(x_mm * mm, self.y(top_mm), value)

    def rule(self, top_mm: float):
        self.c.setLineWidth(0.5)
        self.c.line(MARGIN, self.y(top_mm), PAGE_WIDTH - MARGIN, self.y(top_mm))

    def label(self, top_mm: float, name: str, value: str, value_x: float = 45):
        self.text(15, top_mm, name, bold=True)
        self.text(value_x, top_mm, value)


def _letterhead(page: _Page, title: str) -> None:
    center = PAGE_WIDTH / mm / 2
    page.text(center, 20, settings.shop_name, bold=True, size=20, align="center")
    page.text(center, 27, settings.shop_tagline, size=10, align="center")
    page.rule(32)
    page.text(center, 42, title, bold=True, size=16, align="center")


def _footer(page: _Page) -> None:
    page.text(PAGE_WIDTH / mm / 2, PAGE_HEIGHT / mm - 20, "Thank you for your business!", size=9, align="center")


def build_invoice_pdf(sale: Sale) -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Invoice {sale.id}")
    page = _Page(c)
    right = PAGE_WIDTH / mm - 25

    _letterhead(page, "INVOICE")
    y = 55
    page.label(y, "Customer:", sale.customer_name)
    page.label(y + 7, "Date:", sale.date.strftime("%d/%m/%Y"))
    page.label(y + 14, "Payment:", sale.payment_type.value)
    page.label(y + 21, "Status:", sale.status.value)
    if sale.serial_number:
        page.label(y + 28, "Serial #:", sale.serial_number)
        y += 7

    y += 36
    c.setFillColor(HEADER_FILL)
    c.rect(MARGIN, page.y(y + 5), PAGE_WIDTH - 2 * MARGIN, 10 * mm, stroke=0, fill=1)
    c.setFillColor(BLACK)
    for x, heading in ((20, "Item"), (100, "Qty"), (130, "Price"), (165, "Total")):
        page.text(x, y, heading, bold=True)

    y += 10
    for item in sale.items:
        page.text(20, y, item.product_name[:30])
        page.text(100, y, str(item.quantity))
        page.text(130, y, format_money(item.price))
        page.text(165, y, format_money(item.subtotal))
        y += 8

    y += 5
    page.rule(y)
    y += 10
    page.text(120, y, "Total Amount:", bold=True)
    page.text(right, y, format_money(sale.total_amount), bold=True, align="right")
    if sale.initial_payment > 0:
        y += 8
        page.text(120, y, "Amount Paid:")
        page.text(right, y, format_money(sale.initial_payment), align="right")
        if sale.balance_amount > 0:
            y += 8
            c.setFillColor(RED)
            page.text(120, y, "Balance Due:", bold=True)
            page.text(right, y, format_money(sale.balance_amount), bold=True, align="right")
            c.setFillColor(BLACK)

    if sale.payment_history:
        y += 15
        page.text(15, y, "Payment History:", bold=True)
        y += 8
        for idx, payment in enumerate(sale.payment_history, start=1):
            page.text(20, y, f"{idx}. {payment.date.strftime('%d/%m/%Y')} - {payment.payment_type}")
            page.text(right, y, format_money(payment.amount), align="right")
            y += 7

    _footer(page)
    c.showPage()
    c.save()
    return buffer.getvalue()


def build_receipt_pdf(sale: Sale, payment: PaymentHistoryEntry, payment_index: int) -> bytes:
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Receipt {sale.id}-{payment_index + 1}")
    page = _Page(c)
    right = PAGE_WIDTH / mm - 25

    paid_to_date = sum(p.amount for p in sale.payment_history[: payment_index + 1])
    _letterhead(page, "PAYMENT RECEIPT")
    y = 55
    page.label(y, "Receipt #:", f"{sale.id}-{payment_index + 1}", value_x=50)
    page.label(y + 7, "Customer:", sale.customer_name, value_x=50)
    page.label(y + 14, "Payment Date:", payment.date.strftime("%d/%m/%Y"), value_x=50)
    page.label(y + 21, "Payment Method:", payment.payment_type, value_x=50)

    y += 35
    page.rule(y)
    y += 10
    page.text(120, y, "Amount Received:", bold=True)
    page.text(right, y, format_money(payment.amount), bold=True, align="right")
    y += 8
    page.text(120, y, "Bill Total:")
    page.text(right, y, format_money(sale.total_amount), align="right")
    y += 8
    page.text(120, y, "Paid To Date:")
    page.text(right, y, format_money(paid_to_date), align="right")
    y += 8
    page.text(120, y, "Balance:", bold=True)
    page.text(right, y, format_money(max(0.0, sale.total_amount - paid_to_date)), bold=True, align="right")

    _footer(page)
    c.showPage()
    c.save()
    return buffer.getvalue()


def render_invoice(store: Store, sale_id: int) -> bytes:
    sale = get_sale(store, sale_id)
    pdf = build_invoice_pdf(sale)
    logger.info("Invoice rendered | sale=%s bytes=%s", sale_id, len(pdf))
    return pdf


def render_receipt(store: Store, sale_id: int, payment_index: int) -> bytes:
    sale = get_sale(store, sale_id)
    if payment_index < 0 or payment_index >= len(sale.payment_history):
        raise NotFoundError("Payment not found")
    pdf = build_receipt_pdf(sale, sale.payment_history[payment_index], payment_index)
    logger.info("Receipt rendered | sale=%s payment=%s bytes=%s", sale_id, payment_index, len(pdf))
    return pdf

"""Invoice totals.

Rates on an invoice are fractions (0.07 = 7 %). The percentage discount is
applied first, then the fixed discount amount, and the combined discount is
capped at the subtotal so a total never goes below the tax.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from shiftledger.models.schedule import Invoice, InvoiceLineItem

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class InvoiceTotals:
    """Computed amounts of an invoice.

    Attributes:
        line_items: Line items with their totals recomputed
        subtotal: Sum of quantity × unit price
        tax: subtotal × tax rate
        discount: Percentage plus fixed discount, capped at the subtotal
        total: subtotal + tax − discount
    """

    line_items: List[InvoiceLineItem]
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def compute_invoice_totals(invoice: Invoice) -> InvoiceTotals:
    """Compute subtotal, tax, discount and total of an invoice.

    Negative rates and discount amounts count as zero.

    Example:
        >>> invoice = Invoice(
        ...     lineItems=[{"quantity": 2, "unitPrice": "50"}],
        ...     taxRate="0.07",
        ...     discountAmount="500",
        ... )
        >>> totals = compute_invoice_totals(invoice)
        >>> totals.discount, totals.total
        (Decimal('100.00'), Decimal('7.00'))
    """
    zero = Decimal("0")
    items = [
        li.model_copy(update={"total": round_money(li.quantity * li.unit_price)})
        for li in invoice.line_items
    ]
    subtotal = round_money(sum((li.total for li in items), zero))

    tax = round_money(subtotal * max(zero, invoice.tax_rate))
    percent_off = round_money(subtotal * max(zero, invoice.discount_percent))
    fixed_off = max(zero, invoice.discount_amount)
    discount = min(round_money(percent_off + fixed_off), subtotal)

    total = round_money(subtotal + tax - discount)

    return InvoiceTotals(
        line_items=items,
        subtotal=subtotal,
        tax=tax,
        discount=discount,
        total=total,
    )


def with_computed_totals(invoice: Invoice) -> Invoice:
    """Copy of ``invoice`` with its line items and totals filled in."""
    totals = compute_invoice_totals(invoice)
    return invoice.model_copy(
        update={
            "line_items": totals.line_items,
            "subtotal": totals.subtotal,
            "tax": totals.tax,
            "discount": totals.discount,
            "total": totals.total,
        }
    )


def invoice_revenue(invoice: Invoice) -> Decimal:
    """Stored total of an invoice, computed from its line items when absent."""
    if invoice.total is not None:
        return invoice.total
    return compute_invoice_totals(invoice).total

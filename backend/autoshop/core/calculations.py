"""
Pricing and formatting helpers
Project: Auto Shop Manager

Pure functions shared by the work order preview, the invoice snapshot and
the API responses. Amounts are Decimal; callers round only when storing.
"""

import datetime
import random
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Union

from autoshop.core.config import settings

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Converts numbers (including floats and strings) to Decimal; None is 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Rounds to cents, half up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


# ------------------------------------------------------------
# Line items and totals
# ------------------------------------------------------------

def calculate_line_total(
    quantity: Number,
    unit_price: Number,
    labor_hours: Optional[Number] = None,
    labor_rate: Optional[Number] = None,
) -> Decimal:
    """
    Cost of a single line item.

    quantity * unit_price, plus labor_hours * labor_rate when both labor
    fields are set. A missing labor field contributes nothing.
    """
    total = to_decimal(quantity) * to_decimal(unit_price)
    if labor_hours is not None and labor_rate is not None:
        total += to_decimal(labor_hours) * to_decimal(labor_rate)
    return total


def calculate_subtotal(line_items: Iterable[Any]) -> Decimal:
    """
    Sums the cost of line items.

    Items only need `quantity`, `unit_price`, `labor_hours` and `labor_rate`
    attributes (ORM rows, request schemas and plain objects all work).
    """
    subtotal = Decimal("0")
    for item in line_items:
        subtotal += calculate_line_total(
            item.quantity,
            item.unit_price,
            getattr(item, "labor_hours", None),
            getattr(item, "labor_rate", None),
        )
    return subtotal


def calculate_tax(subtotal: Number, tax_rate: Optional[Number] = None) -> Decimal:
    """Tax on a subtotal; the rate defaults to the configured TAX_RATE."""
    rate = settings.tax_rate if tax_rate is None else to_decimal(tax_rate)
    return to_decimal(subtotal) * rate


def calculate_total(subtotal: Number, tax: Number) -> Decimal:
    return to_decimal(subtotal) + to_decimal(tax)


# ------------------------------------------------------------
# Generated identifiers
# ------------------------------------------------------------

def generate_order_number(
    prefix: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Builds a work order number like "WO-482913057".

    Last six digits of the millisecond clock plus a three digit random
    suffix. Collisions are possible; callers check the database and retry.
    """
    prefix = prefix or settings.order_number_prefix
    rng = rng or random
    timestamp = str(int(time.time() * 1000))[-6:]
    return f"{prefix}-{timestamp}{rng.randint(0, 999):03d}"


def generate_invoice_number(
    prefix: Optional[str] = None,
    today: Optional[datetime.date] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Builds an invoice number like "INV-2610-0427" (year, month, random)."""
    prefix = prefix or settings.invoice_number_prefix
    today = today or datetime.date.today()
    rng = rng or random
    return f"{prefix}-{today:%y%m}-{rng.randint(0, 9999):04d}"


# ------------------------------------------------------------
# Display formatting
# ------------------------------------------------------------

def format_currency(amount: Number) -> str:
    """Formats an amount as US dollars: 1234.5 -> "$1,234.50", -5 -> "-$5.00"."""
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_hours(hours: Number) -> str:
    """Converts decimal hours to "Xh Ym" (1.5 -> "1h 30m")."""
    value = to_decimal(hours)
    whole = int(value)
    minutes = int(((value - whole) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h {minutes}m"


def _ordinal(day: int) -> str:
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(
    value: Union[datetime.date, datetime.datetime, str, None],
    fmt: Optional[str] = None,
) -> str:
    """
    Formats a date for display.

    Accepts date/datetime objects or ISO strings. Without `fmt` the long
    form "October 19th, 2026" is used. Empty input gives "".
    """
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.datetime.fromisoformat(value)
    if fmt:
        return value.strftime(fmt)
    return f"{value:%B} {_ordinal(value.day)}, {value.year}"


def get_full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def get_vehicle_display_name(make: str, model: str, year: int) -> str:
    return f"{year} {make} {model}"

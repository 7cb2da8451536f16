# =========================================================
# CART / DRAFT BUILDER
#
# Two ways of putting a sale together before it is recorded:
# - Cart: the POS basket. One line per product, taxed.
# - LogBook: manual multi-row entry. Rows can be half filled
#   while typing, no tax.
#
# Both hand the sale recorder a list of CommitLine.
# =========================================================

import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, List, Optional

from app.core.config import settings
from app.core.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    """Round to currency precision (half up)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class SalePolicy(str, Enum):
    POS = "pos"
    LOG = "log"

    @property
    def tax_rate(self) -> Decimal:
        if self is SalePolicy.POS:
            return Decimal(settings.POS_TAX_RATE)
        return Decimal("0")


@dataclass(frozen=True)
class CommitLine:
    product_id: Optional[int]
    quantity: int
    unit_price: Optional[Decimal] = None

    @property
    def is_complete(self) -> bool:
        return self.product_id is not None and self.quantity > 0

    @property
    def line_total(self) -> Decimal:
        return money(money(self.unit_price) * self.quantity)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    unit_count: int


def complete_lines(lines: Iterable[CommitLine]) -> List[CommitLine]:
    """Drop rows with no product or no quantity.

    Raises ValidationError when nothing is left.
    """
    valid = [line for line in lines if line.is_complete]
    if not valid:
        raise ValidationError("no valid items")
    return valid


def compute_totals(lines: Iterable[CommitLine], policy: SalePolicy) -> Totals:
    lines = list(lines)
    subtotal = money(sum((line.line_total for line in lines), ZERO))
    rate = policy.tax_rate
    tax = money(subtotal * rate)
    return Totals(
        subtotal=subtotal,
        tax_rate=rate,
        tax=tax,
        total=subtotal + tax,
        unit_count=sum(line.quantity for line in lines),
    )


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)


class Cart:
    """POS basket. Lines are keyed by product id."""

    policy = SalePolicy.POS

    def __init__(self):
        self.lines: List[CartLine] = []

    def __len__(self):
        return len(self.lines)

    def _find(self, product_id: int) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add_line(self, product) -> CartLine:
        if getattr(product, "status", "active") != "active":
            raise ValidationError(f"{product.name} is not available for sale")

        line = self._find(product.id)
        if line is not None:
            line.quantity += 1
            return line

        line = CartLine(
            product_id=product.id,
            name=product.name,
            unit_price=money(product.price),
        )
        self.lines.append(line)
        return line

    def set_quantity(self, product_id: int, quantity: int) -> CartLine:
        line = self._find(product_id)
        if line is None:
            raise ValidationError("Item is not in the cart")
        # Removal is remove_line's job, quantities never drop below one here
        line.quantity = max(1, int(quantity))
        return line

    def adjust_quantity(self, product_id: int, delta: int) -> CartLine:
        line = self._find(product_id)
        if line is None:
            raise ValidationError("Item is not in the cart")
        return self.set_quantity(product_id, line.quantity + delta)

    def remove_line(self, product_id: int) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []

    def unit_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def subtotal(self) -> Decimal:
        return money(sum((line.line_total for line in self.lines), ZERO))

    def tax(self) -> Decimal:
        return money(self.subtotal() * self.policy.tax_rate)

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()

    def commit_lines(self) -> List[CommitLine]:
        return complete_lines(
            CommitLine(line.product_id, line.quantity, line.unit_price)
            for line in self.lines
        )


@dataclass
class LogRow:
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    product_id: Optional[int] = None
    search_query: str = ""
    quantity: int = 1
    unit_price: Decimal = ZERO

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)


class LogBook:
    """Manual multi-row entry. Always keeps at least one editable row."""

    policy = SalePolicy.LOG

    def __init__(self):
        self.rows: List[LogRow] = [LogRow()]

    def _row(self, row_id: str) -> LogRow:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise ValidationError("Row does not exist")

    def add_row(self) -> LogRow:
        row = LogRow()
        self.rows.append(row)
        return row

    def remove_row(self, row_id: str) -> None:
        # The last row stays, contents and all
        if len(self.rows) <= 1:
            return
        self.rows = [row for row in self.rows if row.id != row_id]

    def select_product(self, row_id: str, product) -> LogRow:
        row = self._row(row_id)
        row.product_id = product.id
        row.search_query = product.name
        row.unit_price = money(product.price)
        return row

    def set_search_query(self, row_id: str, query: str) -> LogRow:
        row = self._row(row_id)
        # Editing the text away from the selected product unselects it
        if query != row.search_query:
            row.product_id = None
            row.unit_price = ZERO
        row.search_query = query
        return row

    def set_quantity(self, row_id: str, quantity: int) -> LogRow:
        # Zero is allowed while typing, such rows are dropped at commit
        row = self._row(row_id)
        row.quantity = max(0, int(quantity))
        return row

    def grand_total(self) -> Decimal:
        return money(sum((row.line_total for row in self.rows), ZERO))

    def total(self) -> Decimal:
        return self.grand_total()

    def commit_lines(self) -> List[CommitLine]:
        return complete_lines(
            CommitLine(row.product_id, row.quantity, row.unit_price)
            for row in self.rows
        )

    def reset(self) -> None:
        self.rows = [LogRow()]

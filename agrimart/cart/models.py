"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from agrimart.services.money import multiply, to_decimal, to_float, total


@dataclass
class LineItem:
    """Single product entry in the cart."""
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    image: str = ""
    category: str = ""
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()
        self.unit_price = to_decimal(self.unit_price)

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary for rendering."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": to_float(self.unit_price),
            "quantity": self.quantity,
            "image": self.image,
            "category": self.category,
            "total": to_float(self.total_price),
        }


@dataclass
class Cart:
    """Ordered collection of line items, at most one per product id."""
    items: List[LineItem] = field(default_factory=list)

    def find(self, product_id: str) -> Optional[LineItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    @property
    def total_items(self) -> int:
        """Sum of quantities (the cart badge number)."""
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of unit price times quantity, recomputed on every read."""
        return total(item.total_price for item in self.items)

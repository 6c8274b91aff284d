"""Shipping and order totals."""
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from agrimart.config import DEFAULT_CURRENCY, CheckoutSettings, get_settings
from agrimart.services.money import add, compare, format_money, subtract, to_decimal


@dataclass(frozen=True)
class OrderQuote:
    """Amounts presented to the customer for the current cart."""
    subtotal: Decimal
    shipping_cost: Decimal
    grand_total: Decimal
    free_shipping_remaining: Decimal
    currency: str = DEFAULT_CURRENCY

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "subtotal": format_money(self.subtotal, self.currency),
            "shipping": "Free" if self.shipping_cost == 0 else format_money(self.shipping_cost, self.currency),
            "total": format_money(self.grand_total, self.currency),
            "free_shipping_remaining": format_money(self.free_shipping_remaining, self.currency),
        }


EMPTY_QUOTE = OrderQuote(Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"))


def shipping_cost(subtotal: Decimal, settings: Optional[CheckoutSettings] = None) -> Decimal:
    """
    Flat fee unless the subtotal is strictly above the free-shipping threshold.

    With the defaults: 500 -> 50, 501 -> 0. An empty order ships for free.
    """
    settings = settings or get_settings()
    subtotal = to_decimal(subtotal)
    if compare(subtotal, 0) <= 0 or compare(subtotal, settings.free_shipping_threshold) > 0:
        return Decimal("0")
    return settings.shipping_fee


def quote_order(subtotal: Decimal, settings: Optional[CheckoutSettings] = None) -> OrderQuote:
    """
    Derive shipping, grand total and the amount left to unlock free shipping.

    free_shipping_remaining is the smallest whole-unit amount that takes the
    subtotal strictly above the threshold (499.5 -> 1, 300 -> 201).
    """
    settings = settings or get_settings()
    subtotal = to_decimal(subtotal)
    shipping = shipping_cost(subtotal, settings)

    remaining = Decimal("0")
    if shipping > 0:
        gap = subtract(settings.free_shipping_threshold, subtotal)
        remaining = add(gap.to_integral_value(rounding=ROUND_FLOOR), 1)

    return OrderQuote(
        subtotal=subtotal,
        shipping_cost=shipping,
        grand_total=add(subtotal, shipping),
        free_shipping_remaining=remaining,
        currency=settings.currency,
    )

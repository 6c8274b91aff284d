"""Checkout package: pricing, order gateway and the session state machine."""
from .gateway import OrderGateway, OrderPlacementError, OrderReceipt, SimulatedOrderGateway
from .pricing import OrderQuote, quote_order, shipping_cost
from .session import CheckoutSession, CheckoutTransitionError

__all__ = [
    "CheckoutSession",
    "CheckoutTransitionError",
    "OrderGateway",
    "OrderPlacementError",
    "OrderQuote",
    "OrderReceipt",
    "SimulatedOrderGateway",
    "quote_order",
    "shipping_cost",
]

"""Cart package: models and the in-memory store."""
from .models import Cart, LineItem
from .service import CartStore

__all__ = [
    "Cart",
    "CartStore",
    "LineItem",
]

"""Pytest configuration and fixtures"""
import asyncio
import os
from decimal import Decimal
from typing import List, Optional

import pytest

os.environ.setdefault("LOG_LEVEL", "DEBUG")

from agrimart.cart import CartStore  # noqa: E402
from agrimart.checkout import CheckoutSession, OrderPlacementError, OrderReceipt  # noqa: E402
from agrimart.config import CheckoutSettings  # noqa: E402


class FakeOrderGateway:
    """
    Controllable stand-in for the order backend.

    Orders resolve immediately unless ``hold()`` was called, in which case
    they wait for ``release()``. ``fail_with`` makes the next calls raise.
    """

    def __init__(self):
        self.calls: List[dict] = []
        self.fail_with: Optional[BaseException] = None
        self._gate: Optional[asyncio.Event] = None

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    async def place_order(self, contact, line_items, grand_total) -> OrderReceipt:
        self.calls.append({"contact": contact, "line_items": line_items, "grand_total": grand_total})
        if self._gate is not None:
            await self._gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return OrderReceipt(order_id=f"ORD-TEST{len(self.calls):04d}", grand_total=grand_total)


class CountingCartStore(CartStore):
    """CartStore that records how often clear_cart() ran."""

    def __init__(self):
        super().__init__()
        self.clear_calls = 0

    def clear_cart(self) -> bool:
        self.clear_calls += 1
        return super().clear_cart()


@pytest.fixture
def settings():
    """Default pricing with a short order timeout."""
    return CheckoutSettings(order_timeout_seconds=0.05, order_latency_seconds=0)


@pytest.fixture
def cart():
    store = CountingCartStore()
    yield store
    store.close()


@pytest.fixture
def gateway():
    return FakeOrderGateway()


@pytest.fixture
def session(cart, gateway, settings):
    return CheckoutSession(cart, gateway, settings)


@pytest.fixture
def seeds():
    """Sample product snapshot"""
    return {
        "id": "seeds-0",
        "name": "Hybrid Tomato Seeds",
        "price": 100,
        "image": "https://placehold.co/600x600/e0e0e0/333?text=Hybrid+Tomato+Seeds",
        "category": "seeds",
    }


@pytest.fixture
def spade():
    return {
        "id": "tools-2",
        "name": "Garden Spade",
        "price": Decimal("250"),
        "image": "",
        "category": "tools",
    }


@pytest.fixture
def contact():
    return {"name": "Asha Patil", "phone": "+91 98765 43210", "address": "12 Market Road, Nashik"}


@pytest.fixture
def declined():
    return OrderPlacementError("Card declined")

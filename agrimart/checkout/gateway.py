"""
Order submission interface.

CheckoutSession talks to an OrderGateway; the marketplace has no real
payment integration, so SimulatedOrderGateway stands in for it with a
delay and an optional failure rate.
"""

import asyncio
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Protocol

from agrimart.cart.models import LineItem
from agrimart.config import CheckoutSettings, get_settings
from agrimart.errors import ERROR_ORDER_FAILED
from agrimart.logging import get_logger, sanitize_id_for_logging
from agrimart.models import ContactDetails

logger = get_logger(__name__)


class OrderPlacementError(Exception):
    """Raised by a gateway when the order was not placed."""

    def __init__(self, message: str = ERROR_ORDER_FAILED):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class OrderReceipt:
    """Confirmation returned for a placed order."""
    order_id: str
    grand_total: Decimal
    placed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class OrderGateway(Protocol):
    """At-most-once order placement. Failure is signalled by raising."""

    async def place_order(
        self,
        contact: ContactDetails,
        line_items: List[LineItem],
        grand_total: Decimal,
    ) -> OrderReceipt:
        ...


def generate_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


class SimulatedOrderGateway:
    """
    Pretend payment step: sleeps, then succeeds or fails.

    Args:
        latency: Seconds to wait before answering
        failure_rate: Probability (0-1) that an order is declined
        seed: Optional RNG seed for reproducible failures
    """

    def __init__(
        self,
        latency: Optional[float] = None,
        failure_rate: Optional[float] = None,
        seed: Optional[int] = None,
        settings: Optional[CheckoutSettings] = None,
    ):
        settings = settings or get_settings()
        self.latency = settings.order_latency_seconds if latency is None else latency
        self.failure_rate = settings.order_failure_rate if failure_rate is None else failure_rate
        self._rng = random.Random(seed)

    async def place_order(
        self,
        contact: ContactDetails,
        line_items: List[LineItem],
        grand_total: Decimal,
    ) -> OrderReceipt:
        await asyncio.sleep(self.latency)

        if self._rng.random() < self.failure_rate:
            logger.warning(f"Simulated gateway declined order of {len(line_items)} line(s)")
            raise OrderPlacementError()

        receipt = OrderReceipt(order_id=generate_order_id(), grand_total=grand_total)
        logger.info(f"Simulated gateway accepted order {sanitize_id_for_logging(receipt.order_id)}")
        return receipt

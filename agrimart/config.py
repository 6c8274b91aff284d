"""
Checkout configuration.

Values are read from environment variables once and cached; components
accept an explicit CheckoutSettings so tests can pass their own.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import cache

from agrimart.logging import get_logger

logger = get_logger(__name__)


DEFAULT_CURRENCY = "INR"
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("500")
DEFAULT_SHIPPING_FEE = Decimal("50")
DEFAULT_ORDER_TIMEOUT_SECONDS = 10.0
DEFAULT_ORDER_LATENCY_SECONDS = 2.0
DEFAULT_ORDER_FAILURE_RATE = 0.0


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default
    if not value.is_finite() or value < 0:
        logger.warning(f"Out of range value for {name}: {raw!r}, using default {default}")
        return default
    return value


def _env_float(name: str, default: float, upper: float | None = None) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default
    if value < 0 or (upper is not None and value > upper):
        logger.warning(f"Out of range value for {name}: {raw!r}, using default {default}")
        return default
    return value


@dataclass(frozen=True)
class CheckoutSettings:
    """Pricing and order-submission settings."""
    currency: str = DEFAULT_CURRENCY
    free_shipping_threshold: Decimal = DEFAULT_FREE_SHIPPING_THRESHOLD
    shipping_fee: Decimal = DEFAULT_SHIPPING_FEE
    order_timeout_seconds: float = DEFAULT_ORDER_TIMEOUT_SECONDS
    order_latency_seconds: float = DEFAULT_ORDER_LATENCY_SECONDS
    order_failure_rate: float = DEFAULT_ORDER_FAILURE_RATE

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        """Build settings from AGRIMART_* environment variables."""
        return cls(
            currency=os.environ.get("AGRIMART_CURRENCY", DEFAULT_CURRENCY).upper(),
            free_shipping_threshold=_env_decimal(
                "AGRIMART_FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD
            ),
            shipping_fee=_env_decimal("AGRIMART_SHIPPING_FEE", DEFAULT_SHIPPING_FEE),
            order_timeout_seconds=_env_float(
                "AGRIMART_ORDER_TIMEOUT_SECONDS", DEFAULT_ORDER_TIMEOUT_SECONDS
            ),
            order_latency_seconds=_env_float(
                "AGRIMART_ORDER_LATENCY_SECONDS", DEFAULT_ORDER_LATENCY_SECONDS
            ),
            order_failure_rate=_env_float(
                "AGRIMART_ORDER_FAILURE_RATE", DEFAULT_ORDER_FAILURE_RATE, upper=1.0
            ),
        )


@cache
def get_settings() -> CheckoutSettings:
    """Get cached settings built from the environment."""
    return CheckoutSettings.from_env()

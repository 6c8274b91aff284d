"""
Pydantic Models - Boundary Schemas for Cart and Checkout

Contains the models exchanged with the presentation layer:
- Product snapshots passed to the cart
- Checkout contact form (draft and validated forms)
- Checkout results
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ============================================================
# Enums
# ============================================================

class CheckoutPhase(str, Enum):
    """Checkout session lifecycle."""
    IDLE = "idle"
    FORM_OPEN = "form_open"
    SUBMITTING = "submitting"
    COMPLETED = "completed"  # Terminal, cart cleared
    FAILED = "failed"  # Terminal until retried, cart untouched
    CANCELLED = "cancelled"  # Form dismissed before submitting


# ============================================================
# Cart Models
# ============================================================

class ProductSnapshot(BaseModel):
    """
    Catalog fields copied into the cart at add time.

    Accepts both the catalog's own keys (``id``, ``price``) and the cart's
    (``product_id``, ``unit_price``).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    product_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("product_id", "id"),
        description="Stable catalog identifier",
    )
    name: str = Field(min_length=1, description="Display name")
    unit_price: Decimal = Field(
        ge=0,
        validation_alias=AliasChoices("unit_price", "price"),
        description="Price per unit in whole currency units",
    )
    image: str = Field(default="", description="Primary image URL")
    category: str = Field(default="", description="Catalog category")


# ============================================================
# Checkout Models
# ============================================================

class ContactDraft(BaseModel):
    """Contact form as typed so far. Nothing is enforced until submit."""
    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    phone: str = ""
    address: str = ""


class ContactDetails(BaseModel):
    """Validated contact details sent along with an order."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, description="Full name")
    phone: str = Field(min_length=1, description="Phone number")
    address: str = Field(min_length=1, description="Delivery address")


class CheckoutResult(BaseModel):
    """Outcome of a submit_order() call."""
    success: bool
    phase: CheckoutPhase
    order_id: Optional[str] = None
    error: Optional[str] = None
    field_errors: Dict[str, str] = Field(default_factory=dict)
    subtotal: Decimal = Decimal("0")
    shipping_cost: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

"""
Checkout Session - order placement state machine.

    IDLE -> FORM_OPEN -> SUBMITTING -> COMPLETED
                |             \\-> FAILED -> FORM_OPEN (retry)
                \\-> CANCELLED

The session never mutates the cart except for the single clear_cart()
on success. While SUBMITTING the cart is frozen and further submit calls
are rejected, so a double click cannot place two orders.
"""

import asyncio
from decimal import Decimal
from typing import Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from agrimart.cart import CartStore
from agrimart.config import CheckoutSettings, get_settings
from agrimart.errors import (
    ERROR_ADDRESS_REQUIRED,
    ERROR_CART_EMPTY,
    ERROR_CONTACT_INVALID,
    ERROR_INVALID_TRANSITION,
    ERROR_NAME_REQUIRED,
    ERROR_ORDER_FAILED,
    ERROR_ORDER_TIMEOUT,
    ERROR_PHONE_REQUIRED,
    ERROR_SUBMISSION_IN_PROGRESS,
)
from agrimart.logging import get_logger, sanitize_id_for_logging
from agrimart.models import CheckoutPhase, CheckoutResult, ContactDetails, ContactDraft
from .gateway import OrderGateway, OrderPlacementError, OrderReceipt
from .pricing import EMPTY_QUOTE, OrderQuote, quote_order

logger = get_logger(__name__)

Phase = CheckoutPhase

TRANSITIONS: Dict[CheckoutPhase, Tuple[CheckoutPhase, ...]] = {
    Phase.IDLE: (Phase.FORM_OPEN,),
    Phase.FORM_OPEN: (Phase.SUBMITTING, Phase.CANCELLED),
    Phase.SUBMITTING: (Phase.COMPLETED, Phase.FAILED),
    Phase.COMPLETED: (Phase.IDLE, Phase.FORM_OPEN),
    Phase.FAILED: (Phase.FORM_OPEN, Phase.IDLE),
    Phase.CANCELLED: (Phase.IDLE, Phase.FORM_OPEN),
}

FIELD_ERRORS = {
    "name": ERROR_NAME_REQUIRED,
    "phone": ERROR_PHONE_REQUIRED,
    "address": ERROR_ADDRESS_REQUIRED,
}


class CheckoutTransitionError(ValueError):
    """Raised when an operation is not allowed in the current phase."""

    def __init__(self, current: CheckoutPhase, target: CheckoutPhase, reason: str = ERROR_INVALID_TRANSITION):
        super().__init__(f"{reason}: '{current.value}' -> '{target.value}'")
        self.current = current
        self.target = target
        self.reason = reason


class CheckoutSession:
    """
    Coordinates contact validation, order submission and cart clearing.

    Args:
        cart: The cart being checked out (not owned by the session)
        gateway: Order placement backend
        settings: Pricing/timeout settings (defaults to environment)
    """

    def __init__(
        self,
        cart: CartStore,
        gateway: OrderGateway,
        settings: Optional[CheckoutSettings] = None,
    ):
        self._cart = cart
        self._gateway = gateway
        self._settings = settings or get_settings()

        self._phase = Phase.IDLE
        self._contact = ContactDraft()
        self._field_errors: Dict[str, str] = {}
        self._error: Optional[str] = None
        self._quote: OrderQuote = EMPTY_QUOTE
        self._receipt: Optional[OrderReceipt] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ---------------------------------------------------------------
    # Read accessors
    # ---------------------------------------------------------------

    @property
    def phase(self) -> CheckoutPhase:
        return self._phase

    @property
    def contact(self) -> ContactDraft:
        return self._contact.model_copy()

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self._field_errors)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def quote(self) -> OrderQuote:
        return self._quote

    @property
    def subtotal(self) -> Decimal:
        return self._quote.subtotal

    @property
    def shipping_cost(self) -> Decimal:
        return self._quote.shipping_cost

    @property
    def grand_total(self) -> Decimal:
        return self._quote.grand_total

    @property
    def order_id(self) -> Optional[str]:
        return self._receipt.order_id if self._receipt else None

    # ---------------------------------------------------------------
    # Transitions
    # ---------------------------------------------------------------

    def open(self) -> None:
        """Open the checkout form over a non-empty cart."""
        if self._cart.is_empty:
            raise CheckoutTransitionError(self._phase, Phase.FORM_OPEN, ERROR_CART_EMPTY)

        self._transition(Phase.FORM_OPEN)
        self._contact = ContactDraft()
        self._field_errors = {}
        self._error = None
        self._receipt = None
        self._enter_form()

    def update_contact(
        self,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> None:
        """Update draft contact fields; only allowed while the form is open."""
        if self._phase != Phase.FORM_OPEN:
            raise CheckoutTransitionError(self._phase, Phase.FORM_OPEN, "Contact form is not open")

        for field_name, value in (("name", name), ("phone", phone), ("address", address)):
            if value is None:
                continue
            setattr(self._contact, field_name, value)
            self._field_errors.pop(field_name, None)

    def validate(self) -> Dict[str, str]:
        """Per-field errors for the current draft; empty when it can be submitted."""
        _, errors = self._validated_contact()
        return errors

    async def submit_order(self) -> CheckoutResult:
        """
        Validate the form and place the order.

        A call made while another submission is in flight, or outside the
        open form, is rejected without side effects.

        Returns:
            CheckoutResult describing the outcome
        """
        if self._phase == Phase.SUBMITTING:
            logger.warning("Duplicate submit_order ignored: submission in progress")
            return self._result(False, ERROR_SUBMISSION_IN_PROGRESS)
        if self._phase != Phase.FORM_OPEN:
            logger.warning(f"submit_order ignored in phase '{self._phase.value}'")
            return self._result(False, ERROR_INVALID_TRANSITION)
        if self._cart.is_empty:
            logger.warning("submit_order over an empty cart, cancelling")
            self.cancel()
            return self._result(False, ERROR_CART_EMPTY)

        contact, errors = self._validated_contact()
        if contact is None:
            self._field_errors = errors
            return self._result(False, ERROR_CONTACT_INVALID)

        # Totals and lines are fixed from here on
        self._quote = quote_order(self._cart.subtotal, self._settings)
        line_items = self._cart.items
        self._field_errors = {}
        self._error = None
        self._transition(Phase.SUBMITTING)
        self._cart.freeze()

        try:
            receipt = await asyncio.wait_for(
                self._gateway.place_order(contact, line_items, self._quote.grand_total),
                timeout=self._settings.order_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Order placement timed out after {self._settings.order_timeout_seconds}s")
            self._fail(ERROR_ORDER_TIMEOUT)
            return self._result(False, ERROR_ORDER_TIMEOUT)
        except OrderPlacementError as e:
            logger.warning(f"Order placement declined: {e.message}")
            self._fail(e.message)
            return self._result(False, e.message)
        except asyncio.CancelledError:
            self._fail(ERROR_ORDER_FAILED)
            raise
        except Exception:
            logger.exception("Order placement raised unexpectedly")
            self._fail(ERROR_ORDER_FAILED)
            return self._result(False, ERROR_ORDER_FAILED)

        # No await below: the cart is cleared together with the phase change
        self._cart.unfreeze()
        self._cart.clear_cart()
        self._receipt = receipt
        self._transition(Phase.COMPLETED)
        self._release_cart()
        logger.info(f"Order {sanitize_id_for_logging(receipt.order_id)} placed, total {self._quote.grand_total}")
        return self._result(True)

    def cancel(self) -> None:
        """Dismiss the form. The cart is left as it is."""
        if self._phase != Phase.FORM_OPEN:
            raise CheckoutTransitionError(self._phase, Phase.CANCELLED)
        self._transition(Phase.CANCELLED)
        self._release_cart()

    def retry(self) -> None:
        """Return from FAILED to the form, keeping the entered contact details."""
        if self._phase != Phase.FAILED:
            raise CheckoutTransitionError(self._phase, Phase.FORM_OPEN)
        if self._cart.is_empty:
            raise CheckoutTransitionError(self._phase, Phase.FORM_OPEN, ERROR_CART_EMPTY)
        self._transition(Phase.FORM_OPEN)
        self._error = None
        self._enter_form()

    def reset(self) -> None:
        """Discard a finished session and return to IDLE."""
        if self._phase == Phase.IDLE:
            return
        self._transition(Phase.IDLE)
        self._release_cart()
        self._contact = ContactDraft()
        self._field_errors = {}
        self._error = None
        self._quote = EMPTY_QUOTE
        self._receipt = None

    # ---------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------

    def _transition(self, target: CheckoutPhase) -> None:
        if target not in TRANSITIONS[self._phase]:
            raise CheckoutTransitionError(self._phase, target)
        logger.info(f"Checkout phase: {self._phase.value} -> {target.value}")
        self._phase = target

    def _enter_form(self) -> None:
        self._quote = quote_order(self._cart.subtotal, self._settings)
        if self._unsubscribe is None:
            self._unsubscribe = self._cart.subscribe(self._on_cart_changed)

    def _release_cart(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_cart_changed(self, cart: CartStore) -> None:
        if self._phase != Phase.FORM_OPEN:
            return
        if cart.is_empty:
            logger.info("Cart emptied while checkout form open, cancelling")
            self.cancel()
            return
        self._quote = quote_order(cart.subtotal, self._settings)

    def _fail(self, message: str) -> None:
        self._cart.unfreeze()
        self._error = message
        self._transition(Phase.FAILED)

    def _validated_contact(self) -> Tuple[Optional[ContactDetails], Dict[str, str]]:
        try:
            return ContactDetails.model_validate(self._contact.model_dump()), {}
        except ValidationError as e:
            errors: Dict[str, str] = {}
            for err in e.errors():
                field_name = str(err["loc"][0]) if err["loc"] else "contact"
                errors[field_name] = FIELD_ERRORS.get(field_name, ERROR_CONTACT_INVALID)
            return None, errors

    def _result(self, success: bool, error: Optional[str] = None) -> CheckoutResult:
        return CheckoutResult(
            success=success,
            phase=self._phase,
            order_id=self.order_id,
            error=error,
            field_errors=dict(self._field_errors),
            subtotal=self._quote.subtotal,
            shipping_cost=self._quote.shipping_cost,
            grand_total=self._quote.grand_total,
        )

"""In-memory cart store owned by one shopping session."""
from dataclasses import replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Union

from agrimart.errors import (
    ERROR_CART_LOCKED,
    ERROR_INVALID_QUANTITY,
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_PRODUCT_OUT_OF_STOCK,
)
from agrimart.logging import get_logger, sanitize_string_for_logging
from agrimart.models import ProductSnapshot
from agrimart.services.money import to_float
from .models import Cart, LineItem

if TYPE_CHECKING:
    from agrimart.catalog import Catalog

logger = get_logger(__name__)

CartListener = Callable[["CartStore"], None]


def _is_quantity(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CartStore:
    """
    Sole mutable owner of a Cart.

    Features:
    - One line item per product id; repeated adds accumulate quantity
    - Quantity never below 1 (dropping to 0 removes the item)
    - Totals derived on every read, never cached
    - Can be frozen while an order is in flight; mutations are then ignored
    - Change listeners notified after every applied mutation

    The store is created by whoever owns the shopping session and passed
    to the components that need it; call close() when the session ends.
    """

    def __init__(self):
        self._cart = Cart()
        self._frozen = False
        self._listeners: List[CartListener] = []

    # ---------------------------------------------------------------
    # Mutators
    # ---------------------------------------------------------------

    def add_to_cart(
        self,
        item: Union[ProductSnapshot, Mapping[str, Any]],
        quantity: int = 1,
    ) -> bool:
        """
        Add a product snapshot, or increase its quantity if already present.

        Args:
            item: ProductSnapshot or mapping with id/name/price/image/category
            quantity: Units to add (must be >= 1)

        Returns:
            True if the cart changed, False if the call was ignored

        Raises:
            ValueError: If the snapshot is malformed (empty id, negative price)
        """
        snapshot = item if isinstance(item, ProductSnapshot) else ProductSnapshot.model_validate(item)

        if not _is_quantity(quantity) or quantity < 1:
            logger.warning(
                f"Ignoring add_to_cart for {sanitize_string_for_logging(snapshot.product_id)}: "
                f"{ERROR_INVALID_QUANTITY} (got {quantity!r})"
            )
            return False
        if self._rejected("add_to_cart"):
            return False

        existing = self._cart.find(snapshot.product_id)
        if existing:
            existing.quantity += quantity
        else:
            self._cart.items.append(
                LineItem(
                    product_id=snapshot.product_id,
                    name=snapshot.name,
                    unit_price=snapshot.unit_price,
                    quantity=quantity,
                    image=snapshot.image,
                    category=snapshot.category,
                )
            )

        logger.debug(f"Added {quantity} x {sanitize_string_for_logging(snapshot.product_id)} to cart")
        self._notify()
        return True

    def add_product(self, product_id: str, quantity: int, catalog: "Catalog") -> bool:
        """Look up a product in the catalog and add it. Unknown or out-of-stock ids are ignored."""
        product = catalog.get_product_by_id(product_id)
        if product is None:
            logger.warning(f"{ERROR_PRODUCT_NOT_FOUND}: {sanitize_string_for_logging(product_id)}")
            return False
        if not product.in_stock:
            logger.warning(f"{ERROR_PRODUCT_OUT_OF_STOCK}: {sanitize_string_for_logging(product_id)}")
            return False
        return self.add_to_cart(product.to_snapshot(), quantity)

    def update_quantity(self, product_id: str, new_quantity: int) -> bool:
        """
        Set an item's quantity. A quantity <= 0 removes the item.

        Returns:
            True if the cart changed, False for absent ids or ignored calls
        """
        if not _is_quantity(new_quantity):
            logger.warning(f"Ignoring update_quantity: {ERROR_INVALID_QUANTITY} (got {new_quantity!r})")
            return False
        if new_quantity <= 0:
            return self.remove_from_cart(product_id)

        existing = self._cart.find(product_id)
        if existing is None:
            return False
        if self._rejected("update_quantity"):
            return False
        existing.quantity = new_quantity
        logger.debug(f"Set {sanitize_string_for_logging(product_id)} quantity to {new_quantity}")
        self._notify()
        return True

    def remove_from_cart(self, product_id: str) -> bool:
        """Remove an item if present."""
        existing = self._cart.find(product_id)
        if existing is None:
            return False
        if self._rejected("remove_from_cart"):
            return False

        self._cart.items.remove(existing)
        logger.debug(f"Removed {sanitize_string_for_logging(product_id)} from cart")
        self._notify()
        return True

    def clear_cart(self) -> bool:
        """Empty the cart unconditionally (unless frozen)."""
        if self._rejected("clear_cart"):
            return False

        self._cart.items.clear()
        logger.debug("Cart cleared")
        self._notify()
        return True

    # ---------------------------------------------------------------
    # Derived reads
    # ---------------------------------------------------------------

    def get_total_price(self) -> Decimal:
        """Subtotal: sum of unit price times quantity over all items."""
        return self._cart.subtotal

    @property
    def subtotal(self) -> Decimal:
        return self._cart.subtotal

    @property
    def item_count(self) -> int:
        """Sum of quantities."""
        return self._cart.total_items

    @property
    def line_count(self) -> int:
        """Number of distinct products."""
        return len(self._cart.items)

    @property
    def is_empty(self) -> bool:
        return not self._cart.items

    @property
    def items(self) -> List[LineItem]:
        """Copies of the line items in insertion order."""
        return [replace(item) for item in self._cart.items]

    def get_item(self, product_id: str) -> Optional[LineItem]:
        existing = self._cart.find(product_id)
        return replace(existing) if existing else None

    def get_cart_summary(self) -> dict:
        """Get cart summary for rendering."""
        if self.is_empty:
            return {
                "is_empty": True,
                "total_items": 0,
                "items": [],
                "subtotal": 0,
            }

        return {
            "is_empty": False,
            "total_items": self.item_count,
            "items": [item.to_dict() for item in self._cart.items],
            "subtotal": to_float(self.subtotal),
        }

    # ---------------------------------------------------------------
    # Locking and listeners
    # ---------------------------------------------------------------

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject all mutations until unfreeze() is called."""
        self._frozen = True

    def unfreeze(self) -> None:
        self._frozen = False

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """
        Register a callback run after every applied mutation.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """
        Tear down the store at the end of the shopping session.

        Listeners see the emptied cart once before they are dropped.
        """
        self._frozen = False
        had_items = bool(self._cart.items)
        self._cart.items.clear()
        if had_items:
            self._notify()
        self._listeners.clear()

    def _rejected(self, operation: str) -> bool:
        if self._frozen:
            logger.warning(f"Ignoring {operation}: {ERROR_CART_LOCKED}")
            return True
        return False

    def _notify(self) -> None:
        # Copy: a listener may unsubscribe itself while being notified
        for listener in list(self._listeners):
            listener(self)

"""Cart operations for the DARAH storefront."""

import logging
from typing import Optional

from .cart import CartStore
from .checkout import build_checkout
from .config import Settings
from .errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ItemUnavailableError,
    NotInCartError,
)
from .inventory import Inventory, is_purchasable, load_catalog
from .models import CheckoutLink, Item, ReconciledCart
from .reconciler import reconcile

logger = logging.getLogger(__name__)


class Storefront:
    """Session cart operations checked against the shared inventory.

    Every operation reconciles the session's cart with the inventory as it
    is at call time; nothing is cached between calls.
    """

    def __init__(
        self,
        inventory: Inventory,
        carts: CartStore,
        whatsapp_number: str,
        store_name: str = "DARAH",
    ) -> None:
        """
        Initialize the storefront.

        Args:
            inventory: Shared item inventory
            carts: Per-session cart store
            whatsapp_number: Store contact used in checkout links
            store_name: Name used in checkout messages
        """
        self.inventory = inventory
        self.carts = carts
        self.whatsapp_number = whatsapp_number
        self.store_name = store_name

    def get_cart(self, session_id: str) -> ReconciledCart:
        """Get the session's cart, clamping stored quantities to stock."""
        with self.carts.session(session_id) as cart:
            return reconcile(cart, self.inventory)

    def add_item(self, session_id: str, item_id: str) -> ReconciledCart:
        """
        Add one unit of an item to the cart.

        Args:
            session_id: Session owning the cart
            item_id: Item to add

        Returns:
            Reconciled cart after the addition

        Raises:
            ItemUnavailableError: If the item is missing, inactive or out of stock
            InsufficientStockError: If one more unit would exceed stock
        """
        with self.carts.session(session_id) as cart:
            item = self.inventory.find_item(item_id)
            if item is None or not is_purchasable(item):
                logger.info(f"Rejected add of unavailable item {item_id}")
                raise ItemUnavailableError(f"Item {item_id} is not available")

            current = cart.quantity_of(item_id)
            if current + 1 > item.stock:
                logger.info(f"Rejected add of {item_id}: {current} in cart, stock {item.stock}")
                raise InsufficientStockError(
                    f"Only {item.stock} unit(s) of '{item.name}' available"
                )

            cart.add_one(item_id)
            logger.info(f"Added {item_id} to cart of session {session_id} (quantity: {current + 1})")
            return reconcile(cart, self.inventory)

    def update_quantity(self, session_id: str, item_id: str, quantity: int) -> ReconciledCart:
        """
        Set the quantity of an item already in the cart.

        A quantity of 0 removes the item.

        Args:
            session_id: Session owning the cart
            item_id: Item to update
            quantity: New quantity

        Returns:
            Reconciled cart after the update

        Raises:
            InvalidQuantityError: If quantity is negative
            NotInCartError: If quantity is positive and the item is not in the cart
            ItemUnavailableError: If the item no longer exists or is inactive
            InsufficientStockError: If quantity exceeds stock
        """
        with self.carts.session(session_id) as cart:
            if quantity < 0:
                raise InvalidQuantityError(f"Quantity must not be negative (got {quantity})")

            if quantity == 0:
                cart.set_quantity(item_id, 0)
                logger.info(f"Removed {item_id} from cart of session {session_id}")
                return reconcile(cart, self.inventory)

            if cart.quantity_of(item_id) == 0:
                raise NotInCartError(f"Item {item_id} is not in the cart")

            item = self._require_listed(item_id)
            if quantity > item.stock:
                logger.info(f"Rejected update of {item_id} to {quantity}: stock {item.stock}")
                raise InsufficientStockError(
                    f"Only {item.stock} unit(s) of '{item.name}' available"
                )

            cart.set_quantity(item_id, quantity)
            logger.info(f"Set {item_id} to {quantity} in cart of session {session_id}")
            return reconcile(cart, self.inventory)

    def remove_item(self, session_id: str, item_id: str) -> ReconciledCart:
        """Remove an item from the cart; removing an absent item is a no-op."""
        return self.update_quantity(session_id, item_id, 0)

    def clear_cart(self, session_id: str) -> ReconciledCart:
        with self.carts.session(session_id) as cart:
            cart.clear()
            logger.info(f"Cleared cart of session {session_id}")
            return reconcile(cart, self.inventory)

    def checkout(self, session_id: str, note: Optional[str] = None) -> CheckoutLink:
        """
        Build the WhatsApp checkout link for the session's cart.

        Raises:
            EmptyCartError: If no cart line is currently purchasable
        """
        cart = self.get_cart(session_id)
        link = build_checkout(cart, self.whatsapp_number, self.store_name, note)
        logger.info(f"Checkout link built for session {session_id} ({cart.item_count} unit(s))")
        return link

    def _require_listed(self, item_id: str) -> Item:
        item = self.inventory.find_item(item_id)
        if item is None or not item.active:
            raise ItemUnavailableError(f"Item {item_id} is not available")
        return item


def build_storefront(settings: Settings) -> Storefront:
    """Create a storefront from settings, loading the catalog if configured."""
    if settings.catalog_file:
        inventory = load_catalog(settings.catalog_file)
    else:
        logger.warning("No catalog configured (DARAH_CATALOG_FILE), starting with an empty inventory")
        inventory = Inventory()

    return Storefront(
        inventory=inventory,
        carts=CartStore(max_age=settings.session_max_age),
        whatsapp_number=settings.whatsapp_number,
        store_name=settings.store_name,
    )

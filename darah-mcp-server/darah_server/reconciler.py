"""Cart reconciliation against the live inventory."""

import logging
from decimal import Decimal

from .cart import CartState
from .inventory import Inventory, is_purchasable
from .models import ReconciledCart, ReconciledLine, to_money

logger = logging.getLogger(__name__)


def reconcile(cart: CartState, inventory: Inventory) -> ReconciledCart:
    """
    Build the customer-facing view of a cart from current inventory.

    Entries whose item is gone, inactive or out of stock are left out of the
    view but stay stored. Quantities above stock are clamped, and the clamp
    is written back to the cart so later reads agree.

    Args:
        cart: Session cart state, mutated in place when clamping
        inventory: Inventory to read items from

    Returns:
        Reconciled cart in cart order
    """
    lines: list[ReconciledLine] = []
    subtotal = Decimal("0.00")

    for entry in cart.get():
        item = inventory.find_item(entry.item_id)
        if item is None or not is_purchasable(item):
            logger.debug(f"Skipping stale cart entry {entry.item_id}")
            continue

        quantity = min(entry.quantity, item.stock)
        if quantity < entry.quantity:
            logger.info(
                f"Clamping {entry.item_id} from {entry.quantity} to {quantity} (stock: {item.stock})"
            )
            cart.set_quantity(entry.item_id, quantity)

        line_total = to_money(item.price * quantity)
        subtotal += line_total
        lines.append(
            ReconciledLine(
                item_id=item.id,
                name=item.name,
                category=item.category,
                price=item.price,
                image_url=item.image_url,
                quantity=quantity,
                line_total=line_total,
            )
        )

    taxes = Decimal("0.00")
    return ReconciledCart(
        lines=lines,
        subtotal=to_money(subtotal),
        taxes=taxes,
        total=to_money(subtotal + taxes),
        item_count=sum(line.quantity for line in lines),
    )

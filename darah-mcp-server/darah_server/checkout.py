"""WhatsApp checkout message builder."""

import re
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from .errors import EmptyCartError
from .models import CheckoutLink, ReconciledCart, to_money

WHATSAPP_BASE_URL = "https://wa.me/"


def format_brl(amount: Decimal) -> str:
    """Format an amount the pt-BR way, e.g. ``R$ 1.234,56``."""
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    # Format with en-US separators, then swap them.
    grouped = f"{abs(value):,.2f}"
    return f"{sign}R$ " + grouped.replace(",", "_").replace(".", ",").replace("_", ".")


def build_message(cart: ReconciledCart, store_name: str, note: Optional[str] = None) -> str:
    """
    Render the order summary sent to the store.

    Raises:
        EmptyCartError: If the cart has no lines
    """
    if cart.is_empty:
        raise EmptyCartError("Seu carrinho está vazio. Adicione itens antes de finalizar o pedido.")

    lines = [f"Olá! Gostaria de fazer o seguinte pedido na {store_name}:"]
    for line in cart.lines:
        label = f"{line.name} ({line.category})" if line.category else line.name
        lines.append(
            f"• {label} - Qtd: {line.quantity} - "
            f"Unitário: {format_brl(line.price)} - Subtotal: {format_brl(line.line_total)}"
        )

    if note and note.strip():
        lines.extend(["", "Observações:", note.strip()])

    lines.extend([
        "",
        f"Total: {format_brl(cart.total)}",
        "",
        "Poderia confirmar a disponibilidade, o prazo de entrega e as formas de pagamento?",
    ])
    return "\n".join(lines)


def build_checkout(
    cart: ReconciledCart,
    contact_number: str,
    store_name: str = "DARAH",
    note: Optional[str] = None,
) -> CheckoutLink:
    """
    Build the checkout message and its WhatsApp deep-link.

    Args:
        cart: Reconciled cart to summarize
        contact_number: Store's WhatsApp number; non-digits are ignored
        store_name: Name used in the greeting
        note: Optional customer remarks

    Returns:
        Message and wa.me URL with the message as the ``text`` parameter

    Raises:
        EmptyCartError: If the cart has no lines
    """
    message = build_message(cart, store_name, note)
    digits = re.sub(r"\D", "", contact_number)
    url = f"{WHATSAPP_BASE_URL}{digits}?text={quote(message, safe='')}"
    return CheckoutLink(message=message, url=url)

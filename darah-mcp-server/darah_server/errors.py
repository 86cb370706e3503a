"""Storefront error kinds.

Each error carries a stable ``code`` and the HTTP status the REST API
answers with. The message is shown to the customer as-is.
"""


class StorefrontError(Exception):
    """Base class for rejected cart operations."""

    code = "storefront_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ItemUnavailableError(StorefrontError):
    """Item does not exist, is inactive or is out of stock."""

    code = "item_unavailable"
    status_code = 409


class InsufficientStockError(StorefrontError):
    """Requested quantity is above the current stock."""

    code = "insufficient_stock"
    status_code = 409


class InvalidQuantityError(StorefrontError):
    code = "invalid_quantity"
    status_code = 400


class NotInCartError(StorefrontError):
    code = "not_in_cart"
    status_code = 404


class EmptyCartError(StorefrontError):
    code = "empty_cart"
    status_code = 400

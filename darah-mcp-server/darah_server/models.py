"""Data models for the DARAH storefront."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CENTS = Decimal("0.01")
MAX_ITEM_IMAGES = 5


def to_money(value: Decimal) -> Decimal:
    """Quantize a decimal amount to cents."""
    return Decimal(value).quantize(CENTS)


class Item(BaseModel):
    """Represents a catalog item as held by the inventory."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Item ID")
    sku: Optional[str] = Field(None, description="Stock keeping unit")
    name: str = Field(description="Item name")
    description: str = Field(default="", description="Item description")
    category: str = Field(default="", description="Catalog category")
    price: Decimal = Field(ge=0, description="Unit price in BRL")
    stock: int = Field(default=0, ge=0, description="Units available")
    active: bool = Field(default=True, description="Whether the item is listed")
    highlight: bool = Field(default=False, description="Featured on the homepage")
    images: list[str] = Field(default_factory=list, description="Image URLs")

    @field_validator("price")
    @classmethod
    def _quantize_price(cls, value: Decimal) -> Decimal:
        return to_money(value)

    @field_validator("images")
    @classmethod
    def _limit_images(cls, value: list[str]) -> list[str]:
        return value[:MAX_ITEM_IMAGES]

    @property
    def image_url(self) -> Optional[str]:
        return self.images[0] if self.images else None


class CartEntry(BaseModel):
    """A requested quantity of an item, stored in a session cart."""

    item_id: str
    quantity: int = Field(gt=0, description="Requested quantity")


class ReconciledLine(BaseModel):
    """A cart line checked against current inventory."""

    item_id: str
    name: str
    category: str = ""
    price: Decimal = Field(description="Unit price")
    image_url: Optional[str] = None
    quantity: int = Field(gt=0, description="Effective quantity, never above stock")
    line_total: Decimal = Field(description="price * quantity")


class ReconciledCart(BaseModel):
    """Represents the shopping cart as shown to the customer."""

    lines: list[ReconciledLine] = Field(default_factory=list, description="Cart lines")
    subtotal: Decimal = Field(default=Decimal("0.00"), description="Sum of line totals")
    taxes: Decimal = Field(default=Decimal("0.00"), description="Always zero")
    total: Decimal = Field(default=Decimal("0.00"), description="subtotal + taxes")
    item_count: int = Field(default=0, description="Total number of units")

    @property
    def is_empty(self) -> bool:
        return not self.lines


class CheckoutLink(BaseModel):
    """Pre-filled WhatsApp message and its deep-link."""

    message: str
    url: str

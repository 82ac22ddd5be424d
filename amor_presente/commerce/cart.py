"""
Guest cart.

The cart lives on the client; checkout rebuilds it here from the posted
items with server prices, so repeated ids collapse into one line and the
order total comes from `Cart.total`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENTS = Decimal("0.01")


@dataclass
class CartItem:
    id: str  # item id as posted by the client
    name: str
    price: Decimal
    quantity: int = 1
    image_url: str | None = None
    site_product_id: str | None = None  # set when the item resolved to a site product row

    def __post_init__(self) -> None:
        self.price = Decimal(str(self.price))

    @property
    def subtotal(self) -> Decimal:
        return (self.price * self.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Cart:
    items: list[CartItem] = field(default_factory=list)

    def _find(self, item_id: str) -> CartItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def add(self, item: CartItem, quantity: int = 1) -> None:
        """Add an item; adding an id already in the cart bumps its quantity."""
        if quantity <= 0:
            return
        existing = self._find(item.id)
        if existing:
            existing.quantity += quantity
            return
        self.items.append(replace(item, quantity=quantity))

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id)
            return
        existing = self._find(item_id)
        if existing:
            existing.quantity = quantity

    def remove(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def clear(self) -> None:
        self.items = []

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0")).quantize(CENTS)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_checkout_payload(self) -> list[dict[str, Any]]:
        return [
            {
                "id": item.id,
                "name": item.name,
                "price": float(item.price),
                "quantity": item.quantity,
                "image_url": item.image_url,
            }
            for item in self.items
        ]

from dataclasses import dataclass, field, replace
from decimal import Decimal

from cardshop.models.order import OrderLine


@dataclass(frozen=True, slots=True)
class CartItem:
    """
    A staged purchase held by the client.

    Display fields are copied from the catalog when the item is added, so
    the price may be stale. Checkout always re-reads the server price.

    Attributes:
        card_inventory_id: Inventory row id, the cart key
        card_id: Owning card id
        name: Card name for display
        image_url: Card image for display
        condition: Condition label for display
        price: Unit price at the time the item was added
        quantity: Number of copies staged
    """

    card_inventory_id: int
    card_id: str
    name: str
    image_url: str
    condition: str
    price: Decimal
    quantity: int = 1


@dataclass
class Cart:
    """
    Client-side cart keyed by inventory row id.

    Items keep insertion order and each key appears at most once. Stock is
    not checked here; order placement is the only authority on stock.
    """

    items: list[CartItem] = field(default_factory=list)

    def _index(self, card_inventory_id: int) -> int | None:
        for i, item in enumerate(self.items):
            if item.card_inventory_id == card_inventory_id:
                return i
        return None

    def get(self, card_inventory_id: int) -> CartItem | None:
        """Get the entry for an inventory row, if staged."""
        index = self._index(card_inventory_id)
        return None if index is None else self.items[index]

    def add(self, item: CartItem, quantity: int = 1) -> None:
        """
        Add copies of an item, merging into an existing entry.

        Raises:
            ValueError: If quantity is below 1
        """
        if quantity < 1:
            raise ValueError(f"Quantity to add must be at least 1, got {quantity}")

        index = self._index(item.card_inventory_id)
        if index is None:
            self.items.append(replace(item, quantity=quantity))
        else:
            existing = self.items[index]
            self.items[index] = replace(existing, quantity=existing.quantity + quantity)

    def set_quantity(self, card_inventory_id: int, quantity: int) -> None:
        """Replace an entry's quantity. Zero or less removes the entry."""
        if quantity <= 0:
            self.remove(card_inventory_id)
            return

        index = self._index(card_inventory_id)
        if index is not None:
            self.items[index] = replace(self.items[index], quantity=quantity)

    def remove(self, card_inventory_id: int) -> None:
        self.items = [i for i in self.items if i.card_inventory_id != card_inventory_id]

    def clear(self) -> None:
        self.items = []

    def total_items(self) -> int:
        """Number of copies across all entries."""
        return sum(item.quantity for item in self.items)

    def total_price(self) -> Decimal:
        """Sum of price x quantity using the cached prices."""
        return sum((item.price * item.quantity for item in self.items), Decimal("0.00"))

    def to_order_lines(self) -> list[OrderLine]:
        """Checkout payload for order placement."""
        return [
            OrderLine(inventory_id=item.card_inventory_id, quantity=item.quantity)
            for item in self.items
        ]

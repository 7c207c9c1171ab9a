from dataclasses import dataclass

from cardshop.models.db import UserRole


@dataclass(frozen=True, slots=True)
class Caller:
    """
    Identity of an authenticated caller, as asserted by the auth provider.

    Attributes:
        user_id: Stable user id issued by the provider
        email: Account email, if the provider shares it
        name: Display name, if the provider shares it
        role: CUSTOMER or ADMIN
    """

    user_id: str
    email: str | None = None
    name: str | None = None
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True, slots=True)
class OrderLine:
    """A requested (inventory row, quantity) pair."""

    inventory_id: int
    quantity: int


def merge_order_lines(lines: list[OrderLine]) -> list[OrderLine]:
    """
    Combine lines naming the same inventory row.

    Quantities are summed; first-seen order is preserved.
    """
    merged: dict[int, int] = {}
    for line in lines:
        merged[line.inventory_id] = merged.get(line.inventory_id, 0) + line.quantity
    return [OrderLine(inventory_id=inv_id, quantity=qty) for inv_id, qty in merged.items()]

"""Per-menu-item reduction shared by group orders and group carts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from lunch_api.common.money import ZERO, to_money
from lunch_api.models import MenuItem


@dataclass(slots=True)
class ItemTotal:
    menu_item_id: UUID
    name: str
    unit_price: Decimal
    total_quantity: int = 0
    total_amount: Decimal = ZERO


def summarize_items(lines: Iterable[tuple[MenuItem, int, Decimal]]) -> list[ItemTotal]:
    """Sum ``(menu_item, quantity, amount)`` lines per menu item.

    The result is ordered by total quantity, largest first; ties keep the
    order in which items were first seen.
    """
    totals: dict[UUID, ItemTotal] = {}
    for menu_item, quantity, amount in lines:
        entry = totals.get(menu_item.id)
        if entry is None:
            entry = ItemTotal(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                unit_price=to_money(menu_item.price),
            )
            totals[menu_item.id] = entry
        entry.total_quantity += quantity
        entry.total_amount = to_money(entry.total_amount + to_money(amount))
    return sorted(totals.values(), key=lambda entry: -entry.total_quantity)


__all__ = ["ItemTotal", "summarize_items"]

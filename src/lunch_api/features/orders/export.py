"""Render a group order as text, CSV or JSON."""

from __future__ import annotations

import csv
import io
from decimal import Decimal

from .schemas import (
    ExportBreakdown,
    ExportItem,
    ExportOrder,
    ExportRestaurant,
    ExportSummary,
    GroupOrder,
    OrderExport,
)

RULE = "=" * 60
THIN_RULE = "-" * 60
CSV_HEADER = ("Employee Name", "Item Name", "Quantity", "Price", "Subtotal", "Notes")


def _amount(value: Decimal) -> str:
    return f"{value:.2f}"


def build_export(group_order: GroupOrder) -> OrderExport:
    return OrderExport(
        date=group_order.date,
        restaurant=ExportRestaurant(
            name=group_order.restaurant.name,
            cuisine=group_order.restaurant.cuisine,
        ),
        orders=[
            ExportOrder(
                employee_name=order.user_name,
                items=[
                    ExportItem(
                        item_name=item.menu_item_name,
                        quantity=item.quantity,
                        notes=item.notes,
                        price=item.unit_price,
                        subtotal=item.subtotal,
                    )
                    for item in order.items
                ],
                total=order.total_amount,
            )
            for order in group_order.orders
        ],
        summary=ExportSummary(
            total_orders=group_order.total_orders,
            total_amount=group_order.total_amount,
            item_breakdown=[
                ExportBreakdown(
                    item_name=item.name,
                    total_quantity=item.total_quantity,
                    total_amount=item.total_amount,
                )
                for item in group_order.item_summary
            ],
        ),
    )


def render_text(data: OrderExport) -> str:
    lines: list[str] = [RULE, "LUNCH ORDER SUMMARY", RULE, ""]
    restaurant = data.restaurant.name
    if data.restaurant.cuisine:
        restaurant = f"{restaurant} ({data.restaurant.cuisine})"
    lines += [
        f"Date: {data.date.isoformat()}",
        f"Restaurant: {restaurant}",
        f"Total Orders: {data.summary.total_orders}",
        f"Total Amount: ${_amount(data.summary.total_amount)}",
        "",
        RULE,
        "INDIVIDUAL ORDERS",
        RULE,
        "",
    ]

    for index, order in enumerate(data.orders, start=1):
        lines.append(f"{index}. {order.employee_name}")
        lines.append(THIN_RULE)
        for item in order.items:
            lines.append(f"   {item.quantity}x {item.item_name} - ${_amount(item.subtotal)}")
            if item.notes:
                lines.append(f"      Note: {item.notes}")
        lines.append(f"   Total: ${_amount(order.total)}")
        lines.append("")

    lines += [RULE, "ITEM SUMMARY (for restaurant)", RULE, ""]
    for entry in data.summary.item_breakdown:
        lines.append(
            f"{entry.total_quantity}x {entry.item_name} - ${_amount(entry.total_amount)}"
        )

    lines += ["", RULE, f"GRAND TOTAL: ${_amount(data.summary.total_amount)}", RULE]
    return "\n".join(lines)


def render_csv(data: OrderExport) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for order in data.orders:
        for item in order.items:
            writer.writerow(
                (
                    order.employee_name,
                    item.item_name,
                    item.quantity,
                    _amount(item.price),
                    _amount(item.subtotal),
                    item.notes or "",
                )
            )
    return buffer.getvalue()


def render_json(data: OrderExport) -> str:
    return data.model_dump_json(indent=2)


RENDERERS = {
    "text": render_text,
    "csv": render_csv,
    "json": render_json,
}


__all__ = ["RENDERERS", "build_export", "render_csv", "render_json", "render_text"]

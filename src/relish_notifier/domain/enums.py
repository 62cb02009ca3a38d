from __future__ import annotations

from enum import StrEnum


class OrderStatus(StrEnum):
    PLACED = "Order Placed"
    PREPARING = "Preparing Your Order"
    ARRIVED = "Order Arrived"
    UNKNOWN = "Unknown"


_KNOWN_LABELS: dict[str, OrderStatus] = {
    s.value: s for s in OrderStatus if s is not OrderStatus.UNKNOWN
}


def classify_status(text: object) -> OrderStatus:
    """
    What it does:
    - Maps the text of the order status label to an OrderStatus.

    Why it matters:
    - Called on every poll; the loop only acts on ARRIVED.

    Behavior:
    - Exact, case-sensitive match; no trimming (callers strip the label text).
    - Anything else, including non-string input, returns UNKNOWN. Never raises.
    """
    if not isinstance(text, str):
        return OrderStatus.UNKNOWN
    return _KNOWN_LABELS.get(text, OrderStatus.UNKNOWN)

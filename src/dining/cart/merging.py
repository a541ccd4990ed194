"""Cart line merging — decides whether an incoming item joins an existing line.

Two lines are the same purchase when their signatures match:

    (menu item id, customizations sorted by name, special instructions)

A matching line absorbs the incoming quantity. If the merged quantity would
pass the per-line cap the whole add is rejected; it is never clamped.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from protean.exceptions import ValidationError

from dining.errors import QuantityLimitExceeded

MAX_LINE_QUANTITY = 10

LineSignature = tuple[str, tuple[tuple[str, str, float], ...], str]


def normalize_customizations(raw: Any) -> list[dict]:
    """Validate customizations and return them as plain dicts, in the given order.

    Accepts a JSON string or a list of mappings with ``name``, ``value`` and an
    optional ``additional_price`` (defaults to 0, must not be negative).
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValidationError({"customizations": ["Customizations must be a JSON list"]}) from exc
    if not isinstance(raw, list):
        raise ValidationError({"customizations": ["Customizations must be a list"]})

    normalized = []
    errors = []
    for position, entry in enumerate(raw):
        if not isinstance(entry, dict):
            errors.append(f"Customization #{position + 1} must be an object")
            continue
        name = str(entry.get("name") or "").strip()
        value = str(entry.get("value") or "").strip()
        additional_price = entry.get("additional_price", 0) or 0
        if not name:
            errors.append(f"Customization #{position + 1}: name is required")
        if not value:
            errors.append(f"Customization #{position + 1}: value is required")
        try:
            additional_price = float(additional_price)
        except (TypeError, ValueError):
            errors.append(f"Customization #{position + 1}: additional price must be a number")
            continue
        if additional_price < 0:
            errors.append(f"Customization #{position + 1}: additional price cannot be negative")
        normalized.append({"name": name, "value": value, "additional_price": additional_price})

    if errors:
        raise ValidationError({"customizations": errors})
    return normalized


def line_signature(menu_item_id: Any, customizations: list[dict], special_instructions: str | None) -> LineSignature:
    ordered = sorted(
        customizations,
        key=lambda c: (c["name"], c["value"], float(c.get("additional_price", 0) or 0)),
    )
    return (
        str(menu_item_id),
        tuple((c["name"], c["value"], float(c.get("additional_price", 0) or 0)) for c in ordered),
        (special_instructions or "").strip(),
    )


@dataclass(frozen=True)
class MergePlan:
    """Outcome of matching an incoming item against the cart's lines.

    ``existing`` is the line to grow, or None when a new line must be appended.
    ``quantity`` is the resulting quantity of that line.
    """

    existing: Any
    quantity: int

    @property
    def merges(self) -> bool:
        return self.existing is not None


def plan_merge(
    lines: Iterable[Any],
    signature: LineSignature,
    incoming_quantity: int,
    max_quantity: int = MAX_LINE_QUANTITY,
) -> MergePlan:
    """Find the line sharing ``signature`` and work out the merged quantity.

    Lines only need a ``signature()`` method and a ``quantity`` attribute.

    Raises:
        QuantityLimitExceeded: the resulting line quantity would pass ``max_quantity``.
    """
    existing = next((line for line in lines if line.signature() == signature), None)
    quantity = incoming_quantity + (existing.quantity if existing is not None else 0)
    if quantity > max_quantity:
        raise QuantityLimitExceeded(
            f"Maximum {max_quantity} items allowed per menu item",
            menu_item_id=signature[0],
            requested_quantity=quantity,
            max_quantity=max_quantity,
        )
    return MergePlan(existing=existing, quantity=quantity)

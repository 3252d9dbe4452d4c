"""
Invoice totals engine.

Derives subtotal, tax and total from a list of line items and a tax
percentage. Request bodies are untrusted, so every helper here degrades
malformed input to zero or an empty list instead of raising.
"""

import json
import math
import numbers
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

QUANTITY_KEYS = ("qty", "quantity")
UNIT_PRICE_KEYS = ("unitPrice", "unit_price")


@dataclass(frozen=True)
class Totals:
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def parse_number_or_zero(value: Any) -> float:
    """Coerce a number or numeric string to float, anything else to 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_sequence_or_empty(value: Any) -> List[Any]:
    """Return lists and tuples as a list, anything else as []"""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def parse_items_field(value: Any) -> List[Any]:
    """Normalize an items field that may arrive as a list or a JSON-encoded string"""
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return []
        return parse_sequence_or_empty(decoded)
    return []


def _item_value(item: Any, keys) -> Optional[Any]:
    for key in keys:
        if isinstance(item, Mapping):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if value is not None:
            return value
    return None


def compute_totals(items: Any, tax_percent: Any) -> Totals:
    """Compute subtotal, tax and total; never raises"""
    safe_items = [item for item in parse_sequence_or_empty(items) if item]
    subtotal = 0.0
    for item in safe_items:
        quantity = parse_number_or_zero(_item_value(item, QUANTITY_KEYS))
        unit_price = parse_number_or_zero(_item_value(item, UNIT_PRICE_KEYS))
        amount = quantity * unit_price
        # Finite inputs can still overflow
        if math.isfinite(amount):
            subtotal += amount
    tax = subtotal * parse_number_or_zero(tax_percent) / 100
    total = subtotal + tax
    if not all(math.isfinite(value) for value in (subtotal, tax, total)):
        return Totals()
    return Totals(subtotal=subtotal, tax=tax, total=total)


def apply_totals(record: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of an invoice document with its derived fields recomputed.

    Whatever subtotal/tax/total the document carried is overwritten.
    """
    totals = compute_totals(record.get("items"), record.get("taxPercent"))
    updated = dict(record)
    updated.update(totals.as_dict())
    return updated

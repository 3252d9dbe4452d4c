"""
Invoice lifecycle operations.

Creation fills in defaults and derives the totals; updates merge the request
body over the stored document and derive the totals again from the merged
line items and tax percent. Client-supplied subtotal/tax/total never survive.
"""

import re
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from .config import InvoiceDefaults
from .models import Invoice, InvoiceStatus, InvoiceSummary
from .totals import apply_totals, parse_items_field, parse_number_or_zero

PROTECTED_FIELDS = ("id", "owner", "createdAt")
DERIVED_FIELDS = ("subtotal", "tax", "total")

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    return secrets.token_hex(12)


def is_object_id(value: Any) -> bool:
    """True when value looks like a store id rather than an invoice number"""
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def _writable(body: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        key: value
        for key, value in Invoice.wire_keys(body).items()
        if key not in PROTECTED_FIELDS and key not in DERIVED_FIELDS
    }


def _finalize(raw: Dict[str, Any]) -> Dict[str, Any]:
    document = Invoice.model_validate(raw).model_dump(by_alias=True, mode="json")
    return apply_totals(document)


def build_invoice(
    owner: str,
    body: Mapping[str, Any],
    defaults: InvoiceDefaults,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build a new invoice document owned by owner"""
    now = now or datetime.now(timezone.utc)
    raw = _writable(body)

    tax_value = raw.get("taxPercent")
    if tax_value is None or tax_value == "":
        tax_percent = defaults.tax_percent
    else:
        tax_percent = parse_number_or_zero(tax_value)

    raw.update(
        id=new_object_id(),
        owner=owner,
        invoiceNumber=raw.get("invoiceNumber") or f"INV-{int(now.timestamp() * 1000)}",
        issueDate=raw.get("issueDate") or now.date().isoformat(),
        currency=raw.get("currency") or defaults.currency,
        status=raw.get("status") or defaults.status,
        taxPercent=tax_percent,
        items=parse_items_field(raw.get("items")),
        createdAt=now.isoformat(),
        updatedAt=now.isoformat(),
    )
    return _finalize(raw)


def merge_invoice(
    existing: Mapping[str, Any],
    body: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Merge an update body into a stored invoice and recompute its totals"""
    now = now or datetime.now(timezone.utc)
    changes = _writable(body)
    if "items" in changes:
        changes["items"] = parse_items_field(changes["items"])

    merged = dict(existing)
    merged.update(changes)
    merged["updatedAt"] = now.isoformat()
    return _finalize(merged)


def summarize_invoices(invoices: Iterable[Mapping[str, Any]]) -> InvoiceSummary:
    """Dashboard KPIs; amounts are summed as stored, with no currency conversion"""
    total_invoices = 0
    paid_total = 0.0
    unpaid_total = 0.0
    paid_count = 0
    status_counts = {status.value: 0 for status in InvoiceStatus}

    for invoice in invoices:
        total_invoices += 1
        amount = parse_number_or_zero(invoice.get("total"))
        status = str(invoice.get("status") or "").strip().lower()
        if status in status_counts:
            status_counts[status] += 1

        if status == InvoiceStatus.PAID.value:
            paid_total += amount
            paid_count += 1
        else:
            unpaid_total += amount

    total_amount = paid_total + unpaid_total
    return InvoiceSummary(
        total_invoices=total_invoices,
        total_paid=paid_total,
        total_unpaid=unpaid_total,
        paid_count=paid_count,
        paid_percentage=(paid_total / total_amount * 100) if total_amount > 0 else 0.0,
        average_invoice=(total_amount / total_invoices) if total_invoices else 0.0,
        status_counts=status_counts,
    )

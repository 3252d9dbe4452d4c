from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .invoices import new_object_id
from .models import BusinessProfile

PROTECTED_FIELDS = ("id", "owner", "createdAt")


def _writable(body: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        key: value
        for key, value in BusinessProfile.wire_keys(body).items()
        if key not in PROTECTED_FIELDS
    }


def build_profile(
    owner: str,
    body: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the business profile document for owner"""
    now = now or datetime.now(timezone.utc)
    raw = _writable(body)
    raw.update(
        id=new_object_id(),
        owner=owner,
        createdAt=now.isoformat(),
        updatedAt=now.isoformat(),
    )
    return BusinessProfile.model_validate(raw).model_dump(by_alias=True, mode="json")


def merge_profile(
    existing: Mapping[str, Any],
    body: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Merge an update body into a stored profile; the owner never changes"""
    now = now or datetime.now(timezone.utc)
    merged = dict(existing)
    merged.update(_writable(body))
    merged["updatedAt"] = now.isoformat()
    return BusinessProfile.model_validate(merged).model_dump(by_alias=True, mode="json")

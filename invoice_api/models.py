import json
import uuid
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .totals import parse_items_field, parse_number_or_zero


class CamelModel(BaseModel):
    """Documents are stored and served with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @classmethod
    def wire_keys(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename snake_case field names in a raw body to their camelCase aliases"""
        aliases = {name: info.alias or name for name, info in cls.model_fields.items()}
        return {aliases.get(key, key): value for key, value in data.items()}


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _iso_date(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return _blank_if_none(value)


class LineItem(CamelModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    description: str = ""
    qty: float = Field(default=1.0, validation_alias=AliasChoices("qty", "quantity"))
    unit_price: float = Field(default=0.0, validation_alias=AliasChoices("unitPrice", "unit_price"))

    @field_validator("id", mode="before")
    @classmethod
    def _fill_id(cls, value: Any) -> str:
        return str(value) if value else uuid.uuid4().hex

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> str:
        return str(_blank_if_none(value))

    @field_validator("qty", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> float:
        if value is None:
            return 1.0
        return max(parse_number_or_zero(value), 0.0)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _unit_price(cls, value: Any) -> float:
        return max(parse_number_or_zero(value), 0.0)


class ClientInfo(CamelModel):
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""

    @field_validator("name", "email", "address", "phone", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Any:
        return _blank_if_none(value)


class Invoice(CamelModel):
    id: Optional[str] = None
    owner: str
    invoice_number: str
    issue_date: str
    due_date: str = ""

    # Business info
    from_business_name: str = ""
    from_email: str = ""
    from_address: str = ""
    from_phone: str = ""
    from_gst: str = ""

    client: ClientInfo = Field(default_factory=ClientInfo)
    items: List[LineItem] = Field(default_factory=list)

    currency: str = "INR"
    status: InvoiceStatus = InvoiceStatus.DRAFT

    logo_data_url: Optional[str] = None
    stamp_data_url: Optional[str] = None
    signature_data_url: Optional[str] = None
    signature_name: str = ""
    signature_title: str = ""

    notes: Optional[str] = None
    tax_percent: float = 18.0

    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("issue_date", "due_date", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> Any:
        return _iso_date(value)

    @field_validator(
        "from_business_name", "from_email", "from_address", "from_phone", "from_gst",
        "signature_name", "signature_title",
        mode="before",
    )
    @classmethod
    def _strings(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("client", mode="before")
    @classmethod
    def _client(cls, value: Any) -> Any:
        # Multipart forms send the client block as a JSON string
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return {}
        if isinstance(value, (Mapping, ClientInfo)):
            return value
        return {}

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, value: Any) -> List[Any]:
        return [
            item for item in parse_items_field(value)
            if item and isinstance(item, (Mapping, LineItem))
        ]

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("tax_percent", mode="before")
    @classmethod
    def _tax_percent(cls, value: Any) -> float:
        return parse_number_or_zero(value)


class BusinessProfile(CamelModel):
    id: Optional[str] = None
    owner: str
    business_name: str
    email: str = ""
    address: str = ""
    phone: str = ""
    gst: str = ""

    logo_url: Optional[str] = None
    stamp_url: Optional[str] = None
    signature_url: Optional[str] = None
    signature_owner_name: str = ""
    signature_owner_title: str = ""

    default_tax_percent: float = 18.0

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("business_name", mode="before")
    @classmethod
    def _business_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValueError("businessName is required")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator(
        "address", "phone", "gst", "signature_owner_name", "signature_owner_title",
        mode="before",
    )
    @classmethod
    def _strings(cls, value: Any) -> Any:
        return _blank_if_none(value)

    @field_validator("default_tax_percent", mode="before")
    @classmethod
    def _default_tax_percent(cls, value: Any) -> float:
        if value is None or value == "":
            return 18.0
        return min(max(parse_number_or_zero(value), 0.0), 100.0)


class InvoiceSummary(CamelModel):
    total_invoices: int = 0
    total_paid: float = 0.0
    total_unpaid: float = 0.0
    paid_count: int = 0
    paid_percentage: float = 0.0
    average_invoice: float = 0.0
    status_counts: Dict[str, int] = Field(default_factory=dict)


class APIResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None

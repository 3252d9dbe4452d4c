"""Service configuration, loaded once from the environment."""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


@dataclass(frozen=True)
class InvoiceDefaults:
    """Values applied to a new invoice when the request leaves them out."""

    currency: str = "INR"
    status: str = "draft"
    tax_percent: float = 18.0

    @classmethod
    def from_env(cls) -> "InvoiceDefaults":
        return cls(
            currency=os.getenv("DEFAULT_CURRENCY", cls.currency),
            status=os.getenv("DEFAULT_STATUS", cls.status),
            tax_percent=_float_env("DEFAULT_TAX_PERCENT", cls.tax_percent),
        )


@dataclass(frozen=True)
class Settings:
    """Immutable configuration loaded once at startup."""

    # Supabase
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = field(default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))

    # HTTP
    public_url: str = field(default_factory=lambda: os.getenv("API_PUBLIC_URL", "http://localhost:8000").rstrip("/"))
    host: str = field(default_factory=lambda: os.getenv("API_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8000")))
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: _split_list(os.getenv("CORS_ORIGINS", "*")))

    # Access
    allowed_users: Tuple[str, ...] = field(default_factory=lambda: _split_list(os.getenv("ALLOWED_USERS", "")))

    # Storage
    upload_dir: str = field(default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"))

    # Observability
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    invoice_defaults: InvoiceDefaults = field(default_factory=InvoiceDefaults.from_env)


settings = Settings()

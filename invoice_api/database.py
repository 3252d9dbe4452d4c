import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from .config import settings
from .invoices import is_object_id

logger = logging.getLogger(__name__)

INVOICES_TABLE = "invoices"
PROFILES_TABLE = "business_profiles"


class DatabaseError(Exception):
    """Raised when the document store cannot complete a request"""


class DatabaseClient:
    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self.supabase: Client = create_client(url or settings.supabase_url, key or settings.supabase_key)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def get_user_id(self, access_token: str) -> Optional[str]:
        """Resolve a Supabase access token to the user id it was issued for"""
        try:
            response = self.supabase.auth.get_user(access_token)
        except Exception as e:
            logger.warning("Rejected access token: %s", e)
            return None
        user = getattr(response, "user", None)
        return getattr(user, "id", None)

    def ping(self) -> None:
        """Raise DatabaseError when the store is unreachable"""
        try:
            self.supabase.table(INVOICES_TABLE).select("id").limit(1).execute()
        except Exception as e:
            logger.exception("Database ping failed")
            raise DatabaseError(str(e)) from e

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def _invoice_key_query(self, query, invoice_key: str):
        if is_object_id(invoice_key):
            return query.eq("id", invoice_key)
        return query.eq("invoiceNumber", invoice_key)

    def list_invoices(self, owner: str) -> List[Dict[str, Any]]:
        """All invoices belonging to owner, newest first"""
        try:
            result = (
                self.supabase.table(INVOICES_TABLE)
                .select("*")
                .eq("owner", owner)
                .order("createdAt", desc=True)
                .execute()
            )
        except Exception as e:
            logger.exception("Error listing invoices for %s", owner)
            raise DatabaseError(str(e)) from e
        return result.data or []

    def get_invoice(self, invoice_key: str, owner: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Fetch one invoice by store id or invoice number, optionally scoped to owner"""
        try:
            query = self._invoice_key_query(self.supabase.table(INVOICES_TABLE).select("*"), invoice_key)
            if owner:
                query = query.eq("owner", owner)
            result = query.limit(1).execute()
        except Exception as e:
            logger.exception("Error fetching invoice %s", invoice_key)
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else None

    def insert_invoice(self, invoice: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.supabase.table(INVOICES_TABLE).insert(invoice).execute()
        except Exception as e:
            logger.exception("Error creating invoice %s", invoice.get("invoiceNumber"))
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else invoice

    def update_invoice(self, invoice_id: str, owner: str, invoice: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            result = (
                self.supabase.table(INVOICES_TABLE)
                .update(invoice)
                .eq("id", invoice_id)
                .eq("owner", owner)
                .execute()
            )
        except Exception as e:
            logger.exception("Error updating invoice %s", invoice_id)
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else None

    def delete_invoice(self, invoice_key: str, owner: str) -> Optional[Dict[str, Any]]:
        """Hard delete; returns the removed document, or None when nothing matched"""
        try:
            query = self._invoice_key_query(self.supabase.table(INVOICES_TABLE).delete(), invoice_key)
            result = query.eq("owner", owner).execute()
        except Exception as e:
            logger.exception("Error deleting invoice %s", invoice_key)
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else None

    # ------------------------------------------------------------------
    # Business profiles
    # ------------------------------------------------------------------

    def get_profile(self, owner: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table(PROFILES_TABLE).select("*").eq("owner", owner).limit(1).execute()
        except Exception as e:
            logger.exception("Error fetching business profile for %s", owner)
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else None

    def insert_profile(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.supabase.table(PROFILES_TABLE).insert(profile).execute()
        except Exception as e:
            logger.exception("Error creating business profile for %s", profile.get("owner"))
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else profile

    def update_profile(self, owner: str, profile: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table(PROFILES_TABLE).update(profile).eq("owner", owner).execute()
        except Exception as e:
            logger.exception("Error updating business profile for %s", owner)
            raise DatabaseError(str(e)) from e
        return result.data[0] if result.data else None


@lru_cache()
def get_db() -> DatabaseClient:
    """Shared client, created on first use"""
    return DatabaseClient()

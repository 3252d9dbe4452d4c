"""
Shared fixtures: an in-memory store standing in for Supabase, and a
TestClient wired to it.
"""

import os
import tempfile

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="invoice-uploads-"))
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient

from invoice_api.database import DatabaseError, get_db
from invoice_api.invoices import is_object_id
from invoice_api.main import app

TOKENS = {
    "token-alice": "user_alice",
    "token-bob": "user_bob",
}


class InMemoryDatabase:
    """Implements the DatabaseClient interface over plain dicts"""

    def __init__(self):
        self.invoices = {}
        self.profiles = {}
        self.available = True

    def _check(self):
        if not self.available:
            raise DatabaseError("connection refused")

    def get_user_id(self, access_token):
        return TOKENS.get(access_token)

    def ping(self):
        self._check()

    def _match(self, invoice, invoice_key):
        if is_object_id(invoice_key):
            return invoice["id"] == invoice_key
        return invoice["invoiceNumber"] == invoice_key

    def list_invoices(self, owner):
        self._check()
        owned = [dict(inv) for inv in self.invoices.values() if inv["owner"] == owner]
        return sorted(owned, key=lambda inv: inv["createdAt"], reverse=True)

    def get_invoice(self, invoice_key, owner=None):
        self._check()
        for invoice in self.invoices.values():
            if self._match(invoice, invoice_key) and (owner is None or invoice["owner"] == owner):
                return dict(invoice)
        return None

    def insert_invoice(self, invoice):
        self._check()
        self.invoices[invoice["id"]] = dict(invoice)
        return dict(invoice)

    def update_invoice(self, invoice_id, owner, invoice):
        self._check()
        stored = self.invoices.get(invoice_id)
        if stored is None or stored["owner"] != owner:
            return None
        self.invoices[invoice_id] = dict(invoice)
        return dict(invoice)

    def delete_invoice(self, invoice_key, owner):
        self._check()
        invoice = self.get_invoice(invoice_key, owner)
        if invoice is None:
            return None
        return self.invoices.pop(invoice["id"])

    def get_profile(self, owner):
        self._check()
        profile = self.profiles.get(owner)
        return dict(profile) if profile else None

    def insert_profile(self, profile):
        self._check()
        self.profiles[profile["owner"]] = dict(profile)
        return dict(profile)

    def update_profile(self, owner, profile):
        self._check()
        if owner not in self.profiles:
            return None
        self.profiles[owner] = dict(profile)
        return dict(profile)


@pytest.fixture
def db():
    return InMemoryDatabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def alice():
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob():
    return {"Authorization": "Bearer token-bob"}

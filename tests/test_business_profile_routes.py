"""Tests for the one-per-owner business profile routes."""

import os

from invoice_api.config import settings

PROFILE_BODY = {
    "businessName": "  Studio North  ",
    "email": " Billing@StudioNorth.TEST ",
    "address": "12 Harbour Rd",
    "gst": "29ABCDE1234F1Z5",
}


def create_profile(client, headers, body=None):
    response = client.post("/api/businessProfile", json=body or PROFILE_BODY, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_get_missing_profile(client, alice):
    response = client.get("/api/businessProfile/me", headers=alice)
    assert response.status_code == 404


def test_create_normalizes_fields(client, alice):
    profile = create_profile(client, alice)

    assert profile["owner"] == "user_alice"
    assert profile["businessName"] == "Studio North"
    assert profile["email"] == "billing@studionorth.test"
    assert profile["phone"] == ""
    assert profile["defaultTaxPercent"] == 18
    assert profile["logoUrl"] is None


def test_create_requires_business_name(client, alice):
    response = client.post("/api/businessProfile", json={"businessName": "   "}, headers=alice)
    assert response.status_code == 400


def test_only_one_profile_per_owner(client, alice, bob):
    create_profile(client, alice)
    again = client.post("/api/businessProfile", json=PROFILE_BODY, headers=alice)
    assert again.status_code == 409
    create_profile(client, bob)


def test_get_returns_own_profile(client, alice, bob):
    create_profile(client, alice)
    create_profile(client, bob, {"businessName": "Bob's Bakery"})

    mine = client.get("/api/businessProfile/me", headers=bob).json()["data"]
    assert mine["businessName"] == "Bob's Bakery"


def test_update_profile(client, alice):
    created = create_profile(client, alice)

    response = client.put(
        "/api/businessProfile/me",
        json={"phone": "555-0100", "defaultTaxPercent": "150", "owner": "user_bob"},
        headers=alice,
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["phone"] == "555-0100"
    assert updated["defaultTaxPercent"] == 100
    assert updated["owner"] == "user_alice"
    assert updated["id"] == created["id"]


def test_update_with_assets(client, alice):
    create_profile(client, alice)

    response = client.put(
        "/api/businessProfile/me",
        data={"signatureOwnerName": "J. North"},
        files={
            "signature": ("sig.png", b"sig", "image/png"),
            "logo": ("logo.svg", b"<svg/>", "image/svg+xml"),
        },
        headers=alice,
    )

    updated = response.json()["data"]
    assert updated["signatureOwnerName"] == "J. North"
    assert "/uploads/signature-" in updated["signatureUrl"]
    assert updated["logoUrl"].endswith(".svg")
    assert updated["stampUrl"] is None


def test_update_missing_profile(client, alice):
    response = client.put("/api/businessProfile/me", json={"phone": "1"}, headers=alice)
    assert response.status_code == 404


def test_rejected_create_keeps_no_files(client, alice):
    before = set(os.listdir(settings.upload_dir))

    response = client.post(
        "/api/businessProfile",
        data={"businessName": "  "},
        files={"logo": ("logo.png", b"logo", "image/png")},
        headers=alice,
    )

    assert response.status_code == 400
    assert set(os.listdir(settings.upload_dir)) == before

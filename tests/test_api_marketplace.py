"""
Tests for the marketplace API endpoints.

Runs the real routes against a per-test in-memory database.
Validates request validation, response schemas, and error mapping.
"""

from decimal import Decimal

API = "/api/v1"


def _register(client, name: str, secret: str = "pw") -> dict:
    response = client.post(
        f"{API}/identities",
        json={"name": name, "email": f"{name.lower()}@example.com", "secret": secret},
    )
    assert response.status_code == 201, response.text
    return response.json()


def _mint(client, owner_id: str, **overrides) -> dict:
    payload = {
        "owner_id": owner_id,
        "category": "ART",
        "name": "Sunset",
        "description": "Orange sky",
        "creator": "Studio",
        "price": "10",
        "is_for_sale": True,
        "image_refs": ["sunset.png"],
        "attributes": [{"trait_type": "Mood", "value": "Calm"}],
    }
    payload.update(overrides)
    return client.post(f"{API}/items", json=payload)


class TestIdentityEndpoints:
    """Tests for /api/v1/identities."""

    def test_register_hides_credentials(self, client) -> None:
        """Registration returns the public view with the starting balance."""
        body = _register(client, "Alice")
        assert body["id"].startswith("U-")
        assert Decimal(body["balance"]) == Decimal("100")
        assert "secret" not in body
        assert "credential_hash" not in body

    def test_duplicate_email_returns_409(self, client) -> None:
        """Registering an email twice is a conflict."""
        _register(client, "Alice")
        response = client.post(
            f"{API}/identities",
            json={"name": "Again", "email": "ALICE@example.com", "secret": "x"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "DuplicateIdentity"

    def test_invalid_email_returns_422(self, client) -> None:
        """Malformed email is rejected by validation."""
        response = client.post(
            f"{API}/identities", json={"name": "A", "email": "nope", "secret": "x"}
        )
        assert response.status_code == 422

    def test_authenticate(self, client) -> None:
        """Good credentials return 200; bad ones 401."""
        alice = _register(client, "Alice", secret="s3cret")
        ok = client.post(
            f"{API}/identities/authenticate",
            json={"email": "alice@example.com", "secret": "s3cret"},
        )
        assert ok.status_code == 200
        assert ok.json()["id"] == alice["id"]

        bad = client.post(
            f"{API}/identities/authenticate",
            json={"email": "alice@example.com", "secret": "wrong"},
        )
        assert bad.status_code == 401
        assert bad.json()["error"] == "InvalidCredentials"

    def test_get_unknown_identity_returns_404(self, client) -> None:
        """Missing identities map to 404 with the NotFound code."""
        response = client.get(f"{API}/identities/U-NOBODY")
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_top_up(self, client) -> None:
        """Positive top-ups credit the balance; others return 422."""
        alice = _register(client, "Alice")
        ok = client.post(f"{API}/identities/{alice['id']}/top-up", json={"amount": "25"})
        assert ok.status_code == 200
        assert Decimal(ok.json()["balance"]) == Decimal("125")

        bad = client.post(f"{API}/identities/{alice['id']}/top-up", json={"amount": "0"})
        assert bad.status_code == 422
        assert bad.json()["error"] == "InvalidAmount"

    def test_top_up_beyond_eight_decimals_returns_422(self, client) -> None:
        """Amounts finer than the stored precision are refused, not rounded away."""
        alice = _register(client, "Alice")
        response = client.post(
            f"{API}/identities/{alice['id']}/top-up", json={"amount": "0.000000001"}
        )
        assert response.status_code == 422
        balance = client.get(f"{API}/identities/{alice['id']}").json()["balance"]
        assert Decimal(balance) == Decimal("100")

    def test_multibyte_secret_over_72_bytes_returns_422(self, client) -> None:
        """Forty two-byte characters fit the schema but not bcrypt; 422, not 500."""
        response = client.post(
            f"{API}/identities",
            json={"name": "Alice", "email": "alice@example.com", "secret": "\u00e9" * 40},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidSecret"

        alice = _register(client, "Alice")
        patched = client.patch(
            f"{API}/identities/{alice['id']}", json={"secret": "\u00e9" * 40}
        )
        assert patched.status_code == 422
        assert patched.json()["error"] == "InvalidSecret"

    def test_update_profile_avatar(self, client) -> None:
        """PATCH sets the avatar and returns its resolved URL."""
        alice = _register(client, "Alice")
        response = client.patch(f"{API}/identities/{alice['id']}", json={"avatar_ref": "me.png"})
        assert response.status_code == 200
        assert response.json()["avatar_url"].endswith("/me.png")


class TestItemEndpoints:
    """Tests for /api/v1/items."""

    def test_mint_and_fetch(self, client) -> None:
        """A minted item can be fetched by id, case-insensitively."""
        alice = _register(client, "Alice")
        minted = _mint(client, alice["id"])
        assert minted.status_code == 201
        item = minted.json()
        assert item["owner_id"] == alice["id"]
        assert item["attributes"] == [{"trait_type": "Mood", "value": "Calm"}]
        assert item["history"] == []

        fetched = client.get(f"{API}/items/{item['id'].lower()}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == item["id"]

    def test_mint_identity_for_sale_returns_422(self, client) -> None:
        """IDENTITY items cannot be minted for sale."""
        alice = _register(client, "Alice")
        response = _mint(client, alice["id"], category="IDENTITY", is_for_sale=True)
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidListing"

    def test_mint_without_images_returns_422(self, client) -> None:
        """At least one image is required."""
        alice = _register(client, "Alice")
        response = _mint(client, alice["id"], image_refs=[])
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidMint"

    def test_price_beyond_eight_decimals_returns_422(self, client) -> None:
        """Prices must fit the stored precision on mint and on listing updates."""
        alice = _register(client, "Alice")
        assert _mint(client, alice["id"], price="0.123456789").status_code == 422

        item = _mint(client, alice["id"], price="0.12345678").json()
        assert Decimal(client.get(f"{API}/items/{item['id']}").json()["price"]) == Decimal(
            "0.12345678"
        )
        response = client.patch(
            f"{API}/items/{item['id']}/listing", json={"price": "1.000000001"}
        )
        assert response.status_code == 422

    def test_list_items_filters(self, client) -> None:
        """Catalog honours category and search filters."""
        alice = _register(client, "Alice")
        art = _mint(client, alice["id"], name="Skyline").json()
        ticket = _mint(client, alice["id"], name="Concert", category="TICKET").json()

        everything = client.get(f"{API}/items", params={"category": "ALL"}).json()
        assert {i["id"] for i in everything} == {art["id"], ticket["id"]}

        tickets = client.get(f"{API}/items", params={"category": "TICKET"}).json()
        assert [i["id"] for i in tickets] == [ticket["id"]]

        found = client.get(f"{API}/items", params={"search": "sky"}).json()
        assert [i["id"] for i in found] == [art["id"]]

    def test_update_listing_by_non_owner_returns_403(self, client) -> None:
        """Only the owner may change a listing."""
        alice = _register(client, "Alice")
        bob = _register(client, "Bob")
        item = _mint(client, alice["id"]).json()
        response = client.patch(
            f"{API}/items/{item['id']}/listing",
            json={"acting_identity_id": bob["id"], "price": "1"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "NotOwner"

    def test_toggle_saved(self, client) -> None:
        """Toggling twice adds and then removes the item."""
        alice = _register(client, "Alice")
        item = _mint(client, alice["id"]).json()
        url = f"{API}/items/{item['id']}/toggle-saved"
        assert client.post(url, json={"identity_id": alice["id"]}).json()["saved_item_ids"] == [
            item["id"]
        ]
        assert client.post(url, json={"identity_id": alice["id"]}).json()["saved_item_ids"] == []


class TestTradeEndpoints:
    """Tests for trade requests and the transaction log."""

    def test_full_purchase_flow(self, client) -> None:
        """Request, accept, and verify balances, ownership and the log."""
        alice = _register(client, "Alice")
        bob = _register(client, "Bob")
        item = _mint(client, alice["id"]).json()

        created = client.post(
            f"{API}/trade-requests", json={"item_id": item["id"], "buyer_id": bob["id"]}
        )
        assert created.status_code == 201
        request = created.json()
        assert request["status"] == "PENDING"
        assert request["seller_name"] == "Alice"

        listed = client.get(f"{API}/identities/{alice['id']}/trade-requests").json()
        assert [r["id"] for r in listed] == [request["id"]]

        accepted = client.post(
            f"{API}/trade-requests/{request['id']}/response", json={"decision": "ACCEPT"}
        )
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "ACCEPTED"

        assert Decimal(client.get(f"{API}/identities/{alice['id']}").json()["balance"]) == 110
        assert Decimal(client.get(f"{API}/identities/{bob['id']}").json()["balance"]) == 90
        sold = client.get(f"{API}/items/{item['id']}").json()
        assert sold["owner_id"] == bob["id"]
        assert sold["is_for_sale"] is False
        assert len(sold["history"]) == 1

        log = client.get(f"{API}/transactions").json()
        assert [t["kind"] for t in log] == ["SALE", "MINT"]

        again = client.post(
            f"{API}/trade-requests/{request['id']}/response", json={"decision": "REJECT"}
        )
        assert again.status_code == 409
        assert again.json()["error"] == "AlreadyProcessed"

    def test_request_errors_map_to_400(self, client) -> None:
        """Self trade, unlisted items and insufficient funds are client errors."""
        alice = _register(client, "Alice")
        bob = _register(client, "Bob")
        listed = _mint(client, alice["id"]).json()
        unlisted = _mint(client, alice["id"], is_for_sale=False).json()
        pricey = _mint(client, alice["id"], price="1000").json()

        cases = [
            (listed["id"], alice["id"], "SelfTrade"),
            (unlisted["id"], bob["id"], "NotListed"),
            (pricey["id"], bob["id"], "InsufficientFunds"),
        ]
        for item_id, buyer_id, code in cases:
            response = client.post(
                f"{API}/trade-requests", json={"item_id": item_id, "buyer_id": buyer_id}
            )
            assert response.status_code == 400
            assert response.json()["error"] == code

    def test_competing_accept_returns_500(self, client) -> None:
        """Accepting a second request after a sale is a data integrity error."""
        alice = _register(client, "Alice")
        bob = _register(client, "Bob")
        carol = _register(client, "Carol")
        item = _mint(client, alice["id"]).json()
        first = client.post(
            f"{API}/trade-requests", json={"item_id": item["id"], "buyer_id": bob["id"]}
        ).json()
        second = client.post(
            f"{API}/trade-requests", json={"item_id": item["id"], "buyer_id": carol["id"]}
        ).json()
        client.post(f"{API}/trade-requests/{first['id']}/response", json={"decision": "ACCEPT"})

        response = client.post(
            f"{API}/trade-requests/{second['id']}/response", json={"decision": "ACCEPT"}
        )
        assert response.status_code == 500
        assert response.json()["error"] == "DataIntegrityError"
        assert Decimal(client.get(f"{API}/identities/{carol['id']}").json()["balance"]) == 100

    def test_invalid_decision_returns_422(self, client) -> None:
        """Decisions other than ACCEPT/REJECT fail validation."""
        response = client.post(
            f"{API}/trade-requests/REQ-XXXXXX/response", json={"decision": "MAYBE"}
        )
        assert response.status_code == 422

    def test_unknown_request_returns_404(self, client) -> None:
        """Responding to a missing request is NotFound."""
        response = client.post(
            f"{API}/trade-requests/REQ-XXXXXX/response", json={"decision": "ACCEPT"}
        )
        assert response.status_code == 404

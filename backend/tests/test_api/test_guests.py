"""Tests for guest registration, directory and profile endpoints."""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _unique_email() -> str:
    return f"guest-{uuid.uuid4().hex[:8]}@test.com"


def _registration(hotel_id: uuid.UUID, **overrides) -> dict:
    payload = {
        "hotel_id": str(hotel_id),
        "first_name": "Alice",
        "last_name": "Walker",
        "email": _unique_email(),
        "phone": "+61412345678",
        "room_number": "305",
        "check_in_date": "2025-04-01",
        "check_out_date": "2025-04-06",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# POST /api/v1/guests
# ---------------------------------------------------------------------------


class TestRegisterGuest:
    """Tests for registering guests."""

    async def test_register_success(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        payload = _registration(hotel_id)
        response = await client.post("/api/v1/guests", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["first_name"] == "Alice"
        assert data["full_name"] == "Alice Walker"
        assert data["email"] == payload["email"]
        assert data["hotel_id"] == str(hotel_id)
        assert data["is_active"] is True
        assert data["occupancy"] == {
            "status": "active",
            "room_number": "305",
            "check_in_date": "2025-04-01",
            "check_out_date": "2025-04-06",
            "number_of_nights": 5,
        }
        assert data["loyalty"] == {"status": "not_enrolled"}
        assert data["stay_history"] == []
        assert data["total_nights_stayed"] == 5
        assert "id" in data
        assert "created_at" in data

    async def test_register_duplicate_email(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        email = _unique_email()
        resp1 = await client.post("/api/v1/guests", json=_registration(hotel_id, email=email))
        assert resp1.status_code == 201

        resp2 = await client.post("/api/v1/guests", json=_registration(hotel_id, email=email, first_name="Bob"))
        assert resp2.status_code == 409
        assert resp2.json()["code"] == "DUPLICATE_GUEST"
        assert "already exists" in resp2.json()["detail"].lower()

    async def test_register_checkout_before_checkin(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        response = await client.post(
            "/api/v1/guests",
            json=_registration(hotel_id, check_in_date="2025-04-06", check_out_date="2025-04-01"),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    async def test_register_blank_room(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        response = await client.post("/api/v1/guests", json=_registration(hotel_id, room_number=" "))
        assert response.status_code == 400

    async def test_register_invalid_email(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        response = await client.post("/api/v1/guests", json=_registration(hotel_id, email="not-an-email"))
        assert response.status_code == 422

    async def test_register_missing_dates(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        payload = _registration(hotel_id)
        del payload["check_in_date"]
        response = await client.post("/api/v1/guests", json=payload)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/guests
# ---------------------------------------------------------------------------


class TestListGuests:
    """Tests for searching and paginating guests."""

    async def test_list_all(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        for i in range(2):
            await client.post("/api/v1/guests", json=_registration(hotel_id, first_name=f"List{i}"))

        response = await client.get("/api/v1/guests")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["page"] == 1
        assert data["page_size"] == 10
        assert data["total_pages"] == 1
        assert [item["first_name"] for item in data["items"]] == ["List0", "List1"]

    async def test_search_by_name_case_insensitive(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        await client.post("/api/v1/guests", json=_registration(hotel_id, first_name="Jane", last_name="Doe"))
        await client.post("/api/v1/guests", json=_registration(hotel_id, first_name="Bob", last_name="Stone"))

        response = await client.get("/api/v1/guests", params={"search": "jane"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["full_name"] == "Jane Doe"

    async def test_search_by_partial_email(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        email = _unique_email()
        await client.post("/api/v1/guests", json=_registration(hotel_id, email=email))

        response = await client.get("/api/v1/guests", params={"search": email.split("@")[0]})
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["email"] == email

    async def test_filter_by_status(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        first = (await client.post("/api/v1/guests", json=_registration(hotel_id))).json()
        await client.post("/api/v1/guests", json=_registration(hotel_id))
        await client.patch(f"/api/v1/guests/{first['id']}/status", json={"is_active": False})

        active = (await client.get("/api/v1/guests", params={"status": "active"})).json()
        inactive = (await client.get("/api/v1/guests", params={"status": "inactive"})).json()

        assert active["total"] == 1
        assert all(item["is_active"] for item in active["items"])
        assert [item["id"] for item in inactive["items"]] == [first["id"]]

    async def test_filter_by_unknown_status(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/guests", params={"status": "checked_in"})
        assert response.status_code == 422

    async def test_filter_by_hotel(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        await client.post("/api/v1/guests", json=_registration(hotel_id))
        await client.post("/api/v1/guests", json=_registration(uuid.uuid4()))

        response = await client.get("/api/v1/guests", params={"hotel_id": str(hotel_id)})
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["hotel_id"] == str(hotel_id)

    async def test_bad_pagination_is_clamped(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        for _ in range(3):
            await client.post("/api/v1/guests", json=_registration(hotel_id))

        response = await client.get("/api/v1/guests", params={"page": 0, "limit": 0})
        assert response.status_code == 200
        data = response.json()
        assert data["page"] == 1
        assert data["page_size"] == 1
        assert data["total_pages"] == 3
        assert len(data["items"]) == 1

    async def test_huge_page_returns_empty_page(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        await client.post("/api/v1/guests", json=_registration(hotel_id))

        response = await client.get("/api/v1/guests", params={"page": 10**19})
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 1

    async def test_newest_first(self, client: AsyncClient, hotel_id: uuid.UUID) -> None:
        for name in ("First", "Second"):
            await client.post("/api/v1/guests", json=_registration(hotel_id, first_name=name))

        response = await client.get("/api/v1/guests", params={"newest_first": True})
        assert [item["first_name"] for item in response.json()["items"]] == ["Second", "First"]

    async def test_search_no_results(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/guests", params={"search": "zzz-nonexistent-guest-zzz"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 0
        assert data["items"] == []
        assert data["total_pages"] == 0


# ---------------------------------------------------------------------------
# GET /api/v1/guests/{guest_id}
# ---------------------------------------------------------------------------


class TestGetGuest:
    """Tests for getting a single guest."""

    async def test_get_success(self, client: AsyncClient, test_guest: dict) -> None:
        response = await client.get(f"/api/v1/guests/{test_guest['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_guest["id"]
        assert data["email"] == test_guest["email"]

    async def test_get_not_found(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/guests/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "GUEST_NOT_FOUND"

    async def test_get_malformed_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/guests/not-a-uuid")
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# PATCH /api/v1/guests/{guest_id}/profile
# ---------------------------------------------------------------------------


class TestUpdateProfile:
    """Tests for profile corrections."""

    async def test_update_name(self, client: AsyncClient, test_guest: dict) -> None:
        response = await client.patch(
            f"/api/v1/guests/{test_guest['id']}/profile",
            json={"first_name": "Updated"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["first_name"] == "Updated"
        # Unchanged fields should persist
        assert data["email"] == test_guest["email"]
        assert data["occupancy"] == test_guest["occupancy"]

    async def test_update_email_uniqueness(self, client: AsyncClient, hotel_id: uuid.UUID, test_guest: dict) -> None:
        other_email = _unique_email()
        await client.post("/api/v1/guests", json=_registration(hotel_id, email=other_email))

        response = await client.patch(
            f"/api/v1/guests/{test_guest['id']}/profile",
            json={"email": other_email},
        )
        assert response.status_code == 409

    async def test_update_blank_name(self, client: AsyncClient, test_guest: dict) -> None:
        response = await client.patch(
            f"/api/v1/guests/{test_guest['id']}/profile",
            json={"last_name": "  "},
        )
        assert response.status_code == 400

    async def test_update_not_found(self, client: AsyncClient) -> None:
        response = await client.patch(
            f"/api/v1/guests/{uuid.uuid4()}/profile",
            json={"first_name": "Ghost"},
        )
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Service endpoints
# ---------------------------------------------------------------------------


class TestServiceEndpoints:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_root(self, client: AsyncClient) -> None:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

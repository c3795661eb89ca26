"""
End-to-end tests of the HTTP routes.
"""

import pytest

from shared.security.rate_limit import limiter


def join(client, table_id, **body):
    return client.post(f"/api/tables/{table_id}/join", json=body)


class TestJoinRoutes:
    """Tests for the check-in endpoints."""

    def test_join(self, client, seed_table):
        response = join(client, seed_table.id, user_id="u1")

        assert response.status_code == 201
        data = response.json()
        assert data["participant_id"] > 0
        assert data["fantasy_name"]
        assert data["session_info"]["table_number"] == "1"
        assert data["session_info"]["participant_count"] == 1

    def test_join_unknown_table(self, client, seed_location):
        response = join(client, 999)

        assert response.status_code == 404
        assert response.json() == {"error": "NOT_FOUND", "detail": "Table 999 not found"}

    def test_join_invalid_name(self, client, seed_table):
        response = join(client, seed_table.id, fantasy_name="bad\tname")

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_join_by_number(self, client, seed_location, seed_table):
        response = client.post(f"/api/locations/{seed_location.id}/tables/1/join", json={})

        assert response.status_code == 201
        assert response.json()["session_info"]["table_id"] == seed_table.id

    def test_capacity_scenario(self, client, small_table):
        a = join(client, small_table.id, user_id="a").json()

        clash = join(client, small_table.id, user_id="b", fantasy_name=a["fantasy_name"])
        assert clash.status_code == 409
        assert clash.json() == {"error": "CONFLICT", "detail": "Fantasy name already taken"}

        b = join(client, small_table.id, user_id="b").json()
        full = join(client, small_table.id, user_id="c")
        assert full.status_code == 409
        assert full.json()["detail"] == "Table is at capacity"

        assert client.delete(f"/api/participants/{a['participant_id']}").json() == {"left": True}
        session = client.get(f"/api/tables/{small_table.id}/session")
        assert session.status_code == 200
        assert [p["id"] for p in session.json()["participants"]] == [b["participant_id"]]

        assert client.delete(f"/api/participants/{b['participant_id']}").json() == {"left": True}
        assert client.get(f"/api/tables/{small_table.id}/session").status_code == 404

    def test_request_id_echoed(self, client, seed_table):
        response = join(client, seed_table.id, user_id="u1")

        assert response.headers.get("X-Request-ID")


class TestParticipantRoutes:
    """Tests for leave and rename."""

    def test_leave_unknown(self, client, seed_table):
        response = client.delete("/api/participants/12345")

        assert response.status_code == 200
        assert response.json() == {"left": False}

    def test_leave_with_pending_order(self, client, seed_table):
        joined = join(client, seed_table.id).json()
        client.post(
            "/api/orders",
            json={
                "participant_id": joined["participant_id"],
                "items": [{"menu_item_id": "soup", "quantity": 1, "unit_price": "6.00"}],
            },
        )

        response = client.delete(f"/api/participants/{joined['participant_id']}")

        assert response.status_code == 409
        assert response.json() == {
            "error": "CONFLICT",
            "detail": "Cannot leave session with pending orders",
        }

    def test_rename(self, client, seed_table):
        joined = join(client, seed_table.id).json()

        response = client.put(
            f"/api/participants/{joined['participant_id']}/fantasy-name",
            json={"fantasy_name": "Lady Grey"},
        )

        assert response.status_code == 200
        assert response.json()["fantasy_name"] == "Lady Grey"

    def test_rename_unknown(self, client, seed_table):
        response = client.put("/api/participants/5/fantasy-name", json={"fantasy_name": "Lady Grey"})

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestSessionRoutes:
    """Tests for session views."""

    def test_summary(self, client, small_table):
        a = join(client, small_table.id).json()
        b = join(client, small_table.id).json()
        for participant, price in ((a, "25.99"), (b, "18.50")):
            created = client.post(
                "/api/orders",
                json={
                    "participant_id": participant["participant_id"],
                    "items": [{"menu_item_id": "dish", "quantity": 1, "unit_price": price}],
                },
            )
            assert created.status_code == 201

        response = client.get(f"/api/sessions/{a['session_info']['id']}/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["total_amount"] == "44.49"
        assert data["individual_totals"] == {
            str(a["participant_id"]): "25.99",
            str(b["participant_id"]): "18.50",
        }
        assert len(data["orders"]) == 2

    def test_summary_unknown(self, client, seed_location):
        response = client.get("/api/sessions/42/summary")

        assert response.status_code == 404
        assert response.json() == {"error": "NOT_FOUND", "detail": "Table session 42 not found"}

    def test_participants(self, client, seed_table):
        first = join(client, seed_table.id).json()
        second = join(client, seed_table.id).json()

        response = client.get(f"/api/sessions/{first['session_info']['id']}/participants")

        assert [p["id"] for p in response.json()] == [first["participant_id"], second["participant_id"]]

    def test_fantasy_name_suggestion(self, client, seed_table):
        joined = join(client, seed_table.id).json()

        response = client.get(f"/api/sessions/{joined['session_info']['id']}/fantasy-name")

        assert response.status_code == 200
        assert response.json()["fantasy_name"] != joined["fantasy_name"]

    def test_availability(self, client, seed_location, seed_table):
        join(client, seed_table.id)

        response = client.get(f"/api/locations/{seed_location.id}/tables")

        assert response.status_code == 200
        assert response.json()[0]["occupancy"] == 1


class TestOrderRoutes:
    """Tests for order endpoints."""

    @pytest.fixture
    def pair(self, client, seed_table):
        return join(client, seed_table.id).json(), join(client, seed_table.id).json()

    def create(self, client, participant_id, price="10.00"):
        return client.post(
            "/api/orders",
            json={
                "participant_id": participant_id,
                "items": [{"menu_item_id": "dish", "quantity": 2, "unit_price": price}],
            },
        )

    def test_create_and_get(self, client, pair):
        created = self.create(client, pair[0]["participant_id"])

        assert created.status_code == 201
        assert created.json()["total_amount"] == "20.00"
        fetched = client.get(f"/api/orders/{created.json()['id']}")
        assert fetched.json()["id"] == created.json()["id"]

    def test_create_rejects_bad_body(self, client, pair):
        response = client.post(
            "/api/orders",
            json={"participant_id": pair[0]["participant_id"], "items": []},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_transfer(self, client, pair):
        a, b = pair
        order = self.create(client, a["participant_id"]).json()

        response = client.post(
            f"/api/orders/{order['id']}/transfer",
            json={"from_participant_id": a["participant_id"], "to_participant_id": b["participant_id"]},
        )

        assert response.status_code == 200
        assert response.json()["participant_id"] == b["participant_id"]

    def test_transfer_after_preparing(self, client, pair):
        a, b = pair
        order = self.create(client, a["participant_id"]).json()
        client.patch(f"/api/orders/{order['id']}/status", json={"status": "preparing"})

        response = client.post(
            f"/api/orders/{order['id']}/transfer",
            json={"from_participant_id": a["participant_id"], "to_participant_id": b["participant_id"]},
        )

        assert response.status_code == 409
        assert response.json() == {
            "error": "CONFLICT",
            "detail": "Order not found or cannot be transferred",
        }

    def test_status_update(self, client, pair):
        order = self.create(client, pair[0]["participant_id"]).json()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "ready"})

        assert response.status_code == 200
        assert response.json()["status"] == "ready"


class TestRateLimit:
    """The join endpoint is rate limited per client."""

    def test_join_rate_limited(self, client, make_table, monkeypatch):
        table = make_table(number="RL", capacity=50)
        limiter.reset()
        monkeypatch.setattr(limiter, "enabled", True)

        statuses = [join(client, table.id).status_code for _ in range(31)]

        assert statuses[:30] == [201] * 30
        assert statuses[30] == 429
        limiter.reset()

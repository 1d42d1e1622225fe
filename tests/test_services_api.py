import re
from datetime import datetime, timezone

import pytest

from bluedock_api.app.services import order_service


def _fetch(client, service_id):
    response = client.get(f"/api/services/{service_id}")
    assert response.status_code == 200
    return response.json()["data"]


def _category_id(client, name):
    categories = client.get("/api/categories").json()["data"]
    return next(c["id"] for c in categories if c["name"] == name)


class TestCreate:
    def test_create_assigns_server_fields(self, client):
        response = client.post(
            "/api/services",
            json={"customer_name": "Ana", "item_description": "Reel repair", "price": 150},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "success"
        data = body["data"]
        assert data["status"] == "Pendente"
        assert data["price"] == 150
        assert data["finished_at"] is None
        assert data["created_at"]
        assert data["category_id"] is None
        assert data["category_name"] is None
        assert re.fullmatch(rf"{datetime.now(timezone.utc).year}-\d{{6}}", data["receipt_number"])

    def test_create_returns_full_record_shape(self, make_service):
        data = make_service()
        assert set(data) == {
            "id", "receipt_number", "customer_name", "customer_phone",
            "customer_address", "customer_email", "item_description",
            "service_details", "price", "status", "created_at", "finished_at",
            "category_id", "category_name",
        }

    def test_receipt_numbers_are_unique(self, make_service):
        receipts = [make_service()["receipt_number"] for _ in range(15)]
        assert len(set(receipts)) == len(receipts)

    def test_create_with_category_and_contact_fields(self, client, make_service):
        category_id = _category_id(client, "Molinetes")
        data = make_service(
            customer_phone="11999990000",
            customer_email="ana@example.com",
            customer_address="Rua A, 1",
            service_details="Clean and lubricate",
            category_id=category_id,
        )
        assert data["category_id"] == category_id
        assert data["category_name"] == "Molinetes"
        assert data["customer_phone"] == "11999990000"
        assert data["service_details"] == "Clean and lubricate"

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"item_description": "Reel repair"}, "customer_name"),
            ({"customer_name": "Ana"}, "item_description"),
            ({"customer_name": "   ", "item_description": "Reel repair"}, "customer_name"),
            ({"customer_name": "Ana", "item_description": ""}, "item_description"),
        ],
    )
    def test_missing_required_field_is_rejected(self, client, payload, field):
        response = client.post("/api/services", json=payload)
        assert response.status_code == 400
        assert field in response.json()["error"]
        assert client.get("/api/services").json()["meta"]["total"] == 0

    def test_price_defaults_to_zero(self, make_service):
        assert make_service(price=None)["price"] == 0
        assert make_service(price="not a number")["price"] == 0

    def test_negative_price_is_rejected(self, client):
        response = client.post(
            "/api/services",
            json={"customer_name": "Ana", "item_description": "Reel repair", "price": -5},
        )
        assert response.status_code == 400

    def test_non_integer_category_becomes_null(self, make_service):
        assert make_service(category_id="abc")["category_id"] is None

    def test_unknown_category_is_a_storage_error(self, client):
        response = client.post(
            "/api/services",
            json={"customer_name": "Ana", "item_description": "Reel repair", "category_id": 999},
        )
        assert response.status_code == 500
        assert "FOREIGN KEY" in response.json()["error"]
        assert client.get("/api/services").json()["meta"]["total"] == 0

    def test_receipt_collision_draws_a_new_number(self, client, make_service, monkeypatch):
        numbers = iter(["2026-000001", "2026-000001", "2026-000002"])
        monkeypatch.setattr(order_service, "generate_receipt_number", lambda now=None: next(numbers))
        assert make_service()["receipt_number"] == "2026-000001"
        assert make_service()["receipt_number"] == "2026-000002"

    def test_receipt_collision_gives_up_after_retries(self, client, make_service, monkeypatch):
        monkeypatch.setattr(order_service, "generate_receipt_number", lambda now=None: "2026-123456")
        make_service()
        response = client.post(
            "/api/services",
            json={"customer_name": "Bia", "item_description": "Rod"},
        )
        assert response.status_code == 500
        assert "receipt_number" in response.json()["error"]

    def test_receipt_year_is_taken_in_utc(self):
        last_second = datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        assert order_service.generate_receipt_number(last_second).startswith("2025-")
        new_year = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert order_service.generate_receipt_number(new_year).startswith("2026-")

    def test_receipt_and_created_at_share_one_clock(self, make_service, monkeypatch):
        instant = datetime(2025, 12, 31, 23, 59, 59, 500000, tzinfo=timezone.utc)

        class FrozenDatetime(datetime):
            @classmethod
            def now(cls, tz=None):
                return instant

        monkeypatch.setattr(order_service, "datetime", FrozenDatetime)
        data = make_service()
        assert data["created_at"] == "2025-12-31 23:59:59"
        assert data["receipt_number"].startswith("2025-")
        assert data["created_at"][:4] == data["receipt_number"][:4]


class TestList:
    def test_pagination(self, client, make_service):
        for i in range(25):
            make_service(customer_name=f"Customer {i}")
        response = client.get("/api/services", params={"page": 2, "limit": 10})
        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 10
        assert body["meta"] == {"total": 25, "page": 2, "limit": 10, "totalPages": 3}

        last = client.get("/api/services", params={"page": 3, "limit": 10}).json()
        assert len(last["data"]) == 5

    def test_defaults(self, client, make_service):
        make_service()
        meta = client.get("/api/services").json()["meta"]
        assert meta == {"total": 1, "page": 1, "limit": 10, "totalPages": 1}

    def test_empty_table(self, client):
        body = client.get("/api/services").json()
        assert body["data"] == []
        assert body["meta"]["totalPages"] == 0

    def test_most_recent_first(self, client, make_service):
        ids = [make_service(customer_name=f"C{i}")["id"] for i in range(3)]
        data = client.get("/api/services").json()["data"]
        assert [row["id"] for row in data] == list(reversed(ids))

    def test_includes_category_name(self, client, make_service):
        category_id = _category_id(client, "Varas")
        make_service(category_id=category_id)
        row = client.get("/api/services").json()["data"][0]
        assert row["category_name"] == "Varas"

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 1000}, {"page": "x"}])
    def test_invalid_paging_is_rejected(self, client, params):
        response = client.get("/api/services", params=params)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_status_filter(self, client, make_service):
        first = make_service()
        make_service()
        client.put(f"/api/services/{first['id']}", json={"status": "Em Andamento"})
        body = client.get("/api/services", params={"status": "Em Andamento"}).json()
        assert [row["id"] for row in body["data"]] == [first["id"]]
        assert body["meta"]["total"] == 1

    def test_unknown_status_filter_is_rejected(self, client):
        response = client.get("/api/services", params={"status": "Perdido"})
        assert response.status_code == 400
        assert "Perdido" in response.json()["error"]

    def test_status_filter_accepts_maintenance_alias(self, client, make_service):
        first = make_service()
        make_service()
        client.put(f"/api/services/{first['id']}", json={"status": "Em Andamento"})
        body = client.get("/api/services", params={"status": "Em Manutenção"}).json()
        assert [row["id"] for row in body["data"]] == [first["id"]]
        assert body["meta"]["total"] == 1

    def test_search(self, client, make_service):
        category_id = _category_id(client, "Carabinas")
        make_service(customer_name="Ana Souza", item_description="Reel")
        make_service(customer_name="Bruno", item_description="Rotor", category_id=category_id)
        make_service(customer_name="Carla", item_description="Rod tip")

        names = lambda params: [r["customer_name"] for r in client.get("/api/services", params=params).json()["data"]]
        assert names({"search": "ANA"}) == ["Ana Souza"]
        assert names({"search": "carab"}) == ["Bruno"]
        assert names({"search": "ro"}) == ["Carla", "Bruno"]

    def test_search_folds_accented_capitals(self, client, make_service):
        make_service(customer_name="ÉRICA", item_description="Molinete")
        make_service(customer_name="Otávio", item_description="CARRETILHA ÓTIMA")
        names = lambda params: [r["customer_name"] for r in client.get("/api/services", params=params).json()["data"]]
        assert names({"search": "érica"}) == ["ÉRICA"]
        assert names({"search": "Érica"}) == ["ÉRICA"]
        assert names({"search": "ótima"}) == ["Otávio"]
        assert names({"search": "OTÁVIO"}) == ["Otávio"]

    @pytest.mark.parametrize("term", ["%", "_", "a%c", "R_d"])
    def test_search_treats_wildcards_literally(self, client, make_service, term):
        make_service(customer_name="Abc", item_description="Rod")
        body = client.get("/api/services", params={"search": term}).json()
        assert body["data"] == []
        assert body["meta"]["total"] == 0

    def test_search_matches_literal_percent(self, client, make_service):
        make_service(customer_name="Ana", item_description="Desconto 10%")
        make_service(customer_name="Bruno", item_description="Rod 100")
        body = client.get("/api/services", params={"search": "10%"}).json()
        assert [r["customer_name"] for r in body["data"]] == ["Ana"]


class TestGet:
    def test_get_missing_service(self, client):
        response = client.get("/api/services/42")
        assert response.status_code == 404
        assert "42" in response.json()["error"]


class TestUpdate:
    def test_partial_update_keeps_other_fields(self, client, make_service):
        created = make_service(customer_phone="1234")
        response = client.put(f"/api/services/{created['id']}", json={"status": "Cancelado"})
        assert response.status_code == 200
        assert response.json() == {"message": "success", "changes": 1}

        data = _fetch(client, created["id"])
        assert data["status"] == "Cancelado"
        assert data["customer_name"] == "Ana"
        assert data["customer_phone"] == "1234"
        assert data["price"] == 150
        assert data["receipt_number"] == created["receipt_number"]
        assert data["created_at"] == created["created_at"]
        assert data["finished_at"] is None

    def test_update_fields(self, client, make_service):
        created = make_service()
        client.put(
            f"/api/services/{created['id']}",
            json={"customer_name": "Ana Lima", "price": 200.5, "service_details": "New bearings"},
        )
        data = _fetch(client, created["id"])
        assert data["customer_name"] == "Ana Lima"
        assert data["price"] == 200.5
        assert data["service_details"] == "New bearings"
        assert data["status"] == "Pendente"

    def test_category_can_be_cleared(self, client, make_service):
        category_id = _category_id(client, "Molinetes")
        created = make_service(category_id=category_id)
        client.put(f"/api/services/{created['id']}", json={"category_id": None})
        data = _fetch(client, created["id"])
        assert data["category_id"] is None
        assert data["category_name"] is None

    def test_category_is_always_overwritten(self, client, make_service):
        category_id = _category_id(client, "Molinetes")
        created = make_service(category_id=category_id)
        client.put(f"/api/services/{created['id']}", json={"price": 10})
        assert _fetch(client, created["id"])["category_id"] is None

    def test_category_can_be_changed(self, client, make_service):
        created = make_service()
        category_id = _category_id(client, "Acessórios")
        client.put(f"/api/services/{created['id']}", json={"category_id": category_id})
        assert _fetch(client, created["id"])["category_name"] == "Acessórios"

    def test_missing_id_is_a_no_op(self, client):
        response = client.put("/api/services/999", json={"status": "Pronto"})
        assert response.status_code == 200
        assert response.json()["changes"] == 0

    def test_unknown_status_is_rejected(self, client, make_service):
        created = make_service()
        response = client.put(f"/api/services/{created['id']}", json={"status": "Perdido"})
        assert response.status_code == 400
        assert _fetch(client, created["id"])["status"] == "Pendente"

    def test_maintenance_alias_is_stored_as_in_progress(self, client, make_service):
        created = make_service()
        response = client.put(f"/api/services/{created['id']}", json={"status": "Em Manutenção"})
        assert response.status_code == 200
        assert response.json()["changes"] == 1
        data = _fetch(client, created["id"])
        assert data["status"] == "Em Andamento"
        assert data["finished_at"] is None

    def test_blank_required_field_is_rejected(self, client, make_service):
        created = make_service()
        response = client.put(f"/api/services/{created['id']}", json={"customer_name": ""})
        assert response.status_code == 400
        assert _fetch(client, created["id"])["customer_name"] == "Ana"

    def test_negative_price_is_rejected(self, client, make_service):
        created = make_service()
        response = client.put(f"/api/services/{created['id']}", json={"price": -1})
        assert response.status_code == 400


class TestStatusLifecycle:
    @pytest.mark.parametrize("status", ["Pronto", "Concluído"])
    def test_finishing_sets_finished_at(self, client, make_service, status):
        created = make_service()
        client.put(f"/api/services/{created['id']}", json={"status": status})
        assert _fetch(client, created["id"])["finished_at"] is not None

    @pytest.mark.parametrize(
        "status",
        ["Em Orçamento", "Aguardando Aprovação", "Pendente", "Em Andamento",
         "Aguardando Peça", "Peça Indisponível", "Cancelado"],
    )
    def test_leaving_finished_states_clears_finished_at(self, client, make_service, status):
        created = make_service()
        client.put(f"/api/services/{created['id']}", json={"status": "Pronto"})
        client.put(f"/api/services/{created['id']}", json={"status": status})
        data = _fetch(client, created["id"])
        assert data["status"] == status
        assert data["finished_at"] is None

    def test_first_finish_time_is_kept(self, client, make_service):
        created = make_service()
        url = f"/api/services/{created['id']}"
        client.put(url, json={"status": "Pronto"})
        finished_at = _fetch(client, created["id"])["finished_at"]

        # Backdate the stamp so an overwrite would be visible.
        db = client.app.state.db
        with db.cursor() as cursor:
            cursor.execute(
                "UPDATE services SET finished_at = '2025-12-01 10:00:00' WHERE id = ?",
                (created["id"],),
            )

        client.put(url, json={"status": "Concluído"})
        client.put(url, json={"status": "Pronto"})
        data = _fetch(client, created["id"])
        assert finished_at is not None
        assert data["finished_at"] == "2025-12-01 10:00:00"

    def test_update_without_status_keeps_finished_at(self, client, make_service):
        created = make_service()
        url = f"/api/services/{created['id']}"
        client.put(url, json={"status": "Concluído"})
        finished_at = _fetch(client, created["id"])["finished_at"]
        client.put(url, json={"price": 99})
        assert _fetch(client, created["id"])["finished_at"] == finished_at

    def test_scenario(self, client):
        created = client.post(
            "/api/services",
            json={"customer_name": "Ana", "item_description": "Reel repair", "price": 150},
        ).json()["data"]
        assert created["status"] == "Pendente"
        assert created["price"] == 150
        assert created["receipt_number"]

        url = f"/api/services/{created['id']}"
        client.put(url, json={"status": "Concluído"})
        assert _fetch(client, created["id"])["finished_at"] is not None
        client.put(url, json={"status": "Pendente"})
        assert _fetch(client, created["id"])["finished_at"] is None


class TestDelete:
    def test_delete(self, client, make_service):
        created = make_service()
        response = client.delete(f"/api/services/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "deleted", "changes": 1}
        assert client.get(f"/api/services/{created['id']}").status_code == 404

    def test_delete_missing_id(self, client):
        response = client.delete("/api/services/999")
        assert response.status_code == 200
        assert response.json() == {"message": "deleted", "changes": 0}


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()

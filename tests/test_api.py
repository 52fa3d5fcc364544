"""Tests for the Flask boundary."""

import json

from api.app import create_app
from expense_core.store import STORAGE_KEY

FORM = {"amount": "12.50", "category": "Food", "description": "Coffee beans", "date": "2024-06-03"}


def _create(client, **overrides):
    response = client.post("/expenses", json=dict(FORM, **overrides))
    assert response.status_code == 201
    return response.get_json()


class TestExpenseRoutes:
    def test_create_returns_full_collection(self, client):
        _create(client)
        body = _create(client, description="Train ticket", category="Transportation")
        assert [item["description"] for item in body["items"]] == ["Coffee beans", "Train ticket"]
        assert body["storage"] == "ok"

    def test_create_validation_error_lists_fields(self, client, storage):
        response = client.post("/expenses", json=dict(FORM, amount="0", date=""))
        assert response.status_code == 400
        details = response.get_json()["details"]
        assert set(details) == {"amount", "date"}
        assert storage.get_item(STORAGE_KEY) is None

    def test_rejects_non_json_body(self, client):
        response = client.post("/expenses", data="amount=5")
        assert response.status_code == 400

    def test_list_applies_filters(self, client):
        _create(client, description="Morning coffee", date="2024-06-01")
        _create(client, description="Bus pass", category="Transportation", date="2024-06-10")
        _create(client, description="Iced COFFEE", date="2024-06-12")

        body = client.get("/expenses?search=coffee&category=Food").get_json()
        assert [item["description"] for item in body["items"]] == ["Iced COFFEE", "Morning coffee"]
        assert body["total"] == "25.00"
        assert body["count"] == 2
        assert body["total_count"] == 3

    def test_list_rejects_bad_date(self, client):
        assert client.get("/expenses?from=yesterday").status_code == 400

    def test_get_update_delete(self, client):
        expense_id = _create(client)["items"][0]["id"]

        assert client.get(f"/expenses/{expense_id}").get_json()["amount"] == "12.50"

        body = client.put(f"/expenses/{expense_id}", json={"amount": "99.99"}).get_json()
        assert body["items"][0]["amount"] == "99.99"
        assert body["items"][0]["id"] == expense_id

        body = client.delete(f"/expenses/{expense_id}").get_json()
        assert body["items"] == []
        assert client.get(f"/expenses/{expense_id}").status_code == 404

    def test_unknown_ids_are_noops(self, client):
        _create(client)
        assert len(client.put("/expenses/missing", json={"amount": "1"}).get_json()["items"]) == 1
        assert len(client.delete("/expenses/missing").get_json()["items"]) == 1

    def test_clear(self, client):
        _create(client)
        assert client.delete("/expenses").status_code == 204
        assert client.get("/expenses").get_json()["items"] == []


class TestDashboardRoutes:
    def test_summary(self, client):
        _create(client, amount="100", date="2024-06-01")
        _create(client, amount="50", category="Transportation", date="2024-06-15")
        _create(client, amount="30", date="2024-05-01")

        body = client.get("/summary").get_json()
        assert body["totalExpenses"] == "180.00"
        assert body["monthlyTotal"] == "150.00"
        assert body["topCategory"] == {"category": "Food", "amount": "130.00"}
        assert body["averagePerDay"] == "7.50"
        assert body["month"] == "June 2024"
        assert body["transactionCount"] == 3

    def test_summary_of_empty_collection(self, client):
        body = client.get("/summary").get_json()
        assert body["topCategory"] is None
        assert body["categoryTotals"] == {}
        assert body["averagePerDay"] == "0.00"

    def test_charts(self, client):
        _create(client, amount="10", category="Bills")
        body = client.get("/charts").get_json()
        assert body["categories"] == [{"category": "Bills", "amount": "10.00", "color": "#EF4444"}]
        assert body["monthly"] == [{"month": "Jun 2024", "amount": "10.00"}]

    def test_categories(self, client):
        items = client.get("/categories").get_json()["items"]
        assert items[0] == {"name": "Food", "color": "#10B981", "badge": "green"}
        assert len(items) == 6


class TestExportRoute:
    def test_nothing_to_export(self, client):
        assert client.get("/export.csv").status_code == 204

    def test_csv_download(self, client):
        _create(client, amount="12.5", description="Tea", date="2024-06-01")
        response = client.get("/export.csv")
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert response.headers["Content-Disposition"] == "attachment; filename=expenses-2024-06-20.csv"
        assert response.get_data(as_text=True) == (
            'Date,Amount,Category,Description\n"Jun 1, 2024",12.5,"Food","Tea"'
        )


class TestDegradedStorage:
    def test_unavailable_storage_still_serves(self, client, storage):
        storage.available = False
        body = client.get("/expenses").get_json()
        assert body["items"] == []
        assert body["storage"] == "unavailable"

        response = client.post("/expenses", json=FORM)
        assert response.status_code == 201
        assert response.get_json()["storage"] == "unavailable"
        assert client.delete("/expenses").status_code == 503

    def test_malformed_timestamps_do_not_break_listing(self, client, storage):
        expense_id = _create(client)["items"][0]["id"]
        stored = json.loads(storage.get_item(STORAGE_KEY))
        stored.append(dict(stored[0], id="broken", createdAt=None))
        storage.set_item(STORAGE_KEY, json.dumps(stored))

        response = client.get("/expenses")
        assert response.status_code == 200
        assert [item["id"] for item in response.get_json()["items"]] == [expense_id]

    def test_data_dir_from_environment(self, tmp_path, monkeypatch, clock):
        monkeypatch.setenv("EXPENSE_TRACKER_DATA_DIR", str(tmp_path))
        client = create_app(clock=clock).test_client()
        _create(client)
        assert (tmp_path / f"{STORAGE_KEY}.json").exists()

    def test_cors_allowed_origins(self, monkeypatch, storage, clock):
        monkeypatch.setenv("EXPENSE_TRACKER_ENV", "prod")
        monkeypatch.setenv("EXPENSE_TRACKER_ALLOWED_ORIGINS", "http://localhost:3000")
        client = create_app(storage=storage, clock=clock).test_client()
        response = client.get("/categories", headers={"Origin": "http://localhost:3000"})
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

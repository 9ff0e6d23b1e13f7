"""
Integration tests for measurement endpoints.

Tests single-record CRUD, per-day operations and the backup export.
"""

from datetime import date
from uuid import uuid4

from app.services.measurement_service import MeasurementService


class TestCreateMeasurement:
    """Tests for POST /api/v1/measurements endpoint."""

    def test_create_measurement_success(self, client, auth_headers):
        response = client.post(
            "/api/v1/measurements",
            headers=auth_headers,
            json={"name": "Weight", "value": 80.5, "measured_on": "2024-03-01"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Weight"
        assert data["value"] == 80.5
        assert data["unit"] == "kg"
        assert data["measured_on"] == "2024-03-01"
        assert "measurement_id" in data

    def test_centimeter_unit(self, client, auth_headers):
        response = client.post(
            "/api/v1/measurements",
            headers=auth_headers,
            json={"name": "Vita", "value": 85, "measured_on": "2024-03-01"},
        )
        assert response.json()["unit"] == "cm"

    def test_non_positive_value(self, client, auth_headers):
        response = client.post(
            "/api/v1/measurements",
            headers=auth_headers,
            json={"name": "Weight", "value": 0, "measured_on": "2024-03-01"},
        )
        assert response.status_code == 422

    def test_blank_name(self, client, auth_headers):
        response = client.post(
            "/api/v1/measurements",
            headers=auth_headers,
            json={"name": "   ", "value": 80, "measured_on": "2024-03-01"},
        )
        assert response.status_code == 400

    def test_requires_auth(self, client):
        response = client.post(
            "/api/v1/measurements",
            json={"name": "Weight", "value": 80, "measured_on": "2024-03-01"},
        )
        assert response.status_code in (401, 403)


class TestSingleMeasurement:
    """Tests for GET/PUT/DELETE /api/v1/measurements/{measurement_id}."""

    def _create(self, client, auth_headers):
        response = client.post(
            "/api/v1/measurements",
            headers=auth_headers,
            json={"name": "Waist", "value": 85, "measured_on": "2024-03-01"},
        )
        return response.json()["measurement_id"]

    def test_get(self, client, auth_headers):
        measurement_id = self._create(client, auth_headers)
        response = client.get(f"/api/v1/measurements/{measurement_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["value"] == 85.0

    def test_get_not_found(self, client, auth_headers):
        response = client.get(f"/api/v1/measurements/{uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    def test_other_users_record_hidden(self, client, test_db, auth_headers):
        stranger = client.post(
            "/api/v1/auth/register",
            json={"email": "stranger@example.com", "password": "password123"},
        ).json()
        record = MeasurementService(test_db).add_measurement(
            stranger["user_id"], "Weight", 70, date(2024, 3, 1)
        )

        response = client.get(
            f"/api/v1/measurements/{record.measurement_id}", headers=auth_headers
        )
        assert response.status_code == 404

    def test_update(self, client, auth_headers):
        measurement_id = self._create(client, auth_headers)
        response = client.put(
            f"/api/v1/measurements/{measurement_id}",
            headers=auth_headers,
            json={"value": 84.0, "measured_on": "2024-03-02"},
        )

        assert response.status_code == 200
        assert response.json()["value"] == 84.0
        assert response.json()["measured_on"] == "2024-03-02"

    def test_update_not_found(self, client, auth_headers):
        response = client.put(
            f"/api/v1/measurements/{uuid4()}", headers=auth_headers, json={"value": 84.0}
        )
        assert response.status_code == 404

    def test_delete(self, client, auth_headers):
        measurement_id = self._create(client, auth_headers)
        response = client.delete(f"/api/v1/measurements/{measurement_id}", headers=auth_headers)
        assert response.status_code == 204

        response = client.delete(f"/api/v1/measurements/{measurement_id}", headers=auth_headers)
        assert response.status_code == 404


class TestDays:
    """Tests for the per-day endpoints."""

    def test_save_and_list_days(self, client, auth_headers):
        client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers=auth_headers,
            json={"values": {"Weight": 82.0, "Waist": 88.0}},
        )
        response = client.put(
            "/api/v1/measurements/days/2024-03-08",
            headers=auth_headers,
            json={"values": {"Weight": 81.0, "Waist": None}},
        )
        assert response.status_code == 200
        assert [i["name"] for i in response.json()["items"]] == ["Weight"]

        response = client.get("/api/v1/measurements/days", headers=auth_headers)
        assert response.status_code == 200
        days = response.json()
        assert [d["measured_on"] for d in days] == ["2024-03-08", "2024-03-01"]
        assert [i["name"] for i in days[1]["items"]] == ["Waist", "Weight"]

        response = client.get("/api/v1/measurements", headers=auth_headers)
        assert len(response.json()) == 3

    def test_edit_day_moves_records(self, client, auth_headers):
        client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers=auth_headers,
            json={"values": {"Weight": 82.0, "Neck": 39.0}},
        )
        response = client.put(
            "/api/v1/measurements/days/2024-03-02",
            headers=auth_headers,
            json={"values": {"Weight": 81.5}, "previous_date": "2024-03-01"},
        )

        assert response.status_code == 200
        items = response.json()["items"]
        assert [(i["name"], i["value"]) for i in items] == [("Weight", 81.5)]

        days = client.get("/api/v1/measurements/days", headers=auth_headers).json()
        assert [d["measured_on"] for d in days] == ["2024-03-02"]

    def test_save_day_invalid_value(self, client, auth_headers):
        response = client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers=auth_headers,
            json={"values": {"Weight": -5}},
        )
        assert response.status_code == 400

    def test_save_day_nan_value(self, client, auth_headers):
        """A literal NaN in the body is rejected with 400, not stored."""
        response = client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers={**auth_headers, "Content-Type": "application/json"},
            content='{"values": {"Weight": NaN}}',
        )
        assert response.status_code == 400

        days = client.get("/api/v1/measurements/days", headers=auth_headers).json()
        assert days == []

    def test_delete_day(self, client, auth_headers):
        client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers=auth_headers,
            json={"values": {"Weight": 82.0, "Waist": 88.0}},
        )
        response = client.delete("/api/v1/measurements/days/2024-03-01", headers=auth_headers)
        assert response.status_code == 204

        response = client.delete("/api/v1/measurements/days/2024-03-01", headers=auth_headers)
        assert response.status_code == 404


class TestExport:
    """Tests for GET /api/v1/measurements/export."""

    def test_export_backup(self, client, auth_headers):
        client.put(
            "/api/v1/measurements/days/2024-03-01",
            headers=auth_headers,
            json={"values": {"Weight": 82.0}},
        )
        response = client.get("/api/v1/measurements/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith(
            "attachment; filename=backup_"
        )
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]["name"] == "Weight"
        assert rows[0]["value"] == 82.0
        assert rows[0]["timestamp"] == "2024-03-01"

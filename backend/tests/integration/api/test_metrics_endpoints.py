"""
Integration tests for fitness metrics endpoints.
"""


def set_profile(client, headers, **fields):
    response = client.put("/api/v1/users/me/profile", headers=headers, json=fields)
    assert response.status_code == 200


def save_day(client, headers, day, values):
    response = client.put(
        f"/api/v1/measurements/days/{day}", headers=headers, json={"values": values}
    )
    assert response.status_code == 200


class TestLatestMetrics:
    """Tests for GET /api/v1/metrics/latest."""

    def test_no_measurements(self, client, auth_headers):
        response = client.get("/api/v1/metrics/latest", headers=auth_headers)
        assert response.status_code == 404

    def test_all_metrics(self, client, auth_headers):
        set_profile(client, auth_headers, height_cm=180, gender="male")
        save_day(client, auth_headers, "2024-03-01", {"Weight": 90.0, "Waist": 95.0, "Neck": 40.0})
        save_day(client, auth_headers, "2024-03-08", {"Peso": 80.0, "Vita": 85.0, "Collo": 38.0})

        response = client.get("/api/v1/metrics/latest", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["measured_on"] == "2024-03-08"
        assert data["snapshot"] == {"weight": 80.0, "waist": 85.0, "neck": 38.0}
        assert data["metrics"]["bmi"] == {"value": 24.7, "status": "Normal", "severity_tier": 1}
        assert data["metrics"]["body_fat"] == {"value": 16.1, "method": "Navy Method"}
        assert data["metrics"]["whtr"]["value"] == 0.47
        assert data["metrics"]["whtr"]["status"] == "Healthy"
        assert data["missing_profile_fields"] == []

    def test_without_profile(self, client, auth_headers):
        """Metrics needing height are omitted and the gaps are reported."""
        save_day(client, auth_headers, "2024-03-01", {"Weight": 80.0, "Waist": 85.0})

        data = client.get("/api/v1/metrics/latest", headers=auth_headers).json()

        assert data["metrics"] == {}
        assert data["missing_profile_fields"] == ["height_cm", "gender"]


class TestDayMetrics:
    """Tests for GET /api/v1/metrics/{date} and /history."""

    def test_day(self, client, auth_headers):
        set_profile(client, auth_headers, height_cm=175)
        save_day(client, auth_headers, "2024-03-01", {"Weight": 95.0})

        response = client.get("/api/v1/metrics/2024-03-01", headers=auth_headers)

        assert response.status_code == 200
        metrics = response.json()["metrics"]
        assert metrics["bmi"]["status"] == "Obese"
        assert "body_fat" not in metrics
        assert "whtr" not in metrics

    def test_day_not_found(self, client, auth_headers):
        response = client.get("/api/v1/metrics/2024-03-01", headers=auth_headers)
        assert response.status_code == 404

    def test_history(self, client, auth_headers):
        set_profile(client, auth_headers, height_cm=175)
        save_day(client, auth_headers, "2024-03-01", {"Weight": 50.0})
        save_day(client, auth_headers, "2024-03-08", {"Weight": 70.0})

        response = client.get("/api/v1/metrics/history", headers=auth_headers)

        assert response.status_code == 200
        history = response.json()
        assert [d["measured_on"] for d in history] == ["2024-03-08", "2024-03-01"]
        assert [d["metrics"]["bmi"]["status"] for d in history] == ["Normal", "Underweight"]


class TestCompute:
    """Tests for POST /api/v1/metrics/compute."""

    def test_compute_without_auth(self, client):
        response = client.post(
            "/api/v1/metrics/compute",
            json={
                "snapshot": {"Peso": 70, "Vita": 60},
                "profile": {"gender": "male", "height_cm": 175},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["bmi"]["value"] == 22.9
        assert data["whtr"] == {"value": 0.34, "status": "Extremely lean", "severity_tier": 0}
        assert "body_fat" not in data

    def test_compute_junk_values(self, client):
        response = client.post(
            "/api/v1/metrics/compute",
            json={"snapshot": {"weight": "heavy", "waist": None}},
        )
        assert response.status_code == 200
        assert response.json() == {}


class TestSeriesAndGoals:
    """Tests for GET /api/v1/metrics/series and /goals."""

    def test_series(self, client, auth_headers):
        save_day(client, auth_headers, "2024-03-08", {"Weight": 81.0, "Waist": 86.0})
        save_day(client, auth_headers, "2024-03-01", {"Weight": 82.0})

        data = client.get("/api/v1/metrics/series", headers=auth_headers).json()

        assert [row["date"] for row in data["unified"]] == ["2024-03-01", "2024-03-08"]
        assert [s["key"] for s in data["series"]] == ["weight", "waist"]
        assert [p["value"] for p in data["series"][0]["points"]] == [82.0, 81.0]

    def test_goals(self, client, auth_headers):
        set_profile(client, auth_headers, goals={"Weight": 78})
        save_day(client, auth_headers, "2024-03-01", {"Weight": 80.0})

        data = client.get("/api/v1/metrics/goals", headers=auth_headers).json()

        assert data == [
            {
                "key": "weight",
                "target": 78.0,
                "latest_value": 80.0,
                "latest_date": "2024-03-01",
                "remaining": -2.0,
            }
        ]

    def test_no_goals(self, client, auth_headers):
        response = client.get("/api/v1/metrics/goals", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

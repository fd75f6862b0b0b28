"""
Integration tests for the plan generation API endpoints

Tests plan creation, export downloads, zone lookup and input validation.
"""
import json

import pytest
from fastapi.testclient import TestClient

from main import app
from services.plan_framework.constants import WorkoutType

client = TestClient(app)


@pytest.fixture
def plan_body():
    return {
        "athlete_id": "athlete-1",
        "athlete_name": "Ana Souza",
        "start_date": "2025-01-06",
        "plan_duration_weeks": 12,
        "distance_km": 21,
        "weekly_frequency": 4,
        "available_days": ["Terça", "Quinta", "Sábado", "Domingo"],
        "time_estimates": "10k em 45:00",
    }


class TestHealth:

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers


class TestCreatePlan:

    def test_create_plan(self, plan_body):
        response = client.post("/v1/plans", json=plan_body)
        assert response.status_code == 200

        data = response.json()
        assert data["engine"] == "advanced"
        assert data["athlete_id"] == "athlete-1"
        assert data["vdot"] == pytest.approx(45.3)
        assert len(data["weeks"]) == 12
        assert data["zones"]["A4"]["pace_min_per_km"] == "4:29"
        assert data["sessions"][0]["date"] == "2025-01-07"

    def test_event_plan_ends_with_race(self, plan_body):
        plan_body.pop("plan_duration_weeks")
        plan_body["event_date"] = "2025-04-27"
        data = client.post("/v1/plans", json=plan_body).json()

        race = [s for s in data["sessions"] if s["workout_type"] == WorkoutType.RACE.value]
        assert len(race) == 1
        assert race[0]["date"] == "2025-04-27"
        assert data["weeks"][-1]["phase"] == "regen"

    def test_default_duration_without_event(self, plan_body):
        plan_body.pop("plan_duration_weeks")
        data = client.post("/v1/plans", json=plan_body).json()
        assert len(data["weeks"]) == 12

    def test_no_race_results_falls_back(self, plan_body):
        plan_body["time_estimates"] = None
        response = client.post("/v1/plans", json=plan_body)
        assert response.status_code == 200

        data = response.json()
        assert data["vdot"] is None
        assert data["zones"]["A2"]["pace_min_per_km"] == ""
        assert any("time trial" in note for note in data["notes"])

    def test_short_goal_uses_legacy_engine(self, plan_body):
        plan_body["distance_km"] = 5
        data = client.post("/v1/plans", json=plan_body).json()
        assert data["engine"] == "legacy"
        assert data["vdot"] is None


class TestValidation:

    def test_event_before_start(self, plan_body):
        plan_body["event_date"] = "2024-12-01"
        response = client.post("/v1/plans", json=plan_body)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_EVENT_DATE"

    def test_unknown_weekday(self, plan_body):
        plan_body["available_days"] = ["Someday"]
        response = client.post("/v1/plans", json=plan_body)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR_AVAILABLE_DAYS"
        assert response.json()["field"] == "available_days"

    @pytest.mark.parametrize("field,value", [
        ("weekly_frequency", 0),
        ("weekly_frequency", 8),
        ("distance_km", -1),
        ("available_days", []),
        ("start_date", "06/01/2025"),
    ])
    def test_schema_rejects(self, plan_body, field, value):
        plan_body[field] = value
        assert client.post("/v1/plans", json=plan_body).status_code == 422

    def test_missing_start_date(self, plan_body):
        plan_body.pop("start_date")
        assert client.post("/v1/plans", json=plan_body).status_code == 422


class TestExport:

    def test_csv_download(self, plan_body):
        response = client.post("/v1/plans/export", json=plan_body)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="Ana_Souza_20250107.csv"' in response.headers["content-disposition"]
        assert "Week,Date,Day,Workout Type" in response.text

    def test_json_download(self, plan_body):
        response = client.post("/v1/plans/export?format=json", json=plan_body)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        payload = json.loads(response.text)
        assert payload["export_version"] == "1.0"
        assert payload["plan"]["athlete_name"] == "Ana Souza"

    def test_unknown_format(self, plan_body):
        assert client.post("/v1/plans/export?format=xlsx", json=plan_body).status_code == 422


class TestZones:

    def test_zones_from_text(self):
        response = client.post("/v1/plans/zones", json={"time_estimates": "5k 22:30, 10k em 45:00"})
        assert response.status_code == 200

        data = response.json()
        assert len(data["samples"]) == 2
        assert data["vdot"] == max(s["vdot"] for s in data["samples"])
        assert list(data["zones"]) == ["A1", "A2", "A3", "A4", "A5", "A6"]

    def test_nothing_parsable(self):
        data = client.post("/v1/plans/zones", json={"time_estimates": "just started running"}).json()
        assert data["vdot"] is None
        assert data["samples"] == []
        assert all(z["pace_min_per_km"] == "" for z in data["zones"].values())

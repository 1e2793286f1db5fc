"""Tests for the progress, shopping, export and calculator endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

from cutboard.api.app import create_app
from cutboard.domain.document import AppData, default_document
from cutboard.services import operations
from tests.conftest import TODAY, USER_ID, InMemoryUserDataRepository


def _store(repository: InMemoryUserDataRepository, doc: AppData) -> None:
    repository.rows[USER_ID] = json.dumps(doc.to_json_dict())


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


def test_progress_summarizes_stored_document(
    client: TestClient,
    auth_headers,
    user_data_repository: InMemoryUserDataRepository,
) -> None:
    doc = operations.update_profile(
        default_document(TODAY), start_weight=90, start_date="2025-02-24"
    )
    doc = operations.add_weight(doc, "2025-03-09", 88.2)
    doc = operations.add_weight(doc, "2025-03-10", 88.0)
    doc = operations.set_extra_calories(doc, "2025-03-10", 500)
    _store(user_data_repository, doc)

    response = client.get(
        "/api/progress", params={"today": "2025-03-10"}, headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["progress"]["lost"] == pytest.approx(2)
    assert body["progress"]["days_in"] == 14
    assert body["progress"]["pace"] == "on_track"
    assert body["progress"]["projected_end_date"] == "2025-04-21"
    assert [point["date"] for point in body["moving_average"]] == [
        "2025-03-09",
        "2025-03-10",
    ]
    assert body["adaptive_tdee"]["intake_days"] == 1
    assert body["compliance_7d"] == 0
    assert body["weigh_in_streak"] == 2
    assert body["today"] == {
        "date": "2025-03-10",
        "intake": {"calories": 500, "protein": 0, "carbs": 0, "fat": 0},
    }


def test_progress_without_document_uses_defaults(
    client: TestClient, auth_headers
) -> None:
    response = client.get(
        "/api/progress", params={"today": "2025-03-10"}, headers=auth_headers
    )

    body = response.json()
    assert body["progress"]["days_in"] == 0
    assert body["adaptive_tdee"] is None
    assert body["weigh_in_streak"] == 0


def test_progress_accepts_timestamp_start_date(
    client: TestClient,
    auth_headers,
    user_data_repository: InMemoryUserDataRepository,
) -> None:
    user_data_repository.rows[USER_ID] = json.dumps(
        {"profile": {"startDate": "2025-03-01T08:00:00.000Z"}}
    )

    response = client.get(
        "/api/progress", params={"today": "2025-03-10"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["progress"]["days_in"] == 9


def test_progress_requires_auth(client: TestClient) -> None:
    assert client.get("/api/progress").status_code == 401


def test_shopping_endpoint(
    client: TestClient,
    auth_headers,
    user_data_repository: InMemoryUserDataRepository,
) -> None:
    doc = operations.set_shopping_plan_days(default_document(TODAY), "plan-a", 7)
    doc = operations.toggle_shopping_item(doc, "protein")
    _store(user_data_repository, doc)

    body = client.get("/api/shopping", headers=auth_headers).json()

    assert body["total_days"] == 7
    assert body["checked_count"] == 1
    protein = next(item for item in body["items"] if item["id"] == "protein")
    assert protein["total_quantity"] == 1400
    assert protein["display_needed"] == "1.4kg"
    assert protein["at_home_step"] == 50
    assert protein["checked"] is True
    assert protein["alternatives"][0]["name"] == "Hähnchenbrust"


def test_export_formats(client: TestClient, auth_headers) -> None:
    text = client.get("/api/plans/plan-a/export", headers=auth_headers)
    assert text.status_code == 200
    assert text.headers["content-type"].startswith("text/plain")
    assert text.text.startswith("Tag A\n=====\n")

    table = client.get(
        "/api/plans/plan-a/export", params={"format": "table"}, headers=auth_headers
    )
    assert table.headers["content-type"].startswith("text/markdown")
    assert table.text.startswith("# Tag A\n")

    exported = client.get(
        "/api/plans/plan-b/export", params={"format": "json"}, headers=auth_headers
    )
    assert exported.headers["content-type"].startswith("application/json")
    assert exported.json()["name"] == "Tag B"


def test_export_uses_stored_plan(
    client: TestClient,
    auth_headers,
    user_data_repository: InMemoryUserDataRepository,
) -> None:
    plan = operations.find_plan(default_document(TODAY), "plan-a").model_copy(
        update={"id": "custom", "name": "Refeed"}
    )
    _store(user_data_repository, operations.save_plan(default_document(TODAY), plan))

    response = client.get("/api/plans/custom/export", headers=auth_headers)

    assert response.text.startswith("Refeed\n")


def test_export_errors(client: TestClient, auth_headers) -> None:
    missing = client.get("/api/plans/nope/export", headers=auth_headers)
    assert missing.status_code == 404

    bad_format = client.get(
        "/api/plans/plan-a/export", params={"format": "pdf"}, headers=auth_headers
    )
    assert bad_format.status_code == 400


def test_calculator(client: TestClient, auth_headers) -> None:
    response = client.post(
        "/api/calculator",
        json={
            "weight_kg": 90,
            "height_cm": 180,
            "age": 30,
            "sex": "male",
            "activity": "moderate",
            "goal_weight_kg": 82,
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "bmr": 1880,
        "tdee": 2914,
        "deficit": 583,
        "target_calories": 2331,
        "target_protein": 181,
        "expected_weekly_loss": 0.53,
    }


def test_calculator_validates_input(client: TestClient, auth_headers) -> None:
    response = client.post(
        "/api/calculator",
        json={"weight_kg": 0, "height_cm": 180, "age": 30},
        headers=auth_headers,
    )

    assert response.status_code == 422

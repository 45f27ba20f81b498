"""
API Integration Tests

Exercises the HTTP routes end to end against an application built with a
fixed clock, so recorded attempts and adjustments have predictable times.
"""

import pytest
from fastapi.testclient import TestClient

from adaptive_learning.common.config import AppConfig
from adaptive_learning.main import create_app
from adaptive_learning.tests.helpers import FakeClock

TEST_USER_ID = "test-user-1"


@pytest.fixture
def client():
    app = create_app(config=AppConfig(), clock=FakeClock())
    with TestClient(app) as test_client:
        yield test_client


def attempt_payload(**overrides):
    payload = {
        "challenge_id": "ch-1",
        "realm_id": "mathmage-trials",
        "challenge_type": "equation_balance",
        "concepts": ["Chemical Equations"],
        "time_elapsed": 30.0,
        "is_correct": True,
        "score": 100.0,
    }
    payload.update(overrides)
    return payload


def post_attempts(client, count, **overrides):
    for i in range(count):
        response = client.post(
            f"/analytics/{TEST_USER_ID}/attempts",
            json=attempt_payload(challenge_id=f"ch-{i}", **overrides)
        )
        assert response.status_code == 201


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Welcome" in response.json()["message"]


def test_record_attempt(client):
    response = client.post(f"/analytics/{TEST_USER_ID}/attempts", json=attempt_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == TEST_USER_ID
    assert data["challenge_id"] == "ch-1"
    assert data["is_correct"] is True
    assert data["start_time"] == "2024-03-10T11:59:30"
    assert data["end_time"] == "2024-03-10T12:00:00"


def test_record_attempt_rejects_bad_score(client):
    response = client.post(f"/analytics/{TEST_USER_ID}/attempts", json=attempt_payload(score=150))

    assert response.status_code == 422


def test_metrics(client):
    post_attempts(client, 2)
    post_attempts(client, 2, is_correct=False, score=0.0)

    response = client.get(f"/analytics/{TEST_USER_ID}/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == TEST_USER_ID
    assert data["overall_accuracy"] == 0.5
    assert data["total_challenges_completed"] == 4
    assert data["streak_data"]["current_streak"] == 1
    assert "Chemical Equations" in data["concept_performance"]


def test_metrics_for_unknown_user(client):
    response = client.get("/analytics/nobody/metrics")

    assert response.status_code == 200
    assert response.json()["total_challenges_completed"] == 0


def test_weak_areas(client):
    post_attempts(client, 3, concepts=["Gas Tests"], challenge_type="gas_test",
                  realm_id="memory-labyrinth", is_correct=False, score=0.0)

    response = client.get(f"/analytics/{TEST_USER_ID}/weak-areas")

    assert response.status_code == 200
    [area] = response.json()
    assert area["concept"] == "Gas Tests"
    assert area["challenge_type"] == "gas_test"
    assert area["realm_id"] == "memory-labyrinth"
    assert area["priority"] == "medium"


def test_velocity(client):
    post_attempts(client, 3)

    response = client.get(f"/analytics/{TEST_USER_ID}/velocity", params={"window": "daily"})

    assert response.status_code == 200
    data = response.json()
    assert data["time_window"] == "daily"
    assert data["challenges_completed"] == 3
    assert data["concepts_learned"] == 1


def test_velocity_unknown_window(client):
    response = client.get(f"/analytics/{TEST_USER_ID}/velocity", params={"window": "yearly"})

    assert response.status_code == 400


def test_get_difficulty_for_new_learner(client):
    response = client.get(f"/difficulty/{TEST_USER_ID}/equation_balance")

    assert response.status_code == 200
    data = response.json()
    assert data["current_difficulty"] == 3
    assert data["recommendation"]["recommended_difficulty"] == 2
    assert data["recommendation"]["source"] == "cold_start"


def test_real_time_adjustment(client):
    response = client.post(
        f"/difficulty/{TEST_USER_ID}/gas_test/realtime",
        json={"accuracy": 0.96, "average_time": 45.0, "streak": 4}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["adjusted"] is True
    assert data["adjustment"]["recommended_difficulty"] == 4

    response = client.get(f"/difficulty/{TEST_USER_ID}/gas_test")
    assert response.json()["current_difficulty"] == 4


def test_real_time_no_adjustment(client):
    response = client.post(
        f"/difficulty/{TEST_USER_ID}/gas_test/realtime",
        json={"accuracy": 0.7, "average_time": 45.0, "streak": 1}
    )

    assert response.status_code == 200
    assert response.json() == {"adjusted": False, "current_difficulty": 3}


def test_real_time_rejects_bad_accuracy(client):
    response = client.post(
        f"/difficulty/{TEST_USER_ID}/gas_test/realtime",
        json={"accuracy": 1.5, "average_time": 45.0, "streak": 1}
    )

    assert response.status_code == 422


def test_recommendations(client):
    post_attempts(client, 5, concepts=["Organic Chemistry"], challenge_type="organic_naming",
                  realm_id="forest-of-isomers", is_correct=False, score=0.0)

    response = client.get(f"/difficulty/{TEST_USER_ID}/recommendations")

    assert response.status_code == 200
    ids = [r["id"] for r in response.json()]
    assert ids[0] == "weak-area-Organic Chemistry"
    assert "streak-maintenance" in ids


def test_learning_path(client):
    response = client.get(f"/difficulty/{TEST_USER_ID}/learning-path")
    assert response.status_code == 404

    response = client.get(f"/difficulty/{TEST_USER_ID}/learning-path", params={"target_level": 4})
    assert response.status_code == 200
    path = response.json()
    assert path["target_level"] == 4
    assert path["path"][0]["skill_category"] == "equation_balance"

    cached = client.get(f"/difficulty/{TEST_USER_ID}/learning-path")
    assert cached.status_code == 200
    assert cached.json() == path


def test_learning_path_invalid_target(client):
    response = client.get(f"/difficulty/{TEST_USER_ID}/learning-path", params={"target_level": 0})

    assert response.status_code == 422

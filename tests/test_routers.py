import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from dayplanner.dependencies import get_current_uid, get_document_store, get_planner_session
from dayplanner.exceptions import GenerationError
from dayplanner.main import app
from dayplanner.services.document_store import DocumentStoreService
from dayplanner.services.plan_service import PlanTextService, get_plan_text_service
from dayplanner.services.planner_session import PlannerSession
from mock_llm_service import MockLLMService

UID = "user-1"


@pytest.fixture
def store():
    return DocumentStoreService(mongomock.MongoClient()["dayplanner_api_test"])


@pytest.fixture
def generator():
    mock = AsyncMock()
    mock.generate_day_plan.return_value = "## Day plan\n- Route: Ueno Park -> Senso-ji"
    return mock


@pytest.fixture
def session(generator):
    return PlannerSession(generator=generator, days=2)


@pytest.fixture
def client(store, session):
    app.dependency_overrides[get_current_uid] = lambda: UID
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_planner_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def saved_points(store):
    return [
        store.add_point(UID, "Ueno Park", 35.7156, 139.7745),
        store.add_point(UID, "Senso-ji Temple", 35.7148, 139.7967),
    ]


def day_ids(body, day):
    return [s["pointId"] for s in body["state"]["assignments"][str(day)]["spots"]]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_get_planner_defaults(client):
    body = client.get("/api/v1/planner").json()
    assert body["state"]["days"] == 2
    assert [g["status"] for g in body["generation"]] == ["idle", "idle"]


def test_add_and_reorder_spots(client, saved_points):
    ueno, sensoji = saved_points
    client.post("/api/v1/planner/days/1/spots", json={"pointId": ueno.id})
    body = client.post("/api/v1/planner/days/1/spots", json={"pointId": sensoji.id}).json()
    assert day_ids(body, 1) == [ueno.id, sensoji.id]

    body = client.post("/api/v1/planner/days/1/spots/0/move-down").json()
    assert day_ids(body, 1) == [sensoji.id, ueno.id]

    response = client.delete(f"/api/v1/planner/days/1/spots/{sensoji.id}")
    assert response.status_code == 200
    assert day_ids(response.json(), 1) == [ueno.id]
    assert response.json()["state"]["assignments"]["1"]["spots"][0]["order"] == 1


def test_add_unknown_point_is_404(client):
    response = client.post("/api/v1/planner/days/1/spots", json={"pointId": "pt_missing"})
    assert response.status_code == 404


def test_add_to_unknown_day_is_400(client, saved_points):
    response = client.post("/api/v1/planner/days/5/spots", json={"pointId": saved_points[0].id})
    assert response.status_code == 400
    assert response.json()["detail"]["status"] == "error"


def test_set_days(client, saved_points):
    client.put("/api/v1/planner/days", json={"days": 3})
    client.post("/api/v1/planner/days/3/spots", json={"pointId": saved_points[0].id})

    body = client.put("/api/v1/planner/days", json={"days": 2}).json()

    assert sorted(body["state"]["assignments"]) == ["1", "2"]
    assert client.put("/api/v1/planner/days", json={"days": 0}).status_code == 400


def test_transport_and_time_window(client):
    body = client.put("/api/v1/planner/transport", json={"transport": "walk"}).json()
    assert body["state"]["transport"] == "walk"

    body = client.put("/api/v1/planner/days/2/time-window", json={"startTime": "08:30"}).json()
    assert body["state"]["timeWindows"]["2"] == {"startTime": "08:30", "endTime": "17:00"}

    assert client.put("/api/v1/planner/transport", json={"transport": "car"}).status_code == 422


def test_select_day(client):
    assert client.put("/api/v1/planner/selected-day", json={"day": 2}).json()["state"]["selectedDay"] == 2
    assert client.put("/api/v1/planner/selected-day", json={"day": 9}).status_code == 400


def test_generate_day(client, saved_points, generator):
    client.post("/api/v1/planner/days/1/spots", json={"pointId": saved_points[0].id})

    response = client.post("/api/v1/planner/days/1/generate")

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["applied"] is True
    assert body["state"]["generated"]["1"].startswith("## Day plan")
    request = generator.generate_day_plan.call_args.args[0]
    assert [s.name for s in request.spots] == ["Ueno Park"]


def test_generate_empty_day_is_400(client, generator):
    response = client.post("/api/v1/planner/days/1/generate")
    assert response.status_code == 400
    assert "No spots" in response.json()["detail"]["message"]
    generator.generate_day_plan.assert_not_called()


def test_generate_failure_is_502_and_acknowledged(client, saved_points, generator):
    generator.generate_day_plan.side_effect = GenerationError("Plan generation failed: (500) internal")
    client.post("/api/v1/planner/days/1/spots", json={"pointId": saved_points[0].id})

    response = client.post("/api/v1/planner/days/1/generate")

    assert response.status_code == 502
    assert response.json()["detail"]["message"] == "Plan generation failed: (500) internal"
    status = client.get("/api/v1/planner").json()["generation"][0]
    assert status["status"] == "failed"

    body = client.post("/api/v1/planner/days/1/acknowledge").json()
    assert body["generation"][0]["status"] == "idle"


def test_save_list_and_get_plan(client, saved_points):
    client.post("/api/v1/planner/days/1/spots", json={"pointId": saved_points[0].id})
    client.post("/api/v1/planner/days/1/generate")

    saved = client.post("/api/v1/planner/save", json={"title": "Tokyo"}).json()
    plan_id = saved["planId"]

    plans = client.get("/api/v1/plans").json()["plans"]
    assert [p["planId"] for p in plans] == [plan_id]

    plan = client.get(f"/api/v1/plans/{plan_id}").json()
    assert plan["title"] == "Tokyo"
    assert plan["schedule"][0]["spots"][0]["name"] == "Ueno Park"
    assert plan["schedule"][0]["planText"].startswith("## Day plan")
    assert plan["schedule"][1] == {"day": 2, "spots": [], "planText": ""}

    assert client.get("/api/v1/plans/plan_missing").status_code == 404


def test_save_requires_title(client):
    assert client.post("/api/v1/planner/save", json={"title": ""}).status_code == 422


def test_points_crud(client):
    created = client.post("/api/v1/points", json={"name": "Tokyo Tower", "lat": 35.6586, "lng": 139.7454}).json()
    assert [p["id"] for p in client.get("/api/v1/points").json()] == [created["id"]]
    assert client.delete(f"/api/v1/points/{created['id']}").json() == {"ok": True}
    assert client.delete(f"/api/v1/points/{created['id']}").status_code == 404
    assert client.post("/api/v1/points", json={"name": "Nowhere", "lat": 91, "lng": 0}).status_code == 422


# ---------------------------
# Stateless generation
# ---------------------------

def test_generate_day_endpoint(client):
    llm = MockLLMService(content="one day plan")
    app.dependency_overrides[get_plan_text_service] = lambda: PlanTextService(llm)

    response = client.post("/api/v1/generate-day", json={
        "transport": "walk",
        "startTime": "10:00",
        "endTime": "15:00",
        "spots": [{"name": "Ueno Park", "lat": 35.7156, "lng": 139.7745}],
    })

    assert response.status_code == 200
    assert response.json() == {"plan": "one day plan"}
    assert "Ueno Park" in llm.calls[0]["user_message"]


def test_generate_day_endpoint_errors(client):
    app.dependency_overrides[get_plan_text_service] = lambda: PlanTextService(MockLLMService(error="refused", error_type="transport"))

    empty = client.post("/api/v1/generate-day", json={"spots": []})
    assert empty.status_code == 400
    assert list(empty.json()) == ["error"]
    assert "No spots" in empty.json()["error"]

    failed = client.post("/api/v1/generate-day", json={"spots": [{"name": "A", "lat": 0, "lng": 0}]})
    assert failed.status_code == 500
    assert failed.json() == {"error": "Communication error: refused", "detail": "refused"}


def test_generate_trip_endpoint(client):
    llm = MockLLMService(content="three day plan")
    app.dependency_overrides[get_plan_text_service] = lambda: PlanTextService(llm)

    response = client.post("/api/v1/generate", json={"mode": "destination", "destination": "Kyoto", "days": 3})

    assert response.json() == {"plan": "three day plan"}
    assert client.post("/api/v1/generate", json={"mode": "destination", "days": 3}).status_code == 400


# ---------------------------
# Authentication
# ---------------------------

def test_missing_token_is_401():
    with TestClient(app) as anonymous:
        assert anonymous.get("/api/v1/planner").status_code == 401
        assert anonymous.get("/api/v1/points", headers={"Authorization": "Token abc"}).status_code == 401


def test_verified_token_resolves_uid(store):
    app.dependency_overrides[get_document_store] = lambda: store
    store.add_point("firebase-user", "Ueno Park", 35.7156, 139.7745)
    try:
        with patch("dayplanner.dependencies.id_token.verify_firebase_token",
                   return_value={"user_id": "firebase-user"}) as verify:
            response = TestClient(app).get("/api/v1/points", headers={"Authorization": "Bearer good-token"})
        assert verify.call_args.args[0] == "good-token"
        assert [p["name"] for p in response.json()] == ["Ueno Park"]
    finally:
        app.dependency_overrides.clear()


def test_rejected_token_is_401():
    with patch("dayplanner.dependencies.id_token.verify_firebase_token", side_effect=ValueError("expired")):
        response = TestClient(app).get("/api/v1/planner", headers={"Authorization": "Bearer bad"})
    assert response.status_code == 401


def test_concurrent_adds_through_api(store, session):
    app.dependency_overrides[get_current_uid] = lambda: UID
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_planner_session] = lambda: session
    ids = [store.add_point(UID, f"Spot {i:02d}", 35.0, 139.0).id for i in range(40)]

    async def add_all():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as api:
            return await asyncio.gather(*(
                api.post(f"/api/v1/planner/days/{i % 2 + 1}/spots", json={"pointId": point_id})
                for i, point_id in enumerate(ids)
            ))

    try:
        responses = asyncio.run(add_all())
    finally:
        app.dependency_overrides.clear()

    assert all(r.status_code == 200 for r in responses)
    kept = [s.pointId for day in (1, 2) for s in session.state.assignments[day].spots]
    assert sorted(kept) == sorted(ids)

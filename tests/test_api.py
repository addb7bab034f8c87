"""
HTTP tests for the IntentGuard API.

The platform is faked with httpx.MockTransport and the LLM with a canned
generation service; everything else is the real application wiring.
"""

import csv
import io
import json
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from intent_core.platform import PlatformClient
from intent_core.sessions import TokenValidator

from conftest import FakePlatform, StubGenerationService, intent, slot

AUTH = {"Authorization": "Bearer tok-123"}


class RejectingValidator(TokenValidator):
    async def validate(self, token, region):
        return False


def build_client(config, platform=None, generation_service=None, token_validator=None) -> TestClient:
    platform = platform or FakePlatform()
    application = create_app(
        config=config,
        platform_client=PlatformClient(transport=httpx.MockTransport(platform)),
        generation_service=generation_service or StubGenerationService([]),
        token_validator=token_validator,
    )
    return TestClient(application)


# ── Fixtures ──


@pytest.fixture
def travel_platform() -> FakePlatform:
    return FakePlatform(detections={
        "book a flight to Paris": [intent("book_flight", 0.95, [slot("city", "Paris")])],
        "cancel it": [intent("cancel_booking", 0.88)],
    })


@pytest.fixture
def client(test_config, travel_platform) -> TestClient:
    return build_client(test_config, travel_platform)


def run_batch(client, utterances=None, language="en-us", headers=AUTH):
    payload = {
        "flowId": "flow-1",
        "language": language,
        "utterances": utterances or [
            {"text": "book a flight to Paris", "expected_intent": "book_flight", "expected_slots": {"city": "Paris"}},
            {"text": "cancel it", "expected_intent": "book_flight"},
        ],
    }
    return client.post("/api/genesys/batch-test", json=payload, headers=headers)


# ── Auth ──


def test_health(client):
    response = client.get("/api/auth/health")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_relay_token_requires_token(client):
    response = client.post("/api/auth/relay-token", json={})
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "No token provided"}


@pytest.mark.parametrize("token", ["Bearer ", "bearer", "  BEARER  "])
def test_relay_token_with_empty_bearer(client, token):
    response = client.post("/api/auth/relay-token", json={"token": token})
    assert response.status_code == 400
    assert response.json()["message"] == "No token provided"
    assert len(client.app.state.session_store) == 0


def test_relay_token_opens_cookie_session(client):
    response = client.post("/api/auth/relay-token", json={"token": "Bearer tok-123", "region": "mypurecloud.ie"})

    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "Token received and stored successfully"
    assert response.cookies.get("sessionId") == body["sessionId"]

    info = client.get("/api/user/session").json()["data"]
    assert info["region"] == "mypurecloud.ie"
    assert info["hasValidToken"] is True
    assert "token" not in info


def test_relay_token_rejected_by_validator(test_config):
    client = build_client(test_config, token_validator=RejectingValidator())
    response = client.post("/api/auth/relay-token", json={"token": "bad"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token - authentication failed"


def test_unauthenticated_request(client):
    response = client.get("/api/flows/list")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication required. Please provide a valid token."}


def test_bearer_header_opens_session_and_sets_cookie(client):
    response = client.get("/api/flows/list", headers=AUTH)
    assert response.status_code == 200
    session_id = response.cookies.get("sessionId")
    assert session_id

    # The cookie alone is enough afterwards
    assert client.get("/api/flows/list").status_code == 200
    assert len(client.app.state.session_store) == 1


def test_lowercase_bearer_scheme_is_accepted(client):
    response = client.get("/api/flows/list", headers={"Authorization": "bearer tok-123"})
    assert response.status_code == 200
    session = client.app.state.session_store.get(response.cookies.get("sessionId"))
    assert session.token == "tok-123"


@pytest.mark.parametrize("authorization", ["Basic dXNlcjpwYXNz", "Bearer ", "Token tok-123"])
def test_non_bearer_authorization_is_ignored(client, authorization):
    response = client.get("/api/flows/list", headers={"Authorization": authorization})
    assert response.status_code == 401
    assert len(client.app.state.session_store) == 0


def test_configured_log_level_is_applied(test_config):
    test_config.log_level = "DEBUG"
    build_client(test_config)
    assert logging.getLogger("intent_core").level == logging.DEBUG

    test_config.log_level = "WARNING"
    build_client(test_config)
    assert logging.getLogger("intent_core").level == logging.WARNING



def test_session_header_is_accepted(client):
    session_id = client.post("/api/auth/relay-token", json={"token": "tok"}).json()["sessionId"]
    client.cookies.clear()

    response = client.get("/api/user/session", headers={"x-session-id": session_id})
    assert response.status_code == 200


# ── Flows and user ──


def test_list_flows(client):
    body = client.get("/api/flows/list", headers=AUTH).json()
    assert body["data"] == [{"id": "flow-1", "name": "Travel Bot"}]
    assert "flowType" not in body


def test_list_flows_marks_legacy_listing(test_config):
    client = build_client(test_config, FakePlatform(flows_status=404))
    body = client.get("/api/flows/list", headers=AUTH).json()
    assert body["flowType"] == "legacy"


def test_platform_rejecting_token(test_config):
    client = build_client(test_config, FakePlatform(flows_status=401, legacy_status=401))
    response = client.get("/api/flows/list", headers=AUTH)
    assert response.status_code == 401
    assert response.json()["message"] == "Authentication failed. Please log in again."


def test_flow_details_requires_flow_id(client):
    response = client.get("/api/flows/details", headers=AUTH)
    assert response.status_code == 400
    assert response.json()["message"] == "Flow ID is required"


def test_flow_details_selects_flow(client):
    body = client.get("/api/flows/details", params={"flowId": "flow-1"}, headers=AUTH).json()
    assert body["data"]["nluDomainId"] == "domain-123"

    log = client.get("/api/test/session-log").json()["data"]
    assert log["selected_flow"]["id"] == "flow-1"


def test_flow_configuration(client):
    body = client.get("/api/flows/configuration", params={"flowId": "flow-1"}, headers=AUTH).json()
    assert body["data"]["domainVersionId"] == "version-7"


def test_user_org_is_cached_on_session(client):
    body = client.get("/api/user/org", headers=AUTH).json()
    assert body["data"]["name"] == "Ada"
    assert client.get("/api/user/session").json()["data"]["orgInfo"] == {"id": "user-1", "name": "Ada"}


# ── NLU testing ──


def test_single_utterance_requires_fields(client):
    response = client.post("/api/genesys/test-utterance", json={"utterance": "hi"}, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["message"] == "Utterance, language, and flowId are required"


def test_single_utterance(client):
    response = client.post(
        "/api/genesys/test-utterance",
        json={"utterance": "book", "language": "en-us", "flowId": "flow-1"},
        headers=AUTH,
    )
    assert response.json()["data"]["recognized_intent"] == "book_flight"


def test_batch_test(client):
    response = run_batch(client)

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["summary"] == {"total": 2, "matched": 1, "failed": 1}
    assert [r["overall_match"] for r in body["results"]] == [True, False]
    assert body["testId"].startswith("batch-test-")
    assert client.app.state.datastore.fetch_test_run(body["testId"])["flowId"] == "flow-1"


def test_batch_test_validation(client):
    response = client.post("/api/genesys/batch-test", json={"flowId": "flow-1", "language": "en-us"}, headers=AUTH)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Please provide an array of utterances to test"}


def test_batch_test_without_coordinates(test_config):
    client = build_client(test_config, FakePlatform(config={"nluMetaData": {}}))
    response = run_batch(client)

    body = response.json()
    assert response.status_code == 400
    assert body["message"] == "Domain ID or version ID not found in flow configuration"
    assert body["flowConfig"]["flowId"] == "flow-1"


def test_batch_test_with_unreachable_platform_for_one_utterance(test_config):
    platform = FakePlatform(detections={"cancel it": [intent("cancel_booking")]}, fail_texts={"book a flight to Paris"})
    client = build_client(test_config, platform)

    body = run_batch(client).json()

    assert body["results"][0]["error"]
    assert body["results"][0]["overall_match"] is False
    assert body["results"][1]["recognized_intent"] == "cancel_booking"


# ── Reports ──


def test_report_by_id(client):
    test_id = run_batch(client).json()["testId"]

    body = client.get("/api/test/report", params={"testId": test_id}).json()
    assert body["data"]["id"] == test_id
    assert len(body["data"]["results"]) == 2


def test_report_by_language_code(client):
    test_id = run_batch(client, language="fr-fr").json()["testId"]

    body = client.get("/api/test/report", params={"testId": "fr-fr"}).json()
    assert body["data"]["id"] == test_id


def test_report_not_found(client):
    response = client.get("/api/test/report", params={"testId": "batch-test-1"}, headers=AUTH)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Test report with ID batch-test-1 not found"}


def test_report_listing(client):
    test_id = run_batch(client).json()["testId"]
    body = client.get("/api/test/report").json()
    assert [s["test_id"] for s in body["data"]] == [test_id]


def test_export_csv(client):
    test_id = run_batch(client, utterances=[
        {"text": 'fly to "Paris, France"', "expected_intent": "book_flight"},
    ]).json()["testId"]

    response = client.post("/api/test/export", json={"testId": test_id, "format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == f'attachment; filename="test-results-{test_id}.csv"'
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[1][0] == 'fly to "Paris, France"'


def test_export_json(client):
    test_id = run_batch(client).json()["testId"]
    response = client.post("/api/test/export", json={"testId": test_id})

    assert response.headers["content-type"].startswith("application/json")
    assert json.loads(response.text)["id"] == test_id


@pytest.mark.parametrize("payload,message", [
    ({"format": "csv"}, "Test ID is required"),
    ({"testId": "batch-test-1", "format": "xml"}, "Unsupported export format: xml"),
])
def test_export_validation(client, payload, message):
    response = client.post("/api/test/export", json=payload, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["message"] == message


# ── LLM ──


def test_generate_tests(test_config):
    service = StubGenerationService([json.dumps({"utterances": [
        {"text": "fly to Paris", "expected_intent": "book_flight", "expected_slots": {"city": "Paris"}},
        {"utterance": "cancel", "intent": "cancel_booking"},
    ]})])
    client = build_client(test_config, generation_service=service)

    response = client.post(
        "/api/llm/generate-tests",
        json={"intents": [{"name": "book_flight", "slots": {"city": ["Paris"]}}], "language": "en-US"},
        headers=AUTH,
    )

    body = response.json()
    assert response.status_code == 200
    assert body["data"][1] == {"text": "cancel", "expected_intent": "cancel_booking", "expected_slots": {}}
    session_id = response.cookies.get("sessionId")
    session = client.app.state.session_store.get(session_id)
    assert [u.text for u in session.test_data["en-US"]] == ["fly to Paris", "cancel"]


def test_generate_tests_requires_intents(client):
    response = client.post("/api/llm/generate-tests", json={"language": "en-US"}, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["message"] == "Intents and language are required"


def test_generate_more_requires_existing(client):
    response = client.post(
        "/api/llm/generate-more-tests",
        json={"intents": [{"name": "x"}], "language": "en-US", "existingUtterances": []},
        headers=AUTH,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Existing utterances are required and must be a non-empty array"


def test_generate_description(test_config):
    client = build_client(test_config, generation_service=StubGenerationService(["<think>x</think>Books flights."]))
    response = client.post("/api/llm/generate-description", json={"intents": [{"name": "book_flight"}]}, headers=AUTH)
    assert response.json() == {"success": True, "description": "Books flights."}


def test_missing_llm_key(test_config, travel_platform):
    test_config.llm_api_key = None
    application = create_app(
        config=test_config,
        platform_client=PlatformClient(transport=httpx.MockTransport(travel_platform)),
    )
    client = TestClient(application)

    response = client.post(
        "/api/llm/generate-tests",
        json={"intents": [{"name": "book_flight"}], "language": "en-US"},
        headers=AUTH,
    )
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "LLM API key is not configured"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["success"] is False

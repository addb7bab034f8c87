"""Shared test fixtures for IntentGuard tests."""

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Add the project root to the path so tests can import app and intent_core
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep results written while importing the app module out of the working tree
os.environ.setdefault("RESULTS_OUTPUT_DIR", tempfile.mkdtemp(prefix="intentguard-results-"))

from intent_core.config import Config  # noqa: E402
from intent_core.datastore import FileSystemService  # noqa: E402
from intent_core.generators import GenerationService  # noqa: E402
from intent_core.platform import PlatformClient  # noqa: E402

DOMAIN_ID = "domain-123"
VERSION_ID = "version-7"


def raw_nlu() -> Dict[str, Any]:
    return {
        "language": "en-us",
        "intents": [
            {"name": "book_flight", "entityNameReferences": ["city"], "utterances": [{"segments": []}] * 3},
            {"name": "cancel_booking", "utterances": []},
        ],
        "entities": [
            {"name": "city", "type": "CityType"},
            {"name": "date", "type": "builtin:date"},
        ],
        "entityTypes": [
            {
                "name": "CityType",
                "mechanism": {
                    "type": "List",
                    "items": [
                        {"value": "Paris", "synonyms": ["paris"]},
                        {"value": "Berlin"},
                    ],
                },
            }
        ],
    }


def flow_configuration(**overrides) -> Dict[str, Any]:
    """Raw latestConfiguration payload with coordinates nested under botFlowSettings."""
    payload = {
        "botFlowSettings": {"nluDomainId": DOMAIN_ID, "nluDomainVersionId": VERSION_ID},
        "nluMetaData": {"rawNlu": json.dumps(raw_nlu())},
        "supportedLanguages": ["en-us"],
    }
    payload.update(overrides)
    return payload


def intent(name: str, probability: float = 0.9, entities: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"name": name, "probability": probability, "entities": entities or []}


def slot(name: str, resolved: Optional[str] = None, raw: Optional[str] = None) -> Dict[str, Any]:
    return {"name": name, "value": {"raw": raw if raw is not None else resolved, "resolved": resolved}}


class FakePlatform:
    """httpx.MockTransport handler standing in for the contact-center platform."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        detections: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        fail_texts=(),
        flows_status: int = 200,
        legacy_status: int = 200,
        token_status: int = 200,
    ):
        self.config = config if config is not None else flow_configuration()
        self.detections = detections or {}
        self.fail_texts = set(fail_texts)
        self.flows_status = flows_status
        self.legacy_status = legacy_status
        self.token_status = token_status
        self.requests: List[httpx.Request] = []

    def detect_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/detect")]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/latestConfiguration"):
            return httpx.Response(200, json=self.config)
        if path.endswith("/detect"):
            text = json.loads(request.content)["input"]["text"]
            if text in self.fail_texts:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"output": {"intents": self.detections.get(text, [])}})
        if path == "/api/v2/flows":
            return httpx.Response(self.flows_status, json={"entities": [{"id": "flow-1", "name": "Travel Bot"}]})
        if path == "/api/v2/architect/botflows":
            return httpx.Response(self.legacy_status, json={"entities": [{"id": "legacy-1", "name": "Old Bot"}]})
        if path.endswith("/predict"):
            return httpx.Response(200, json={"intent": {"name": "book_flight", "confidence": 0.8}, "slots": {}})
        if path.startswith("/api/v2/flows/"):
            return httpx.Response(200, json={"id": "flow-1", "name": "Travel Bot", "type": "digitalbot"})
        if path == "/api/v2/users/me":
            return httpx.Response(200, json={"id": "user-1", "name": "Ada"})
        if path == "/api/v2/authorization/permissions":
            return httpx.Response(self.token_status, json={"entities": []})
        return httpx.Response(404, json={"message": "Not found"})


class StubGenerationService(GenerationService):
    """Returns canned completions in order and records every call."""

    def __init__(self, responses: List[str]):
        super().__init__(logger=logging.getLogger("tests.generation"))
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, provider, messages, model=None, max_tokens=None, json_mode=False) -> str:
        self.calls.append({
            "provider": provider,
            "messages": messages,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
        })
        return self.responses.pop(0)


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def platform_client(fake_platform) -> PlatformClient:
    return PlatformClient(timeout=2, transport=httpx.MockTransport(fake_platform))


@pytest.fixture
def datastore(tmp_path) -> FileSystemService:
    return FileSystemService(base_path=str(tmp_path / "results"))


@pytest.fixture
def test_config(tmp_path) -> Config:
    return Config(
        default_region="mypurecloud.de",
        results_output_dir=str(tmp_path / "results"),
        allowed_origins=["http://localhost:3000"],
        cookie_secure=False,
        validate_tokens=False,
        llm_api_key="test-key",
    )

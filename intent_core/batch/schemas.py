"""
'batch/schemas.py': Utterances, per-utterance results and the TestRun record.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..exceptions import RequestValidationFailed


def coerce_expected_slots(value: Any) -> Dict[str, str]:
    """Keep scalar slot expectations as strings; drop nested or null values."""
    if not isinstance(value, dict):
        return {}
    slots: Dict[str, str] = {}
    for name, expected in value.items():
        if expected is None or isinstance(expected, (dict, list)):
            continue
        slots[str(name)] = str(expected)
    return slots


class Utterance(BaseModel):
    """A candidate test input."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    text: str
    expected_intent: str
    expected_slots: Dict[str, str] = Field(default_factory=dict)

    @field_validator("expected_slots", mode="before")
    @classmethod
    def _coerce_slots(cls, value: Any) -> Dict[str, str]:
        return coerce_expected_slots(value)


class UtteranceResult(BaseModel):
    """Outcome of one detection call compared against its expectation."""

    utterance: str
    language: str
    recognized_intent: Optional[str] = None
    confidence: Optional[float] = None
    slots: List[Dict[str, Any]] = Field(default_factory=list)
    raw_response: Any = None
    expected_intent: str
    expected_slots: Dict[str, str] = Field(default_factory=dict)
    intent_match: bool = False
    slots_match: bool = False
    overall_match: bool = False
    error: Optional[str] = None

    @model_validator(mode="after")
    def _derive_overall_match(self) -> "UtteranceResult":
        # overall_match is never taken from input
        self.overall_match = self.intent_match and self.slots_match
        return self


class TestSummary(BaseModel):
    __test__ = False

    total: int = 0
    matched: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: List[UtteranceResult]) -> "TestSummary":
        matched = sum(1 for result in results if result.overall_match)
        return cls(total=len(results), matched=matched, failed=len(results) - matched)


class TestRun(BaseModel):
    """The full record of one batch of utterances tested against one flow/language pair."""

    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    id: str
    flow_id: str = Field(alias="flowId")
    language: str
    timestamp: str
    results: List[UtteranceResult] = Field(default_factory=list)
    summary: TestSummary = Field(default_factory=TestSummary)

    def to_record(self) -> Dict[str, Any]:
        """Serialized form stored on disk and returned by the API."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TestRun":
        return cls.model_validate(record)


class BatchTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    utterances: List[Utterance]
    flow_id: str = Field(alias="flowId")
    language: str
    region: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BatchTestRequest":
        """
        Validate a raw batch-test body.

        Raises:
            RequestValidationFailed: When utterances, flowId or language are missing.
        """
        utterances = payload.get("utterances")
        if not isinstance(utterances, list) or not utterances:
            raise RequestValidationFailed("Please provide an array of utterances to test")
        if not payload.get("flowId"):
            raise RequestValidationFailed("Please provide a flow ID")
        if not payload.get("language"):
            raise RequestValidationFailed("Please provide a language")

        parsed = []
        for index, item in enumerate(utterances):
            if not isinstance(item, dict) or not item.get("text"):
                raise RequestValidationFailed(f"Utterance #{index + 1} has no text")
            parsed.append(Utterance(
                text=str(item["text"]),
                expected_intent=str(item.get("expected_intent") or ""),
                expected_slots=item.get("expected_slots") or {},
            ))

        return cls(
            utterances=parsed,
            flowId=str(payload["flowId"]),
            language=str(payload["language"]),
            region=payload.get("region"),
        )


class DetectionOutcome(BaseModel):
    """Success or failure of a single detection call, folded into the batch as-is."""

    ok: bool
    recognized_intent: Optional[str] = None
    confidence: Optional[float] = None
    slots: List[Dict[str, Any]] = Field(default_factory=list)
    raw_response: Any = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, raw_response: Any = None) -> "DetectionOutcome":
        return cls(ok=False, error=error, raw_response=raw_response)

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DetectedIntent(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = "none"
    probability: float = 0.0
    entities: List[Dict[str, Any]] = Field(default_factory=list)

    # The detect endpoint sends explicit nulls for intents without entities or score
    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return "none" if value is None else value

    @field_validator("probability", mode="before")
    @classmethod
    def _null_probability(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("entities", mode="before")
    @classmethod
    def _null_entities(cls, value: Any) -> Any:
        return [] if value is None else value


class DetectionResponse(BaseModel):
    """Parsed answer of the NLU detect endpoint (any status below 500)."""

    status_code: int = 200
    intents: List[DetectedIntent] = Field(default_factory=list)
    raw: Any = None
    error: Optional[str] = None

    @property
    def top_intent(self) -> DetectedIntent:
        return self.intents[0] if self.intents else DetectedIntent()


class FlowListing(BaseModel):
    flows: List[Dict[str, Any]] = Field(default_factory=list)
    flow_type: Literal["digital", "legacy"] = "digital"

from .coordinates import STRATEGIES, resolve_nlu_coordinates
from .schemas import (
    BatchTestRequest,
    DetectionOutcome,
    TestRun,
    TestSummary,
    Utterance,
    UtteranceResult,
)
from .service import BatchTestRunner

__all__ = [
    "STRATEGIES",
    "resolve_nlu_coordinates",
    "BatchTestRequest",
    "BatchTestRunner",
    "DetectionOutcome",
    "TestRun",
    "TestSummary",
    "Utterance",
    "UtteranceResult",
]

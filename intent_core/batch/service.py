"""
'batch/service.py': Runs a batch of utterances against a flow's NLU model.
"""
import asyncio
import logging
from logging import Logger
from typing import TYPE_CHECKING, List, Optional

import arrow

from ..comparator.service import intent_matches, slots_match
from ..datastore.base import BaseDatastore
from ..exceptions import IntentGuardError, NluCoordinatesNotFound
from ..platform.client import PlatformClient
from .coordinates import Coordinates, resolve_nlu_coordinates
from .schemas import BatchTestRequest, DetectionOutcome, TestRun, TestSummary, Utterance, UtteranceResult

if TYPE_CHECKING:
    from ..sessions.schemas import Session


def new_test_id() -> str:
    now = arrow.utcnow()
    return f"batch-test-{int(now.timestamp() * 1000)}"


def build_result(utterance: Utterance, language: str, outcome: DetectionOutcome) -> UtteranceResult:
    """Compare one detection outcome against its utterance's expectations."""
    if not outcome.ok:
        return UtteranceResult(
            utterance=utterance.text,
            language=language,
            raw_response=outcome.raw_response,
            expected_intent=utterance.expected_intent,
            expected_slots=utterance.expected_slots,
            error=outcome.error,
        )

    return UtteranceResult(
        utterance=utterance.text,
        language=language,
        recognized_intent=outcome.recognized_intent,
        confidence=outcome.confidence,
        slots=outcome.slots,
        raw_response=outcome.raw_response,
        expected_intent=utterance.expected_intent,
        expected_slots=utterance.expected_slots,
        intent_match=intent_matches(outcome.recognized_intent, utterance.expected_intent),
        slots_match=slots_match(utterance.expected_slots, outcome.slots),
        error=outcome.error,
    )


class BatchTestRunner:
    """
    Resolves a flow's NLU coordinates, detects every utterance, compares and persists.
    """

    def __init__(
        self,
        platform_client: PlatformClient,
        datastore: BaseDatastore,
        max_concurrency: int = 1,
        logger: Optional[Logger] = None,
    ):
        self.platform_client = platform_client
        self.datastore = datastore
        self.max_concurrency = max(1, max_concurrency)
        self.logger = logger or logging.getLogger(__name__)

    async def resolve_coordinates(self, flow_id: str, region: str, token: str) -> Coordinates:
        """
        Raises:
            NluCoordinatesNotFound: No strategy could locate the domain/version pair.
        """
        config = await self.platform_client.get_flow_configuration(flow_id, region, token)
        coordinates = resolve_nlu_coordinates(config)
        if coordinates is None:
            self.logger.error(f"[BatchTestRunner] Domain ID or version ID not found for flow {flow_id}")
            raise NluCoordinatesNotFound(config)
        self.logger.info(f"[BatchTestRunner] Flow {flow_id}: domain={coordinates[0]}, version={coordinates[1]}")
        return coordinates

    async def detect(self, utterance: Utterance, coordinates: Coordinates, language: str, region: str, token: str) -> DetectionOutcome:
        """Single detection call; any failure becomes a failed outcome."""
        domain_id, version_id = coordinates
        try:
            response = await self.platform_client.detect_intent(
                domain_id, version_id, utterance.text, language, region, token
            )
        except Exception as e:
            self.logger.error(f"[BatchTestRunner] Detection failed for '{utterance.text}': {e}")
            if isinstance(e, IntentGuardError):
                return DetectionOutcome.failure(e.message, raw_response=e.error)
            return DetectionOutcome.failure(str(e) or type(e).__name__)

        top_intent = response.top_intent
        return DetectionOutcome(
            ok=True,
            recognized_intent=top_intent.name,
            confidence=top_intent.probability,
            slots=top_intent.entities,
            raw_response=response.raw,
            error=response.error,
        )

    async def detect_all(self, utterances: List[Utterance], coordinates: Coordinates, language: str, region: str, token: str) -> List[UtteranceResult]:
        """Detect in input order; results keep input order whatever the concurrency."""
        semaphore = asyncio.Semaphore(value=self.max_concurrency)

        async def run_with_semaphore(utterance: Utterance) -> UtteranceResult:
            async with semaphore:
                outcome = await self.detect(utterance, coordinates, language, region, token)
                return build_result(utterance, language, outcome)

        return list(await asyncio.gather(*(run_with_semaphore(u) for u in utterances)))

    async def persist(self, run: TestRun) -> bool:
        loop = asyncio.get_running_loop()
        saved = await loop.run_in_executor(None, self.datastore.save_test_run, run.id, run.to_record())
        if not saved:
            self.logger.warning(f"[BatchTestRunner] Test run {run.id} was not persisted to disk")
        return saved

    async def run_batch_test(self, request: BatchTestRequest, region: str, token: str, session: Optional["Session"] = None) -> TestRun:
        """
        Run one batch test.

        Args:
            request (BatchTestRequest): Validated utterances, flow id and language.
            region (str): Platform region to target.
            token (str): Bearer token for the platform.
            session (Optional[Session]): Session to record the run on, if any.

        Returns:
            TestRun: The completed run; per-utterance failures are embedded in its results.
        """
        self.logger.info(
            f"[BatchTestRunner] Starting batch test: flow={request.flow_id}, language={request.language}, "
            f"utterances={len(request.utterances)}"
        )
        coordinates = await self.resolve_coordinates(request.flow_id, region, token)
        results = await self.detect_all(request.utterances, coordinates, request.language, region, token)

        run = TestRun(
            id=new_test_id(),
            flowId=request.flow_id,
            language=request.language,
            timestamp=arrow.utcnow().isoformat(),
            results=results,
            summary=TestSummary.from_results(results),
        )
        if session is not None:
            session.record_test_run(run)
        await self.persist(run)

        self.logger.info(
            f"[BatchTestRunner] {run.id}: {run.summary.matched}/{run.summary.total} matched"
        )
        return run

"""Analysis service: fingerprint, cache lookup, in-flight dedup, single upstream call."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from ..errors import AnalyzerError, ErrorKind
from .cache import AnalysisCache
from .fingerprint import fingerprint, normalize_description
from .inflight import InFlightRegistry
from .schemas import AnalyzeResult, LlmVacancyAnalysis, VacancyAnalysis

logger = logging.getLogger(__name__)

ModelCaller = Callable[[str], Awaitable[LlmVacancyAnalysis]]

STRESS_FREE_WEIGHT = 0.4
REMOTE_WEIGHT = 0.3
LEARNING_WEIGHT = 0.3


def compute_compatibility_score(stress_free: float, remote: float, learning: float) -> int:
    """Weighted 0.4/0.3/0.3 blend, rounded half up and clamped to 0-100. NaN becomes 0."""
    raw = STRESS_FREE_WEIGHT * stress_free + REMOTE_WEIGHT * remote + LEARNING_WEIGHT * learning
    if math.isnan(raw):
        return 0
    raw = max(0.0, min(100.0, raw))
    return int(math.floor(raw + 0.5))


def build_analysis(llm: LlmVacancyAnalysis) -> VacancyAnalysis:
    return VacancyAnalysis(
        stress_free_score=llm.stress_free_score,
        remote_friendliness_score=llm.remote_friendliness_score,
        learning_opportunities_score=llm.learning_opportunities_score,
        compatibility_score=compute_compatibility_score(
            llm.stress_free_score, llm.remote_friendliness_score, llm.learning_opportunities_score
        ),
        explanation=llm.explanation,
    )


class VacancyAnalyzer:
    """Turns a vacancy description into a cached VacancyAnalysis.

    For a given fingerprint at most one upstream call runs at a time within
    this process; concurrent callers await the same task and see the same
    outcome. The computation runs as its own task, so a caller that goes
    away does not abort the cache fill for everyone else.
    """

    def __init__(
        self,
        cache: AnalysisCache,
        call_model: ModelCaller,
        registry: InFlightRegistry | None = None,
    ) -> None:
        self._cache = cache
        self._call_model = call_model
        self.registry = registry if registry is not None else InFlightRegistry()

    async def analyze(self, description: str) -> AnalyzeResult:
        normalized = normalize_description(description or "")
        if not normalized:
            raise AnalyzerError("Vacancy description is empty", ErrorKind.INVALID_REQUEST)

        fp = fingerprint(normalized)

        cached = await self._cache.get(fp)
        if cached is not None:
            logger.debug("Analysis cache hit %s", fp[:16])
            return AnalyzeResult(fingerprint=fp, cached=True, analysis=cached)

        task = self.registry.get(fp)
        if task is not None:
            logger.info("Joining in-flight analysis %s", fp[:16])
        else:
            logger.info("Analysis cache miss %s, calling upstream model", fp[:16])
            task = asyncio.ensure_future(self._run_and_cache(fp, normalized))
            self.registry.register(fp, task)
            task.add_done_callback(lambda done: self.registry.release(fp, done))

        analysis = await asyncio.shield(task)
        return AnalyzeResult(fingerprint=fp, cached=False, analysis=analysis)

    async def _run_and_cache(self, fp: str, description: str) -> VacancyAnalysis:
        try:
            llm = await self._call_model(description)
        except Exception:
            logger.exception("Upstream analysis failed for %s", fp[:16])
            raise

        analysis = build_analysis(llm)
        await self._cache.set(fp, analysis)
        return analysis

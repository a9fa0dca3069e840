"""Content-addressed cache of vacancy analyses."""

import logging

import redis
from pydantic import ValidationError

from ..errors import AnalyzerError, ErrorKind
from ..integrations.store import KeyValueStore
from .schemas import VacancyAnalysis

logger = logging.getLogger(__name__)

CACHE_PREFIX = "analyzer:vacancy:v1:"
CACHE_TTL = 60 * 60 * 12  # 12 hours


def cache_key(fingerprint: str) -> str:
    return f"{CACHE_PREFIX}{fingerprint}"


class AnalysisCache:
    """Reads and writes VacancyAnalysis objects keyed by description fingerprint.

    Store failures are raised as INFRASTRUCTURE_ERROR rather than treated as a
    miss. A corrupt stored value is dropped and reported as a miss.
    """

    def __init__(self, store: KeyValueStore, ttl_seconds: int = CACHE_TTL) -> None:
        self._store = store
        self._ttl = ttl_seconds

    async def get(self, fingerprint: str) -> VacancyAnalysis | None:
        key = cache_key(fingerprint)
        try:
            raw = await self._store.get(key)
        except redis.RedisError as exc:
            raise AnalyzerError(
                "Failed to read analysis from the cache", ErrorKind.INFRASTRUCTURE_ERROR, str(exc)
            ) from exc

        if not raw:
            return None

        try:
            return VacancyAnalysis.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping corrupt cache entry %s", key)
            try:
                await self._store.delete(key)
            except redis.RedisError:
                logger.warning("Could not delete corrupt cache entry %s", key, exc_info=True)
            return None

    async def set(self, fingerprint: str, analysis: VacancyAnalysis) -> None:
        key = cache_key(fingerprint)
        try:
            await self._store.set(key, analysis.model_dump_json(by_alias=True), ex=self._ttl)
        except redis.RedisError as exc:
            raise AnalyzerError(
                "Failed to write analysis to the cache", ErrorKind.INFRASTRUCTURE_ERROR, str(exc)
            ) from exc

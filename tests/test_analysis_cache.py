"""Tests for the content-addressed analysis cache."""

import json

import pytest

from jobradar.analysis.cache import CACHE_TTL, AnalysisCache, cache_key
from jobradar.analysis.schemas import VacancyAnalysis
from jobradar.errors import AnalyzerError, ErrorKind

FP = "a" * 64


def _analysis():
    return VacancyAnalysis(
        stress_free_score=70,
        remote_friendliness_score=60,
        learning_opportunities_score=50,
        compatibility_score=61,
        explanation="Moderate pace.",
    )


class TestAnalysisCache:
    @pytest.mark.asyncio
    async def test_miss_returns_none(self, store):
        assert await AnalysisCache(store).get(FP) is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        cache = AnalysisCache(store)
        await cache.set(FP, _analysis())

        assert await cache.get(FP) == _analysis()
        assert store.ttls[cache_key(FP)] == CACHE_TTL == 43200

    @pytest.mark.asyncio
    async def test_stored_as_camel_case_json(self, store):
        await AnalysisCache(store).set(FP, _analysis())

        stored = json.loads(store.data[f"analyzer:vacancy:v1:{FP}"])
        assert stored == {
            "stressFreeScore": 70,
            "remoteFriendlinessScore": 60,
            "learningOpportunitiesScore": 50,
            "compatibilityScore": 61,
            "explanation": "Moderate pace.",
        }

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_dropped(self, store):
        store.data[cache_key(FP)] = "{not json"

        assert await AnalysisCache(store).get(FP) is None
        assert cache_key(FP) not in store.data

    @pytest.mark.asyncio
    async def test_entry_with_wrong_shape_is_dropped(self, store):
        store.data[cache_key(FP)] = json.dumps({"stressFreeScore": 500})

        assert await AnalysisCache(store).get(FP) is None
        assert cache_key(FP) not in store.data

    @pytest.mark.asyncio
    async def test_read_failure_is_infrastructure_error(self, store):
        store.fail = True

        with pytest.raises(AnalyzerError) as exc_info:
            await AnalysisCache(store).get(FP)

        assert exc_info.value.kind == ErrorKind.INFRASTRUCTURE_ERROR
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_write_failure_is_infrastructure_error(self, store):
        store.fail = True

        with pytest.raises(AnalyzerError) as exc_info:
            await AnalysisCache(store).set(FP, _analysis())

        assert exc_info.value.kind == ErrorKind.INFRASTRUCTURE_ERROR

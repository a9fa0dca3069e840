"""Tests for job search filtering, pagination and facets."""

import json

import pytest

from jobradar.integrations.hh import HHClient
from jobradar.jobs.schemas import ExperienceLevel, Job, JobSearchQuery, JobsQueryParams
from jobradar.jobs.service import (
    VACANCY_TTL,
    build_facets,
    filter_jobs,
    paginate,
    salary_overlaps,
    search_jobs,
)
from tests.fakes import hh_item


def _job(job_id="1", **fields):
    values = {"id": job_id, "title": "Python Developer", "company": "Acme", "city": "Москва"}
    values.update(fields)
    return Job(**values)


class TestSalaryOverlaps:
    def test_no_requested_range_matches_everything(self):
        assert salary_overlaps(_job(), None, None)

    def test_job_without_salary_excluded_when_range_requested(self):
        assert not salary_overlaps(_job(), 100000, None)

    def test_overlapping_ranges(self):
        job = _job(salary_min=150000, salary_max=250000)
        assert salary_overlaps(job, 200000, None)
        assert salary_overlaps(job, None, 160000)
        assert not salary_overlaps(job, 260000, None)
        assert not salary_overlaps(job, None, 100000)

    def test_open_ended_job_salary(self):
        assert salary_overlaps(_job(salary_min=300000), 250000, 350000)
        assert salary_overlaps(_job(salary_max=120000), 100000, None)


class TestFilterJobs:
    def test_keyword_matches_title_tags_and_description(self):
        jobs = [
            _job("1", title="Go Developer"),
            _job("2", title="Backend", tags=["Python"]),
            _job("3", title="Backend", description="We use python daily"),
        ]
        assert [j.id for j in filter_jobs(jobs, JobSearchQuery(keyword="PYTHON"))] == ["2", "3"]

    def test_city_name_is_matched_locally(self):
        jobs = [_job("1", city="Москва"), _job("2", city="Санкт-Петербург")]
        assert [j.id for j in filter_jobs(jobs, JobSearchQuery(city="москва"))] == ["1"]

    def test_numeric_city_is_left_to_hh(self):
        jobs = [_job("1", city="Москва"), _job("2", city="Санкт-Петербург")]
        assert len(filter_jobs(jobs, JobSearchQuery(city="2"))) == 2

    def test_experience_and_remote(self):
        jobs = [
            _job("1", experience=ExperienceLevel.NO_EXPERIENCE, remote=True),
            _job("2", experience=ExperienceLevel.BETWEEN_1_AND_3, remote=True),
            _job("3", experience=ExperienceLevel.BETWEEN_1_AND_3, remote=False),
        ]
        query = JobSearchQuery(experience=ExperienceLevel.BETWEEN_1_AND_3, remote_only=True)
        assert [j.id for j in filter_jobs(jobs, query)] == ["2"]


class TestPaginate:
    def test_first_page_has_cursor(self):
        jobs = [_job(str(i)) for i in range(5)]
        items, cursor = paginate(jobs, 0, 2)
        assert [j.id for j in items] == ["0", "1"]
        assert cursor == "2"

    def test_last_page_has_no_cursor(self):
        jobs = [_job(str(i)) for i in range(5)]
        items, cursor = paginate(jobs, 4, 2)
        assert [j.id for j in items] == ["4"]
        assert cursor is None

    def test_offset_past_end(self):
        assert paginate([_job()], 10, 5) == ([], None)


class TestBuildFacets:
    def test_cities_and_salary_bounds(self):
        facets = build_facets(
            [
                _job("1", city="Москва", salary_min=100000),
                _job("2", city="Казань", salary_max=400000),
                _job("3", city="Москва"),
            ]
        )
        assert facets.cities == ["Казань", "Москва"]
        assert (facets.salary_min, facets.salary_max) == (100000, 400000)

    def test_no_salaries(self):
        facets = build_facets([_job()])
        assert (facets.salary_min, facets.salary_max) == (0, 0)


class TestJobsQueryParams:
    def test_converts_to_search_query(self):
        params = JobsQueryParams.model_validate(
            {"q": "python", "salaryMin": "100000", "remote": "true", "experience": "moreThan6", "limit": "10"}
        )
        query = params.to_query()
        assert query.keyword == "python"
        assert query.salary_min == 100000
        assert query.remote_only is True
        assert query.experience == ExperienceLevel.MORE_THAN_6
        assert params.limit == 10

    def test_remote_false_is_kept(self):
        query = JobsQueryParams.model_validate({"remote": "false", "salaryMax": "300000"}).to_query()
        assert query.remote_only is False
        assert query.salary_max == 300000

    def test_remote_absent_is_unset(self):
        assert JobsQueryParams.model_validate({}).to_query().remote_only is None

    @pytest.mark.parametrize("remote", ["yes", "1", "on", "True"])
    def test_remote_accepts_only_true_or_false(self, remote):
        with pytest.raises(ValueError):
            JobsQueryParams.model_validate({"remote": remote})

    @pytest.mark.parametrize("raw", [{"limit": "0"}, {"limit": "51"}, {"salaryMin": "-1"}, {"experience": "senior"}])
    def test_rejects_invalid_values(self, raw):
        with pytest.raises(ValueError):
            JobsQueryParams.model_validate(raw)


class TestSearchJobs:
    @pytest.mark.asyncio
    async def test_filters_paginates_and_remembers_descriptions(self, upstream, store):
        upstream.hh_search = {
            "items": [
                hh_item("1"),
                hh_item("2", schedule={"id": "fullDay"}),
                hh_item("3"),
                hh_item("4"),
            ]
        }
        http_client = upstream.client()
        hh = HHClient(http_client, "https://hh.test")

        try:
            result = await search_jobs(hh, JobSearchQuery(remote_only=True), offset=0, limit=2, store=store)
        finally:
            await http_client.aclose()

        assert [j.id for j in result.items] == ["1", "3"]
        assert result.total == 3
        assert result.next_cursor == "2"
        assert result.facets.cities == ["Москва"]

        stored = json.loads(store.data["hh:vacancy:1"])
        assert stored["description"].startswith("Разработка API")
        assert store.ttls["hh:vacancy:1"] == VACANCY_TTL
        assert "hh:vacancy:4" not in store.data

    @pytest.mark.asyncio
    async def test_store_failure_does_not_break_search(self, upstream, store):
        upstream.hh_search = {"items": [hh_item("1")]}
        store.fail = True
        http_client = upstream.client()
        hh = HHClient(http_client, "https://hh.test")

        try:
            result = await search_jobs(hh, JobSearchQuery(), store=store)
        finally:
            await http_client.aclose()

        assert result.total == 1

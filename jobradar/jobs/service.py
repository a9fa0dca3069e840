"""Job search service: fetch from hh.ru, refine locally, paginate, build facets."""

import json
import logging
from collections.abc import Iterable

import redis

from ..integrations.hh import HHClient
from ..integrations.store import KeyValueStore
from .schemas import Facets, Job, JobSearchQuery, JobSearchResult

logger = logging.getLogger(__name__)

VACANCY_KEY_PREFIX = "hh:vacancy:"
VACANCY_TTL = 60 * 60 * 12  # 12 hours, same window as the analysis cache


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def salary_overlaps(job: Job, requested_min: int | None, requested_max: int | None) -> bool:
    """True when the job's salary range intersects the requested one.

    Jobs without any salary are excluded once a range is requested.
    """
    if requested_min is None and requested_max is None:
        return True
    if job.salary_min is None and job.salary_max is None:
        return False

    low = job.salary_min if job.salary_min is not None else job.salary_max
    high = job.salary_max if job.salary_max is not None else low

    if requested_min is not None and high < requested_min:
        return False
    if requested_max is not None and low > requested_max:
        return False
    return True


def matches(job: Job, query: JobSearchQuery) -> bool:
    keyword = (query.keyword or "").strip()
    if keyword:
        blob = "\n".join([job.title, job.company, job.city, job.description, " ".join(job.tags)])
        if not _contains(blob, keyword):
            return False

    city = (query.city or "").strip()
    if city and not city.isdigit() and not _contains(job.city, city):
        return False

    if query.experience and job.experience != query.experience:
        return False

    if query.remote_only and not job.remote:
        return False

    return salary_overlaps(job, query.salary_min, query.salary_max)


def filter_jobs(jobs: Iterable[Job], query: JobSearchQuery) -> list[Job]:
    return [job for job in jobs if matches(job, query)]


def paginate(jobs: list[Job], offset: int, limit: int) -> tuple[list[Job], str | None]:
    """Slice one page; the cursor is the next offset, or None on the last page."""
    items = jobs[offset : offset + limit]
    next_cursor = str(offset + limit) if offset + limit < len(jobs) else None
    return items, next_cursor


def build_facets(jobs: Iterable[Job]) -> Facets:
    jobs = list(jobs)
    salaries = [v for job in jobs for v in (job.salary_min, job.salary_max) if v is not None]
    return Facets(
        cities=sorted({job.city for job in jobs if job.city}),
        salary_min=min(salaries) if salaries else 0,
        salary_max=max(salaries) if salaries else 0,
    )


async def remember_descriptions(store: KeyValueStore, jobs: Iterable[Job]) -> None:
    """Store each description under ``hh:vacancy:<id>`` so it can be analyzed by id."""
    for job in jobs:
        if not job.description:
            continue
        try:
            await store.set(
                f"{VACANCY_KEY_PREFIX}{job.id}",
                json.dumps({"description": job.description}, ensure_ascii=False),
                ex=VACANCY_TTL,
            )
        except redis.RedisError:
            logger.warning("Could not store description of vacancy %s", job.id, exc_info=True)
            return


async def search_jobs(
    hh: HHClient,
    query: JobSearchQuery,
    offset: int = 0,
    limit: int = 20,
    store: KeyValueStore | None = None,
) -> JobSearchResult:
    fetched = await hh.search_jobs(query)
    filtered = filter_jobs(fetched, query)
    items, next_cursor = paginate(filtered, offset, limit)

    if store is not None:
        await remember_descriptions(store, items)

    logger.debug("Job search %r: fetched=%d matched=%d", query.keyword, len(fetched), len(filtered))
    return JobSearchResult(
        items=items,
        total=len(filtered),
        next_cursor=next_cursor,
        facets=build_facets(fetched),
    )

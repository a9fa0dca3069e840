"""hh.ru vacancy API client.

API docs: https://api.hh.ru (OpenAPI: https://github.com/hhru/api).
hh.ru requires a User-Agent and throttles anonymous clients, so requests are
retried with backoff on 429/5xx.
"""

import logging

import httpx
from bs4 import BeautifulSoup

from ..errors import HttpError, RetryExhaustedError
from ..http import fetch_json
from ..jobs.schemas import Employer, ExperienceLevel, Job, JobSearchQuery
from ..retry import is_retryable_upstream_error, log_retry, with_retry

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 100
_CURRENCY_ALIASES = {"RUR": "RUB"}
_EXPERIENCE_IDS = {level.value for level in ExperienceLevel}


def html_to_text(html: str | None) -> str:
    """Flatten hh.ru HTML (descriptions, <highlighttext> snippets) to plain text."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)


def build_search_params(query: JobSearchQuery, page: int = 0, per_page: int = DEFAULT_PER_PAGE) -> dict:
    """Translate a JobSearchQuery into ``GET /vacancies`` parameters.

    hh.ru ``area`` takes a numeric region id, so only numeric ``city`` values
    are forwarded; city names are matched locally against the results.
    """
    params: dict = {"page": page, "per_page": per_page}
    if query.keyword and query.keyword.strip():
        params["text"] = query.keyword.strip()
    if query.city and query.city.strip().isdigit():
        params["area"] = query.city.strip()
    if query.experience:
        params["experience"] = query.experience.value
    if query.salary_min is not None:
        params["salary"] = query.salary_min
        params["only_with_salary"] = "true"
    if query.remote_only:
        params["schedule"] = "remote"
    return params


def _is_remote(item: dict) -> bool:
    schedule = item.get("schedule") or {}
    if schedule.get("id") == "remote":
        return True
    work_formats = item.get("work_format") or []
    return any((wf or {}).get("id") == "REMOTE" for wf in work_formats)


def _description(item: dict) -> str:
    if item.get("description"):
        return html_to_text(item["description"])
    snippet = item.get("snippet") or {}
    parts = [html_to_text(snippet.get("responsibility")), html_to_text(snippet.get("requirement"))]
    return "\n".join(p for p in parts if p)


def _tags(item: dict) -> list[str]:
    skills = [s.get("name", "") for s in item.get("key_skills") or []]
    if not skills:
        skills = [r.get("name", "") for r in item.get("professional_roles") or []]
    return [s for s in skills if s]


def vacancy_to_job(item: dict) -> Job:
    """Map an hh.ru vacancy (search item or full vacancy) onto a Job."""
    salary = item.get("salary") or {}
    employer = item.get("employer") or {}
    area = item.get("area") or {}
    experience_id = (item.get("experience") or {}).get("id")
    currency = salary.get("currency") or "RUR"

    return Job(
        id=str(item["id"]),
        title=item.get("name", ""),
        company=employer.get("name", ""),
        city=area.get("name", ""),
        remote=_is_remote(item),
        experience=experience_id if experience_id in _EXPERIENCE_IDS else None,
        salary_min=salary.get("from"),
        salary_max=salary.get("to"),
        currency=_CURRENCY_ALIASES.get(currency, currency),
        tags=_tags(item),
        description=_description(item),
        published_at=item.get("published_at", ""),
        url=item.get("alternate_url") or item.get("url", ""),
        apply_url=item.get("apply_alternate_url", ""),
        employer=Employer(
            id=str(employer.get("id") or ""),
            name=employer.get("name", ""),
            logo=(employer.get("logo_urls") or {}).get("90"),
            trusted=employer.get("trusted"),
        ),
    )


class HHClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "https://api.hh.ru",
        user_agent: str = "jobradar/1.0",
        token: str = "",
        retries: int = 2,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": user_agent}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._retries = retries
        self._timeout = timeout

    def vacancy_url(self, vacancy_id: str) -> str:
        return f"{self._base_url}/vacancies/{vacancy_id}"

    async def _get(self, url: str, params: dict | None = None) -> dict:
        async def _attempt(attempt: int) -> dict:
            return await fetch_json(
                self._http, "GET", url, params=params, headers=self._headers, timeout=self._timeout
            )

        return await with_retry(
            _attempt,
            retries=self._retries,
            should_retry=is_retryable_upstream_error,
            on_retry=log_retry("hh.ru request"),
        )

    async def search_vacancies(self, params: dict) -> dict:
        """``GET /vacancies``; returns ``{items, found, page, pages, per_page}``."""
        return await self._get(f"{self._base_url}/vacancies", params)

    async def search_jobs(self, query: JobSearchQuery, per_page: int = DEFAULT_PER_PAGE) -> list[Job]:
        data = await self.search_vacancies(build_search_params(query, per_page=per_page))
        jobs = []
        for item in data.get("items") or []:
            try:
                jobs.append(vacancy_to_job(item))
            except (KeyError, ValueError):
                logger.warning("Skipping malformed hh.ru vacancy %r", item.get("id"))
        return jobs

    async def get_vacancy(self, vacancy_id: str) -> dict | None:
        """``GET /vacancies/{id}``; None when hh.ru answers 404."""
        try:
            return await self._get(self.vacancy_url(vacancy_id))
        except RetryExhaustedError as exc:
            if isinstance(exc.last_error, HttpError) and exc.last_error.status == 404:
                return None
            raise

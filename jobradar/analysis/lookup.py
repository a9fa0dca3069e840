"""Resolve a vacancy id to its description for analysis by id."""

import json
import logging

from pydantic import BaseModel, Field, ValidationError

from ..integrations.hh import HHClient, html_to_text
from ..integrations.store import KeyValueStore
from ..jobs.service import VACANCY_KEY_PREFIX, VACANCY_TTL

logger = logging.getLogger(__name__)


class StoredVacancy(BaseModel):
    description: str = Field(..., min_length=1)


def candidate_keys(vacancy_id: str) -> list[str]:
    return [f"vacancy:{vacancy_id}", f"{VACANCY_KEY_PREFIX}{vacancy_id}"]


class VacancyLookup:
    """Looks up stored vacancies in the key/value store, then on hh.ru.

    Store errors propagate to the caller. Stored values that are not JSON
    with a non-empty ``description`` are skipped.
    """

    def __init__(self, store: KeyValueStore, hh: HHClient | None = None) -> None:
        self._store = store
        self._hh = hh

    async def get_description(self, vacancy_id: str) -> str | None:
        for key in candidate_keys(vacancy_id):
            raw = await self._store.get(key)
            if not raw:
                continue
            try:
                return StoredVacancy.model_validate(json.loads(raw)).description
            except (json.JSONDecodeError, ValidationError):
                logger.debug("Ignoring invalid stored vacancy under %s", key)

        # hh.ru vacancy ids are numeric
        if self._hh is None or not vacancy_id.isdigit():
            return None
        return await self._fetch_from_hh(vacancy_id)

    async def _fetch_from_hh(self, vacancy_id: str) -> str | None:
        vacancy = await self._hh.get_vacancy(vacancy_id)
        if vacancy is None:
            return None

        description = html_to_text(vacancy.get("description"))
        if not description:
            return None

        await self._store.set(
            f"{VACANCY_KEY_PREFIX}{vacancy_id}",
            json.dumps({"description": description}, ensure_ascii=False),
            ex=VACANCY_TTL,
        )
        logger.info("Fetched vacancy %s from hh.ru for analysis", vacancy_id)
        return description

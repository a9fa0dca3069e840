"""Saved-search alerts: per-token filter lists and new-job notifications.

Filters live under ``alerts:filters:<token>`` as a JSON list; the ids seen on
the previous check live under ``alerts:lastseen:<filter_id>``. Both expire
after a week without activity.
"""

import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import redis
from pydantic import TypeAdapter, ValidationError

from ..integrations.store import KeyValueStore
from ..jobs.schemas import Job, JobSearchQuery
from .schemas import AlertFilter, AlertFilterCreate, JobSummary, Notification

logger = logging.getLogger(__name__)

ALERTS_TTL = 7 * 24 * 60 * 60  # 7 days
LAST_SEEN_LIMIT = 100
NOTIFICATION_JOB_LIMIT = 5

JobSearch = Callable[[JobSearchQuery], Awaitable[list[Job]]]

_filters_adapter = TypeAdapter(list[AlertFilter])


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AlertStore:
    def __init__(self, store: KeyValueStore, ttl_seconds: int = ALERTS_TTL) -> None:
        self._store = store
        self._ttl = ttl_seconds

    async def list_filters(self, token: str) -> list[AlertFilter]:
        raw = await self._store.get(f"alerts:filters:{token}")
        if not raw:
            return []
        try:
            return _filters_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable alert filters for a token")
            return []

    async def _save_filters(self, token: str, filters: list[AlertFilter]) -> None:
        payload = _filters_adapter.dump_json(filters, by_alias=True).decode()
        await self._store.set(f"alerts:filters:{token}", payload, ex=self._ttl)

    async def save_filter(self, data: AlertFilterCreate) -> AlertFilter:
        """Add a filter; one with the same name is replaced in place."""
        new_filter = AlertFilter(
            id=str(uuid.uuid4()),
            created_at=_now_iso(),
            **data.model_dump(exclude={"token"}),
        )
        filters = await self.list_filters(data.token)

        for i, existing in enumerate(filters):
            if existing.name == new_filter.name:
                filters[i] = new_filter
                break
        else:
            filters.insert(0, new_filter)

        await self._save_filters(data.token, filters)
        return new_filter

    async def delete_filter(self, token: str, filter_id: str) -> None:
        filters = await self.list_filters(token)
        await self._save_filters(token, [f for f in filters if f.id != filter_id])

    async def get_last_seen(self, filter_id: str) -> list[str]:
        try:
            raw = await self._store.get(f"alerts:lastseen:{filter_id}")
        except redis.RedisError:
            logger.warning("Could not read last-seen jobs for filter %s", filter_id, exc_info=True)
            return []
        if not raw:
            return []
        try:
            seen = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return [str(i) for i in seen] if isinstance(seen, list) else []

    async def update_last_seen(self, filter_id: str, job_ids: list[str]) -> None:
        try:
            await self._store.set(
                f"alerts:lastseen:{filter_id}",
                json.dumps(job_ids[:LAST_SEEN_LIMIT]),
                ex=self._ttl,
            )
        except redis.RedisError:
            logger.warning("Could not update last-seen jobs for filter %s", filter_id, exc_info=True)


async def check_alerts(alerts: AlertStore, search: JobSearch, token: str) -> list[Notification]:
    """Run every saved filter and report jobs not seen on the previous check."""
    filters = await alerts.list_filters(token)
    notifications = []

    for alert_filter in filters:
        try:
            current = await search(alert_filter.to_search_query())
            current_ids = [job.id for job in current]
            last_seen = set(await alerts.get_last_seen(alert_filter.id))
            new_jobs = [job for job in current if job.id not in last_seen]

            if new_jobs:
                notifications.append(
                    Notification(
                        id=f"notification_{int(datetime.now(UTC).timestamp() * 1000)}_{alert_filter.id}",
                        filter_id=alert_filter.id,
                        filter_name=alert_filter.name,
                        jobs=[
                            JobSummary(id=j.id, title=j.title, company=j.company, city=j.city, remote=j.remote)
                            for j in new_jobs[:NOTIFICATION_JOB_LIMIT]
                        ],
                        count=len(new_jobs),
                        timestamp=_now_iso(),
                    )
                )

            await alerts.update_last_seen(alert_filter.id, current_ids)
        except Exception:
            logger.exception("Alert check failed for filter %s", alert_filter.id)

    logger.info("Checked %d alert filters, %d with new jobs", len(filters), len(notifications))
    return notifications

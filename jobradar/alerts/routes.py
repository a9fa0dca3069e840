"""Saved-search alert routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_alert_store, get_hh_client, get_store
from ..integrations.hh import HHClient
from ..integrations.store import KeyValueStore
from ..jobs.schemas import Job, JobSearchQuery
from ..jobs.service import search_jobs
from .schemas import AlertDeleteRequest, AlertFilterCreate
from .service import AlertStore, check_alerts

router = APIRouter(prefix="/alerts", tags=["alerts"])

ALERT_SEARCH_LIMIT = 50


def _missing_token() -> JSONResponse:
    return JSONResponse({"error": "INVALID_REQUEST", "message": "Missing token"}, status_code=400)


@router.get("")
async def list_alerts(token: str = "", alerts: AlertStore = Depends(get_alert_store)):
    if not token:
        return _missing_token()
    filters = await alerts.list_filters(token)
    return JSONResponse({"filters": [f.model_dump(mode="json", by_alias=True) for f in filters]})


@router.post("")
async def create_alert(body: AlertFilterCreate, alerts: AlertStore = Depends(get_alert_store)):
    alert_filter = await alerts.save_filter(body)
    return JSONResponse({"filter": alert_filter.model_dump(mode="json", by_alias=True)})


@router.delete("")
async def delete_alert(body: AlertDeleteRequest, alerts: AlertStore = Depends(get_alert_store)):
    await alerts.delete_filter(body.token, str(body.filter_id))
    return JSONResponse({"success": True})


@router.get("/check")
async def check_alert_filters(
    token: str = "",
    alerts: AlertStore = Depends(get_alert_store),
    hh: HHClient = Depends(get_hh_client),
    store: KeyValueStore = Depends(get_store),
):
    """Report jobs that appeared since the previous check, per saved filter."""
    if not token:
        return _missing_token()

    async def _search(query: JobSearchQuery) -> list[Job]:
        result = await search_jobs(hh, query, 0, ALERT_SEARCH_LIMIT, store)
        return result.items

    notifications = await check_alerts(alerts, _search, token)
    return JSONResponse({"notifications": [n.model_dump(mode="json", by_alias=True) for n in notifications]})

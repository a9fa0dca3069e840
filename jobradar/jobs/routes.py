"""Job search JSON API."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..dependencies import get_hh_client, get_store
from ..errors import classify_error
from ..integrations.hh import HHClient
from ..integrations.store import KeyValueStore
from .schemas import JobsQueryParams
from .service import search_jobs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


@router.get("/jobs")
async def list_jobs(
    request: Request,
    hh: HHClient = Depends(get_hh_client),
    store: KeyValueStore = Depends(get_store),
):
    try:
        params = JobsQueryParams.model_validate(dict(request.query_params))
    except ValidationError as exc:
        return JSONResponse(
            {
                "error": "INVALID_QUERY",
                "message": "Invalid query parameters",
                "details": jsonable_encoder(exc.errors(include_url=False, include_context=False)),
            },
            status_code=400,
        )

    offset = 0
    if params.cursor:
        if not params.cursor.isdigit():
            return JSONResponse(
                {
                    "error": "INVALID_CURSOR",
                    "message": "cursor must be a non-negative integer",
                    "details": {"cursor": params.cursor},
                },
                status_code=400,
            )
        offset = int(params.cursor)

    try:
        result = await search_jobs(hh, params.to_query(), offset, params.limit, store)
    except Exception as exc:
        error = classify_error(exc)
        logger.warning("Job search failed: %s %s", error.kind.value, error.message)
        return JSONResponse(error.to_dict(), status_code=error.status)

    return JSONResponse(result.model_dump(mode="json", by_alias=True))

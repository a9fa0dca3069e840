"""Vacancy analysis JSON API."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..dependencies import get_analyzer, get_vacancy_lookup
from ..errors import AnalyzerError, ErrorKind, classify_error
from ..rate_limit import limiter
from .lookup import VacancyLookup
from .schemas import AnalyzeRequest
from .service import VacancyAnalyzer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


def _error_response(error: AnalyzerError) -> JSONResponse:
    return JSONResponse(error.to_dict(), status_code=error.status)


@router.post("/analyze")
@limiter.limit(settings.rate_limit_analyze)
async def analyze_api(
    request: Request,
    body: AnalyzeRequest,
    analyzer: VacancyAnalyzer = Depends(get_analyzer),
    lookup: VacancyLookup = Depends(get_vacancy_lookup),
):
    """Score a vacancy description, given inline or by id of a stored vacancy."""
    vacancy_id = body.vacancy_id
    description = body.inline_description

    if not description and vacancy_id is not None:
        try:
            description = await lookup.get_description(vacancy_id)
        except Exception as exc:
            error = classify_error(exc)
            logger.warning("Vacancy lookup failed for id=%s: %s", vacancy_id, error.message)
            return _error_response(error)

        if not description:
            return _error_response(
                AnalyzerError(
                    "Vacancy not found by id (provide a description or store the vacancy first)",
                    ErrorKind.NOT_FOUND,
                    {"id": vacancy_id},
                )
            )

    try:
        result = await analyzer.analyze(description or "")
    except Exception as exc:
        error = classify_error(exc)
        if error.kind == ErrorKind.UNEXPECTED:
            logger.exception("Analysis failed unexpectedly")
        else:
            logger.warning("Analysis failed: %s %s", error.kind.value, error.message)
        return _error_response(error)

    analysis = result.analysis
    return JSONResponse(
        {
            "id": vacancy_id,
            "fingerprint": result.fingerprint,
            "cached": result.cached,
            "score": analysis.compatibility_score,
            "rationale": analysis.explanation,
            "analysis": analysis.model_dump(by_alias=True),
        }
    )

"""
API endpoints for matching stored preferences against listings.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query

from app.errors import FetchError, MatchingError, NotFoundError, ValidationError
from app.schemas import MatchResponse
from app.services.match_query import build_listing_predicate
from app.services.matching_service import MatchingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preferences", tags=["Preferences"])

_matching_service = MatchingService()


def _http_error(error: MatchingError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=str(error))


@router.get("/{preference_id}/matches", response_model=MatchResponse)
async def get_preference_matches(
    preference_id: str,
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=100, description="Results per page"),
    explain: bool = Query(False, description="Include per-criterion score breakdown"),
) -> Dict[str, Any]:
    """
    Rank listings for a preference.

    Listings must pass every hard filter derived from the preference; the
    survivors are scored 50-100, sorted by score, and the top 80% flagged
    as priority matches.

    Raises:
        HTTPException: 404 unknown preference, 400 invalid preference,
            503 listing store unavailable
    """
    try:
        return await _matching_service.match_preference(
            preference_id, page=page, limit=limit, include_breakdown=explain
        )
    except (NotFoundError, ValidationError) as e:
        raise _http_error(e)
    except FetchError as e:
        logger.warning(f"Match fetch failed for preference {preference_id}: {e}")
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Error matching preference {preference_id}: {e}")
        raise HTTPException(status_code=500, detail="An error occurred while matching listings")


@router.get("/{preference_id}/criteria")
async def get_preference_criteria(preference_id: str) -> Dict[str, Any]:
    """Canonical matching criteria and hard-filter clauses for a preference."""
    try:
        criteria = await _matching_service.load_criteria(preference_id)
        return {
            "criteria": criteria.to_dict(),
            "hard_filters": build_listing_predicate(criteria).describe(),
        }
    except MatchingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.exception(f"Error loading criteria for preference {preference_id}: {e}")
        raise HTTPException(status_code=500, detail="An error occurred while loading criteria")

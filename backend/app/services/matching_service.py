"""Preference-to-listing matching pipeline.

normalize -> build predicate -> fetch candidates -> score -> threshold
-> rank -> prioritize -> paginate

Nothing here writes to a store; every call works on the point-in-time
listing snapshot returned by the fetcher.
"""
import asyncio
import logging
import math
import os
from typing import Any, Dict, List, Optional

from app.errors import NotFoundError, ValidationError
from app.services.listing_store import ListingFetcher, fetch_candidates, get_listing_store
from app.services.match_query import build_listing_predicate, to_number
from app.services.preference_normalizer import PreferenceCriteria, normalize_preference
from app.services.preference_store import PreferenceRepository, get_preference_store
from app.services.ranking import MatchResult, apply_threshold, paginate, prioritize, rank
from app.services.scoring_service import ScoredListing, ScoringService

logger = logging.getLogger(__name__)

SCORING_CHUNK_SIZE = int(os.getenv("MATCH_SCORING_CHUNK_SIZE", "500"))
PLACEHOLDER_IMAGE = "https://placehold.co/600x400/000000/FFFFFF?text=No+Image"


def _optional_text(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _amount(value: Any) -> Optional[float]:
    number = to_number(value)
    return number if number is not None and math.isfinite(number) else None


def _count(value: Any) -> Optional[int]:
    number = _amount(value)
    return int(number) if number is not None else None


def listing_summary(listing: Dict) -> Dict:
    """Public subset of a listing returned with each match.

    Listings that pass the hard filter may still carry loosely typed
    fields ("65,000,000" prices, string room counts, no id). Everything
    is coerced here so any scored listing also serializes.
    """
    raw_pictures = listing.get("pictures")
    pictures = [str(p) for p in raw_pictures if p] if isinstance(raw_pictures, list) else []
    return {
        "id": _optional_text(listing.get("id")),
        "brief_type": _optional_text(listing.get("brief_type")),
        "property_type": _optional_text(listing.get("property_type")),
        "building_type": _optional_text(listing.get("building_type")),
        "price": _amount(listing.get("price")),
        "location": {
            "state": _optional_text(listing.get("state")),
            "local_government": _optional_text(listing.get("local_government")),
            "area": _optional_text(listing.get("area")),
        },
        "bedrooms": _count(listing.get("bedrooms")),
        "bathrooms": _count(listing.get("bathrooms")),
        "pictures": pictures,
        "image": pictures[0] if pictures else PLACEHOLDER_IMAGE,
    }


def match_payload(match: MatchResult, include_breakdown: bool = False) -> Dict:
    payload = {
        "listing": listing_summary(match.listing),
        "match_score": match.match_score,
        "is_priority": match.is_priority,
    }
    if include_breakdown and match.breakdown is not None:
        payload["score_breakdown"] = match.breakdown.to_dict()
    return payload


class MatchingService:
    """Finds, scores and ranks listings for a stored preference."""

    def __init__(
        self,
        preference_store: Optional[PreferenceRepository] = None,
        listing_store: Optional[ListingFetcher] = None,
        scoring_chunk_size: int = SCORING_CHUNK_SIZE,
    ):
        self.preference_store = preference_store or get_preference_store()
        self.listing_store = listing_store or get_listing_store()
        self.scoring_chunk_size = max(1, scoring_chunk_size)

    async def load_criteria(self, preference_id: str) -> PreferenceCriteria:
        preference = await self.preference_store.get(preference_id)
        if preference is None:
            raise NotFoundError(f"Preference {preference_id} not found")
        return normalize_preference(preference)

    async def score_candidates(
        self, candidates: List[Dict], criteria: PreferenceCriteria
    ) -> List[ScoredListing]:
        """Score candidates, fanning large sets out to worker threads.

        Chunks are reassembled in fetch order so ranking ties stay stable.
        """
        size = self.scoring_chunk_size
        if len(candidates) <= size:
            return ScoringService.score_listings(candidates, criteria)

        chunks = [candidates[i:i + size] for i in range(0, len(candidates), size)]
        logger.info(f"Scoring {len(candidates)} candidates in {len(chunks)} chunks")
        results = await asyncio.gather(
            *(asyncio.to_thread(ScoringService.score_listings, chunk, criteria) for chunk in chunks)
        )
        return [item for chunk in results for item in chunk]

    async def rank_matches(self, criteria: PreferenceCriteria) -> List[MatchResult]:
        """Full ranked and prioritized match list for the given criteria."""
        predicate = build_listing_predicate(criteria)
        candidates = await fetch_candidates(self.listing_store, predicate)
        if not candidates:
            logger.info(f"No listings pass hard filters for preference {criteria.preference_id}")
            return []

        scored = await self.score_candidates(candidates, criteria)
        eligible = apply_threshold(scored)
        if len(eligible) != len(scored):
            logger.warning(
                f"Dropped {len(scored) - len(eligible)} sub-threshold candidates "
                f"for preference {criteria.preference_id}"
            )
        return prioritize(rank(eligible))

    async def match_preference(
        self,
        preference_id: str,
        page: int = 1,
        limit: int = 10,
        include_breakdown: bool = False,
    ) -> Dict:
        """
        Match a stored preference against current listings.

        Args:
            preference_id: Preference to match
            page: 1-based page number
            limit: Results per page
            include_breakdown: Attach per-criterion score points

        Returns:
            {"data": [match payloads], "pagination": {total, page, limit, totalPages}}

        Raises:
            NotFoundError: unknown preference id
            ValidationError: preference cannot be normalized, or bad paging
            FetchError: listing store failed or timed out
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")

        criteria = await self.load_criteria(preference_id)
        matches = await self.rank_matches(criteria)
        page_items, pagination = paginate(matches, page, limit)

        logger.info(
            f"Preference {preference_id}: {pagination['total']} matches, "
            f"page {page}/{pagination['totalPages']}"
        )
        return {
            "data": [match_payload(m, include_breakdown) for m in page_items],
            "pagination": pagination,
        }

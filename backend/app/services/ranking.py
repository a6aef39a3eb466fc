"""Threshold, rank, prioritize and paginate scored listings."""
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

from app.errors import ValidationError
from app.services.scoring_service import BASE_SCORE, ScoreBreakdown, ScoredListing

MIN_MATCH_SCORE = BASE_SCORE
PRIORITY_RATIO = Fraction(4, 5)


@dataclass
class MatchResult:
    listing: dict
    match_score: int
    is_priority: bool = False
    breakdown: Optional[ScoreBreakdown] = None


def apply_threshold(scored: Sequence[ScoredListing], minimum: int = MIN_MATCH_SCORE) -> List[ScoredListing]:
    return [item for item in scored if item.score >= minimum]


def rank(scored: Sequence[ScoredListing]) -> List[ScoredListing]:
    """Sort by score descending. Ties keep fetch order (sorted is stable)."""
    return sorted(scored, key=lambda item: item.score, reverse=True)


def priority_cutoff(total: int) -> int:
    return math.ceil(PRIORITY_RATIO * total)


def prioritize(ranked: Sequence[ScoredListing]) -> List[MatchResult]:
    """Flag the top 80% (rounded up) of a ranked list as priority matches."""
    cutoff = priority_cutoff(len(ranked))
    return [
        MatchResult(
            listing=item.listing,
            match_score=item.score,
            is_priority=index < cutoff,
            breakdown=item.breakdown,
        )
        for index, item in enumerate(ranked)
    ]


def paginate(items: Sequence, page: int, limit: int) -> Tuple[list, dict]:
    """Slice one page. Pages past the end are empty, not an error."""
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive integers")

    total = len(items)
    start = (page - 1) * limit
    return list(items[start:start + limit]), {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
    }

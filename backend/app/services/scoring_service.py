"""Heuristic scoring engine for preference matches.

Every listing that clears the hard filter starts from a 50 point base and
earns bonus points per criterion. Bonuses are capped at 50, so the final
score always lands in [50, 100]. Unset criteria earn full credit.
No I/O, no clock reads: the score depends only on (listing, criteria).
"""
import math
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

from app.services.match_query import fold, provided_documents, to_number
from app.services.preference_normalizer import (
    LocationCriteria,
    PreferenceCriteria,
    Range,
)

BASE_SCORE = 50
MAX_BONUS = 50

LOCATION_STATE_POINTS = 5
LOCATION_LGA_POINTS = 5
LOCATION_AREA_POINTS = 5
LOCATION_WEIGHT = LOCATION_STATE_POINTS + LOCATION_LGA_POINTS + LOCATION_AREA_POINTS
PRICE_WEIGHT = 15
BEDROOM_WEIGHT = 10
BATHROOM_WEIGHT = 10
PROPERTY_TYPE_WEIGHT = 10
CONDITION_WEIGHT = 3
BUILDING_TYPE_WEIGHT = 2
FEATURE_WEIGHT = 5
MODE_CAPACITY_POINTS = 2
MODE_EXTRA_POINTS = 3
MODE_BONUS_WEIGHT = MODE_CAPACITY_POINTS + MODE_EXTRA_POINTS

# Partial feature/document coverage below this ratio earns nothing
MIN_COVERAGE_RATIO = 0.5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-criterion points. ``total`` is what callers see as matchScore."""
    location: float = 0
    price: float = 0
    bedrooms: float = 0
    bathrooms: float = 0
    property_type: float = 0
    property_condition: float = 0
    building_type: float = 0
    features: float = 0
    mode_bonus: float = 0

    @property
    def bonus_total(self) -> float:
        return (
            self.location
            + self.price
            + self.bedrooms
            + self.bathrooms
            + self.property_type
            + self.property_condition
            + self.building_type
            + self.features
            + self.mode_bonus
        )

    @property
    def capped_bonus(self) -> float:
        return min(self.bonus_total, MAX_BONUS)

    @property
    def total(self) -> int:
        return round_half_up(BASE_SCORE + self.capped_bonus)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["base"] = BASE_SCORE
        data["bonus_total"] = self.bonus_total
        data["total"] = self.total
        return data


@dataclass(frozen=True)
class ScoredListing:
    listing: dict
    breakdown: ScoreBreakdown

    @property
    def score(self) -> int:
        return self.breakdown.total


class ScoringService:
    """Stateless weighted scoring of listings against preference criteria."""

    # -- Re-checks of criteria the hard filter already enforces. They keep
    # -- scoring total over listings that never went through the filter.

    @staticmethod
    def location_points(listing: dict, location: LocationCriteria) -> int:
        """Score location fit (0-15).

        State is worth 5. With an LGA list, a listing outside it stops at
        the state points; inside it earns 5 more, plus 5 when the area
        also matches (or no areas were given). Without an LGA list the
        remaining 10 are awarded outright.
        """
        points = 0
        if location.state is None or fold(listing.get("state")) == fold(location.state):
            points += LOCATION_STATE_POINTS

        if not location.lgas:
            return points + LOCATION_LGA_POINTS + LOCATION_AREA_POINTS

        lgas = {fold(lga) for lga in location.lgas}
        if fold(listing.get("local_government")) not in lgas:
            return points
        points += LOCATION_LGA_POINTS

        areas = {fold(area) for area in location.areas}
        if not areas or fold(listing.get("area")) in areas:
            points += LOCATION_AREA_POINTS
        return points

    @staticmethod
    def price_points(listing: dict, budget: Range) -> int:
        if not budget.is_set:
            return PRICE_WEIGHT
        return PRICE_WEIGHT if budget.contains(to_number(listing.get("price"))) else 0

    @staticmethod
    def minimum_points(actual, required: Optional[int], weight: int) -> int:
        """Full weight when the count meets the minimum or no minimum is set."""
        if required is None:
            return weight
        count = to_number(actual)
        return weight if count is not None and count >= required else 0

    @staticmethod
    def exact_points(actual, expected: Optional[str], weight: int) -> int:
        if not expected:
            return weight
        return weight if fold(actual) == fold(expected) else 0

    # -- Soft criteria: these actually separate eligible listings.

    @staticmethod
    def coverage_ratio(requested: Sequence[str], available: set) -> float:
        if not requested:
            return 1.0
        wanted = {fold(item) for item in requested}
        return len(wanted & available) / len(wanted)

    @staticmethod
    def feature_points(listing: dict, requested: Sequence[str]) -> int:
        """Score requested-feature coverage (0-5). Under 50% earns nothing."""
        if not requested:
            return FEATURE_WEIGHT
        listed = {fold(f) for f in listing.get("features") or [] if fold(f)}
        ratio = ScoringService.coverage_ratio(requested, listed)
        if ratio < MIN_COVERAGE_RATIO:
            return 0
        return round_half_up(ratio * FEATURE_WEIGHT)

    @staticmethod
    def mode_bonus_points(listing: dict, criteria: PreferenceCriteria) -> float:
        """Mode-specific bonus (0-5).

        Shortlet: 2 for guest capacity, up to 3 for house rules honoured.
        Joint venture: 2 for land size in range, up to 3 for document
        coverage (nothing below 50% coverage).
        """
        shortlet = criteria.shortlet
        if shortlet is not None:
            capacity = ScoringService.minimum_points(
                listing.get("max_guests"), shortlet.guests, MODE_CAPACITY_POINTS
            )
            rules = shortlet.required_house_rules
            if not rules:
                return capacity + MODE_EXTRA_POINTS
            house_rules = listing.get("house_rules")
            house_rules = house_rules if isinstance(house_rules, dict) else {}
            honoured = sum(1 for rule in rules if house_rules.get(rule) is True)
            return capacity + MODE_EXTRA_POINTS * honoured / len(rules)

        joint_venture = criteria.joint_venture
        if joint_venture is not None:
            land = joint_venture.land_size
            points = MODE_CAPACITY_POINTS
            if land.is_set and not land.contains(to_number(listing.get("land_size"))):
                points = 0
            ratio = ScoringService.coverage_ratio(
                joint_venture.required_documents,
                provided_documents(listing.get("documents")),
            )
            if ratio >= MIN_COVERAGE_RATIO:
                points += MODE_EXTRA_POINTS * ratio
            return points

        return 0

    @staticmethod
    def compute_breakdown(listing: dict, criteria: PreferenceCriteria) -> ScoreBreakdown:
        return ScoreBreakdown(
            location=ScoringService.location_points(listing, criteria.location),
            price=ScoringService.price_points(listing, criteria.budget),
            bedrooms=ScoringService.minimum_points(
                listing.get("bedrooms"), criteria.min_bedrooms, BEDROOM_WEIGHT
            ),
            bathrooms=ScoringService.minimum_points(
                listing.get("bathrooms"), criteria.min_bathrooms, BATHROOM_WEIGHT
            ),
            property_type=ScoringService.exact_points(
                listing.get("property_type"), criteria.property_type, PROPERTY_TYPE_WEIGHT
            ),
            property_condition=ScoringService.exact_points(
                listing.get("property_condition"), criteria.property_condition, CONDITION_WEIGHT
            ),
            building_type=ScoringService.exact_points(
                listing.get("building_type"), criteria.building_type, BUILDING_TYPE_WEIGHT
            ),
            features=ScoringService.feature_points(listing, criteria.features.requested),
            mode_bonus=ScoringService.mode_bonus_points(listing, criteria),
        )

    @staticmethod
    def score(listing: dict, criteria: PreferenceCriteria) -> int:
        """Final match score in [50, 100]."""
        return ScoringService.compute_breakdown(listing, criteria).total

    @staticmethod
    def score_listings(listings: Sequence[dict], criteria: PreferenceCriteria) -> List[ScoredListing]:
        """Score listings, preserving input order."""
        return [
            ScoredListing(listing=listing, breakdown=ScoringService.compute_breakdown(listing, criteria))
            for listing in listings
        ]

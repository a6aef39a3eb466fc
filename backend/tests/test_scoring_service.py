"""Tests for ScoringService weighted match scoring."""
import pytest

from app.services.preference_normalizer import normalize_preference
from app.services.scoring_service import (
    BASE_SCORE,
    MAX_BONUS,
    ScoreBreakdown,
    ScoringService,
    round_half_up,
)


def _criteria(mode="buy", location=None, budget=None, details=None, features=None, contact=None):
    preference_type, bag = {
        "buy": ("buy", "property_details"),
        "developer": ("joint-venture", "development_details"),
        "shortlet": ("shortlet", "booking_details"),
    }[mode]
    return normalize_preference({
        "preference_type": preference_type,
        "preference_mode": mode,
        "location": location or {},
        "budget": budget or {},
        bag: details or {},
        "features": features or {},
        "contact_info": contact or {},
    })


STRICT_CRITERIA = _criteria(
    location={"state": "Lagos"},
    budget={"min_price": 1000000, "max_price": 2000000},
    details={
        "property_type": "Residential",
        "building_type": "Duplex",
        "property_condition": "Brand New",
        "min_bedrooms": "3",
        "min_bathrooms": 2,
    },
)


class TestLocationPoints:
    """Location component: 0-15."""

    LGA_LOCATION = _criteria(location={
        "state": "Lagos",
        "local_government_areas": ["Ikeja"],
        "lgas_with_areas": [{"lga_name": "Ikeja", "areas": ["GRA"]}],
    }).location

    def test_full_match(self):
        listing = {"state": "Lagos", "local_government": "Ikeja", "area": "GRA"}
        assert ScoringService.location_points(listing, self.LGA_LOCATION) == 15

    def test_lga_mismatch_caps_at_state_points(self):
        listing = {"state": "Lagos", "local_government": "Eti-Osa", "area": "GRA"}
        assert ScoringService.location_points(listing, self.LGA_LOCATION) == 5

    def test_area_mismatch(self):
        listing = {"state": "Lagos", "local_government": "Ikeja", "area": "Alausa"}
        assert ScoringService.location_points(listing, self.LGA_LOCATION) == 10

    def test_no_lga_list_awards_remaining_points(self):
        location = _criteria(location={"state": "Lagos"}).location
        assert ScoringService.location_points({"state": "Lagos"}, location) == 15

    def test_no_location_constraints(self):
        location = _criteria().location
        assert ScoringService.location_points({}, location) == 15

    def test_nothing_matches(self):
        listing = {"state": "Ogun", "local_government": "Sango"}
        assert ScoringService.location_points(listing, self.LGA_LOCATION) == 0


class TestRecheckedCriteria:
    """Price, rooms and type criteria re-checked from the hard filter."""

    def test_price_in_budget(self):
        assert ScoringService.price_points({"price": 1500000}, STRICT_CRITERIA.budget) == 15

    def test_price_out_of_budget(self):
        assert ScoringService.price_points({"price": 2500000}, STRICT_CRITERIA.budget) == 0

    def test_missing_price_earns_nothing(self):
        assert ScoringService.price_points({}, STRICT_CRITERIA.budget) == 0

    def test_no_budget_earns_full_price_points(self):
        assert ScoringService.price_points({}, _criteria().budget) == 15

    def test_bedroom_minimum(self):
        assert ScoringService.minimum_points(3, 3, 10) == 10
        assert ScoringService.minimum_points(2, 3, 10) == 0
        assert ScoringService.minimum_points(None, 3, 10) == 0
        assert ScoringService.minimum_points(None, None, 10) == 10

    def test_exact_match_is_case_insensitive(self):
        assert ScoringService.exact_points("residential", "Residential", 10) == 10
        assert ScoringService.exact_points("Commercial", "Residential", 10) == 0
        assert ScoringService.exact_points("Commercial", None, 10) == 10


class TestFeaturePoints:
    """Feature component: 0-5, nothing below 50% coverage."""

    REQUESTED = ("Parking", "Swimming Pool", "Gym", "Wi-Fi")

    def test_full_coverage(self):
        listing = {"features": ["parking", "Swimming Pool", "GYM", "Wi-Fi", "Garden"]}
        assert ScoringService.feature_points(listing, self.REQUESTED) == 5

    def test_half_coverage_rounds_half_up(self):
        listing = {"features": ["Parking", "Gym"]}
        assert ScoringService.feature_points(listing, self.REQUESTED) == 3

    def test_three_quarters_coverage(self):
        listing = {"features": ["Parking", "Gym", "Wi-Fi"]}
        assert ScoringService.feature_points(listing, self.REQUESTED) == 4

    def test_below_half_coverage_earns_nothing(self):
        listing = {"features": ["Parking"]}
        assert ScoringService.feature_points(listing, self.REQUESTED) == 0

    def test_no_requested_features(self):
        assert ScoringService.feature_points({"features": []}, ()) == 5

    def test_missing_feature_list(self):
        assert ScoringService.feature_points({}, self.REQUESTED) == 0


class TestModeBonusPoints:
    """Mode-specific component: 0-5."""

    def test_shortlet_capacity_and_rules(self):
        criteria = _criteria(
            mode="shortlet",
            details={"number_of_guests": 4},
            contact={"pets_allowed": True, "parties_allowed": True},
        )
        listing = {"max_guests": 6, "house_rules": {"pets_allowed": True, "parties_allowed": False}}
        assert ScoringService.mode_bonus_points(listing, criteria) == pytest.approx(3.5)

    def test_shortlet_without_requirements(self):
        criteria = _criteria(mode="shortlet")
        assert ScoringService.mode_bonus_points({}, criteria) == 5

    def test_shortlet_insufficient_capacity(self):
        criteria = _criteria(mode="shortlet", details={"number_of_guests": 4})
        assert ScoringService.mode_bonus_points({"max_guests": 2}, criteria) == 3

    def test_joint_venture_partial_documents(self):
        criteria = _criteria(
            mode="developer",
            details={"min_land_size": "800", "document_types": ["C of O", "Survey Plan"]},
        )
        listing = {
            "land_size": 900,
            "documents": [
                {"name": "C of O", "is_provided": True},
                {"name": "Survey Plan", "is_provided": False},
            ],
        }
        assert ScoringService.mode_bonus_points(listing, criteria) == pytest.approx(3.5)

    def test_joint_venture_low_document_coverage(self):
        criteria = _criteria(
            mode="developer",
            details={"document_types": ["C of O", "Survey Plan", "Deed of Assignment"]},
        )
        listing = {"documents": [{"name": "C of O", "is_provided": True}]}
        assert ScoringService.mode_bonus_points(listing, criteria) == 2

    def test_joint_venture_land_out_of_range(self):
        criteria = _criteria(mode="developer", details={"min_land_size": "800"})
        assert ScoringService.mode_bonus_points({"land_size": 500}, criteria) == 3

    def test_buy_has_no_mode_bonus(self):
        assert ScoringService.mode_bonus_points({}, _criteria()) == 0


class TestOverallScore:
    """Base 50 plus bonuses capped at 50."""

    def test_empty_listing_scores_base(self):
        criteria = _criteria(
            location={"state": "Lagos", "local_government_areas": ["Ikeja"]},
            budget={"max_price": 100},
            details={"property_type": "Residential", "min_bedrooms": "2", "min_bathrooms": 1,
                     "building_type": "Duplex", "property_condition": "New"},
            features={"base_features": ["Parking"]},
        )
        assert ScoringService.score({}, criteria) == BASE_SCORE

    def test_bonuses_are_capped(self):
        breakdown = ScoringService.compute_breakdown({}, _criteria())
        assert breakdown.bonus_total == 70
        assert breakdown.capped_bonus == MAX_BONUS
        assert breakdown.total == 100

    def test_partial_match_score(self):
        listing = {"state": "Lagos", "price": 1500000}
        # location 15 + price 15 + features 5
        assert ScoringService.score(listing, STRICT_CRITERIA) == 85

    def test_additional_criterion_never_lowers_score(self):
        listing = {"state": "Lagos", "price": 1500000}
        base = ScoringService.score(listing, STRICT_CRITERIA)
        with_bedrooms = ScoringService.score({**listing, "bedrooms": 3}, STRICT_CRITERIA)
        with_type = ScoringService.score(
            {**listing, "bedrooms": 3, "property_type": "Residential"}, STRICT_CRITERIA
        )
        assert base <= with_bedrooms <= with_type
        assert with_bedrooms == 95
        assert with_type == 100

    def test_score_always_in_bounds(self):
        listings = [
            {},
            {"state": "Lagos"},
            {"price": "not-a-number", "bedrooms": "three"},
            {"state": "Lagos", "price": 1500000, "bedrooms": 5, "bathrooms": 5,
             "property_type": "Residential", "building_type": "Duplex",
             "property_condition": "Brand New"},
        ]
        for listing in listings:
            assert 50 <= ScoringService.score(listing, STRICT_CRITERIA) <= 100

    def test_breakdown_to_dict(self):
        data = ScoringService.compute_breakdown({"state": "Lagos", "price": 1500000}, STRICT_CRITERIA).to_dict()
        assert data["base"] == 50
        assert data["location"] == 15
        assert data["bonus_total"] == 35
        assert data["total"] == 85

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(87.5) == 88
        assert round_half_up(87.49) == 87

    def test_fractional_bonus_rounds_final_score(self):
        assert ScoreBreakdown(location=5, mode_bonus=1.5).total == 57


class TestScoreListings:

    def test_preserves_input_order(self):
        listings = [{"id": "a"}, {"id": "b", "state": "Lagos", "price": 1500000}, {"id": "c"}]
        scored = ScoringService.score_listings(listings, STRICT_CRITERIA)
        assert [s.listing["id"] for s in scored] == ["a", "b", "c"]
        assert scored[1].score == 85

"""Hard-filter predicate built from canonical preference criteria.

The predicate is an AND of clauses. Each clause names a listing field, an
operator and an expected value, so the same predicate can be evaluated
in memory (``ListingPredicate.matches``) or translated into SQL by a
listing store. Clauses are only emitted for criteria the preference
actually sets.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.services.preference_normalizer import (
    JointVentureCriteria,
    PreferenceCriteria,
    ShortletCriteria,
)

BRIEF_TYPE_BY_PREFERENCE_TYPE: Dict[str, str] = {
    "buy": "Outright Sales",
    "joint-venture": "Joint Venture",
    "rent": "Rent",
    "shortlet": "Shortlet",
}

# Operators a SQL backend can evaluate directly against scalar columns
PUSHDOWN_OPERATORS = frozenset({"eq", "in", "gte", "lte", "is_true", "not_true"})


def fold(value: Any) -> Optional[str]:
    """Case-insensitive comparison key for free-text listing fields."""
    if value is None:
        return None
    text = str(value).strip().casefold()
    return text or None


def to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", ""))
    except ValueError:
        return None


def to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def periods_overlap(new_start: date, new_end: date, start: date, end: date) -> bool:
    return new_start <= end and new_end >= start


def _op_eq(actual: Any, expected: Any) -> bool:
    key = fold(actual)
    return key is not None and key == fold(expected)


def _op_in(actual: Any, expected: Tuple[str, ...]) -> bool:
    key = fold(actual)
    return key is not None and key in {fold(v) for v in expected}


def _op_gte(actual: Any, expected: float) -> bool:
    number = to_number(actual)
    return number is not None and number >= expected


def _op_lte(actual: Any, expected: float) -> bool:
    number = to_number(actual)
    return number is not None and number <= expected


def _op_is_true(actual: Any, expected: Any) -> bool:
    return actual is True


def _op_not_true(actual: Any, expected: Any) -> bool:
    return actual is not True


def _op_no_overlap(periods: Any, window: Tuple[date, date]) -> bool:
    new_start, new_end = window
    for period in periods or []:
        if not isinstance(period, dict):
            continue
        start = to_date(period.get("check_in"))
        end = to_date(period.get("check_out"))
        if start is None or end is None:
            continue
        if periods_overlap(new_start, new_end, start, end):
            return False
    return True


def provided_documents(documents: Any) -> set:
    return {
        fold(doc.get("name"))
        for doc in documents or []
        if isinstance(doc, dict) and doc.get("is_provided") is True and fold(doc.get("name"))
    }


def _op_documents_provided(documents: Any, required: Tuple[str, ...]) -> bool:
    provided = provided_documents(documents)
    return all(fold(name) in provided for name in required)


def _op_allows(house_rules: Any, required: Tuple[str, ...]) -> bool:
    rules = house_rules if isinstance(house_rules, dict) else {}
    return all(rules.get(rule) is True for rule in required)


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": _op_eq,
    "in": _op_in,
    "gte": _op_gte,
    "lte": _op_lte,
    "is_true": _op_is_true,
    "not_true": _op_not_true,
    "no_overlap": _op_no_overlap,
    "documents_provided": _op_documents_provided,
    "allows": _op_allows,
}


@dataclass(frozen=True)
class Clause:
    name: str
    field: str
    op: str
    value: Any = None

    @property
    def pushdown(self) -> bool:
        return self.op in PUSHDOWN_OPERATORS

    def test(self, listing: dict) -> bool:
        return _OPERATORS[self.op](listing.get(self.field), self.value)

    def describe(self) -> dict:
        value = self.value
        if isinstance(value, tuple):
            value = [v.isoformat() if isinstance(v, date) else v for v in value]
        return {"name": self.name, "field": self.field, "op": self.op, "value": value}


@dataclass(frozen=True)
class ListingPredicate:
    clauses: Tuple[Clause, ...]

    def matches(self, listing: dict) -> bool:
        return all(clause.test(listing) for clause in self.clauses)

    def failed_clauses(self, listing: dict) -> List[str]:
        return [clause.name for clause in self.clauses if not clause.test(listing)]

    @property
    def pushdown_clauses(self) -> Tuple[Clause, ...]:
        return tuple(c for c in self.clauses if c.pushdown)

    @property
    def residual_clauses(self) -> Tuple[Clause, ...]:
        return tuple(c for c in self.clauses if not c.pushdown)

    def describe(self) -> List[dict]:
        return [clause.describe() for clause in self.clauses]


def _lifecycle_clauses(criteria: PreferenceCriteria) -> List[Clause]:
    return [
        Clause("lifecycle.not_deleted", "is_deleted", "not_true"),
        Clause("lifecycle.not_rejected", "is_rejected", "not_true"),
        Clause("lifecycle.approved", "status", "eq", "approved"),
        Clause("lifecycle.available", "is_available", "is_true"),
        Clause(
            "lifecycle.brief_type",
            "brief_type",
            "eq",
            BRIEF_TYPE_BY_PREFERENCE_TYPE[criteria.preference_type],
        ),
    ]


def _location_clauses(criteria: PreferenceCriteria) -> List[Clause]:
    location = criteria.location
    clauses = []
    if location.state:
        clauses.append(Clause("location.state", "state", "eq", location.state))
    if location.lgas:
        clauses.append(Clause("location.lga", "local_government", "in", location.lgas))
    if location.areas:
        clauses.append(Clause("location.area", "area", "in", location.areas))
    return clauses


def _range_clauses(name: str, field: str, low: Optional[float], high: Optional[float]) -> List[Clause]:
    clauses = []
    if low is not None:
        clauses.append(Clause(f"{name}.min", field, "gte", low))
    if high is not None:
        clauses.append(Clause(f"{name}.max", field, "lte", high))
    return clauses


def _property_clauses(criteria: PreferenceCriteria) -> List[Clause]:
    clauses = []
    if criteria.min_bedrooms is not None:
        clauses.append(Clause("rooms.bedrooms", "bedrooms", "gte", criteria.min_bedrooms))
    if criteria.min_bathrooms is not None:
        clauses.append(Clause("rooms.bathrooms", "bathrooms", "gte", criteria.min_bathrooms))
    for name, value in (
        ("property_type", criteria.property_type),
        ("building_type", criteria.building_type),
        ("property_condition", criteria.property_condition),
    ):
        if value:
            clauses.append(Clause(f"type.{name}", name, "eq", value))
    return clauses


def _shortlet_clauses(shortlet: ShortletCriteria) -> List[Clause]:
    clauses = []
    if shortlet.guests is not None:
        clauses.append(Clause("shortlet.guests", "max_guests", "gte", shortlet.guests))
    if shortlet.has_stay_window:
        clauses.append(
            Clause(
                "shortlet.availability",
                "booked_periods",
                "no_overlap",
                (shortlet.check_in, shortlet.check_out),
            )
        )
    if shortlet.required_house_rules:
        clauses.append(
            Clause("shortlet.house_rules", "house_rules", "allows", shortlet.required_house_rules)
        )
    return clauses


def _joint_venture_clauses(joint_venture: JointVentureCriteria) -> List[Clause]:
    clauses = _range_clauses(
        "joint_venture.land_size",
        "land_size",
        joint_venture.land_size.min,
        joint_venture.land_size.max,
    )
    if joint_venture.required_documents:
        clauses.append(
            Clause(
                "joint_venture.documents",
                "documents",
                "documents_provided",
                joint_venture.required_documents,
            )
        )
    return clauses


def build_listing_predicate(criteria: PreferenceCriteria) -> ListingPredicate:
    """Translate criteria into the mandatory predicate every match must pass."""
    clauses = _lifecycle_clauses(criteria)
    clauses += _location_clauses(criteria)
    clauses += _range_clauses("budget", "price", criteria.budget.min, criteria.budget.max)
    clauses += _property_clauses(criteria)

    if criteria.shortlet is not None:
        clauses += _shortlet_clauses(criteria.shortlet)
    elif criteria.joint_venture is not None:
        clauses += _joint_venture_clauses(criteria.joint_venture)

    return ListingPredicate(clauses=tuple(clauses))

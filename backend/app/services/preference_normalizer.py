"""Resolve a stored preference record into canonical matching criteria.

A preference carries exactly one mode-specific detail bag:

- buy / tenant   -> ``property_details``
- developer      -> ``development_details``
- shortlet       -> ``booking_details``

Everything downstream (hard filter, scoring) works off the
``PreferenceCriteria`` produced here and never reads the raw record.
Absent optional fields stay ``None`` / empty, meaning "unconstrained".
"""
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from app.errors import ValidationError


class PreferenceMode(str, Enum):
    BUY = "buy"
    TENANT = "tenant"
    DEVELOPER = "developer"
    SHORTLET = "shortlet"


PREFERENCE_TYPE_BY_MODE: Dict[PreferenceMode, str] = {
    PreferenceMode.BUY: "buy",
    PreferenceMode.TENANT: "rent",
    PreferenceMode.DEVELOPER: "joint-venture",
    PreferenceMode.SHORTLET: "shortlet",
}

DETAIL_BAG_BY_MODE: Dict[PreferenceMode, str] = {
    PreferenceMode.BUY: "property_details",
    PreferenceMode.TENANT: "property_details",
    PreferenceMode.DEVELOPER: "development_details",
    PreferenceMode.SHORTLET: "booking_details",
}

HOUSE_RULES = ("pets_allowed", "smoking_allowed", "parties_allowed")


@dataclass(frozen=True)
class Range:
    """Inclusive numeric range; either bound may be open."""
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_set(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: Optional[float]) -> bool:
        if value is None:
            return False
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class LocationCriteria:
    state: Optional[str] = None
    lgas: Tuple[str, ...] = ()
    areas: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureCriteria:
    base: Tuple[str, ...] = ()
    premium: Tuple[str, ...] = ()

    @property
    def requested(self) -> Tuple[str, ...]:
        return _unique(self.base + self.premium)


@dataclass(frozen=True)
class ShortletCriteria:
    guests: Optional[int] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    required_house_rules: Tuple[str, ...] = ()

    @property
    def has_stay_window(self) -> bool:
        return self.check_in is not None and self.check_out is not None


@dataclass(frozen=True)
class JointVentureCriteria:
    land_size: Range = field(default_factory=Range)
    required_documents: Tuple[str, ...] = ()


ModeExtension = Union[ShortletCriteria, JointVentureCriteria, None]


@dataclass(frozen=True)
class PreferenceCriteria:
    """Mode-agnostic criteria shared by the hard filter and the scorer."""
    preference_id: Optional[str]
    preference_type: str
    mode: PreferenceMode
    location: LocationCriteria = field(default_factory=LocationCriteria)
    budget: Range = field(default_factory=Range)
    property_type: Optional[str] = None
    building_type: Optional[str] = None
    property_condition: Optional[str] = None
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    land_size: Range = field(default_factory=Range)
    required_documents: Tuple[str, ...] = ()
    features: FeatureCriteria = field(default_factory=FeatureCriteria)
    extension: ModeExtension = None

    @property
    def shortlet(self) -> Optional[ShortletCriteria]:
        return self.extension if isinstance(self.extension, ShortletCriteria) else None

    @property
    def joint_venture(self) -> Optional[JointVentureCriteria]:
        return self.extension if isinstance(self.extension, JointVentureCriteria) else None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    result = []
    for value in values:
        key = value.casefold()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return tuple(result)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_strings(values: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    if not values:
        return ()
    return _unique(s for s in (_optional_str(v) for v in values) if s)


def _parse_number(value: Any, field_name: str) -> Optional[float]:
    """Parse numbers stored as strings in detail bags ("3", "4+", "1,200")."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "").rstrip("+").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValidationError(f"Invalid numeric value for {field_name}: {value!r}")


def _parse_int(value: Any, field_name: str) -> Optional[int]:
    number = _parse_number(value, field_name)
    return int(number) if number is not None else None


def _parse_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid date for {field_name}: {value!r}")


def _parse_mode(preference: dict) -> PreferenceMode:
    raw_mode = preference.get("preference_mode")
    try:
        mode = PreferenceMode(raw_mode)
    except ValueError:
        raise ValidationError(f"Unknown preference mode: {raw_mode!r}")

    expected_type = PREFERENCE_TYPE_BY_MODE[mode]
    if preference.get("preference_type") != expected_type:
        raise ValidationError(
            f"Preference type {preference.get('preference_type')!r} "
            f"does not match mode {mode.value!r} (expected {expected_type!r})"
        )
    return mode


def _detail_bag(preference: dict, mode: PreferenceMode) -> dict:
    bag_key = DETAIL_BAG_BY_MODE[mode]
    foreign = sorted(
        key for key in set(DETAIL_BAG_BY_MODE.values())
        if key != bag_key and preference.get(key)
    )
    if foreign:
        raise ValidationError(
            f"Mode {mode.value!r} expects {bag_key} but preference carries {', '.join(foreign)}"
        )
    return preference.get(bag_key) or {}


def _checked_range(low: Optional[float], high: Optional[float], name: str) -> Range:
    if low is not None and high is not None and low > high:
        raise ValidationError(f"{name} minimum {low} exceeds maximum {high}")
    return Range(min=low, max=high)


def _no_extension(preference: dict, details: dict) -> ModeExtension:
    return None


def _shortlet_extension(preference: dict, details: dict) -> ShortletCriteria:
    check_in = _parse_date(details.get("check_in_date"), "check_in_date")
    check_out = _parse_date(details.get("check_out_date"), "check_out_date")
    if check_in and check_out and check_out <= check_in:
        raise ValidationError("check_out_date must be after check_in_date")

    contact = preference.get("contact_info") or {}
    return ShortletCriteria(
        guests=_parse_int(details.get("number_of_guests"), "number_of_guests"),
        check_in=check_in,
        check_out=check_out,
        required_house_rules=tuple(rule for rule in HOUSE_RULES if contact.get(rule) is True),
    )


def _joint_venture_extension(preference: dict, details: dict) -> JointVentureCriteria:
    return JointVentureCriteria(
        land_size=_checked_range(
            _parse_number(details.get("min_land_size"), "min_land_size"),
            _parse_number(details.get("max_land_size"), "max_land_size"),
            "Land size",
        ),
        required_documents=_clean_strings(details.get("document_types")),
    )


_EXTENSION_BUILDERS: Dict[PreferenceMode, Callable[[dict, dict], ModeExtension]] = {
    PreferenceMode.BUY: _no_extension,
    PreferenceMode.TENANT: _no_extension,
    PreferenceMode.DEVELOPER: _joint_venture_extension,
    PreferenceMode.SHORTLET: _shortlet_extension,
}


def normalize_preference(preference: dict) -> PreferenceCriteria:
    """Build ``PreferenceCriteria`` from a raw preference record.

    Raises:
        ValidationError: mode/type mismatch, a detail bag that does not
            belong to the mode, or malformed numeric/date fields.
    """
    mode = _parse_mode(preference)
    details = _detail_bag(preference, mode)
    extension = _EXTENSION_BUILDERS[mode](preference, details)

    location = preference.get("location") or {}
    lgas_with_areas = location.get("lgas_with_areas") or []
    budget = preference.get("budget") or {}
    features = preference.get("features") or {}

    if isinstance(extension, JointVentureCriteria):
        land_size = extension.land_size
        required_documents = extension.required_documents
    else:
        land_size = Range(min=_parse_number(details.get("land_size"), "land_size"))
        required_documents = _clean_strings(details.get("document_types"))

    return PreferenceCriteria(
        preference_id=_optional_str(preference.get("id")),
        preference_type=PREFERENCE_TYPE_BY_MODE[mode],
        mode=mode,
        location=LocationCriteria(
            state=_optional_str(location.get("state")),
            lgas=_clean_strings(location.get("local_government_areas")),
            areas=_clean_strings(
                area for entry in lgas_with_areas for area in (entry.get("areas") or [])
            ),
        ),
        budget=_checked_range(
            _parse_number(budget.get("min_price"), "min_price"),
            _parse_number(budget.get("max_price"), "max_price"),
            "Budget",
        ),
        property_type=_optional_str(details.get("property_type")),
        building_type=_optional_str(details.get("building_type")),
        property_condition=_optional_str(details.get("property_condition")),
        min_bedrooms=_parse_int(details.get("min_bedrooms"), "min_bedrooms"),
        min_bathrooms=_parse_int(details.get("min_bathrooms"), "min_bathrooms"),
        land_size=land_size,
        required_documents=required_documents,
        features=FeatureCriteria(
            base=_clean_strings(features.get("base_features")),
            premium=_clean_strings(features.get("premium_features")),
        ),
        extension=extension,
    )

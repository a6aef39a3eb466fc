"""
ORM models for the matching service database.
"""
from app.models.listing import ListingModel
from app.models.preference import PreferenceModel

__all__ = ["ListingModel", "PreferenceModel"]

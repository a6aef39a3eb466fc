"""
SQLAlchemy ORM model for buyer/tenant/developer/shortlet preferences.
"""
from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.database import Base


class PreferenceModel(Base):
    """
    ORM model for a submitted preference.

    Only one of the detail bags is populated, chosen by preference_mode.
    """
    __tablename__ = "preferences"

    id = Column(String(50), primary_key=True)
    buyer_id = Column(String(50), nullable=True)

    preference_type = Column(String(30), nullable=False)  # buy, rent, joint-venture, shortlet
    preference_mode = Column(String(30), nullable=False)  # buy, tenant, developer, shortlet

    location = Column(JSONB, nullable=False)  # {"state", "local_government_areas", "lgas_with_areas"}
    budget = Column(JSONB, nullable=False)  # {"min_price", "max_price", "currency"}

    property_details = Column(JSONB, nullable=True)
    development_details = Column(JSONB, nullable=True)
    booking_details = Column(JSONB, nullable=True)

    features = Column(JSONB, nullable=True)  # {"base_features": [], "premium_features": []}
    contact_info = Column(JSONB, nullable=True)
    additional_notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="pending")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_preferences_type', 'preference_type'),
        Index('idx_preferences_status', 'status'),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "preference_type": self.preference_type,
            "preference_mode": self.preference_mode,
            "location": self.location or {},
            "budget": self.budget or {},
            "property_details": self.property_details,
            "development_details": self.development_details,
            "booking_details": self.booking_details,
            "features": self.features or {},
            "contact_info": self.contact_info or {},
            "additional_notes": self.additional_notes,
            "status": self.status,
        }

    def __repr__(self):
        return f"<Preference {self.id}: {self.preference_type}/{self.preference_mode}>"

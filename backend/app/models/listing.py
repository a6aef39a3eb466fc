"""
SQLAlchemy ORM model for property listings.
"""
from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.database import Base


class ListingModel(Base):
    """
    ORM model for property listings (briefs).

    Scalar columns back the hard-filter clauses that can run in SQL;
    list/dict attributes live in JSONB and are filtered in Python.
    """
    __tablename__ = "listings"

    id = Column(String(50), primary_key=True)
    owner_id = Column(String(50), nullable=True)

    # Brief classification
    brief_type = Column(String(50), nullable=False)  # Outright Sales, Rent, Joint Venture, Shortlet
    property_type = Column(String(100), nullable=True)
    building_type = Column(String(100), nullable=True)
    property_condition = Column(String(100), nullable=True)

    # Location
    state = Column(String(100), nullable=False)
    local_government = Column(String(100), nullable=True)
    area = Column(String(150), nullable=True)

    # Listing details
    price = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    land_size = Column(Float, nullable=True)
    land_size_unit = Column(String(30), nullable=True)  # plot, acre, sqm
    max_guests = Column(Integer, nullable=True)  # shortlet only

    features = Column(JSONB, default=list)
    documents = Column(JSONB, default=list)  # [{"name": ..., "is_provided": bool}]
    house_rules = Column(JSONB, nullable=True)  # {"pets_allowed": bool, ...}
    booked_periods = Column(JSONB, default=list)  # [{"check_in": "YYYY-MM-DD", "check_out": ...}]
    pictures = Column(JSONB, default=list)
    description = Column(Text, nullable=True)

    # Lifecycle
    status = Column(String(30), nullable=False, default="pending")
    is_available = Column(Boolean, default=False)
    is_deleted = Column(Boolean, default=False)
    is_rejected = Column(Boolean, default=False)
    is_premium = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_listings_brief_type', 'brief_type'),
        Index('idx_listings_status', 'status'),
        Index('idx_listings_state_lga', 'state', 'local_government'),
        Index('idx_listings_area', 'area'),
        Index('idx_listings_price', 'price'),
        Index('idx_listings_bedrooms', 'bedrooms'),
    )

    def to_dict(self) -> dict:
        """Convert model to the listing dict used by matching and API responses."""
        return {
            "id": self.id,
            "brief_type": self.brief_type,
            "property_type": self.property_type,
            "building_type": self.building_type,
            "property_condition": self.property_condition,
            "state": self.state,
            "local_government": self.local_government,
            "area": self.area,
            "price": self.price,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "land_size": self.land_size,
            "land_size_unit": self.land_size_unit,
            "max_guests": self.max_guests,
            "features": self.features or [],
            "documents": self.documents or [],
            "house_rules": self.house_rules or {},
            "booked_periods": self.booked_periods or [],
            "pictures": self.pictures or [],
            "description": self.description or "",
            "status": self.status,
            "is_available": self.is_available,
            "is_deleted": self.is_deleted,
            "is_rejected": self.is_rejected,
            "is_premium": self.is_premium,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Listing {self.id}: {self.brief_type} in {self.area}, {self.state} - {self.price}>"

from pydantic import BaseModel, Field
from typing import List, Optional


class LocationSummary(BaseModel):
    """Listing location"""
    state: Optional[str] = None
    local_government: Optional[str] = None
    area: Optional[str] = None


class ListingSummary(BaseModel):
    """Public subset of a listing returned with a match"""
    id: Optional[str] = None
    brief_type: Optional[str] = None
    property_type: Optional[str] = None
    building_type: Optional[str] = None
    price: Optional[float] = None
    location: LocationSummary
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    pictures: List[str] = []
    image: str

    class Config:
        json_schema_extra = {
            "example": {
                "id": "lst-001",
                "brief_type": "Outright Sales",
                "property_type": "Residential",
                "building_type": "Detached Duplex",
                "price": 65000000,
                "location": {"state": "Lagos", "local_government": "Ikeja", "area": "GRA"},
                "bedrooms": 3,
                "bathrooms": 3,
                "pictures": ["https://example.com/lst-001.jpg"],
                "image": "https://example.com/lst-001.jpg"
            }
        }


class ScoreBreakdownResponse(BaseModel):
    """Points earned per criterion on top of the 50 point base"""
    base: int
    location: float
    price: float
    bedrooms: float
    bathrooms: float
    property_type: float
    property_condition: float
    building_type: float
    features: float
    mode_bonus: float
    bonus_total: float
    total: int


class MatchResultResponse(BaseModel):
    """A listing matched to a preference"""
    listing: ListingSummary
    match_score: int = Field(..., ge=50, le=100, alias="matchScore")
    is_priority: bool = Field(..., alias="isPriority")
    score_breakdown: Optional[ScoreBreakdownResponse] = Field(None, alias="scoreBreakdown")

    class Config:
        populate_by_name = True


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        populate_by_name = True


class MatchResponse(BaseModel):
    """Response model for preference matching"""
    data: List[MatchResultResponse]
    pagination: Pagination

    class Config:
        json_schema_extra = {
            "example": {
                "data": [],
                "pagination": {"total": 0, "page": 1, "limit": 10, "totalPages": 0}
            }
        }


class HealthResponse(BaseModel):
    """Response model for health check endpoint"""
    status: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "message": "Property matching API is running"
            }
        }

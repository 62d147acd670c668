from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PLACEHOLDER_IMAGE = "/placeholder-property.jpg"
LOCATION_NOT_INFORMED = "Localização não informada"


class PropertyCategory(str, Enum):
    HOUSE = "House"
    APARTMENT = "Apartment"
    LAND = "Land"
    COMMERCIAL = "Commercial"
    OTHER = "Other"


class ListingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    price_amount: float = Field(ge=0)
    price_display: str = ""
    description: str = ""
    image_url: str = PLACEHOLDER_IMAGE
    source_url: str = ""
    source_name: str
    location_text: str = LOCATION_NOT_INFORMED
    bedroom_count: Optional[int] = Field(default=None, ge=0)
    bathroom_count: Optional[int] = Field(default=None, ge=0)
    parking_count: Optional[int] = Field(default=None, ge=0)
    area_square_meters: Optional[float] = Field(default=None, ge=0)
    category: PropertyCategory = PropertyCategory.OTHER
    neighborhood: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("description"):
            data["description"] = data.get("title") or ""
        if not data.get("image_url"):
            data["image_url"] = PLACEHOLDER_IMAGE
        if not data.get("location_text"):
            data["location_text"] = LOCATION_NOT_INFORMED
        return data

    @property
    def is_valid(self) -> bool:
        return bool(self.title.strip()) and self.price_amount > 0


class QueryFilters(BaseModel):
    """Search constraints. Live sources treat them as hints; the synthetic source applies them exactly."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category: Optional[PropertyCategory] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    min_area: Optional[float] = None
    location: Optional[str] = None
    neighborhoods: List[str] = []

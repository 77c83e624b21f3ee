from typing import List, Optional, Dict
from pydantic import BaseModel, ConfigDict, Field

from listing_stats.parsing import round_half_up


class ListingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str = Field(..., description="district/room bucket, assigned by the caller")
    price_raw: str = ""
    area_raw: str = ""
    price: float = Field(0.0, ge=0, description="whole currency units, 0 = unparseable")
    area: float = Field(0.0, ge=0, description="square meters, 0 = unparseable")
    price_per_area: int = Field(0, ge=0)
    title: str = ""
    address: str = ""
    url: str = ""

    @property
    def is_valid(self) -> bool:
        return self.price > 0 and self.area > 0


class CategoryTotals(BaseModel):
    count: int = 0
    sum_price: float = 0.0
    sum_area: float = 0.0
    sum_price_per_area: float = 0.0


class AggregateSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = Field(..., gt=0)
    avg_price: float
    avg_area: float
    avg_price_per_area: float

    def display(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "avg_price": round_half_up(self.avg_price),
            "avg_area": round_half_up(self.avg_area, 1),
            "avg_price_per_area": round_half_up(self.avg_price_per_area),
        }


class ExtractionResult(BaseModel):
    listings: List[ListingRecord] = []
    articles_count: int = 0
    reported_count: Optional[int] = None


class ExtractRequest(BaseModel):
    html: str
    category: str


class ExtractResponse(ExtractionResult):
    summary: Dict[str, AggregateSummary] = {}


class SummaryRequest(BaseModel):
    listings: List[ListingRecord]

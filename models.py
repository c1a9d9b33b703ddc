# models.py
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union

FAMILIES = ["FLORAL", "WOODY", "ORIENTAL", "FRESH", "FRUITY", "GOURMAND"]
NOTE_TIERS = ["top", "middle", "base"]

ReasonType = Literal["similar_notes", "same_brand", "similar_family", "popular_choice", "complementary"]
FeedbackStatus = Optional[Literal["loved", "rejected"]]

# A note field arrives either comma-joined or already split
NoteInput = Union[str, List[str], None]


def _as_number(value, cast):
    try:
        number = cast(value)
    except (TypeError, ValueError, OverflowError):
        return cast(0)
    if not math.isfinite(number) or number < 0:
        return cast(0)
    return number


class PerfumeNotes(BaseModel):
    top: List[str] = []
    middle: List[str] = []
    base: List[str] = []


class Perfume(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    brand: str = ""
    title: str = ""
    description: str = ""
    year: Optional[Union[int, str]] = None
    img_id: Optional[str] = Field(None, alias="imgId")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    top_notes: NoteInput = None
    middle_notes: NoteInput = None
    base_notes: NoteInput = None
    notes: Optional[PerfumeNotes] = None


class RecommendationSignal(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    similarity_score: float = Field(0.0, alias="similarityScore")
    # kept as a float: the count is compared as sent (6.5 > 6)
    shared_notes: float = Field(0.0, alias="sharedNotes")
    olfactive_profile: Dict[str, float] = Field(default_factory=dict, alias="olfactiveProfile")

    @field_validator("similarity_score", mode="before")
    @classmethod
    def _score(cls, v):
        return _as_number(v, float)

    @field_validator("shared_notes", mode="before")
    @classmethod
    def _shared(cls, v):
        return _as_number(v, float)

    @field_validator("olfactive_profile", mode="before")
    @classmethod
    def _profile(cls, v):
        if not isinstance(v, dict):
            return {}
        return {str(k): _as_number(s, float) for k, s in v.items()}


class RecommendationReason(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: ReasonType
    confidence: float = Field(..., ge=0, le=1)
    details: str
    matching_elements: List[str] = Field(default_factory=list, alias="matchingElements")


class RecommendationItem(BaseModel):
    perfume: Perfume
    signal: RecommendationSignal
    notes: List[Dict[str, Any]] = []  # backend note evidence, passed through untouched


class ExplainedRecommendation(BaseModel):
    perfume: Perfume
    reason: RecommendationReason


class FeedbackData(BaseModel):
    loved: List[str] = []
    rejected: List[str] = []
    timestamp: str = ""


class NoteCount(BaseModel):
    note: str
    count: int


class BrandCount(BaseModel):
    brand: str
    count: int


class YearRange(BaseModel):
    min: int
    max: int


class FeedbackAnalysis(BaseModel):
    top_notes: List[NoteCount] = []
    top_brands: List[BrandCount] = []
    preferred_year_range: Optional[YearRange] = None

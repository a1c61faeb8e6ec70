from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Frequency(str, Enum):
    RARELY = "0-1 times"
    OCCASIONALLY = "2-3 times"
    REGULARLY = "4-6 times"
    OFTEN = "7+ times"


class Club(str, Enum):
    DRIVER = "Driver"
    FAIRWAY_WOOD = "Fairway Wood"
    HYBRID = "Hybrid"
    LONG_IRONS = "Long Irons"
    MID_IRONS = "Mid Irons"
    SHORT_IRONS = "Short Irons"
    WEDGES = "Wedges"
    PUTTER = "Putter"


class AnalysisRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    frequency: Frequency
    age: int
    familiarity: int = Field(ge=1, le=10)
    best_club: Club
    worst_club: Club


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    level: str = Field(min_length=1)
    description: str
    tips: List[str]

    @field_validator("level")
    @classmethod
    def level_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("level must not be blank")
        return v

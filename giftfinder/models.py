import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import INITIAL_CHARACTERISTICS_COUNT, MIN_BUDGET_ABSOLUTE, MAX_BUDGET_ABSOLUTE


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    PREFER_NOT_TO_SAY = "Prefer not to say"


def _blank_characteristics() -> List[str]:
    return [""] * INITIAL_CHARACTERISTICS_COUNT


class FormData(BaseModel):
    """Raw form input. Checked by validation.validate_form before submission."""
    recipient_characteristics: List[str] = Field(default_factory=_blank_characteristics)
    gender: Gender = Gender.PREFER_NOT_TO_SAY
    year_of_birth: str = Field("", description="Free text so invalid input can be reported inline")
    location: str = ""
    min_budget: int = MIN_BUDGET_ABSOLUTE
    max_budget: int = MAX_BUDGET_ABSOLUTE
    occasion: str = ""


def new_suggestion_id() -> str:
    return uuid.uuid4().hex


class GiftSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_suggestion_id)
    name: str
    reason: str
    price: Optional[str] = None


class GroundingSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    title: str


class SuggestionResponse(BaseModel):
    suggestions: List[GiftSuggestion] = Field(default_factory=list)
    sources: List[GroundingSource] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.suggestions and not self.sources

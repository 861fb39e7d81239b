# candidate_ranking/schemas/candidate.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    OPEN = "ampla"
    DISABILITY_RESERVED = "pcd"
    AFFIRMATIVE_ACTION_RESERVED = "ppp"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def label_for(cls, value) -> str:
        """Display label for a stored category value, or the value itself if unknown"""
        try:
            return cls(value).label
        except ValueError:
            return "" if value is None else str(value)


CATEGORY_LABELS = {
    Category.OPEN: "Ampla Concorrência",
    Category.DISABILITY_RESERVED: "PCD",
    Category.AFFIRMATIVE_ACTION_RESERVED: "PPP",
}


class CandidateCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nome", min_length=1)
    score: float = Field(alias="pontuacao")
    category: Category = Field(alias="tipo")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class RestoreRecord(BaseModel):
    """A single candidate from a backup file.

    Only presence of the required fields is enforced; category values are
    stored as given.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nome", min_length=1)
    score: float = Field(alias="pontuacao")
    category: str = Field(alias="tipo", min_length=1)
    region: str = Field(min_length=1)
    timestamp: Optional[str] = None

    @field_validator("name", "region", mode="before")
    def number_as_text(cls, v):
        # Names and region keys sometimes come back from the page as numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("timestamp", mode="before")
    def timestamp_as_text(cls, v):
        # Keep any existing timestamp; only an empty or unusable one gets a fresh stamp
        if v == "" or v is None:
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        if not isinstance(v, str):
            return None
        return v

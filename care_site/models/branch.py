from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegionalDirector(BaseModel):
    """A director listed on a branch row (stored as a JSON sub-record)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    image: Optional[str] = None  # File name under the RDs/ storage folder


class Branch(BaseModel):
    """A branch row from the 'branches' table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str]
    city: str
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    color: Optional[str] = None  # Gradient theme token, e.g. "from-a to-b"
    chapters: List[str] = Field(default_factory=list)
    rds: List[RegionalDirector] = Field(default_factory=list)
    # Explicit flag; when absent the featured city setting decides
    featured: Optional[bool] = None

    @field_validator("chapters", "rds", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

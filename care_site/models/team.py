from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .enums import TeamCategory


class SocialLinks(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    linkedin: Optional[str] = None
    twitter: Optional[str] = None


class TeamMember(BaseModel):
    """A row from the 'team_members' table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str]
    name: str
    position: Optional[str] = None
    category: TeamCategory
    order_rank: Optional[int] = None
    image: Optional[str] = None
    description: Optional[str] = None
    social: Optional[SocialLinks] = None
    university: Optional[str] = None  # Interns only

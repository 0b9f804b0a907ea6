from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .enums import TeamCategory
from .event import Event
from .team import SocialLinks


class BranchView(BaseModel):
    """Render-ready branch card."""

    id: Union[int, str]
    city: str
    slug: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    fallback_image: str
    color: str
    featured: bool = False


class DirectorView(BaseModel):
    name: str
    image: Optional[str] = None
    fallback_image: str


class BranchDetailView(BranchView):
    chapters: List[str] = Field(default_factory=list)
    directors: List[DirectorView] = Field(default_factory=list)


class EventView(BaseModel):
    id: Union[int, str]
    title: str
    description: Optional[str] = None
    storage_prefix: Optional[str] = None
    featured_branch: bool = False

    @classmethod
    def from_event(cls, event: Event, featured_branch: bool = False) -> "EventView":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            storage_prefix=event.storage_prefix,
            featured_branch=featured_branch,
        )


class BranchEventsSection(BaseModel):
    """Events grouped under their branch."""

    branch: BranchView
    events: List[EventView]


class TeamMemberView(BaseModel):
    id: Union[int, str]
    name: str
    position: Optional[str] = None
    category: TeamCategory
    image: Optional[str] = None
    fallback_image: str
    description: Optional[str] = None
    summary: Optional[str] = None  # Truncated description
    expandable: bool = False
    accent: str
    social: Optional[SocialLinks] = None
    university: Optional[str] = None


class TeamSection(BaseModel):
    category: TeamCategory
    title: str
    members: List[TeamMemberView]


class LandingGallery(BaseModel):
    """Images shown in the landing page events strip."""

    section: str
    urls: List[str] = Field(default_factory=list)

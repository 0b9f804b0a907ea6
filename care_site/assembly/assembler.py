"""Merges fetched rows with resolved assets into render-ready view models.

All functions here are pure: no I/O, and source models are never mutated.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from care_site.models.asset import ImageAsset, Slide
from care_site.models.branch import Branch
from care_site.models.enums import EntityKind, TeamCategory
from care_site.models.event import Event
from care_site.models.team import TeamMember
from care_site.models.view import (
    BranchDetailView,
    BranchEventsSection,
    BranchView,
    DirectorView,
    EventView,
    LandingGallery,
    TeamMemberView,
    TeamSection,
)
from care_site.storage.assets import AssetResolver, fallback_image

DEFAULT_COLOR = "from-green-600 to-emerald-500"
DIRECTOR_IMAGE_FOLDER = "RDs"
LANDING_EVENTS_SECTION = "landing.events"
DESCRIPTION_PREVIEW_LENGTH = 100
ACCENT_COLORS = ["green", "emerald", "teal", "sky", "blue", "indigo"]

TEAM_SECTION_TITLES: Dict[TeamCategory, str] = {
    TeamCategory.BOARD: "Board of Directors",
    TeamCategory.RESEARCH: "Research & Design",
    TeamCategory.INTERN: "Interns",
}


def with_default_color(color: Optional[str]) -> str:
    return color or DEFAULT_COLOR


def is_featured(branch: Branch, featured_name: Optional[str]) -> bool:
    """An explicit ``featured`` flag wins; otherwise match the city name."""
    if branch.featured is not None:
        return branch.featured
    if not featured_name:
        return False
    return branch.city.strip().lower() == featured_name.strip().lower()


def pin_featured(branches: Sequence[BranchView]) -> List[BranchView]:
    """Moves the first featured branch to the front, keeping the rest in order."""
    ordered = list(branches)
    for index, branch in enumerate(ordered):
        if branch.featured:
            ordered.insert(0, ordered.pop(index))
            break
    return ordered


def assemble_branch(
    branch: Branch,
    resolver: Optional[AssetResolver] = None,
    featured_name: Optional[str] = None,
) -> BranchView:
    image = resolver.resolve_reference(branch.image) if resolver else branch.image
    return BranchView(
        id=branch.id,
        city=branch.city,
        slug=branch.slug,
        description=branch.description,
        image=image,
        fallback_image=fallback_image(EntityKind.BRANCH),
        color=with_default_color(branch.color),
        featured=is_featured(branch, featured_name),
    )


def assemble_branches(
    branches: Iterable[Branch],
    resolver: Optional[AssetResolver] = None,
    featured_name: Optional[str] = None,
) -> List[BranchView]:
    """Branch cards in store order with the featured branch pinned first."""
    views = [assemble_branch(b, resolver, featured_name) for b in branches]
    return pin_featured(views)


def assemble_branch_detail(
    branch: Branch,
    resolver: AssetResolver,
    featured_name: Optional[str] = None,
) -> BranchDetailView:
    card = assemble_branch(branch, resolver, featured_name)
    directors = [
        DirectorView(
            name=rd.name,
            image=resolver.resolve_reference(rd.image, DIRECTOR_IMAGE_FOLDER),
            fallback_image=fallback_image(EntityKind.GENERIC),
        )
        for rd in branch.rds
    ]
    return BranchDetailView(
        **card.model_dump(), chapters=list(branch.chapters), directors=directors
    )


def group_events_by_branch(
    branches: Sequence[BranchView],
    events: Iterable[Event],
    active_branch_id: Optional[Union[int, str]] = None,
) -> List[BranchEventsSection]:
    """
    Groups events under their branches.

    Sections follow the order of ``branches``; events keep the order they were
    fetched in. Branches without events are left out, as are events whose
    branch is not in ``branches``. With ``active_branch_id`` set only that
    branch's section can appear.
    """
    by_branch: Dict[Union[int, str], List[Event]] = {}
    for event in events:
        by_branch.setdefault(event.branch_id, []).append(event)

    sections = []
    for branch in branches:
        if active_branch_id is not None and branch.id != active_branch_id:
            continue
        branch_events = by_branch.get(branch.id, [])
        if not branch_events:
            continue
        sections.append(
            BranchEventsSection(
                branch=branch,
                events=[EventView.from_event(e, branch.featured) for e in branch_events],
            )
        )

    orphaned = set(by_branch) - {b.id for b in branches}
    if orphaned:
        logger.debug(f"Events reference unknown branches: {sorted(map(str, orphaned))}")
    return sections


def truncate_text(text: Optional[str], max_length: int = DESCRIPTION_PREVIEW_LENGTH):
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def assemble_team_member(
    member: TeamMember, index: int, resolver: Optional[AssetResolver] = None
) -> TeamMemberView:
    image = resolver.resolve_reference(member.image) if resolver else member.image
    return TeamMemberView(
        id=member.id,
        name=member.name,
        position=member.position,
        category=member.category,
        image=image,
        fallback_image=fallback_image(EntityKind.TEAM),
        description=member.description,
        summary=truncate_text(member.description),
        expandable=bool(
            member.description
            and len(member.description) > DESCRIPTION_PREVIEW_LENGTH
        ),
        accent=ACCENT_COLORS[index % len(ACCENT_COLORS)],
        social=member.social,
        university=member.university,
    )


def build_team_section(
    category: TeamCategory,
    members: Sequence[TeamMember],
    resolver: Optional[AssetResolver] = None,
) -> Optional[TeamSection]:
    """A roster section, or None when the category has no members."""
    if not members:
        return None
    return TeamSection(
        category=category,
        title=TEAM_SECTION_TITLES[category],
        members=[assemble_team_member(m, i, resolver) for i, m in enumerate(members)],
    )


def build_team_sections(
    members_by_category: Dict[TeamCategory, Sequence[TeamMember]],
    resolver: Optional[AssetResolver] = None,
) -> List[TeamSection]:
    sections = []
    for category in TeamCategory:
        section = build_team_section(
            category, members_by_category.get(category, []), resolver
        )
        if section is not None:
            sections.append(section)
    return sections


def build_slides(title: str, images: Sequence[ImageAsset]) -> List[Slide]:
    return [Slide(src=image.url, alt=f"{title} - {image.name}") for image in images]


def assemble_landing_gallery(
    rows: Iterable[dict],
    resolver: AssetResolver,
    section: str = LANDING_EVENTS_SECTION,
) -> LandingGallery:
    """
    Resolves the file ids listed on the ``data`` row for ``section``.

    Ids that cannot be resolved are dropped; the rest keep their position.
    """
    row = next((r for r in rows if r.get("section") == section), None)
    if row is None:
        logger.warning(f"No '{section}' row found in data table.")
        return LandingGallery(section=section)

    urls = []
    for file_id in row.get("file_ids") or []:
        url = resolver.resolve_reference(file_id) if isinstance(file_id, str) else None
        if url is None:
            logger.debug(f"Skipping unresolvable file id {file_id!r}")
            continue
        urls.append(url)
    return LandingGallery(section=section, urls=urls)

import asyncio
from typing import Dict, List

from care_site.assembly.assembler import build_team_sections
from care_site.models.enums import EntityKind, TeamCategory, ViewState
from care_site.models.team import TeamMember
from care_site.models.view import TeamSection
from care_site.pages.base import Page, PageContext, parse_rows, require_rows
from care_site.shell.state import Section
from care_site.storage.records import RowFilter, RowOrder, fetch_rows

# Board members follow an explicit rank; everyone else is alphabetical
CATEGORY_ORDER: Dict[TeamCategory, RowOrder] = {
    TeamCategory.BOARD: RowOrder("order_rank"),
    TeamCategory.RESEARCH: RowOrder("name"),
    TeamCategory.INTERN: RowOrder("name"),
}


class TeamPage(Page):
    title = "Our Team"

    def __init__(self, ctx: PageContext):
        super().__init__(ctx)
        self.categories: Dict[TeamCategory, Section[List[TeamMember]]] = {}
        for category in TeamCategory:
            self.categories[category] = self.add_section(
                Section(f"team:{category.value}", self._loader_for(category))
            )

    def _loader_for(self, category: TeamCategory):
        async def load() -> List[TeamMember]:
            result = await fetch_rows(
                self.ctx.supabase_client,
                "team_members",
                where=RowFilter("category", category.value),
                order=CATEGORY_ORDER[category],
            )
            return parse_rows(TeamMember, require_rows(result), "team_members")

        return load

    async def visible_sections(self) -> List[TeamSection]:
        """Roster sections that loaded with members; empty ones are left out."""
        loaded = {
            category: section.data
            for category, section in self.categories.items()
            if section.state == ViewState.SUCCESS
        }
        sections = build_team_sections(loaded, self.ctx.resolver)
        for section in sections:
            images = await asyncio.gather(
                *(
                    self.ctx.checked_image(m.image, EntityKind.TEAM)
                    for m in section.members
                )
            )
            section.members = [
                m.model_copy(update={"image": img})
                for m, img in zip(section.members, images)
            ]
        return sections

import asyncio
from typing import List

from care_site.assembly.assembler import assemble_branch_detail, assemble_branches
from care_site.errors import NotFound
from care_site.models.branch import Branch
from care_site.models.enums import EntityKind
from care_site.models.view import BranchDetailView, BranchView
from care_site.pages.base import Page, PageContext, parse_rows, require_rows
from care_site.shell.state import Section
from care_site.storage.records import RowOrder, fetch_one, fetch_rows

BRANCHES_PATH = "/branches"


class BranchesPage(Page):
    """Branch directory: every branch, featured branch first."""

    title = "Our Branches"

    def __init__(self, ctx: PageContext):
        super().__init__(ctx)
        self.branches = self.add_section(Section("branches", self._load_branches))

    async def _load_branches(self) -> List[BranchView]:
        result = await fetch_rows(
            self.ctx.supabase_client, "branches", order=RowOrder("city")
        )
        branches = parse_rows(Branch, require_rows(result), "branches")
        views = assemble_branches(branches, self.ctx.resolver, self.ctx.featured_branch)
        images = await asyncio.gather(
            *(self.ctx.checked_image(v.image, EntityKind.BRANCH) for v in views)
        )
        return [v.model_copy(update={"image": img}) for v, img in zip(views, images)]


class BranchDetailPage(Page):
    """One branch looked up by its slug."""

    title = "Branch"

    def __init__(self, ctx: PageContext, slug: str):
        super().__init__(ctx)
        self.slug = slug
        self.back_link = BRANCHES_PATH
        self.branch = self.add_section(Section(f"branch:{slug}", self._load_branch))

    async def _load_branch(self) -> BranchDetailView:
        result = await fetch_one(self.ctx.supabase_client, "branches", "slug", self.slug)
        branches = parse_rows(Branch, require_rows(result), "branches")
        if not branches:
            raise NotFound("branches", "slug", self.slug)

        view = assemble_branch_detail(
            branches[0], self.ctx.resolver, self.ctx.featured_branch
        )
        image = await self.ctx.checked_image(view.image, EntityKind.BRANCH)
        director_images = await asyncio.gather(
            *(
                self.ctx.checked_image(d.image, EntityKind.GENERIC)
                for d in view.directors
            )
        )
        directors = [
            d.model_copy(update={"image": img})
            for d, img in zip(view.directors, director_images)
        ]
        return view.model_copy(update={"image": image, "directors": directors})

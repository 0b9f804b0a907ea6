import asyncio

from care_site.assembly.assembler import assemble_landing_gallery
from care_site.models.enums import EntityKind
from care_site.models.view import LandingGallery
from care_site.pages.base import Page, PageContext, require_rows
from care_site.shell.state import Section
from care_site.storage.records import fetch_rows


class LandingPage(Page):
    title = "Home"

    def __init__(self, ctx: PageContext):
        super().__init__(ctx)
        self.gallery = self.add_section(Section("landing.events", self._load_gallery))

    async def _load_gallery(self) -> LandingGallery:
        result = await fetch_rows(
            self.ctx.supabase_client, "data", columns="section, file_ids"
        )
        gallery = assemble_landing_gallery(require_rows(result), self.ctx.resolver)
        urls = await asyncio.gather(
            *(self.ctx.checked_image(url, EntityKind.GENERIC) for url in gallery.urls)
        )
        return gallery.model_copy(update={"urls": list(urls)})

import asyncio
from typing import Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field

from care_site.assembly.assembler import (
    assemble_branches,
    build_slides,
    group_events_by_branch,
)
from care_site.models.asset import ImageAsset, Slide
from care_site.models.branch import Branch
from care_site.models.enums import ViewState
from care_site.models.event import Event
from care_site.models.view import BranchEventsSection, BranchView, EventView
from care_site.pages.base import Page, PageContext, parse_rows, require_rows
from care_site.shell.state import Lightbox, Section
from care_site.storage.assets import AssetResolver
from care_site.storage.records import RowOrder, fetch_rows


class EventsListing(BaseModel):
    """Branches and events as fetched, before tab filtering."""

    branches: List[BranchView] = Field(default_factory=list)
    events: List[Event] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.events)


class EventCard:
    """An event and its photo listing, which loads after the card appears."""

    def __init__(self, event: EventView, resolver: AssetResolver):
        self.event = event
        self.resolver = resolver
        self.section: Section[List[ImageAsset]] = Section(
            f"images:{event.id}", self._list_images
        )

    async def _list_images(self) -> List[ImageAsset]:
        return await self.resolver.list_images(self.event.storage_prefix)

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def images_ready(self) -> bool:
        return self.section.state in (ViewState.SUCCESS, ViewState.EMPTY)

    @property
    def images(self) -> List[ImageAsset]:
        return self.section.data or []

    @property
    def slides(self) -> List[Slide]:
        return build_slides(self.event.title, self.images)

    async def load(self) -> bool:
        return await self.section.load()


class EventsPage(Page):
    """Events grouped by branch, each card with its own photo gallery."""

    title = "Events"

    def __init__(
        self, ctx: PageContext, active_branch_id: Optional[Union[int, str]] = None
    ):
        super().__init__(ctx)
        self.active_branch_id = active_branch_id
        self.cards: Dict[Union[int, str], EventCard] = {}
        self.lightbox = Lightbox()
        self.listing: Section[EventsListing] = self.add_section(
            Section("events", self._load_listing)
        )

    async def _load_listing(self) -> EventsListing:
        branches_result, events_result = await asyncio.gather(
            fetch_rows(self.ctx.supabase_client, "branches", order=RowOrder("city")),
            fetch_rows(self.ctx.supabase_client, "events", order=RowOrder("title")),
        )
        branches = parse_rows(Branch, require_rows(branches_result), "branches")
        events = parse_rows(Event, require_rows(events_result), "events")
        return EventsListing(
            branches=assemble_branches(
                branches, self.ctx.resolver, self.ctx.featured_branch
            ),
            events=events,
        )

    @property
    def tabs(self) -> List[BranchView]:
        """Branch filter tabs, featured branch first."""
        return self.listing.data.branches if self.listing.data else []

    async def select_branch(self, branch_id: Optional[Union[int, str]]) -> None:
        """Switches the tab filter (None shows all branches).

        Cards that become visible list their photos before this returns.
        """
        self.active_branch_id = branch_id
        await self.load_cards()

    def visible_sections(self) -> List[BranchEventsSection]:
        if self.listing.state != ViewState.SUCCESS or self.listing.data is None:
            return []
        return group_events_by_branch(
            self.listing.data.branches, self.listing.data.events, self.active_branch_id
        )

    @property
    def visible_state(self) -> ViewState:
        """Page state after tab filtering: success can narrow to empty."""
        if self.listing.state == ViewState.SUCCESS and not self.visible_sections():
            return ViewState.EMPTY
        return self.listing.state

    def card_for(self, event: EventView) -> EventCard:
        card = self.cards.get(event.id)
        if card is None:
            card = EventCard(event, self.ctx.resolver)
            self.cards[event.id] = card
        return card

    async def load_cards(self) -> None:
        """Lists photos for every visible card not loaded yet, concurrently."""
        pending = []
        for section in self.visible_sections():
            for event in section.events:
                card = self.card_for(event)
                if card.section.generation == 0:
                    pending.append(card)
        if pending:
            logger.debug(f"Listing images for {len(pending)} event cards")
            await asyncio.gather(*(card.load() for card in pending))

    async def mount(self) -> None:
        await super().mount()
        await self.load_cards()

    async def retry_failed(self) -> None:
        await super().retry_failed()
        await self.load_cards()

    async def retry_card(self, event_id: Union[int, str]) -> bool:
        return await self.cards[event_id].section.retry()

    def open_lightbox(self, event_id: Union[int, str], index: int = 0) -> None:
        self.lightbox.open_for(self.cards[event_id], index)

    def teardown(self) -> None:
        super().teardown()
        for card in self.cards.values():
            card.section.teardown()

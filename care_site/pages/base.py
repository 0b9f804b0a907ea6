import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError
from supabase import AsyncClient

from care_site.config.settings import AppSettings
from care_site.errors import FetchFailed
from care_site.models.enums import EntityKind, ViewState
from care_site.shell.state import Section
from care_site.storage.assets import AssetResolver, FolderListingCache, probe_image
from care_site.storage.records import FetchResult

M = TypeVar("M", bound=BaseModel)


@dataclass
class PageContext:
    """Collaborators shared by the pages of one session."""

    supabase_client: Optional[AsyncClient]
    resolver: AssetResolver
    featured_branch: Optional[str] = None
    # Only set when image URLs should be verified before rendering
    http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        supabase_client: Optional[AsyncClient],
        settings: AppSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "PageContext":
        resolver = AssetResolver(
            supabase_client,
            settings.supabase_url,
            settings.storage_bucket,
            cache=FolderListingCache(settings.asset_cache_ttl_seconds),
        )
        return cls(
            supabase_client=supabase_client,
            resolver=resolver,
            featured_branch=settings.featured_branch,
            http_client=http_client if settings.verify_images else None,
        )

    async def checked_image(self, url: Optional[str], kind: EntityKind) -> Optional[str]:
        """Swaps an unreachable image for its placeholder when verification is on."""
        if self.http_client is None:
            return url
        return await probe_image(self.http_client, url, kind)


def require_rows(result: FetchResult) -> List[Dict[str, Any]]:
    """Unwraps a fetch result, raising FetchFailed if it carries an error."""
    if not result.ok:
        raise FetchFailed(result.collection, result.error)
    return result.rows


def parse_rows(model: Type[M], rows: List[Dict[str, Any]], collection: str) -> List[M]:
    """Validates rows into models, dropping (and logging) malformed ones."""
    parsed = []
    for index, row in enumerate(rows):
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {collection} row #{index} (id={row.get('id')}): "
                f"{e.error_count()} validation errors"
            )
    return parsed


class Page:
    """A set of sections mounted together and settling independently."""

    title: str = ""

    def __init__(self, ctx: PageContext):
        self.ctx = ctx
        self.sections: List[Section] = []

    def add_section(self, section: Section) -> Section:
        self.sections.append(section)
        return section

    async def mount(self) -> None:
        logger.info(f"Mounting page '{self.title}' ({len(self.sections)} sections)")
        await asyncio.gather(*(section.load() for section in self.sections))

    @property
    def failed_sections(self) -> List[Section]:
        return [s for s in self.sections if s.state == ViewState.ERROR]

    async def retry_failed(self) -> None:
        """Re-runs failed sections only."""
        await asyncio.gather(*(section.retry() for section in self.failed_sections))

    def teardown(self) -> None:
        for section in self.sections:
            section.teardown()

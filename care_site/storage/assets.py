"""Public URL resolution and folder listings for the Supabase storage bucket."""

import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

import httpx
from loguru import logger
from supabase import AsyncClient

from care_site.errors import AssetListFailed, ImageLoadFailed
from care_site.models.asset import ImageAsset
from care_site.models.enums import EntityKind

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")

FALLBACK_IMAGES: Dict[EntityKind, str] = {
    EntityKind.BRANCH: "/branch-placeholder.png",
    EntityKind.TEAM: "/team-placeholder.png",
    EntityKind.GENERIC: "/avatar-placeholder.png",
}


def fallback_image(kind: EntityKind) -> str:
    return FALLBACK_IMAGES[kind]


def public_url(base_url: str, bucket: str, path: str) -> str:
    """Builds the public object URL. Pure; the object may still 404 when fetched."""
    return (
        f"{base_url.rstrip('/')}/storage/v1/object/public/{bucket}/"
        f"{quote(path.lstrip('/'), safe='/')}"
    )


def filter_image_names(names: Iterable[str]) -> List[str]:
    """Keeps image files only, dropping folder markers, sorted by name."""
    return sorted(
        name
        for name in names
        if name
        and not name.endswith("/")
        and name.endswith(IMAGE_EXTENSIONS)
    )


class FolderListingCache:
    """Folder listings keyed by prefix, expiring after ``ttl_seconds``.

    A ttl of 0 disables caching. ``invalidate``/``clear`` force a refresh.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, List[str]]] = {}

    def get(self, prefix: str) -> Optional[List[str]]:
        entry = self._entries.get(prefix)
        if entry is None:
            return None
        stored_at, names = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[prefix]
            return None
        return list(names)

    def put(self, prefix: str, names: List[str]) -> None:
        if self.ttl_seconds <= 0:
            return
        self._entries[prefix] = (self._clock(), list(names))

    def invalidate(self, prefix: str) -> None:
        self._entries.pop(prefix, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class AssetResolver:
    """Resolves stored paths to public URLs and lists bucket folders."""

    def __init__(
        self,
        supabase_client: Optional[AsyncClient],
        base_url: str,
        bucket: str = "images",
        cache: Optional[FolderListingCache] = None,
    ):
        self.client = supabase_client
        self.base_url = base_url
        self.bucket = bucket
        self.cache = cache

    def resolve(self, path: str) -> str:
        return public_url(self.base_url, self.bucket, path)

    def resolve_reference(self, ref: Optional[str], folder: str = "") -> Optional[str]:
        """Resolves a stored image reference.

        Absolute URLs and site-local paths (``/…``) pass through unchanged; a
        bare object name is resolved under ``folder``.
        """
        if not ref:
            return None
        if ref.startswith(("http://", "https://", "/")):
            return ref
        if folder:
            return self.resolve(f"{folder.strip('/')}/{ref}")
        return self.resolve(ref)

    async def list_folder(self, prefix: Optional[str]) -> List[str]:
        """Lists object names directly under ``prefix``, sorted by name.

        Raises:
            AssetListFailed: the storage service returned an error.
        """
        if not prefix:
            return []

        if self.cache is not None:
            cached = self.cache.get(prefix)
            if cached is not None:
                logger.debug(f"Listing cache hit for '{prefix}' ({len(cached)} objects)")
                return cached

        if not self.client:
            raise AssetListFailed(prefix, "Storage service is not available")

        try:
            items = await self.client.storage.from_(self.bucket).list(
                prefix, {"sortBy": {"column": "name", "order": "asc"}}
            )
        except Exception as e:
            logger.error(f"Error listing storage folder '{prefix}': {e}")
            raise AssetListFailed(prefix) from e

        names = sorted(item.get("name", "") for item in items or [])
        logger.debug(f"Listed {len(names)} objects under '{prefix}'")
        if self.cache is not None:
            self.cache.put(prefix, names)
        return names

    async def list_images(self, prefix: Optional[str]) -> List[ImageAsset]:
        """Image files under ``prefix`` with their public URLs."""
        names = filter_image_names(await self.list_folder(prefix))
        assets = []
        for name in names:
            path = f"{prefix.rstrip('/')}/{name}"
            assets.append(ImageAsset(name=name, path=path, url=self.resolve(path)))
        return assets


async def check_image(http_client: httpx.AsyncClient, url: str) -> None:
    """Raises ImageLoadFailed unless ``url`` answers a HEAD request."""
    try:
        response = await http_client.head(url, follow_redirects=True)
    except httpx.RequestError as e:
        raise ImageLoadFailed(f"Request for {url} failed: {e}") from e
    if response.status_code >= 400:
        raise ImageLoadFailed(f"{url} returned {response.status_code}")


async def probe_image(
    http_client: httpx.AsyncClient, url: Optional[str], kind: EntityKind
) -> str:
    """Returns ``url`` if it loads, otherwise the placeholder for ``kind``."""
    if not url:
        return fallback_image(kind)
    if url.startswith("/"):
        # Site-local assets are served alongside the pages
        return url
    try:
        await check_image(http_client, url)
    except ImageLoadFailed as e:
        logger.debug(f"{e}; using {kind.value} placeholder")
        return fallback_image(kind)
    return url

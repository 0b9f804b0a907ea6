from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from care_site.errors import AssetListFailed
from care_site.models.enums import EntityKind
from care_site.storage.assets import (
    AssetResolver,
    FolderListingCache,
    fallback_image,
    filter_image_names,
    probe_image,
    public_url,
)
from conftest import SUPABASE_URL, FakeSupabase


def test_resolve_builds_public_url():
    resolver = AssetResolver(None, SUPABASE_URL, "images")
    assert (
        resolver.resolve("events/gala/a.jpg")
        == "https://demo.supabase.co/storage/v1/object/public/images/events/gala/a.jpg"
    )


def test_resolve_is_idempotent_and_quotes_spaces():
    resolver = AssetResolver(None, SUPABASE_URL + "/", "images")
    first = resolver.resolve("RDs/Jane Doe.png")
    assert first == resolver.resolve("RDs/Jane Doe.png")
    assert first.endswith("/images/RDs/Jane%20Doe.png")


def test_public_url_strips_leading_slash():
    assert public_url("https://x.co", "b", "/a.png") == (
        "https://x.co/storage/v1/object/public/b/a.png"
    )


def test_resolve_reference_passes_through_absolute_and_local():
    resolver = AssetResolver(None, SUPABASE_URL, "images")
    assert resolver.resolve_reference("https://cdn.test/x.jpg") == "https://cdn.test/x.jpg"
    assert resolver.resolve_reference("/images/branch-ny.jpg") == "/images/branch-ny.jpg"
    assert resolver.resolve_reference("") is None
    assert resolver.resolve_reference("jane.png", "RDs").endswith("/images/RDs/jane.png")


def test_filter_image_names_scenario():
    assert filter_image_names(["b.png", "a.jpg", "notes/", "c.txt"]) == ["a.jpg", "b.png"]


def test_filter_image_names_accepts_every_extension():
    names = ["d.gif", "c.jpeg", "folder.png/", "readme.md", "a.jpg"]
    assert filter_image_names(names) == ["a.jpg", "c.jpeg", "d.gif"]


@pytest.mark.asyncio
async def test_list_folder_sorts_and_passes_sort_option():
    client = FakeSupabase(folders={"events/123": ["b.png", "a.jpg", "notes/", "c.txt"]})
    resolver = AssetResolver(client, SUPABASE_URL)

    names = await resolver.list_folder("events/123")

    assert names == ["a.jpg", "b.png", "c.txt", "notes/"]
    bucket, path, options = client.listed[0]
    assert (bucket, path) == ("images", "events/123")
    assert options == {"sortBy": {"column": "name", "order": "asc"}}


@pytest.mark.asyncio
async def test_list_images_filters_and_resolves():
    client = FakeSupabase(folders={"events/123": ["b.png", "a.jpg", "notes/", "c.txt"]})
    resolver = AssetResolver(client, SUPABASE_URL)

    assets = await resolver.list_images("events/123")

    assert [a.name for a in assets] == ["a.jpg", "b.png"]
    assert assets[0].path == "events/123/a.jpg"
    assert assets[0].url == resolver.resolve("events/123/a.jpg")


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", [None, ""])
async def test_empty_prefix_short_circuits(prefix):
    client = FakeSupabase()
    resolver = AssetResolver(client, SUPABASE_URL)

    assert await resolver.list_folder(prefix) == []
    assert await resolver.list_images(prefix) == []
    assert client.listed == []


@pytest.mark.asyncio
async def test_listing_error_raises_asset_list_failed():
    client = FakeSupabase(folders={"events/bad": RuntimeError("500")})
    resolver = AssetResolver(client, SUPABASE_URL)

    with pytest.raises(AssetListFailed) as exc_info:
        await resolver.list_folder("events/bad")
    assert exc_info.value.prefix == "events/bad"
    assert str(exc_info.value) == "Failed to load images"


@pytest.mark.asyncio
async def test_cache_serves_repeat_listings_until_invalidated():
    now = [0.0]
    cache = FolderListingCache(60, clock=lambda: now[0])
    client = FakeSupabase(folders={"events/1": ["a.jpg"]})
    resolver = AssetResolver(client, SUPABASE_URL, cache=cache)

    await resolver.list_folder("events/1")
    await resolver.list_folder("events/1")
    assert len(client.listed) == 1

    cache.invalidate("events/1")
    await resolver.list_folder("events/1")
    assert len(client.listed) == 2

    now[0] = 61.0
    await resolver.list_folder("events/1")
    assert len(client.listed) == 3


def test_cache_with_zero_ttl_stores_nothing():
    cache = FolderListingCache(0)
    cache.put("events/1", ["a.jpg"])
    assert cache.get("events/1") is None
    assert len(cache) == 0


def test_cache_returns_copies():
    cache = FolderListingCache(60)
    cache.put("p", ["a.jpg"])
    cache.get("p").append("x.jpg")
    assert cache.get("p") == ["a.jpg"]


def test_fallbacks_differ_per_kind():
    fallbacks = {fallback_image(kind) for kind in EntityKind}
    assert len(fallbacks) == 3
    assert fallback_image(EntityKind.TEAM) == "/team-placeholder.png"


@pytest.mark.asyncio
async def test_probe_image_substitutes_fallback_on_404():
    http_client = MagicMock()
    http_client.head = AsyncMock(return_value=httpx.Response(404))

    url = await probe_image(http_client, "https://x.co/missing.png", EntityKind.BRANCH)

    assert url == "/branch-placeholder.png"


@pytest.mark.asyncio
async def test_probe_image_substitutes_fallback_on_request_error():
    http_client = MagicMock()
    http_client.head = AsyncMock(side_effect=httpx.ConnectError("refused"))

    url = await probe_image(http_client, "https://x.co/a.png", EntityKind.TEAM)

    assert url == "/team-placeholder.png"


@pytest.mark.asyncio
async def test_probe_image_keeps_working_and_local_urls():
    http_client = MagicMock()
    http_client.head = AsyncMock(return_value=httpx.Response(200))

    assert await probe_image(http_client, "https://x.co/a.png", EntityKind.GENERIC) == (
        "https://x.co/a.png"
    )
    assert await probe_image(http_client, "/local.png", EntityKind.GENERIC) == "/local.png"
    assert await probe_image(http_client, None, EntityKind.GENERIC) == (
        "/avatar-placeholder.png"
    )
    assert http_client.head.await_count == 1

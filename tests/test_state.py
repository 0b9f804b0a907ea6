import asyncio

import pytest

from care_site.errors import AssetsNotReady, FetchFailed, NotFound
from care_site.models.asset import Slide
from care_site.models.enums import ViewState
from care_site.shell.state import Lightbox, Section


@pytest.mark.asyncio
async def test_section_success_and_empty():
    section = Section("rows", lambda: asyncio.sleep(0, result=[1, 2]))
    assert section.state == ViewState.LOADING

    assert await section.load()
    assert section.state == ViewState.SUCCESS
    assert section.data == [1, 2]

    empty = Section("rows", lambda: asyncio.sleep(0, result=[]))
    await empty.load()
    assert empty.state == ViewState.EMPTY


@pytest.mark.asyncio
async def test_section_maps_errors_to_states():
    async def failing():
        raise FetchFailed("branches", "Failed to load branches")

    async def missing():
        raise NotFound("branches", "slug", "nope")

    async def broken():
        raise KeyError("surprise")

    errored = Section("a", failing)
    await errored.load()
    assert errored.state == ViewState.ERROR
    assert errored.error == "Failed to load branches"

    not_found = Section("b", missing)
    await not_found.load()
    assert not_found.state == ViewState.NOT_FOUND

    unexpected = Section("c", broken)
    await unexpected.load()
    assert unexpected.state == ViewState.ERROR
    assert unexpected.error == "An unexpected error occurred"


@pytest.mark.asyncio
async def test_late_result_from_older_generation_is_ignored():
    release_first = asyncio.Event()
    calls = []

    async def loader():
        calls.append(len(calls))
        if len(calls) == 1:
            await release_first.wait()
            return ["stale"]
        return ["fresh"]

    section = Section("rows", loader)
    first = asyncio.create_task(section.load())
    await asyncio.sleep(0)
    assert await section.load()
    release_first.set()

    assert await first is False
    assert section.data == ["fresh"]
    assert section.generation == 2


@pytest.mark.asyncio
async def test_result_after_teardown_is_ignored():
    gate = asyncio.Event()

    async def loader():
        await gate.wait()
        return ["late"]

    section = Section("rows", loader)
    task = asyncio.create_task(section.load())
    await asyncio.sleep(0)
    section.teardown()
    gate.set()

    assert await task is False
    assert section.data is None
    assert section.state == ViewState.LOADING


@pytest.mark.asyncio
async def test_retry_reruns_only_that_section():
    attempts = {"a": 0, "b": 0}

    async def flaky():
        attempts["a"] += 1
        if attempts["a"] == 1:
            raise FetchFailed("a", "down")
        return ["ok"]

    async def steady():
        attempts["b"] += 1
        return ["ok"]

    a, b = Section("a", flaky), Section("b", steady)
    await asyncio.gather(a.load(), b.load())
    assert a.state == ViewState.ERROR and b.state == ViewState.SUCCESS

    await a.retry()

    assert a.state == ViewState.SUCCESS
    assert attempts == {"a": 2, "b": 1}


class FakeCard:
    title = "Gala"

    def __init__(self, ready, slides):
        self.images_ready = ready
        self.slides = slides


def test_lightbox_requires_loaded_card():
    lightbox = Lightbox()
    with pytest.raises(AssetsNotReady):
        lightbox.open_for(FakeCard(False, []), 0)
    assert not lightbox.open


def test_lightbox_navigation_wraps():
    slides = [Slide(src=f"https://u/{i}.jpg", alt=str(i)) for i in range(3)]
    lightbox = Lightbox()

    lightbox.open_for(FakeCard(True, slides), 2)
    assert lightbox.current.src == "https://u/2.jpg"
    assert lightbox.next() == 0
    assert lightbox.previous() == 2

    lightbox.close()
    assert lightbox.current is None


def test_lightboxes_are_independent():
    slides = [Slide(src="https://u/0.jpg", alt="0")]
    first, second = Lightbox(), Lightbox()
    first.show(slides)
    assert first.open and not second.open
    assert second.slides == []

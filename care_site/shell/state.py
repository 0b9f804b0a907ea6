"""Fetch state for page sections and the image lightbox.

A page is made of sections that each load once on mount and settle on their
own: one section failing never touches another. Retrying re-runs only the
failed section's loader.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sized, TypeVar

from loguru import logger

from care_site.errors import AssetsNotReady, FetchFailed, NotFound, SiteDataError
from care_site.models.asset import Slide
from care_site.models.enums import ViewState

T = TypeVar("T")


class Section(Generic[T]):
    """One independently loading block of a page.

    The loader returns the section's data or raises ``FetchFailed`` /
    ``NotFound``. Each ``load`` takes a new generation number; a result that
    arrives for an older generation, or after ``teardown``, is discarded.
    """

    def __init__(self, name: str, loader: Callable[[], Awaitable[T]]):
        self.name = name
        self._loader = loader
        self._generation = 0
        self._torn_down = False
        self.state: ViewState = ViewState.LOADING
        self.data: Optional[T] = None
        self.error: Optional[str] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def settled(self) -> bool:
        return self.state != ViewState.LOADING

    async def load(self) -> bool:
        """Runs the loader. Returns False if the result was discarded."""
        self._generation += 1
        generation = self._generation
        self.state = ViewState.LOADING
        self.error = None

        data: Optional[T] = None
        error: Optional[str] = None
        try:
            data = await self._loader()
            if isinstance(data, Sized) and len(data) == 0:
                state = ViewState.EMPTY
            else:
                state = ViewState.SUCCESS
        except NotFound as e:
            logger.info(f"Section '{self.name}': {e}")
            state, error = ViewState.NOT_FOUND, str(e)
        except FetchFailed as e:
            logger.warning(f"Section '{self.name}' failed: {e.message}")
            state, error = ViewState.ERROR, e.message
        except SiteDataError as e:
            logger.warning(f"Section '{self.name}' failed: {e}")
            state, error = ViewState.ERROR, str(e)
        except Exception as e:
            logger.exception(f"Unexpected error loading section '{self.name}': {e}")
            state, error = ViewState.ERROR, "An unexpected error occurred"

        if self._torn_down or generation != self._generation:
            logger.debug(
                f"Discarding stale result for '{self.name}' (generation {generation})"
            )
            return False

        self.state, self.data, self.error = state, data, error
        return True

    async def retry(self) -> bool:
        """Re-runs this section only; sibling sections keep their state."""
        logger.info(f"Retrying section '{self.name}'")
        return await self.load()

    def teardown(self) -> None:
        self._torn_down = True


@dataclass
class Lightbox:
    """Image overlay state, owned by a single page instance."""

    open: bool = False
    index: int = 0
    slides: List[Slide] = field(default_factory=list)

    def show(self, slides: List[Slide], index: int = 0) -> None:
        if not slides:
            raise AssetsNotReady("No slides to show")
        self.slides = list(slides)
        self.index = max(0, min(index, len(self.slides) - 1))
        self.open = True

    def open_for(self, card: Any, index: int = 0) -> None:
        """Opens on a card's images; the card must have finished listing them."""
        if not card.images_ready:
            raise AssetsNotReady(f"Images for '{card.title}' are not loaded yet")
        self.show(card.slides, index)

    def next(self) -> int:
        if self.slides:
            self.index = (self.index + 1) % len(self.slides)
        return self.index

    def previous(self) -> int:
        if self.slides:
            self.index = (self.index - 1) % len(self.slides)
        return self.index

    @property
    def current(self) -> Optional[Slide]:
        if not self.open or not self.slides:
            return None
        return self.slides[self.index]

    def close(self) -> None:
        self.open = False

from pydantic import BaseModel, ConfigDict


class ImageAsset(BaseModel):
    """A storage object and its public URL. Derived per listing, never stored."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str  # Full object path inside the bucket
    url: str


class Slide(BaseModel):
    """One lightbox slide."""

    model_config = ConfigDict(frozen=True)

    src: str
    alt: str
    width: int = 1600
    height: int = 900

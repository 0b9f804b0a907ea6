class SiteDataError(Exception):
    """Base exception for data-layer errors."""

    pass


class FetchFailed(SiteDataError):
    """A row query against a collection returned an error or was rejected."""

    def __init__(self, collection: str, message: str):
        super().__init__(message)
        self.collection = collection
        self.message = message


class NotFound(SiteDataError):
    """A detail lookup matched no row."""

    def __init__(self, collection: str, field: str, value: str):
        super().__init__(f"No {collection} row with {field}={value!r}")
        self.collection = collection
        self.field = field
        self.value = value


class AssetListFailed(SiteDataError):
    """Listing a storage folder failed. Scoped to the card that asked."""

    def __init__(self, prefix: str, message: str = "Failed to load images"):
        super().__init__(message)
        self.prefix = prefix
        self.message = message


class ImageLoadFailed(SiteDataError):
    """An image URL did not load; replaced with a fallback, never shown."""

    pass


class AssetsNotReady(SiteDataError):
    """The lightbox was opened before the card's images were listed."""

    pass

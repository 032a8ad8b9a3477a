"""Exception hierarchy for the niche radar pipeline."""


class NicheRadarError(Exception):
    """Base class for every error raised by this package."""


class ProfileExtractionError(NicheRadarError):
    """The niche profile provider failed or returned unparseable output."""


class EmptyCorpusError(NicheRadarError):
    """Both the cached and the fresh corpus fetch returned no items."""

    def __init__(self, source: str):
        super().__init__(f"No trends returned from {source}")
        self.source = source


class BackendError(NicheRadarError):
    """The trends backend answered with an unusable payload."""


class SnippetFetchError(BackendError):
    """Snippet lookup for a single topic failed (non-2xx or ``success: false``)."""

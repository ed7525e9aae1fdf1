"""Exceptions raised by the mood journal core."""


class MoodJournalError(Exception):
    """Base exception for the package."""


class EnrichmentError(MoodJournalError):
    """A location, weather or geocoding request failed."""


class PersistenceWriteError(MoodJournalError):
    """The key-value backend rejected a write."""

    def __init__(self, key: str, message: str = ""):
        self.key = key
        super().__init__(f"failed to write {key!r}" + (f": {message}" if message else ""))

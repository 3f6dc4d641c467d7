import logging

from services.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

READ_METHODS = frozenset({
    "list_venues",
    "get_venue",
    "list_venue_availability",
    "list_equipment",
    "get_equipment",
    "list_tutorials",
    "get_tutorial",
    "list_lessons",
})


class FallbackDataStore:
    """
    Wraps the primary store. Catalogue reads that fail with
    BackendUnavailableError are answered from a seeded in-memory copy so
    listings stay populated during an outage. Writes and user-specific reads
    always go to the primary and propagate its errors; nothing is queued.
    """

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+fallback"

    @property
    def bus(self):
        return self.primary.bus

    def __getattr__(self, attr):
        target = getattr(self.primary, attr)
        if attr not in READ_METHODS:
            return target

        def read_with_fallback(*args, **kwargs):
            try:
                return target(*args, **kwargs)
            except BackendUnavailableError:
                logger.warning("Primary store unavailable for %s; serving seed data", attr)
                return getattr(self.fallback, attr)(*args, **kwargs)

        return read_with_fallback

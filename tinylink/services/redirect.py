import logging

from tinylink.db.base import LinkStorage

logger = logging.getLogger(__name__)


class RedirectResolver:
    """Hot path for redirects: one atomic increment, no extra reads."""

    def __init__(self, storage: LinkStorage):
        self.storage = storage

    def resolve(self, code: str) -> str:
        """Record a visit and return the target URL.

        Raises LinkNotFoundError for unknown codes; no counter changes then.
        """
        target_url = self.storage.increment_clicks(code)
        logger.debug("Resolved %s -> %s", code, target_url[:50])
        return target_url

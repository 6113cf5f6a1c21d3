from typing import Callable, Iterable, List, Optional
import logging

from tinylink.core.exceptions import CodeExhaustedError, CodeExistsError, CodeReservedError
from tinylink.db.base import LinkStorage
from tinylink.schemas.LinkRecord import LinkRecord
from tinylink.utils.encoding import FALLBACK_CODE_LENGTH, SHORT_CODE_LENGTH, generate_short_code

logger = logging.getLogger(__name__)

MAX_GENERATE_ATTEMPTS = 5


class LinkRegistry:
    """Create, read and delete links on top of a storage backend.

    Holds no state between calls; the backend is the only source of truth.
    URL and code syntax are expected to be validated by the caller.
    """

    def __init__(
        self,
        storage: LinkStorage,
        generator: Callable[[int], str] = generate_short_code,
        reserved: Iterable[str] = (),
    ):
        self.storage = storage
        self.generator = generator
        self.reserved = frozenset(reserved)

    def _insert(self, code: str, target_url: str) -> LinkRecord:
        if code in self.reserved:
            raise CodeReservedError(code)
        return self.storage.insert(code, target_url)

    def create(self, target_url: str, code: Optional[str] = None) -> LinkRecord:
        if code:
            # Caller picked the code: a collision is final
            record = self._insert(code, target_url)
        else:
            record = self._create_with_generated_code(target_url)

        logger.info("Created link %s -> %s", record.code, target_url[:50])
        return record

    def _create_with_generated_code(self, target_url: str) -> LinkRecord:
        for attempt in range(MAX_GENERATE_ATTEMPTS):
            candidate = self.generator(SHORT_CODE_LENGTH)
            try:
                return self._insert(candidate, target_url)
            except CodeExistsError:
                logger.info(
                    f"Short code collision on attempt {attempt + 1}/{MAX_GENERATE_ATTEMPTS}: {candidate}"
                )

        # Widen the search space once instead of retrying forever
        candidate = self.generator(FALLBACK_CODE_LENGTH)
        try:
            return self._insert(candidate, target_url)
        except CodeExistsError as e:
            logger.warning("Fallback code %s also collided, giving up", candidate)
            raise CodeExhaustedError(candidate, MAX_GENERATE_ATTEMPTS + 1) from e

    def list(self) -> List[LinkRecord]:
        return self.storage.list()

    def get(self, code: str) -> LinkRecord:
        return self.storage.find_by_code(code)

    def delete(self, code: str) -> None:
        self.storage.delete(code)
        logger.info("Deleted link %s", code)

"""Storage contract shared by every link backend.

Each primitive is atomic with respect to the whole record set. Backends hand
back ``LinkRecord`` values, never ORM objects or raw rows, so the registry
does not care which engine sits underneath.
"""

from abc import ABC, abstractmethod
from typing import List

from tinylink.schemas.LinkRecord import LinkRecord


class LinkStorage(ABC):
    """Abstract base class for link storage backends."""

    name = "abstract"

    @abstractmethod
    def insert(self, code: str, target_url: str) -> LinkRecord:
        """Create a record with zero clicks.

        Raises:
            CodeExistsError: a live record already uses ``code``.
        """

    @abstractmethod
    def list(self) -> List[LinkRecord]:
        """All live records, newest first; ties go to the later insertion."""

    @abstractmethod
    def find_by_code(self, code: str) -> LinkRecord:
        """Raises LinkNotFoundError when ``code`` is unknown."""

    @abstractmethod
    def increment_clicks(self, code: str) -> str:
        """Add one click, stamp ``last_clicked`` and return the target URL.

        Raises:
            LinkNotFoundError: nothing is changed.
        """

    @abstractmethod
    def delete(self, code: str) -> None:
        """Remove the record permanently; the code becomes reusable.

        Raises:
            LinkNotFoundError: ``code`` is unknown.
        """

    @abstractmethod
    def health_check(self) -> bool:
        """True when the backend can currently be read."""

    def close(self) -> None:
        """Release connections or handles held by the backend."""

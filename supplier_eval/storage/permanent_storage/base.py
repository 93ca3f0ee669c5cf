"""Abstract base class for permanent storage backends.

Records are organized by category (providers, categories, evaluations,
selection events) and keyed by record ID. Besides plain writes, backends
must offer a conditional write so that state transitions can be guarded at
the storage layer.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any


class PermanentStorage(ABC):
    """Abstract base class for permanent storage implementations."""

    @abstractmethod
    def save(self, key: str, data: Any, category: str) -> Path:
        """Save data to permanent storage.

        Args:
            key: Unique identifier for the data within the category.
            data: Data to store (implementation determines serialization).
            category: Category/namespace for organizing data.

        Returns:
            Path or identifier where data was stored.
        """
        ...

    @abstractmethod
    def save_if(
        self,
        key: str,
        data: Any,
        category: str,
        condition: Callable[[Any | None], bool],
    ) -> bool:
        """Atomically save data only if the stored value satisfies a condition.

        The read, the check and the write happen as one step with respect to
        other writers of the same store.

        Args:
            key: Unique identifier for the data within the category.
            data: Data to store.
            category: Category/namespace for organizing data.
            condition: Called with the currently stored data (None if absent).

        Returns:
            True if the data was written, False if the condition rejected it.
        """
        ...

    @abstractmethod
    def load(self, key: str, category: str) -> Any | None:
        """Load data from permanent storage.

        Returns:
            Stored data if found, None otherwise.
        """
        ...

    @abstractmethod
    def delete(self, key: str, category: str) -> bool:
        """Delete data from permanent storage.

        Returns:
            True if data was deleted, False if not found.
        """
        ...

    @abstractmethod
    def exists(self, key: str, category: str) -> bool:
        """Check if data exists in permanent storage."""
        ...

    @abstractmethod
    def list_keys(self, category: str) -> list[str]:
        """List all keys in a category."""
        ...

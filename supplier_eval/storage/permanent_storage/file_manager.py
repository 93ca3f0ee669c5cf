"""File-based storage layer for evaluation data persistence.

Provides operations for:
- Providers and their criticality
- Categories and their weight overrides
- Evaluation records (with conditional updates for commitments)
- Selection events (with conditional updates for winner confirmation)
- Generic key-value storage by category
"""

import json
import logging
import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from supplier_eval.consts import (
    DEFAULT_DATA_DIR,
    STORAGE_CATEGORIES,
    STORAGE_EVALUATIONS,
    STORAGE_LOCK_TIMEOUT,
    STORAGE_PROVIDERS,
    STORAGE_SELECTION_EVENTS,
)
from supplier_eval.exceptions import StorageError
from supplier_eval.models.model_criteria import Category, Provider
from supplier_eval.models.model_evaluation import EvaluationRecord
from supplier_eval.models.model_selection import SelectionEvent
from supplier_eval.storage.permanent_storage.base import PermanentStorage

logger = logging.getLogger(__name__)


class FileManager(PermanentStorage):
    """File-based storage manager for evaluation data.

    Directory structure:
        data/
        ├── providers/{provider_id}.json         # Provider records
        ├── categories/{category_id}.json        # Categories + weight overrides
        ├── evaluations/{evaluation_id}.json     # Evaluation records
        └── selection_events/{event_id}.json     # Selection events

    Every file is written to a temporary sibling first and then moved into
    place, so readers never see a partial record. Writes to a key hold a
    `{key}.json.lock` file lock, shared by every FileManager and process
    working on the same data directory.
    """

    def __init__(
        self, data_dir: Path | str = DEFAULT_DATA_DIR, lock_timeout: float = STORAGE_LOCK_TIMEOUT
    ):
        """Initialize FileManager with data directory.

        Args:
            data_dir: Root directory for all data files.
            lock_timeout: Seconds to wait for a key lock before giving up.
        """
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout
        self._lock = threading.Lock()
        self._file_locks: dict[Path, FileLock] = {}

    def _ensure_dirs(self, *dirs: Path) -> None:
        """Create directories if they don't exist."""
        for d in dirs:
            d.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str, category: str) -> Path:
        return self.data_dir / category / f"{key}.json"

    def _write_atomic(self, path: Path, text: str) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)

    @contextmanager
    def locked(self, key: str, category: str) -> Iterator[None]:
        """Hold the cross-process lock of one key.

        Re-entrant within a thread, so writes nested inside the block reuse
        the lock already held.

        Raises:
            StorageError: If the lock is not acquired within ``lock_timeout``.
        """
        lock_path = self._path(key, category).with_suffix(".json.lock")
        with self._lock:
            file_lock = self._file_locks.get(lock_path)
            if file_lock is None:
                self._ensure_dirs(lock_path.parent)
                file_lock = FileLock(lock_path, timeout=self.lock_timeout)
                self._file_locks[lock_path] = file_lock
        try:
            file_lock.acquire()
        except Timeout as e:
            raise StorageError(
                f"Timed out waiting for lock on {category}/{key}",
                context={"key": key, "category": category, "timeout": self.lock_timeout},
            ) from e
        try:
            yield
        finally:
            file_lock.release()

    # === PROVIDER OPERATIONS ===

    def save_provider(self, provider: Provider) -> Path:
        """Save a provider record."""
        path = self.save(provider.id, provider.model_dump(mode="json"), STORAGE_PROVIDERS)
        logger.info(f"Saved provider: {provider.id} ({provider.criticality.value})")
        return path

    def load_provider(self, provider_id: str) -> Provider | None:
        """Load a provider record.

        Returns:
            Provider if found, None otherwise.
        """
        data = self.load(provider_id, STORAGE_PROVIDERS)
        if data is None:
            logger.warning(f"Provider not found: {provider_id}")
            return None
        return Provider.model_validate(data)

    def list_providers(self) -> list[Provider]:
        """Load all provider records, sorted by ID."""
        providers = []
        for key in self.list_keys(STORAGE_PROVIDERS):
            data = self.load(key, STORAGE_PROVIDERS)
            if data is not None:
                providers.append(Provider.model_validate(data))
        return providers

    def list_providers_in_category(self, category_id: str) -> list[Provider]:
        """Load providers assigned to a category."""
        return [p for p in self.list_providers() if category_id in p.category_ids]

    # === CATEGORY OPERATIONS ===

    def save_category(self, category: Category) -> Path:
        """Save a category, including its weight override."""
        path = self.save(category.id, category.model_dump(mode="json"), STORAGE_CATEGORIES)
        logger.info(f"Saved category: {category.id} ({category.category_type.value})")
        return path

    def load_category(self, category_id: str) -> Category | None:
        """Load a category.

        Returns:
            Category if found, None otherwise.
        """
        data = self.load(category_id, STORAGE_CATEGORIES)
        if data is None:
            logger.warning(f"Category not found: {category_id}")
            return None
        return Category.model_validate(data)

    def list_categories(self) -> list[Category]:
        """Load all categories, sorted by ID."""
        categories = []
        for key in self.list_keys(STORAGE_CATEGORIES):
            data = self.load(key, STORAGE_CATEGORIES)
            if data is not None:
                categories.append(Category.model_validate(data))
        return categories

    # === EVALUATION OPERATIONS ===

    def save_evaluation(self, record: EvaluationRecord) -> Path:
        """Save an evaluation record."""
        path = self.save(record.id, record.model_dump(mode="json"), STORAGE_EVALUATIONS)
        logger.info(
            f"Saved evaluation: {record.id} (provider={record.provider_id}, "
            f"total={record.total_score:.2f})"
        )
        return path

    def save_evaluation_if(
        self,
        record: EvaluationRecord,
        condition: Callable[[EvaluationRecord | None], bool],
    ) -> bool:
        """Save an evaluation only if the stored version satisfies a condition.

        Args:
            record: New version of the record.
            condition: Called with the stored record (None if absent).

        Returns:
            True if written, False if the condition rejected the write.
        """

        def _check(current: Any | None) -> bool:
            stored = EvaluationRecord.model_validate(current) if current is not None else None
            return condition(stored)

        written = self.save_if(
            record.id, record.model_dump(mode="json"), STORAGE_EVALUATIONS, _check
        )
        if written:
            logger.info(f"Conditionally updated evaluation: {record.id}")
        else:
            logger.warning(f"Conditional update rejected for evaluation: {record.id}")
        return written

    def load_evaluation(self, evaluation_id: str) -> EvaluationRecord | None:
        """Load an evaluation record.

        Returns:
            EvaluationRecord if found, None otherwise.
        """
        data = self.load(evaluation_id, STORAGE_EVALUATIONS)
        if data is None:
            logger.warning(f"Evaluation not found: {evaluation_id}")
            return None
        return EvaluationRecord.model_validate(data)

    def list_evaluations(self, provider_id: str | None = None) -> list[EvaluationRecord]:
        """Load evaluation records, optionally for a single provider.

        Args:
            provider_id: Restrict to this provider. None returns all records.

        Returns:
            Records in storage key order.
        """
        records = []
        for key in self.list_keys(STORAGE_EVALUATIONS):
            data = self.load(key, STORAGE_EVALUATIONS)
            if data is None:
                continue
            record = EvaluationRecord.model_validate(data)
            if provider_id is None or record.provider_id == provider_id:
                records.append(record)
        return records

    def delete_evaluation(self, evaluation_id: str) -> bool:
        """Hard-delete an evaluation record.

        Returns:
            True if deleted, False if not found.
        """
        deleted = self.delete(evaluation_id, STORAGE_EVALUATIONS)
        if deleted:
            logger.info(f"Deleted evaluation: {evaluation_id}")
        return deleted

    # === SELECTION EVENT OPERATIONS ===

    def save_event(self, event: SelectionEvent) -> Path:
        """Save a selection event."""
        path = self.save(event.id, event.model_dump(mode="json"), STORAGE_SELECTION_EVENTS)
        logger.info(
            f"Saved selection event: {event.id} ({event.status.value}, "
            f"{len(event.competitors)} competitors)"
        )
        return path

    def save_event_if(
        self,
        event: SelectionEvent,
        condition: Callable[[SelectionEvent | None], bool],
    ) -> bool:
        """Save a selection event only if the stored version satisfies a condition.

        Returns:
            True if written, False if the condition rejected the write.
        """

        def _check(current: Any | None) -> bool:
            stored = SelectionEvent.model_validate(current) if current is not None else None
            return condition(stored)

        written = self.save_if(
            event.id, event.model_dump(mode="json"), STORAGE_SELECTION_EVENTS, _check
        )
        if written:
            logger.info(f"Conditionally updated selection event: {event.id}")
        else:
            logger.warning(f"Conditional update rejected for selection event: {event.id}")
        return written

    def load_event(self, event_id: str) -> SelectionEvent | None:
        """Load a selection event.

        Returns:
            SelectionEvent if found, None otherwise.
        """
        data = self.load(event_id, STORAGE_SELECTION_EVENTS)
        if data is None:
            logger.warning(f"Selection event not found: {event_id}")
            return None
        return SelectionEvent.model_validate(data)

    def list_events(self) -> list[SelectionEvent]:
        """Load all selection events, sorted by ID."""
        events = []
        for key in self.list_keys(STORAGE_SELECTION_EVENTS):
            data = self.load(key, STORAGE_SELECTION_EVENTS)
            if data is not None:
                events.append(SelectionEvent.model_validate(data))
        return events

    # === UTILITY METHODS ===

    def get_data_summary(self) -> dict[str, Any]:
        """Get summary of stored data.

        Returns:
            Dict with record counts per storage category.
        """
        return {
            category: {"count": len(self.list_keys(category))}
            for category in (
                STORAGE_PROVIDERS,
                STORAGE_CATEGORIES,
                STORAGE_EVALUATIONS,
                STORAGE_SELECTION_EVENTS,
            )
        }

    # === GENERIC PERMANENT STORAGE OPERATIONS ===
    # These implement the PermanentStorage abstract base class interface

    def save(self, key: str, data: Any, category: str) -> Path:
        """Save data to permanent storage.

        Args:
            key: Unique identifier for the data within the category.
            data: Data to store (must be JSON-serializable).
            category: Category/namespace for organizing data.

        Returns:
            Path where data was stored.
        """
        category_dir = self.data_dir / category
        with self.locked(key, category):
            self._ensure_dirs(category_dir)
            path = category_dir / f"{key}.json"
            content = {
                "key": key,
                "category": category,
                "saved_at": datetime.now(UTC).isoformat(),
                "data": data,
            }
            self._write_atomic(path, json.dumps(content, indent=2, default=str))
        logger.debug(f"Saved {key} in category={category}")
        return path

    def save_if(
        self,
        key: str,
        data: Any,
        category: str,
        condition: Callable[[Any | None], bool],
    ) -> bool:
        """Atomically save data only if the stored value satisfies a condition.

        Args:
            key: Unique identifier for the data within the category.
            data: Data to store (must be JSON-serializable).
            category: Category/namespace for organizing data.
            condition: Called with the currently stored data (None if absent).

        Returns:
            True if the data was written, False otherwise.
        """
        with self.locked(key, category):
            current = self.load(key, category)
            if not condition(current):
                logger.debug(f"Condition rejected write of {key} in category={category}")
                return False
            self.save(key, data, category)
            return True

    def load(self, key: str, category: str) -> Any | None:
        """Load data from permanent storage.

        Args:
            key: Unique identifier for the data.
            category: Category/namespace to look in.

        Returns:
            Stored data if found, None otherwise.
        """
        path = self._path(key, category)
        if not path.exists():
            return None

        try:
            content = json.loads(path.read_text(encoding="utf-8"))
            return content.get("data")
        except (json.JSONDecodeError, KeyError) as e:
            logger.warning(f"Failed to load {key} from {category}: {e}")
            return None

    def delete(self, key: str, category: str) -> bool:
        """Delete data from permanent storage.

        Args:
            key: Unique identifier for the data.
            category: Category/namespace to look in.

        Returns:
            True if data was deleted, False if not found.
        """
        path = self._path(key, category)
        with self.locked(key, category):
            if path.exists():
                path.unlink()
                logger.debug(f"Deleted {key} from category={category}")
                return True
        return False

    def exists(self, key: str, category: str) -> bool:
        """Check if data exists in permanent storage.

        Args:
            key: Unique identifier for the data.
            category: Category/namespace to look in.

        Returns:
            True if data exists, False otherwise.
        """
        return self._path(key, category).exists()

    def list_keys(self, category: str) -> list[str]:
        """List all keys in a category.

        Args:
            category: Category/namespace to list keys from.

        Returns:
            List of keys in the category.
        """
        category_dir = self.data_dir / category
        if not category_dir.exists():
            return []

        keys = []
        for path in category_dir.glob("*.json"):
            keys.append(path.stem)
        return sorted(keys)

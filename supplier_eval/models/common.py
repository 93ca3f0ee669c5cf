from datetime import UTC, datetime
from uuid import uuid4


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def _new_id() -> str:
    """Return a random record identifier."""
    return uuid4().hex

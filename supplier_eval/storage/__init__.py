"""Storage backends for persisting evaluation data.

This module provides:
- PermanentStorage: Abstract base class for persistent storage
- FileManager: File-based persistent storage implementation
"""

from supplier_eval.storage.permanent_storage.base import PermanentStorage
from supplier_eval.storage.permanent_storage.file_manager import FileManager

__all__ = [
    "FileManager",
    "PermanentStorage",
]

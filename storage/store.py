"""
Key-value storage interface.

Every backend stores an arbitrary JSON value under a string key. Domain code
talks to storage only through this interface, so the concrete backend is
chosen once at startup and injected where it is needed.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Abstract get/set/delete store for JSON values.

    Methods:
        get: Return the value for a key, or None when absent
        set: Create or fully replace the value for a key
        delete: Remove a key and report whether it existed
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under ``key``.

        A missing key is a normal outcome and returns None rather than raising.
        """

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``, overwriting any previous value.

        The write is durable when this returns.

        Raises:
            StorageError: If the value could not be persisted
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove ``key``.

        Returns:
            bool: True if a value existed and was removed, False if it was absent
        """

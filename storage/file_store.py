"""
File-backed key-value store.

Each key is persisted as one JSON file below a root directory. The key is used
as a relative path, so ``user:1234`` lands in ``<root>/user:1234`` and a key
containing ``/`` creates intermediate directories. Writes go to a temporary
file in the destination directory which is fsynced and then moved into place.
There is no locking: concurrent writers to one key race and the last
``os.replace`` wins.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from storage.store import KeyValueStore
from utils.error_handling import StorageError

logger = logging.getLogger(__name__)


class FileKeyValueStore(KeyValueStore):
    """Store JSON values as one file per key under ``root``."""

    def __init__(self, root: str):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"<FileKeyValueStore(root='{self.root}')>"

    def _key_path(self, key: str) -> Path:
        """
        Map a key to its file path, refusing keys that would leave the root.

        Raises:
            StorageError: For empty, absolute or traversing keys
        """
        if not isinstance(key, str) or not key or '\x00' in key:
            raise StorageError(f"Invalid storage key: {key!r}")
        segments = key.split('/')
        if key.startswith('/') or any(s in ('', '.', '..') for s in segments):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.root.joinpath(*segments)

    def get(self, key: str) -> Optional[Any]:
        try:
            path = self._key_path(key)
        except StorageError as e:
            logger.warning("Rejected read: %s", e.message)
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            # Unreadable and corrupt files are reported as absent
            logger.warning("Failed to read key '%s' from %s: %s", key, path, e)
            return None

    def set(self, key: str, value: Any) -> None:
        path = self._key_path(key)

        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for key '{key}' is not JSON serializable: {e}") from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error("Failed to write key '%s' to %s: %s", key, path, e)
            raise StorageError(f"Failed to write key '{key}': {e}") from e

        logger.debug("Wrote key '%s' (%d bytes)", key, len(payload))

    def delete(self, key: str) -> bool:
        try:
            path = self._key_path(key)
        except StorageError as e:
            logger.warning("Rejected delete: %s", e.message)
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to delete key '%s' at %s: %s", key, path, e)
            return False
        return True

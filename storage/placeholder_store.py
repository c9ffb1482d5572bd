"""Placeholder backend for storage locations that carry a URI scheme."""

import logging
from typing import Any, Optional

from storage.store import KeyValueStore
from utils.error_handling import BackendNotImplementedError

logger = logging.getLogger(__name__)


class NotImplementedStore(KeyValueStore):
    """
    Store selected for ``scheme://`` locations that have no backend yet.

    Reads report absence, deletes report nothing removed and writes fail, so a
    misconfigured deployment can never appear to persist identities.
    """

    def __init__(self, location: str):
        self.location = location
        logger.warning("No storage backend implemented for '%s'", location)

    def __repr__(self) -> str:
        return f"<NotImplementedStore(location='{self.location}')>"

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any) -> None:
        raise BackendNotImplementedError(self.location, 'set')

    def delete(self, key: str) -> bool:
        return False

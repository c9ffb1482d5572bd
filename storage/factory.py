"""
Storage backend selection.

The backend is decided once from the configured storage location descriptor:
anything that looks like a filesystem path is served by FileKeyValueStore,
while descriptors with an explicit scheme (``http://``, ``s3://``,
``postgres://``, ...) get the placeholder backend until one is written.
"""

import re
from urllib.parse import urlsplit

from storage.store import KeyValueStore
from storage.file_store import FileKeyValueStore
from storage.placeholder_store import NotImplementedStore
from utils.error_handling import ConfigurationError

# urlsplit reads "C:\data" as scheme "c"
_WINDOWS_DRIVE = re.compile(r'^[A-Za-z]:[\\/]')


def is_file_location(location: str) -> bool:
    """
    Return True when ``location`` names a filesystem path.

    Bare names (``storage``), relative paths (``./data/users``) and absolute
    paths (``/srv/keyhold``) have no scheme and count as file locations.
    """
    if _WINDOWS_DRIVE.match(location):
        return True
    return urlsplit(location).scheme == ''


def select_store(location: str) -> KeyValueStore:
    """
    Build the store for a storage location descriptor.

    Args:
        location (str): Filesystem path or URI-like string

    Returns:
        KeyValueStore: FileKeyValueStore for paths, NotImplementedStore otherwise

    Raises:
        ConfigurationError: If the descriptor is empty
    """
    if not location or not location.strip():
        raise ConfigurationError("Storage location must not be empty")
    location = location.strip()
    if is_file_location(location):
        return FileKeyValueStore(location)
    return NotImplementedStore(location)

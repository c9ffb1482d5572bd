from .store import KeyValueStore
from .file_store import FileKeyValueStore
from .placeholder_store import NotImplementedStore
from .factory import is_file_location, select_store

__all__ = ['KeyValueStore', 'FileKeyValueStore', 'NotImplementedStore', 'is_file_location', 'select_store']

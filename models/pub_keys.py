"""
Public key index model.

The index is a single JSON object stored under the ``keys`` record. It maps the
composite key derived from (application hash, public key) to the identifier of
the user created for that pair, and is the only route from credential material
to an identifier.

Every update is a read-modify-write of the whole record with no lock around
it, so two writers that both read the old record race and the last write wins.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from storage.store import KeyValueStore
from utils.error_handling import StorageError

KEYS_RECORD = 'keys'


@dataclass
class PubKeyIndex:
    """In-memory projection of the ``keys`` record."""

    entries: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def derive_key(app_hash: str, pub_key: str) -> str:
        """
        Derive the composite lookup key for an (application hash, public key) pair.

        The hash is length-prefixed so the boundary between the two parts is
        unambiguous: ("ab", "c") and ("a", "bc") give "2:abc" and "1:abc".

        Args:
            app_hash (str): Application-supplied hash
            pub_key (str): Encoded public key

        Returns:
            str: The composite key
        """
        return f"{len(app_hash)}:{app_hash}{pub_key}"

    @classmethod
    def load(cls, store: KeyValueStore) -> 'PubKeyIndex':
        """
        Read the index from ``store``, starting empty when the record is absent.

        Raises:
            StorageError: If the stored record is not a mapping of strings
        """
        data = store.get(KEYS_RECORD)
        if data is None:
            return cls()
        if not isinstance(data, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
            raise StorageError(f"Record '{KEYS_RECORD}' is not a valid key index")
        return cls(entries=dict(data))

    def save(self, store: KeyValueStore) -> None:
        store.set(KEYS_RECORD, self.entries)

    def get_user_uuid(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def num_keys(self) -> int:
        return len(self.entries)

    @classmethod
    def lookup(cls, store: KeyValueStore, key: str) -> Optional[str]:
        """Return the identifier mapped to composite ``key``, or None."""
        return cls.load(store).get_user_uuid(key)

    @classmethod
    def insert(cls, store: KeyValueStore, key: str, user_uuid: str) -> None:
        """
        Map composite ``key`` to ``user_uuid`` and write the whole index back.

        Raises:
            StorageError: If the index could not be read or written
        """
        index = cls.load(store)
        index.entries[key] = user_uuid
        index.save(store)

    @classmethod
    def remove(cls, store: KeyValueStore, key: str, expected_uuid: Optional[str] = None) -> bool:
        """
        Drop composite ``key`` from the index.

        With ``expected_uuid`` the key is only dropped while it still maps to
        that identifier, so an entry rewritten by another user survives.

        Returns:
            bool: True if the key was present and the index was rewritten
        """
        index = cls.load(store)
        if key not in index.entries:
            return False
        if expected_uuid is not None and index.entries[key] != expected_uuid:
            return False
        del index.entries[key]
        index.save(store)
        return True

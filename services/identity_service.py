"""
Identity service for public-key based users.

This module provides the IdentityService class which maps an (application
hash, public key) pair to a stable user identifier. It owns the
resolve-or-create protocol and the identifier-scoped lookup, hash update and
delete operations. All persistence goes through the injected KeyValueStore.

Callers must authenticate requests before calling in; this module performs no
cryptography.
"""

import logging
from dataclasses import replace
from typing import Callable, NamedTuple, Optional

from models.user import UserRecord, user_key
from models.pub_keys import PubKeyIndex
from storage.store import KeyValueStore
from utils.error_handling import (
    AuthorizationError,
    ConflictError,
    ResourceNotFoundError,
    StorageError,
)
from utils.signature_utils import generate_uuid

logger = logging.getLogger(__name__)


class ResolveResult(NamedTuple):
    """Outcome of resolve_or_create."""
    user_uuid: str
    created: bool


class IdentityService:
    """
    Service class for identity resolution and user record management.

    There is no lock around the ``keys`` record. Two concurrent
    resolve_or_create calls for the same new pair can both miss the index,
    both write a user record and both rewrite the index; the last index write
    wins and the other user record is left unindexed.

    Methods:
        resolve_or_create: Return the identifier for a pair, creating a user if needed
        get_user: Read a user record by identifier
        update_hash: Move a user to a new application hash
        delete_user: Remove a user record and its index entry
    """

    def __init__(self, store: KeyValueStore, uuid_factory: Callable[[], str] = generate_uuid):
        self.store = store
        self.uuid_factory = uuid_factory

    def resolve_or_create(self, pub_key: str, app_hash: str) -> ResolveResult:
        """
        Return the identifier for (pub_key, app_hash), creating the user on first use.

        The user record is written before the index entry, so a user is never
        reachable through the index without its record. A failed index write
        is not rolled back and leaves the new record orphaned.

        Args:
            pub_key (str): Verified public key of the caller
            app_hash (str): Application-supplied hash

        Returns:
            ResolveResult: The identifier and whether it was newly created

        Raises:
            StorageError: If the user record or the index could not be written
        """
        key = PubKeyIndex.derive_key(app_hash, pub_key)
        existing = PubKeyIndex.lookup(self.store, key)
        if existing is not None:
            return ResolveResult(existing, False)

        user = UserRecord(uuid=self.uuid_factory(), pub_key=pub_key, hash=app_hash)
        try:
            self.store.set(user.storage_key, user.to_dict())
        except StorageError as e:
            raise StorageError(f"Failed to put user: {e.message}", e.error_code, e.status_code) from e

        try:
            PubKeyIndex.insert(self.store, key, user.uuid)
        except StorageError as e:
            logger.error("User %s was written but could not be indexed", user.uuid)
            raise StorageError(f"Failed to update keys: {e.message}", e.error_code, e.status_code) from e

        logger.info("Created user %s", user.uuid)
        return ResolveResult(user.uuid, True)

    def get_user(self, user_uuid: str) -> Optional[UserRecord]:
        """
        Read the user record for ``user_uuid``.

        Returns:
            Optional[UserRecord]: The record, or None when no such user exists

        Raises:
            StorageError: If the stored record is malformed
        """
        data = self.store.get(user_key(user_uuid))
        if data is None:
            return None
        try:
            return UserRecord.from_dict(data)
        except ValueError as e:
            raise StorageError(f"Corrupt user record for {user_uuid}: {e}") from e

    def _require_user(self, user_uuid: str, app_hash: str) -> UserRecord:
        user = self.get_user(user_uuid)
        if user is None:
            raise ResourceNotFoundError(f"User {user_uuid} not found")
        if user.hash != app_hash:
            raise AuthorizationError("Hash does not match user")
        return user

    def update_hash(self, user_uuid: str, current_hash: str, new_hash: str) -> UserRecord:
        """
        Move a user from ``current_hash`` to ``new_hash``.

        The user record is rewritten first, then the old composite key is
        dropped from the index and the new one added in a single index write.
        If the index write fails the previous user record is written back, so
        the record and the index keep agreeing on the old hash.

        Raises:
            ResourceNotFoundError: If the user does not exist
            AuthorizationError: If current_hash is not the user's hash
            ConflictError: If another user already holds the new pair
            StorageError: If a write fails
        """
        user = self._require_user(user_uuid, current_hash)
        if new_hash == current_hash:
            return user

        old_key = PubKeyIndex.derive_key(current_hash, user.pub_key)
        new_key = PubKeyIndex.derive_key(new_hash, user.pub_key)

        index = PubKeyIndex.load(self.store)
        holder = index.get_user_uuid(new_key)
        if holder is not None and holder != user_uuid:
            raise ConflictError("Another user already exists for this public key and hash")

        updated = replace(user, hash=new_hash)
        self.store.set(updated.storage_key, updated.to_dict())

        if index.get_user_uuid(old_key) == user_uuid:
            del index.entries[old_key]
        index.entries[new_key] = user_uuid
        try:
            index.save(self.store)
        except StorageError as e:
            try:
                self.store.set(user.storage_key, user.to_dict())
            except StorageError:
                logger.error("User %s holds hash %s but the index still has the old key", user_uuid, new_hash)
            raise StorageError(f"Failed to update keys: {e.message}", e.error_code, e.status_code) from e

        logger.info("Updated hash for user %s", user_uuid)
        return updated

    def delete_user(self, user_uuid: str, app_hash: str) -> bool:
        """
        Delete a user record and retract its index entry.

        The index entry is only removed after the record is gone, and only
        while it still points at this user.

        Returns:
            bool: True if the user record existed and was removed

        Raises:
            ResourceNotFoundError: If the user does not exist
            AuthorizationError: If app_hash is not the user's hash
            StorageError: If the record could not be removed or the index
                could not be rewritten
        """
        user = self._require_user(user_uuid, app_hash)
        deleted = self.store.delete(user.storage_key)
        if not deleted and self.store.get(user.storage_key) is not None:
            raise StorageError(f"Failed to delete user {user_uuid}")

        key = PubKeyIndex.derive_key(user.hash, user.pub_key)
        PubKeyIndex.remove(self.store, key, expected_uuid=user_uuid)

        logger.info("Deleted user %s", user_uuid)
        return deleted

"""
User record model.

This module defines the UserRecord, the identity entity persisted by the
service. Each record ties a generated identifier to the public key and the
application hash it was created with, and lives in the store under
``user:<identifier>``.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict

USER_KEY_PREFIX = 'user:'


def user_key(identifier: str) -> str:
    """Return the storage key for the user with ``identifier``."""
    return f"{USER_KEY_PREFIX}{identifier}"


@dataclass(frozen=True)
class UserRecord:
    """A stored identity: generated identifier, public key and application hash."""

    uuid: str
    pub_key: str
    hash: str

    @property
    def storage_key(self) -> str:
        return user_key(self.uuid)

    def to_dict(self) -> Dict[str, str]:
        return {
            'uuid': self.uuid,
            'pubKey': self.pub_key,
            'hash': self.hash,
        }

    @staticmethod
    def from_dict(data: Any) -> 'UserRecord':
        """
        Rebuild a record from its stored JSON form.

        Raises:
            ValueError: If ``data`` is not a complete user record
        """
        if not isinstance(data, dict):
            raise ValueError(f"User record must be an object, got {type(data).__name__}")
        try:
            record = UserRecord(uuid=data['uuid'], pub_key=data['pubKey'], hash=data['hash'])
        except KeyError as e:
            raise ValueError(f"User record is missing field {e}") from e
        if not all(isinstance(v, str) for v in asdict(record).values()):
            raise ValueError("User record fields must be strings")
        return record

    def __repr__(self) -> str:
        pub_key_display = f"{self.pub_key[:8]}..." if self.pub_key else "None"
        return f"<UserRecord(uuid='{self.uuid}', pub_key='{pub_key_display}', hash='{self.hash}')>"

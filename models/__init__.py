from .user import UserRecord, user_key
from .pub_keys import PubKeyIndex, KEYS_RECORD

__all__ = ['UserRecord', 'user_key', 'PubKeyIndex', 'KEYS_RECORD']

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import random
import string

import pytest
from models.pub_keys import PubKeyIndex, KEYS_RECORD
from models.user import UserRecord, user_key
from utils.error_handling import StorageError


def test_user_key():
    assert user_key("1234") == "user:1234"
    assert UserRecord(uuid="1234", pub_key="02ab", hash="h").storage_key == "user:1234"


def test_user_record_dict_round_trip():
    user = UserRecord(uuid="u-1", pub_key="02abcdef", hash="random_hash")
    assert user.to_dict() == {"uuid": "u-1", "pubKey": "02abcdef", "hash": "random_hash"}
    assert UserRecord.from_dict(user.to_dict()) == user


@pytest.mark.parametrize("data", [None, [], "user", {"uuid": "u"}, {"uuid": "u", "pubKey": 1, "hash": "h"}])
def test_user_record_from_malformed_dict(data):
    with pytest.raises(ValueError):
        UserRecord.from_dict(data)


def test_derive_key_is_deterministic():
    assert PubKeyIndex.derive_key("random_hash", "02ab") == PubKeyIndex.derive_key("random_hash", "02ab")


@pytest.mark.parametrize("first, second", [
    (("ab", "c"), ("a", "bc")),
    (("", "abc"), ("abc", "")),
    (("1:a", "b"), ("1", ":ab")),
    (("2:", "x"), ("", "2:x")),
    (("hash", "02ff"), ("hash0", "2ff")),
])
def test_derive_key_separates_boundary_shifts(first, second):
    assert PubKeyIndex.derive_key(*first) != PubKeyIndex.derive_key(*second)


def test_derive_key_is_injective_over_random_pairs():
    rng = random.Random(1234)
    alphabet = string.ascii_letters + string.digits + ":/|-_ "
    seen = {}
    for _ in range(2000):
        pair = (
            ''.join(rng.choice(alphabet) for _ in range(rng.randint(0, 12))),
            ''.join(rng.choice(alphabet) for _ in range(rng.randint(0, 12))),
        )
        key = PubKeyIndex.derive_key(*pair)
        assert seen.setdefault(key, pair) == pair


def test_lookup_on_empty_store(store):
    assert PubKeyIndex.lookup(store, "anything") is None
    assert PubKeyIndex.load(store).num_keys() == 0


def test_insert_then_lookup(store):
    key = PubKeyIndex.derive_key("random_hash", "02ab")
    PubKeyIndex.insert(store, key, "uuid-1")
    assert PubKeyIndex.lookup(store, key) == "uuid-1"
    assert store.get(KEYS_RECORD) == {key: "uuid-1"}


def test_insert_keeps_other_entries_and_overwrites_same_key(store):
    PubKeyIndex.insert(store, "a", "uuid-a")
    PubKeyIndex.insert(store, "b", "uuid-b")
    PubKeyIndex.insert(store, "a", "uuid-a2")
    index = PubKeyIndex.load(store)
    assert index.num_keys() == 2
    assert index.get_user_uuid("a") == "uuid-a2"
    assert index.get_user_uuid("b") == "uuid-b"


def test_remove(store):
    PubKeyIndex.insert(store, "a", "uuid-a")
    assert PubKeyIndex.remove(store, "a") is True
    assert PubKeyIndex.remove(store, "a") is False
    assert PubKeyIndex.lookup(store, "a") is None


@pytest.mark.parametrize("bad", [["a"], "keys", {"a": 1}])
def test_load_rejects_malformed_index(store, bad):
    store.set(KEYS_RECORD, bad)
    with pytest.raises(StorageError):
        PubKeyIndex.load(store)


def test_remove_with_expected_uuid(store):
    PubKeyIndex.insert(store, "a", "uuid-a")
    assert PubKeyIndex.remove(store, "a", expected_uuid="uuid-other") is False
    assert PubKeyIndex.lookup(store, "a") == "uuid-a"
    assert PubKeyIndex.remove(store, "a", expected_uuid="uuid-a") is True
    assert PubKeyIndex.lookup(store, "a") is None

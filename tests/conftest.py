"""
Shared pytest fixtures for the identity service tests.

Every test gets its own storage root under pytest's tmp_path, so the file
backend never shares state between tests.
"""

import os
import sys
import time

import pytest

# Add project root to Python path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app import create_app
from config import TestingConfig
from services.identity_service import IdentityService
from storage.file_store import FileKeyValueStore
from utils.signature_utils import generate_keypair, sign_message


class Signer:
    """A client-side key pair that signs request messages."""

    def __init__(self):
        self.private_key, self.pub_key = generate_keypair()

    def sign(self, *parts: str) -> str:
        return sign_message(self.private_key, ''.join(parts))


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / 'storage'


@pytest.fixture
def store(storage_dir):
    return FileKeyValueStore(str(storage_dir))


@pytest.fixture
def identity_service(store):
    return IdentityService(store)


@pytest.fixture
def app(store):
    return create_app(TestingConfig, store=store)


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def signer():
    return Signer()


@pytest.fixture
def timestamp():
    return str(int(time.time()))

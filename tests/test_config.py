import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from config import Config, TestingConfig, DevelopmentConfig, get_config


def test_get_config_by_name():
    assert get_config('testing') is TestingConfig
    assert get_config('development') is DevelopmentConfig
    assert get_config('unknown') is DevelopmentConfig


def test_default_storage_uri():
    assert Config.STORAGE_URI


def test_validate_rejects_empty_storage_uri(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'STORAGE_URI', '')
    with pytest.raises(ValueError, match='STORAGE_URI'):
        TestingConfig.validate()


def test_validate_rejects_bad_port(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'PORT', 0)
    with pytest.raises(ValueError, match='PORT'):
        TestingConfig.validate()


def test_app_builds_store_from_config(tmp_path, monkeypatch):
    from app import create_app
    from storage.file_store import FileKeyValueStore

    monkeypatch.setattr(TestingConfig, 'STORAGE_URI', str(tmp_path / 'storage'))
    app = create_app(TestingConfig)
    store = app.extensions['identity_service'].store
    assert isinstance(store, FileKeyValueStore)
    assert str(store.root) == str(tmp_path / 'storage')

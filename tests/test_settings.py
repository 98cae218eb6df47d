import pytest

import docstore
from docstore.settings import DEFAULT_COLLECTION, DEFAULT_DATABASE, DEFAULT_TIMEOUT_MS, DEFAULT_URI, StoreSettings


def test_defaults():
    settings = StoreSettings.from_env(environ={})

    assert settings == StoreSettings()
    assert settings.uri == DEFAULT_URI
    assert settings.database_name == DEFAULT_DATABASE
    assert settings.collection_name == DEFAULT_COLLECTION
    assert settings.timeout == DEFAULT_TIMEOUT_MS
    assert settings.ping_on_connect


def test_from_environ_mapping():
    settings = StoreSettings.from_env(
        environ={
            "DOCSTORE_URI": "mongodb://db.internal:27017/?replicaSet=rs0",
            "DOCSTORE_DATABASE": "inventory",
            "DOCSTORE_COLLECTION": "items",
            "DOCSTORE_TIMEOUT_MS": "1500",
            "DOCSTORE_PING": "off",
        }
    )

    assert settings.uri == "mongodb://db.internal:27017/?replicaSet=rs0"
    assert settings.database_name == "inventory"
    assert settings.collection_name == "items"
    assert settings.timeout == 1500
    assert not settings.ping_on_connect


def test_custom_prefix(monkeypatch):
    monkeypatch.setenv("APP_DATABASE", "appdb")
    monkeypatch.setenv("DOCSTORE_DATABASE", "ignored")

    assert StoreSettings.from_env("APP_").database_name == "appdb"


@pytest.mark.parametrize(("value", "expected"), [("1", True), ("yes", True), ("FALSE", False), ("0", False), ("", False)])
def test_ping_flag(value, expected):
    assert StoreSettings.from_env(environ={"DOCSTORE_PING": value}).ping_on_connect is expected


def test_invalid_timeout():
    with pytest.raises(ValueError):
        StoreSettings.from_env(environ={"DOCSTORE_TIMEOUT_MS": "soon"})


def test_lazy_package_exports():
    from docstore.store import DocumentStore

    assert docstore.DocumentStore is DocumentStore
    assert docstore.query_builder.build_filter({}) == {}
    with pytest.raises(AttributeError):
        docstore.NotAThing

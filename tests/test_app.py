from __future__ import annotations

import pytest

from src.signin_desk.signin_desk.container import build_container
from src.signin_desk.signin_desk.core.exceptions import ConfigurationError
from src.signin_desk.signin_desk.main import create_app
from src.signin_desk.signin_desk.storage.tables import OWNED_TABLES


def test_create_app_wires_the_desk_from_testing_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    app = create_app()
    container = app.extensions["signin_desk"]
    client = app.test_client()

    assert client.get("/ping").get_json() == {"ok": True}
    assert all(container.store.has_table(s.name) for s in OWNED_TABLES)

    started = client.post("/api/sign-in/sessions", json={"label": "Drop-in", "date": "2025-03-01"}).get_json()
    assert started["ok"] is True
    assert started["session"]["type"] == "individual"


def test_cache_ttls_are_checked_and_applied():
    with pytest.raises(ConfigurationError):
        build_container(cache_ttls={"rosters": 5})

    container = build_container(cache_ttls={"mentors": 0})
    container.cache.put("mentors:all:v1", ["STAFFA"], ttl_seconds=600)

    assert container.cache.get("mentors:all:v1") is None

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from domipets_bot.api.app import create_app
from domipets_bot.config.settings import get_settings


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WHATSAPP_VERIFY_TOKEN", "test-token")
    monkeypatch.setenv("SESSION_SWEEP_INTERVAL_SECONDS", "0")
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()

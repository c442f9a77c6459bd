import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from app.core.config import settings
from app.main import create_app


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeTelegram:
    """Records Bot API calls and replays queued responses (default: ok)."""

    def __init__(self):
        self.calls: list[dict] = []
        self.responses: list = []
        self.sleeps: list[float] = []

    def _next(self):
        r = self.responses.pop(0) if self.responses else {"ok": True, "result": {"message_id": 1}}
        if isinstance(r, Exception):
            raise r
        return r if isinstance(r, FakeResponse) else FakeResponse(r)

    def client_class(self):
        api = self

        class _Client:
            def __init__(self, *args, **kwargs):
                pass

            def __enter__(self):
                return self

            def __exit__(self, exc_type, exc, tb):
                return False

            def post(self, url, json):
                api.calls.append({"url": url, "json": json})
                return api._next()

            def get(self, url):
                api.calls.append({"url": url, "json": None})
                return api._next()

        return _Client

    @property
    def texts(self) -> list[str]:
        return [c["json"]["text"] for c in self.calls]


@pytest.fixture(autouse=True)
def _telegram_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "telegram_bot_token", None)
    monkeypatch.setattr(settings, "telegram_chat_id", None)
    monkeypatch.setattr(settings, "telegram_api_base_url", "https://tg.test")
    monkeypatch.setattr(settings, "telegram_max_message_length", 4000)
    monkeypatch.setattr(settings, "telegram_chunk_delay_seconds", 1.0)
    monkeypatch.setattr(settings, "report_timezone", "UTC")


@pytest.fixture()
def telegram_api(monkeypatch):
    import app.services.telegram as telegram_mod

    api = FakeTelegram()
    monkeypatch.setattr(telegram_mod.httpx, "Client", api.client_class())
    monkeypatch.setattr(telegram_mod, "time", SimpleNamespace(sleep=api.sleeps.append))
    return api


@pytest.fixture()
def telegram_configured(monkeypatch, telegram_api):
    monkeypatch.setattr(settings, "telegram_bot_token", "123:abc")
    monkeypatch.setattr(settings, "telegram_chat_id", "-10042")
    return telegram_api


@pytest.fixture(scope="session")
def client():
    return TestClient(create_app())


@pytest.fixture()
def alice_payload():
    return {
        "studentName": "Alice",
        "questions": [{"question": "2+2?", "options": ["3", "4"], "correct": 1, "selected": 1}],
        "timeSpent": 65,
        "timeLeft": 0,
        "leaveCount": 0,
    }

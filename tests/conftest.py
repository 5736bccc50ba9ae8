"""
Pytest fixtures for testing
"""
import json
import threading
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from sqlalchemy.orm import sessionmaker

from saldo.config import Settings
from saldo.infrastructure.http.client import ApiClient
from saldo.infrastructure.storage.session import create_storage_engine
from saldo.infrastructure.storage.token_storage import TokenStorage


API_PREFIX = "/api"


class FakeServer(BaseAdapter):
    """
    requests transport adapter that answers from scripted replies

    A reply is (status, body), an exception instance to raise, or a
    callable(request) returning one of those. Replies for a route are
    consumed in order; the last one repeats.
    """

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.requests = []
        self._lock = threading.Lock()

    def add(self, method, path, *replies):
        self.routes.setdefault((method, path), []).extend(replies)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and self.path_of(r) == path]

    @staticmethod
    def path_of(request):
        path = urlsplit(request.url).path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        return path

    @staticmethod
    def query_of(request):
        return {k: v[0] for k, v in parse_qs(urlsplit(request.url).query).items()}

    @staticmethod
    def json_of(request):
        return json.loads(request.body) if request.body else None

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        key = (request.method, self.path_of(request))
        with self._lock:
            self.requests.append(request)
            replies = self.routes.get(key)
            if not replies:
                reply = (404, {"success": False, "message": "Ruta no encontrada"})
            elif len(replies) > 1:
                reply = replies.pop(0)
            else:
                reply = replies[0]

        if callable(reply):
            reply = reply(request)
        if isinstance(reply, Exception):
            raise reply

        status, body = reply
        response = requests.Response()
        response.status_code = status
        response.url = request.url
        response.request = request
        response.encoding = "utf-8"
        response.headers["Content-Type"] = "application/json"
        response._content = json.dumps(body).encode("utf-8") if body is not None else b""
        return response

    def close(self):
        pass


def envelope(data=None, success=True, message=None):
    body = {"success": success, "data": data}
    if message:
        body["message"] = message
    return body


PROFILE = {
    "id": 12,
    "nombre": "Ana",
    "apellido": "López",
    "email": "ana@example.com",
    "telefono": "1155550000",
    "fotoPerfil": None,
    "saldoActual": "1500.50",
    "nivelSuscripcion": {"id": 1, "nombre": "Básico"},
    "tarjeta": {"id": 3, "uuid": "c0ffee", "estado": "ACTIVA", "saldoActual": "1500.50"},
}


@pytest.fixture
def settings(tmp_path):
    """Settings with zero backoff so retry tests don't sleep"""
    return Settings(
        API_URL="http://api.test/api",
        API_TIMEOUT=2000,
        RETRY_ATTEMPTS=3,
        RETRY_BASE_DELAY=0,
        RETRY_MAX_DELAY=0,
        STORAGE_URL=f"sqlite:///{tmp_path / 'saldo_test.db'}",
    )


@pytest.fixture
def storage_engine(settings):
    """SQLite file storage in a temp dir (shared across worker threads)"""
    engine = create_storage_engine(settings.STORAGE_URL)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(storage_engine) -> TokenStorage:
    return TokenStorage(sessionmaker(bind=storage_engine))


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def api(storage, settings, server) -> ApiClient:
    """ApiClient wired to FakeServer"""
    client = ApiClient(storage, settings)
    client.session.mount("http://", server)
    return client


@pytest.fixture
def profile_payload():
    return dict(PROFILE)

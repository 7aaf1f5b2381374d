"""Shared pytest fixtures.

MockDropbox is a tiny scripted HTTP server: tests queue the responses it
should give, run real client calls against it over urllib, then inspect
the recorded requests.
"""

import json
import os
import sys
import threading
from collections import deque
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

# Ensure dbxwrap can be imported without installing it
sys.path.insert(0, str(Path(__file__).parent))

from dbxwrap.client import ApiClient  # noqa: E402
from dbxwrap.credentials import Credential, Scope  # noqa: E402


class RecordedRequest:
    def __init__(self, path, headers, body):
        self.path = path
        self.headers = headers
        self.body = body

    def json(self):
        return json.loads(self.body.decode("utf-8"))


class MockDropbox:
    def __init__(self):
        self.responses = deque()
        self.requests = []
        self.url = ""

    def queue(self, body=None, status=200, headers=None, raw=None):
        """Queue one response. raw (bytes or str) is sent verbatim instead of JSON.

        body=None is sent as the literal null, as Dropbox's void routes do.
        """
        if raw is None:
            payload = json.dumps(body).encode("utf-8")
        elif isinstance(raw, str):
            payload = raw.encode("utf-8")
        else:
            payload = raw
        self.responses.append((status, headers or {}, payload))

    @property
    def paths(self):
        return [r.path for r in self.requests]


class _Handler(BaseHTTPRequestHandler):
    def do_POST(self):
        mock = self.server.mock
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        mock.requests.append(RecordedRequest(self.path, self.headers, body))

        if mock.responses:
            status, headers, payload = mock.responses.popleft()
        else:
            status, headers, payload = 500, {}, b"no response queued"

        self.send_response(status)
        if "Content-Type" not in headers:
            self.send_header("Content-Type", "application/json")
        for key, value in headers.items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    """Keep urllib from routing requests for 127.0.0.1 through a proxy."""
    for name in ("http_proxy", "https_proxy", "all_proxy", "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_dropbox():
    mock = MockDropbox()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.mock = mock
    mock.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield mock
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def client(mock_dropbox):
    return ApiClient(
        api_url=f"{mock_dropbox.url}/2",
        content_url=f"{mock_dropbox.url}/content/2",
    )


@pytest.fixture
def personal():
    return Credential(scope=Scope.PERSONAL, secret="personal-token")


@pytest.fixture
def team_info():
    return Credential(scope=Scope.TEAM_INFORMATION, secret="info-token")


@pytest.fixture
def clean_env():
    """Remove DBXWRAP_* variables for the test and restore them afterwards."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("DBXWRAP_")}
    for key in saved:
        del os.environ[key]
    try:
        yield
    finally:
        for key in [k for k in os.environ if k.startswith("DBXWRAP_")]:
            del os.environ[key]
        os.environ.update(saved)

# Shared fixtures for the EzShare client tests.
# Created: 2026-10-06

import json
import os
import re
import urllib.parse

import httpx
import pytest

from ezshare.config import reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate every test from EZSHARE_* variables and cached settings."""
    for key in list(os.environ):
        if key.startswith("EZSHARE_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


class FakeServer:
    """Just enough of the EzShare server API to exercise a session."""

    def __init__(self):
        self.tree = {"/": ["docs"], "/docs": []}
        self.files: dict[str, bytes] = {}
        self.clipboard = ""
        self.saved_pastes: list[str] = []
        self.requests: list[tuple[str, str]] = []
        self.fail_paths: set[str] = set()
        self.fail_routes: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        route = request.url.path
        if route in self.fail_routes:
            return httpx.Response(500)
        if route == "/api/browse":
            return self._browse(request.url.params["p"])
        if route == "/api/upload":
            return self._upload(request)
        if route == "/api/paste":
            form = urllib.parse.parse_qs(request.content.decode())
            text = form["clipboard"][0]
            if form["saveAsFile"][0] == "true":
                self.saved_pastes.append(text)
            else:
                self.clipboard = text
            return httpx.Response(200)
        if route == "/api/copy":
            return httpx.Response(200, text=self.clipboard)
        if route == "/api/download":
            name = request.url.params["f"].rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                content=self.files.get(name, b""),
                headers={"Content-Disposition": f'attachment; filename="{name}"'},
            )
        return httpx.Response(404)

    def _browse(self, path: str) -> httpx.Response:
        if path in self.fail_paths:
            return httpx.Response(500)
        base = "" if path == "/" else path
        entries = [
            {"fileName": name, "path": f"{base}/{name}", "isDir": True}
            for name in self.tree.get(path, [])
        ]
        if path == "/":
            entries += [
                {"fileName": name, "path": f"/{name}", "isDir": False} for name in self.files
            ]
        return httpx.Response(
            200,
            content=json.dumps(
                {"curRelPath": path, "sharedPath": "/srv/share", "files": entries}
            ),
            headers={"Content-Type": "application/json"},
        )

    def _upload(self, request: httpx.Request) -> httpx.Response:
        boundary = request.headers["Content-Type"].split("boundary=", 1)[1].encode()
        for part in request.content.split(b"--" + boundary)[1:-1]:
            head, _, data = part.partition(b"\r\n\r\n")
            name = re.search(rb'filename="([^"]*)"', head).group(1).decode()
            self.files[name] = data.removesuffix(b"\r\n")
        return httpx.Response(200)


@pytest.fixture
def server():
    return FakeServer()

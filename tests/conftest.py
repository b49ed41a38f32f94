from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from roster_engine.remote_store.http_store import HttpRemoteStore

BASE_URL = "https://api.example.test"


class FakeUsersApi:
    """
    In-memory REST collection served through httpx.MockTransport.

    Mirrors the behavior of a typical mock API: numeric ids, server-assigned
    ids on POST, and the request body echoed back on PUT.
    """

    def __init__(self, users: list[dict[str, Any]] | None = None, *, next_id: int = 11) -> None:
        self.users: list[dict[str, Any]] = [dict(u) for u in (users or [])]
        self.next_id = next_id
        self.fail_status: dict[str, int] = {}
        self.fail_transport: set[str] = set()
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _operation(request: httpx.Request) -> str:
        methods = {"GET": "list", "POST": "create", "PUT": "update", "DELETE": "delete"}
        return methods[request.method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        op = self._operation(request)
        if op in self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)
        if op in self.fail_status:
            return httpx.Response(self.fail_status[op], json={"error": "nope"})

        parts = [p for p in request.url.path.split("/") if p]
        if op == "list":
            return httpx.Response(200, json=self.users)

        if op == "create":
            body = json.loads(request.content)
            body["id"] = self.next_id
            self.next_id += 1
            self.users.append(body)
            return httpx.Response(201, json=body)

        user_id = parts[-1]
        if op == "update":
            body = json.loads(request.content)
            body["id"] = int(user_id) if user_id.isdigit() else user_id
            return httpx.Response(200, json=body)

        self.users = [u for u in self.users if str(u.get("id")) != user_id]
        return httpx.Response(200, json={})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def store(self) -> HttpRemoteStore:
        return HttpRemoteStore(BASE_URL, client=self.client())


def seed_users() -> list[dict[str, Any]]:
    return [
        {"id": 1, "name": "Ann", "username": "ann", "email": "ann@x.io", "phone": "1-770"},
        {"id": 2, "name": "Ben", "username": "ben", "email": "ben@x.io"},
    ]


@pytest.fixture
def users_api() -> FakeUsersApi:
    return FakeUsersApi(seed_users(), next_id=3)


@pytest.fixture
def mirror_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "users.json"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ROSTER_BASE_URL", "ROSTER_LOG_LEVEL", "ROSTER_DATA_ROOT"):
        monkeypatch.delenv(name, raising=False)

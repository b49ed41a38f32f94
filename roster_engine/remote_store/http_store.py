"""
HTTP implementation of RemoteStore.

Endpoint contract
-----------------
======  ======  ==============  =================
Op      Method  Path            Response
======  ======  ==============  =================
list    GET     /users          JSON array of User
create  POST    /users          JSON User
update  PUT     /users/{id}     JSON User
delete  DELETE  /users/{id}     ignored
======  ======  ==============  =================

Threading
---------
An httpx.Client is not shared across threads here. The GUI creates and uses
its store entirely within the adapter's worker thread.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence
from urllib.parse import quote

import httpx

from ..data_models import User, UserDraft, UserId
from .errors import RemoteStoreError

logger = logging.getLogger(__name__)

COLLECTION_PATH = "/users"


class HttpRemoteStore:
    """
    RemoteStore backed by a REST collection.

    Parameters
    ----------
    base_url:
        API root; the collection lives at ``<base_url>/users``.
    client:
        Optional preconfigured httpx.Client (tests pass one with a
        MockTransport). When omitted the store owns a default client and the
        transport's default timeout applies.
    """

    def __init__(self, base_url: str, *, client: httpx.Client | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        """Close the underlying client if this store created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpRemoteStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---------- URL helpers ----------
    def _collection_url(self) -> str:
        return f"{self._base_url}{COLLECTION_PATH}"

    def _item_url(self, user_id: UserId) -> str:
        return f"{self._collection_url()}/{quote(str(user_id), safe='')}"

    # ---------- Transport ----------
    def _send(
        self, operation: str, method: str, url: str, body: dict[str, Any] | None = None
    ) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(operation, f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise RemoteStoreError(
                operation,
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(operation: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(
                operation, "Response body is not valid JSON", status_code=response.status_code
            ) from exc

    @staticmethod
    def _user(operation: str, payload: Any, *, fallback_id: UserId | None = None) -> User:
        try:
            return User.from_dict(payload, fallback_id=fallback_id)
        except ValueError as exc:
            raise RemoteStoreError(operation, f"Unexpected user payload: {exc}") from exc

    # ---------- Operations ----------
    def list_all(self) -> Sequence[User]:
        response = self._send("list", "GET", self._collection_url())
        payload = self._json("list", response)
        if payload is None:
            return ()
        if not isinstance(payload, list):
            raise RemoteStoreError("list", "Expected a JSON array of users")
        users = tuple(self._user("list", item) for item in payload)
        logger.debug("Listed %d user(s)", len(users))
        return users

    def create(self, draft: UserDraft) -> User:
        response = self._send("create", "POST", self._collection_url(), draft.to_dict())
        return self._user("create", self._json("create", response))

    def update(self, user_id: UserId, draft: UserDraft) -> User:
        body = User.from_draft(user_id, draft).to_dict()
        response = self._send("update", "PUT", self._item_url(user_id), body)
        return self._user("update", self._json("update", response), fallback_id=user_id)

    def delete(self, user_id: UserId) -> None:
        self._send("delete", "DELETE", self._item_url(user_id))

"""HTTP package API client used as an import target.

Speaks the package API's REST surface:
- POST /packages creates (409 Conflict when the uuid is taken)
- PUT /packages/{uuid} updates mutable fields
- GET /packages/{uuid} looks a package up (404 when absent)
"""

import json
from typing import Any, Optional

import httpx

from package_import.store.base import AlreadyExistsError, StoreError, TargetStore, WriteContext


class HttpPackageStore(TargetStore):
    """Package store reached over HTTP. One shared client; httpx.Client is thread-safe."""

    DEFAULT_HEADERS = {
        "User-Agent": "package-import/0.1",
        "Accept": "application/json",
    }

    def __init__(self, base_url: str, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=self.DEFAULT_HEADERS,
        )

    def _error_message(self, response: httpx.Response) -> str:
        """Prefer the API's {code, message} error body over the bare status line."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            code = body.get("code")
            prefix = f"{response.status_code} {code}" if code else str(response.status_code)
            return f"{prefix}: {body['message']}"
        return f"{response.status_code} {response.reason_phrase}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

    def _body(self, record: dict[str, Any]) -> str:
        return json.dumps(record, default=str)

    def create(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        response = self._request(
            "POST",
            "/packages",
            content=self._body(record),
            headers={"Content-Type": "application/json"},
        )
        if response.status_code == 409:
            raise AlreadyExistsError(key)
        if response.is_error:
            raise StoreError(f"Create of {key} rejected: {self._error_message(response)}")

    def update(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        # The API refuses changes to immutable fields, so they never leave the client
        body = {k: v for k, v in record.items() if k not in context.immutable_fields}
        response = self._request(
            "PUT",
            f"/packages/{key}",
            content=self._body(body),
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise StoreError(f"Update of {key} rejected: {self._error_message(response)}")

    def exists(self, key: str) -> bool:
        response = self._request("GET", f"/packages/{key}")
        if response.status_code == 404:
            return False
        if response.is_error:
            raise StoreError(f"Lookup of {key} failed: {self._error_message(response)}")
        return True

    def close(self) -> None:
        self._client.close()

"""HTTP client wrapper around the tour operations REST API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

import httpx
from loguru import logger

from tourdesk.app.config import Settings
from tourdesk.app.services.query import encode, query_to_search

OVERRIDDEN_METHODS = ("PUT", "PATCH", "DELETE")


class ApiError(Exception):
    """Raised when the REST API rejects a request or cannot be reached.

    ``formik_errors`` maps field names to a single message, ready to be shown
    next to the matching form field; ``message`` is the form-level status.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
        formik_errors: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.formik_errors = formik_errors
        super().__init__(message)

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> "ApiError":
        error = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(error, dict):
            return cls(
                f"Request failed with status {status_code}",
                status_code=status_code,
                payload=payload,
            )
        formik_errors = None
        errors = error.get("errors")
        if isinstance(errors, dict):
            formik_errors = {
                name: ", ".join(messages) if isinstance(messages, list) else str(messages)
                for name, messages in errors.items()
            }
        return cls(
            error.get("message") or f"Request failed with status {status_code}",
            status_code=status_code,
            payload=payload,
            formik_errors=formik_errors,
        )


class TourApiClient:
    """Async client handling the bearer token, body encoding and errors."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._token: Optional[str] = settings.access_token or self._load_token()
        self._client = httpx.AsyncClient(
            base_url=str(settings.api_base_url),
            timeout=httpx.Timeout(10.0, read=30.0),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @asynccontextmanager
    async def lifespan(self) -> AsyncIterator["TourApiClient"]:
        """Async context manager to ensure resource cleanup."""
        try:
            yield self
        finally:
            await self.close()

    # --- Token storage ---

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token
        token_file = self._settings.token_file
        if token_file is None:
            return
        if token:
            token_file.write_text(token, encoding="utf-8")
        elif token_file.exists():
            token_file.unlink()

    def _load_token(self) -> Optional[str]:
        token_file = self._settings.token_file
        if token_file is None or not token_file.exists():
            return None
        return token_file.read_text(encoding="utf-8").strip() or None

    # --- Transport ---

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Perform an authorized, form-encoded API request."""
        method = method.upper()
        body: Dict[str, Any] = dict(data or {})
        if self._settings.method_override and method in OVERRIDDEN_METHODS:
            body["_method"] = method
            method = "POST"

        headers = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        target = url + query_to_search(params)
        logger.debug("API request {method} {url}", method=method, url=target)
        try:
            response = await self._client.request(
                method,
                target,
                headers=headers,
                content=encode(body) if body else None,
            )
        except httpx.HTTPError as exc:
            logger.error("API request {url} failed: {error}", url=target, error=exc)
            raise ApiError(f"Could not reach the API: {exc}") from exc
        payload = self._decode(response)
        if response.status_code >= 400:
            logger.error(
                "API error {status} on {url}: {body}",
                status=response.status_code,
                url=target,
                body=response.text,
            )
            raise ApiError.from_response(response.status_code, payload)
        if isinstance(payload, dict) and payload.get("access_token"):
            self.set_token(payload["access_token"])
        return payload if isinstance(payload, dict) else {"data": payload}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(
        self, url: str, *, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request("GET", url, params=params)

    async def post(
        self, url: str, data: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request("POST", url, data=data)

    async def put(
        self, url: str, data: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request("PUT", url, data=data)

    async def patch(
        self, url: str, data: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request("PATCH", url, data=data)

    async def delete(
        self, url: str, data: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self._request("DELETE", url, data=data)

    # --- Session ---

    async def login(self, credentials: Mapping[str, Any]) -> Dict[str, Any]:
        """Exchange credentials for an access token (kept by the client)."""
        return await self.post("/login", credentials)

    async def logout(self) -> None:
        try:
            await self.delete("/logout")
        finally:
            self.set_token(None)

    async def get_current_user(self) -> Dict[str, Any]:
        response = await self.get("/me")
        return response.get("data") or response.get("user") or {}

    # --- Pricing ---

    async def get_prices(
        self, group: str, rows: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Bulk price lookup; results are positionally aligned with ``rows``."""
        return await self.get("/prices", params={group: rows})

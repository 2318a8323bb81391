"""HTTP client for the inspection server.

One request per call: no retries and no caching. Every failure is raised as a
`SyncError` subclass so callers never see raw httpx or pydantic exceptions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from inspectsync.core.config import Settings, get_settings
from inspectsync.core.errors import AuthError, NetworkError, ParseError, ServerError
from inspectsync.core.metrics import observe_remote_request
from inspectsync.core.structured_logging import log_json
from inspectsync.models.enums import Endpoint
from inspectsync.schemas.auth import AuthToken, TokenRequest, TokenResponse
from inspectsync.schemas.hierarchy import HierarchyResponse
from inspectsync.schemas.result import (
    RemoteResult,
    ResultAck,
    ResultListResponse,
    ResultSubmission,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Credentials:
    """Inspector account used to obtain a session token."""

    username: str
    password: str

    @classmethod
    def from_settings(cls, settings: Settings) -> Credentials:
        return cls(username=settings.api_username, password=settings.api_password)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class RemoteDataClient:
    """Async client for the token, hierarchy and results endpoints."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=self.settings.request_timeout_seconds,
            headers=JSON_HEADERS,
        )

    async def __aenter__(self) -> RemoteDataClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    def url_for(self, endpoint: Endpoint) -> str:
        return f"{self.settings.api_base_url}{endpoint.path}"

    async def request_token(self, credentials: Credentials) -> AuthToken:
        """Exchange credentials for a session token."""
        body = TokenRequest(username=credentials.username, password=credentials.password)
        payload = await self._send(Endpoint.TOKEN, json_body=body.model_dump())

        if not payload.get("success"):
            raise AuthError("Server rejected the credentials")

        try:
            parsed = TokenResponse.model_validate(payload)
        except ValidationError as exc:
            raise AuthError("Token response did not contain a token") from exc

        return AuthToken(value=parsed.data.token)

    async def fetch_hierarchy(self, token: AuthToken) -> HierarchyResponse:
        """Fetch the default section/subsection/comment hierarchy."""
        payload = await self._send(Endpoint.HIERARCHY, token=token)
        self._require_success(Endpoint.HIERARCHY, payload)
        return self._validate(Endpoint.HIERARCHY, HierarchyResponse, payload)

    async def fetch_results(self, token: AuthToken) -> list[RemoteResult]:
        """Fetch the results already stored on the server."""
        payload = await self._send(Endpoint.RESULTS_READ, token=token)
        self._require_success(Endpoint.RESULTS_READ, payload)
        return self._validate(Endpoint.RESULTS_READ, ResultListResponse, payload).data

    async def submit_result(
        self,
        token: AuthToken,
        submission: ResultSubmission,
    ) -> ResultAck:
        """Post one result to the server."""
        payload = await self._send(
            Endpoint.RESULTS_WRITE,
            token=token,
            json_body=submission.model_dump(),
        )
        self._require_success(Endpoint.RESULTS_WRITE, payload)
        return self._validate(Endpoint.RESULTS_WRITE, ResultAck, payload)

    async def _send(
        self,
        endpoint: Endpoint,
        *,
        token: AuthToken | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        params: dict[str, str] | None = None
        if endpoint.requires_token:
            if token is None:
                raise AuthError(f"{endpoint.value} requires a session token")
            params = token.query_params

        started = time.perf_counter()
        try:
            response = await self._http.request(
                endpoint.method,
                self.url_for(endpoint),
                params=params,
                json=json_body,
            )
        except httpx.RequestError as exc:
            self._record(endpoint, "network_error", started, error=str(exc))
            raise NetworkError(f"{endpoint.value} request failed: {exc}") from exc

        if response.status_code >= 400:
            self._record(endpoint, "http_error", started, status_code=response.status_code)
            if endpoint is Endpoint.TOKEN and response.status_code in (401, 403):
                raise AuthError("Server rejected the credentials")
            raise ServerError(
                f"{endpoint.value} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            self._record(endpoint, "parse_error", started, status_code=response.status_code)
            raise ParseError(f"{endpoint.value} response is not valid JSON") from exc

        if not isinstance(payload, dict):
            self._record(endpoint, "parse_error", started, status_code=response.status_code)
            raise ParseError(f"{endpoint.value} response is not a JSON object")

        self._record(endpoint, "ok", started, status_code=response.status_code)
        return payload

    @staticmethod
    def _require_success(endpoint: Endpoint, payload: dict[str, Any]) -> None:
        if not payload.get("success"):
            raise ServerError(f"{endpoint.value} responded with success=false")

    @staticmethod
    def _validate(endpoint: Endpoint, model: type[ModelT], payload: dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ParseError(
                f"{endpoint.value} response has an unexpected shape: "
                f"{exc.error_count()} validation error(s)"
            ) from exc

    @staticmethod
    def _record(endpoint: Endpoint, outcome: str, started: float, **fields: Any) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        observe_remote_request(
            endpoint=endpoint.value,
            outcome=outcome,
            duration_ms=duration_ms,
        )
        log_json(
            logger,
            logging.INFO if outcome == "ok" else logging.WARNING,
            "remote_request" if outcome == "ok" else "remote_request_error",
            endpoint=endpoint.value,
            method=endpoint.method,
            outcome=outcome,
            duration_ms=round(duration_ms, 2),
            **fields,
        )

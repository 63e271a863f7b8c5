"""
MQM CI Bridge — session handling shared by all MQM REST calls.

Owns the httpx client, the sign-in cookie, URI construction and the
status-code → error translation. Every round-trip goes through
``_exchange`` so the response is released on all exit paths.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import quote

import httpx

from mqm.client.auth import COOKIE_CSRF, HEADER_CSRF, MqmCredentials, client_headers
from mqm.core.config import MqmConnectionConfig
from mqm.errors import (
    LoginFailedError,
    RequestFailedError,
    ResponseParseError,
    TransportFailedError,
)
from mqm.utils.logging import client_logger as logger, round_trip

URI_AUTHENTICATION = "authentication/sign_in"
URI_LOGOUT = "authentication/sign_out"

SHARED_SPACE_INTERNAL_API = "internal-api/shared_spaces/{shared_space}/"
SHARED_SPACE_API = "api/shared_spaces/{shared_space}/"
WORKSPACE_API = SHARED_SPACE_API + "workspaces/{workspace}/"


def expand_template(template: str, *params: Any) -> str:
    """Fill ``{0}``, ``{1}``… with params, each encoded as one path segment."""
    return template.format(*(quote(str(p), safe="") for p in params))


class AbstractMqmRestClient:
    """Authenticated, synchronous access to one MQM shared space."""

    def __init__(
        self,
        config: MqmConnectionConfig,
        transport: httpx.BaseTransport | None = None,
    ):
        config.validate()
        self.config = config
        self.location = config.location.rstrip("/")
        self.credentials = MqmCredentials(config.username, config.password)
        self._http = httpx.Client(
            timeout=config.timeout,
            transport=transport,
            headers=client_headers(config.client_type),
            follow_redirects=False,
        )
        self._authenticated = False

    # ---- Session ----

    def login(self) -> None:
        """Sign in and keep the session cookie for subsequent calls."""
        with round_trip("sign in"):
            with self._exchange(
                "POST",
                f"{self.location}/{URI_AUTHENTICATION}",
                authenticate=False,
                json=self.credentials.as_sign_in_payload(),
            ) as resp:
                if not resp.is_success:
                    raise LoginFailedError(
                        resp.status_code, resp.reason_phrase, self._try_parse_message(resp)
                    )
        csrf = self._http.cookies.get(COOKIE_CSRF)
        if csrf:
            self._http.headers[HEADER_CSRF] = csrf
        self._authenticated = True
        logger.info("  Signed in to %s as '%s'", self.location, self.credentials.username)

    def logout(self) -> None:
        if not self._authenticated:
            return
        with self._exchange("POST", f"{self.location}/{URI_LOGOUT}", authenticate=False) as resp:
            self._authenticated = False
            self._http.cookies.clear()
            self._http.headers.pop(HEADER_CSRF, None)
            if not resp.is_success:
                raise self._request_failure("Logout failed", resp)

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---- URIs ----

    def shared_space_internal_api_uri(self, template: str, *params: Any) -> str:
        prefix = SHARED_SPACE_INTERNAL_API.format(
            shared_space=quote(self.config.shared_space, safe="")
        )
        return f"{self.location}/{prefix}{expand_template(template, *params)}"

    def workspace_api_uri(self, workspace_id: int, template: str, *params: Any) -> str:
        prefix = WORKSPACE_API.format(
            shared_space=quote(self.config.shared_space, safe=""),
            workspace=workspace_id,
        )
        return f"{self.location}/{prefix}{expand_template(template, *params)}"

    # ---- Round-trips ----

    @contextmanager
    def _exchange(
        self, method: str, url: str, *, authenticate: bool = True, **kwargs: Any
    ) -> Iterator[httpx.Response]:
        """Send one request and yield the fully-read response, closing it afterwards."""
        if authenticate and not self._authenticated:
            self.login()
        request = self._http.build_request(method, url, **kwargs)
        try:
            response = self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise TransportFailedError(f"{method} {url} failed: {exc}", exc) from exc
        try:
            response.read()
            yield response
        except httpx.HTTPError as exc:
            raise TransportFailedError(f"{method} {url} failed: {exc}", exc) from exc
        finally:
            response.close()

    def _request_failure(self, context: str, response: httpx.Response) -> RequestFailedError:
        return RequestFailedError.from_status(
            context,
            response.status_code,
            response.reason_phrase,
            self._try_parse_message(response),
        )

    @staticmethod
    def _try_parse_message(response: httpx.Response) -> str:
        """Best-effort extraction of the server's error description."""
        if not response.content:
            return ""
        try:
            obj = response.json()
        except ValueError as exc:
            logger.error("Unable to determine failure message: %s", exc)
            return ""
        if isinstance(obj, dict):
            if "error_code" in obj and "description" in obj:
                return str(obj["description"])
            if "message" in obj:
                return str(obj["message"])
        return ""

    @staticmethod
    def _json_object(response: httpx.Response, context: str) -> dict[str, Any]:
        try:
            obj = response.json()
        except ValueError as exc:
            raise ResponseParseError(f"{context}: malformed JSON ({exc})") from exc
        if not isinstance(obj, dict):
            raise ResponseParseError(f"{context}: expected a JSON object")
        return obj

    @staticmethod
    def _json_objects(obj: dict[str, Any], key: str, context: str) -> list[dict[str, Any]]:
        items = obj.get(key)
        if items is None:
            raise ResponseParseError(f"{context}: no '{key}' array")
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ResponseParseError(f"{context}: '{key}' is not a list of objects")
        return items

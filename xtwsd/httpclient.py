"""A small synchronous HTTP(S) client.

Query parameters and request headers are gathered on the client and sent
with the next request only; they are cleared once that request has been
built.
"""

from __future__ import annotations

import http.client
import json
import ssl
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .xtutil import url_encode

__all__ = ["Response", "HttpClient", "USER_AGENT"]

USER_AGENT = "xtwsd/0.2"


@dataclass
class Response:
    """The status, headers and raw body of an HTTP response."""

    status: int
    reason: str = ""
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def ok(self) -> bool:
        """True when the response status is 200."""
        return self.status == 200

    def get_body(self) -> str:
        """Return the body as text."""
        return self.body.decode("utf-8", errors="replace")

    def as_json(self) -> Any:
        """Decode the body as JSON; raises json.JSONDecodeError if it is not."""
        return json.loads(self.get_body())

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first header called ``name`` (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return default

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.headers)


class HttpClient:
    """Sends GET and POST requests to one host over http or https."""

    def __init__(
        self,
        host: str,
        protocol: str = "http",
        port: str | int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self.protocol = protocol
        if port is None:
            port = "443" if protocol == "https" else "80"
        self.port = str(port)
        self.timeout = timeout
        self._query_params: dict[str, str] = {}
        self._request_headers: dict[str, tuple[str, str]] = {}

    def set_query_parameter(self, name: str, value: str) -> None:
        """Add a query parameter to the next request; an existing name is kept."""
        self._query_params.setdefault(name, value)

    def set_request_header(self, name: str, value: str) -> None:
        """Add a header to the next request; an existing header is kept."""
        self._request_headers.setdefault(name.lower(), (name, value))

    def build_target(self, path: str) -> str:
        """Return ``path`` with the pending query parameters appended.

        Parameters are ordered by name; values are percent-encoded.
        """
        if not self._query_params:
            return path
        query = "&".join(
            f"{name}={url_encode(value)}"
            for name, value in sorted(self._query_params.items())
        )
        return f"{path}?{query}"

    def get(self, path: str) -> Response:
        """Send a GET request for ``path``."""
        return self._execute("GET", path, b"")

    def post(self, path: str, body: str | bytes) -> Response:
        """Send ``body`` verbatim in a POST request to ``path``."""
        data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        return self._execute("POST", path, data)

    def post_json(self, path: str, body: Any) -> Response:
        """POST ``body`` serialised as compact JSON, typed application/json."""
        self.set_request_header("Content-Type", "application/json")
        text = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
        return self.post(path, text)

    def _take_pending(self, path: str) -> tuple[str, list[tuple[str, str]]]:
        target = self.build_target(path)
        headers: dict[str, tuple[str, str]] = {
            "host": ("Host", self.host),
            "user-agent": ("User-Agent", USER_AGENT),
        }
        headers.update(self._request_headers)
        self._query_params.clear()
        self._request_headers.clear()
        return target, list(headers.values())

    def _connection(self) -> http.client.HTTPConnection:
        port = int(self.port)
        if self.protocol == "https":
            context = ssl.create_default_context()
            context.minimum_version = ssl.TLSVersion.TLSv1_2
            return http.client.HTTPSConnection(
                self.host, port, timeout=self.timeout, context=context
            )
        return http.client.HTTPConnection(self.host, port, timeout=self.timeout)

    def _execute(self, method: str, path: str, body: bytes) -> Response:
        if self.protocol == "https":
            print(f"   {method}: {path}")
        conn = self._connection()
        try:
            conn.connect()
            target, headers = self._take_pending(path)
            conn.putrequest(method, target, skip_host=True, skip_accept_encoding=True)
            for name, value in headers:
                conn.putheader(name, value)
            if body or method != "GET":
                conn.putheader("Content-Length", str(len(body)))
            conn.endheaders(body or None)
            raw = conn.getresponse()
            data = raw.read()
            return Response(
                status=raw.status,
                reason=raw.reason,
                headers=list(raw.getheaders()),
                body=data,
            )
        finally:
            conn.close()
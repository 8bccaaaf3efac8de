"""Low-level calls to the server API, with error reporting and tracing."""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Iterable, Iterator

import requests

_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_CHUNK = 64 * 1024


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


@dataclass
class ServerMessage:
    """Error description returned by the server."""

    error: str = ""
    status_code: str = ""
    message: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ServerMessage:
        message = data.get("message") or []
        if isinstance(message, str):
            message = [message]
        status = data.get("statusCode")
        return cls(
            error=str(data.get("error") or ""),
            status_code="" if status is None else str(status),
            message=[str(m) for m in message],
        )


class CallError(Exception):
    """Raised when a call to the server fails."""

    def __init__(
        self,
        end_point: str,
        method: str = "",
        url: str = "",
        status: int = 0,
        cause: BaseException | None = None,
        message: ServerMessage | None = None,
    ) -> None:
        self.end_point = end_point
        self.method = method
        self.url = url
        self.status = status
        self.cause = cause
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [f"{self.end_point}, {self.method}, {self.url}"]
        if self.status > 0:
            parts.append(f", {self.status} {_status_text(self.status)}")
        parts.append("\n")
        if self.cause is not None and not isinstance(self.cause, CallError):
            parts.append(f"{self.cause}\n")
        if self.message is not None:
            if self.message.error:
                parts.append(f"{self.message.error}\n")
            for line in self.message.message:
                parts.append(f"{line}\n")
        return "".join(parts)


def _tee_stream(stream: Any) -> Iterator[bytes]:
    while True:
        chunk = stream.read(_CHUNK)
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        sys.stdout.write(chunk.decode("utf-8", errors="replace"))
        yield chunk
    print("\n--- BODY ---")


def _tee_iterable(items: Iterable[bytes]) -> Iterator[bytes]:
    for chunk in items:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        sys.stdout.write(chunk.decode("utf-8", errors="replace"))
        yield chunk
    print("\n--- BODY ---")


class ApiBase:
    """Sends authenticated requests to the server API.

    Setting ssl_verify to True disables the check of the server certificate.
    """

    def __init__(self, end_point: str, key: str, ssl_verify: bool = False) -> None:
        self.end_point = end_point + "/api"
        self.key = key
        self.api_trace = False
        self.session = requests.Session()
        self.session.verify = not ssl_verify

    def _trace(self, method: str, url: str, headers: dict[str, str], body: Any) -> Any:
        print("--------------------")
        print(method, url)
        for name, value in headers.items():
            print(f"{name} [{value}]")
        if body is None:
            return None
        if isinstance(body, (bytes, bytearray)):
            sys.stdout.write(bytes(body).decode("utf-8", errors="replace"))
            print("\n--- BODY ---")
            return body
        if isinstance(body, str):
            sys.stdout.write(body)
            print("\n--- BODY ---")
            return body
        if hasattr(body, "read"):
            return _tee_stream(body)
        return _tee_iterable(body)

    def call(
        self,
        api: str,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        data: Any = None,
        content_type: str | None = None,
        accept_json: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON answer, or None when empty.

        Raises CallError on transport failures, on statuses of 300 and above,
        and on answers that are not valid JSON.
        """
        method = method.upper()
        url = self.end_point + path
        if _CONTROL.search(url):
            raise CallError(
                api, method, url, 0,
                ValueError(f"parse {url!r}: invalid control character in URL"),
            )

        headers: dict[str, str] = {}
        if accept_json:
            headers["Accept"] = "application/json"
        body = data
        if json_body is not None:
            try:
                text = json.dumps(
                    json_body,
                    indent=1 if self.api_trace else None,
                    separators=None if self.api_trace else (",", ":"),
                )
            except (TypeError, ValueError) as exc:
                raise CallError(api, method, url, 0, exc) from exc
            body = (text + "\n").encode("utf-8")
            headers["Content-Type"] = "application/json"
        if content_type:
            headers["Content-Type"] = content_type
        headers["x-api-key"] = self.key

        if self.api_trace:
            body = self._trace(method, url, headers, body)

        try:
            response = self.session.request(method, url, headers=headers, data=body)
        except requests.RequestException as exc:
            raise CallError(api, method, url, 0, exc) from exc

        with response:
            status = response.status_code
            if status >= 300:
                message = ServerMessage()
                try:
                    decoded = response.json()
                except ValueError:
                    decoded = None
                if isinstance(decoded, dict):
                    message = ServerMessage.from_json(decoded)
                raise CallError(api, method, url, status, None, message)

            if status == HTTPStatus.NO_CONTENT or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise CallError(api, method, url, status, exc) from exc
"""HTTP client with timeouts and optional transport-level retries."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from prtr_sanctions.common.constants import DEFAULT_HEADERS, USER_AGENT
from prtr_sanctions.common.errors import FetchError

TRANSIENT_TRANSPORT_ERRORS = (requests.ConnectionError, requests.Timeout)


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 30.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 30.0


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        headers: dict[str, str] | None = None,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()
        self.session.max_redirects = 3
        self.default_headers = {**DEFAULT_HEADERS, "user-agent": user_agent, **(headers or {})}

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = dict(self.default_headers)
        if headers:
            out.update(headers)
        return out

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        response = self.session.request(
            method=method,
            url=url,
            params=params,
            headers=self._headers(headers),
            timeout=(self.timeout.connect, self.timeout.read),
            allow_redirects=True,
        )
        return HttpResponse(
            status_code=response.status_code,
            headers={key.lower(): value for key, value in response.headers.items()},
            body=response.content,
            url=response.url,
        )

    def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Send one request; non-2xx statuses are returned, not raised."""

        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(TRANSIENT_TRANSPORT_ERRORS),
            reraise=True,
        )
        def _wrapped() -> HttpResponse:
            return self._request(method, url, params=params, headers=headers)

        try:
            return _wrapped()
        except requests.RequestException as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

    def get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        return self.request("GET", url, params=params, headers=headers)

"""Shared HTTP helpers used by the platform data sources.

``HttpClient`` is the async JSON transport (aiohttp) with retries on
connection failures and rate limiting. ``endpoint_responds`` is a small
synchronous HEAD check (requests) used during platform detection.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import aiohttp
import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from repository.errors import PlatformError

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Status, headers and decoded body of a completed request."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


def _rate_limit_wait(response: HttpResponse) -> Optional[float]:
    """Seconds to wait before retrying a rate-limited response, or None."""
    if response.status not in (403, 429):
        return None

    retry_after = response.header("Retry-After")
    if retry_after:
        try:
            return min(max(float(retry_after), 0.0), Constants.RATE_LIMIT_MAX_WAIT_SEC)
        except ValueError:
            return 1.0

    if response.header("X-RateLimit-Remaining") == "0":
        reset = response.header("X-RateLimit-Reset")
        wait = 1.0
        if reset:
            try:
                wait = max(float(reset) - time.time(), 1.0)
            except ValueError:
                pass
        return min(wait, Constants.RATE_LIMIT_MAX_WAIT_SEC)

    # 429 without hints
    if response.status == 429:
        return 1.0
    return None


class HttpClient:
    """Async JSON client bound to one API base URL.

    The aiohttp session is created lazily on first use and closed by
    ``aclose`` (or when leaving ``async with``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        platform: str,
        headers: Optional[Mapping[str, str]] = None,
        ignore_cert_errors: bool = False,
        timeout: int = Constants.REQUEST_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        log: Optional[logging.Logger] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root; relative request paths are appended to it.
            platform: Platform name used in errors and log context.
            headers: Extra request headers (authorization, accept variants).
            ignore_cert_errors: Disable TLS certificate verification.
            timeout: Total request timeout in seconds.
            session: Pre-built session (tests); not closed by ``aclose``.
            log: Logger for request traces.
        """
        self.base_url = base_url.rstrip("/")
        self.platform = platform
        self.ignore_cert_errors = ignore_cert_errors
        self.log = log or logger
        self._headers = {
            "User-Agent": Constants.USER_AGENT,
            "Accept": "application/json",
        }
        if headers:
            self._headers.update(headers)
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def url_for(self, path: str) -> str:
        """Absolute URL for a path; absolute URLs pass through unchanged."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def _fetch(self, url: str, params: Optional[Mapping[str, Any]]) -> HttpResponse:
        session = self._ensure_session()
        async with session.get(
            url,
            headers=self._headers,
            params=params,
            ssl=False if self.ignore_cert_errors else True,
        ) as resp:
            text = await resp.text()
            return HttpResponse(status=resp.status, headers=dict(resp.headers), text=text)

    async def get_json(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> HttpResponse:
        """GET a path and decode its JSON body.

        Connection errors and timeouts are retried with exponential
        backoff; rate-limited responses are retried after the advertised
        wait. Any other status is returned to the caller unchanged.

        Args:
            path: Path relative to the base URL, or an absolute URL
            params: Optional query parameters

        Returns:
            HttpResponse whose ``data`` is the decoded JSON or None

        Raises:
            PlatformError: when every attempt failed at the connection level
        """
        url = self.url_for(path)
        safe_target = safe_url(url)
        last_exception = ""
        rate_limit_retries = 0
        attempt = 0

        while attempt < Constants.HTTP_RETRY_MAX:
            with Timer() as t:
                if is_debug_enabled(self.log):
                    self.log.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            platform=self.platform,
                            attempt=attempt + 1,
                        ),
                    )
                try:
                    response = await self._fetch(url, params)
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    last_exception = str(exc) or type(exc).__name__
                    if is_debug_enabled(self.log):
                        self.log.debug(
                            "HTTP request exception",
                            extra=extra_context(
                                event="http_exception",
                                component="http_client",
                                action="GET",
                                outcome=type(exc).__name__,
                                attempt=attempt + 1,
                                target=safe_target,
                            ),
                        )
                    attempt += 1
                    if attempt < Constants.HTTP_RETRY_MAX:
                        await asyncio.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
                    continue

            if is_debug_enabled(self.log):
                self.log.debug(
                    "HTTP response",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        outcome="success" if response.ok else "http_error",
                        status_code=response.status,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                    ),
                )

            wait = _rate_limit_wait(response)
            if wait is not None and rate_limit_retries < Constants.RATE_LIMIT_RETRIES:
                rate_limit_retries += 1
                self.log.warning(
                    "%s API rate limit reached, retrying in %.1f seconds", self.platform, wait
                )
                await asyncio.sleep(wait)
                continue

            if response.text:
                try:
                    response.data = json.loads(response.text)
                except json.JSONDecodeError:
                    if is_debug_enabled(self.log):
                        self.log.debug(
                            "JSON decode error",
                            extra=extra_context(
                                event="parse",
                                component="http_client",
                                action="get_json",
                                outcome="json_decode_error",
                                status_code=response.status,
                                target=safe_target,
                            ),
                        )
            return response

        raise PlatformError(
            self.platform,
            f"{self.platform} request to {safe_target} failed after "
            f"{Constants.HTTP_RETRY_MAX} attempts: {last_exception}",
        )


def endpoint_responds(
    url: str,
    *,
    timeout: float = Constants.DETECTION_TIMEOUT,
    verify: bool = True,
) -> bool:
    """Return True when a HEAD request suggests the endpoint exists.

    2xx, 401 and 403 count as present (the API answered); anything else,
    including connection failures, counts as absent.
    """
    safe_target = safe_url(url)
    try:
        res = requests.head(
            url,
            timeout=timeout,
            verify=verify,
            allow_redirects=True,
            headers={"User-Agent": Constants.USER_AGENT},
        )
    except requests.RequestException as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "Endpoint check failed",
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="HEAD",
                    outcome=type(exc).__name__,
                    target=safe_target,
                ),
            )
        return False

    if is_debug_enabled(logger):
        logger.debug(
            "Endpoint check response",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="HEAD",
                status_code=res.status_code,
                target=safe_target,
            ),
        )
    return 200 <= res.status_code < 300 or res.status_code in (401, 403)

"""HTTP client service for Steam requests with optional proxy indirection."""

import re
from typing import Any
from urllib.parse import quote, urlencode

import httpx
import structlog

log = structlog.stdlib.get_logger()

_KEY_PARAM = re.compile(r"(key=)[^&]+", re.IGNORECASE)


def redact_url(url: str) -> str:
    """Mask the API key query parameter so it never reaches the logs."""
    return _KEY_PARAM.sub(r"\1***", url)


class HttpClientService:
    """Async HTTP client making exactly one attempt per request."""

    def __init__(
        self,
        timeout: float = 30.0,
        proxy_url: str | None = None,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            proxy_url: Prefix that the percent-encoded target URL is appended to
            verify_ssl: Whether to verify SSL certificates
            transport: Custom transport (used by tests)
        """
        self.timeout = timeout
        self.proxy_url = proxy_url

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": "Steam-Group-Stats/0.1"
            },
            follow_redirects=True,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=40),
            verify=verify_ssl,
            transport=transport,
        )

        log.info(
            "HTTP client service initialized",
            timeout=timeout,
            proxied=proxy_url is not None,
            verify_ssl=verify_ssl
        )

    def build_url(self, url: str, params: dict[str, Any] | None = None) -> str:
        """Build the final request URL, routing it through the proxy if set."""
        target = f"{url}?{urlencode(params)}" if params else url
        if self.proxy_url:
            return self.proxy_url + quote(target, safe="")
        return target

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a single GET request.

        Args:
            url: The URL to request
            params: Optional query parameters

        Returns:
            HTTP response object

        Raises:
            httpx.HTTPStatusError: On a 4xx/5xx response
            httpx.RequestError: On transport failure or timeout
        """
        request_url = self.build_url(url, params)
        safe_url = redact_url(request_url)

        log.debug("Making HTTP GET request", url=safe_url)

        try:
            response = await self._client.get(request_url)
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            log.warning(
                "HTTP GET request failed",
                url=safe_url,
                error=redact_url(str(e)),
                error_type=type(e).__name__
            )
            raise

        log.debug(
            "HTTP GET request successful",
            url=safe_url,
            status_code=response.status_code,
            content_length=len(response.content)
        )
        return response

    async def get_text(self, url: str, params: dict[str, Any] | None = None) -> str:
        response = await self.get(url, params)
        return response.text

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.get(url, params)
        return response.json()

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

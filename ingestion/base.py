"""
Base class for upstream provider clients
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional
import httpx
import logging

from ingestion.result import FetchResult
from core.exceptions import (
    ETLException,
    MalformedUpstreamResponse,
    UpstreamError,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)


class ProviderClient:
    """
    Base class for all provider clients.

    Responsibilities:
    - Bounded HTTP GETs (every request carries the client timeout)
    - Mapping transport, status and parse failures onto UpstreamUnavailable /
      MalformedUpstreamResponse
    - Converting every failure into a FetchResult at the public boundary, so
      a provider problem never escapes into the orchestrator

    No retries: the next scheduled run retries whatever failed.
    """

    provider_name = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Use the injected client, or open one for the duration of a lookup"""
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                yield client

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            UpstreamUnavailable: timeout, connection failure or non-2xx status
            MalformedUpstreamResponse: body is not JSON
        """
        context = {"provider": self.provider_name, "url": url}

        try:
            logger.debug(f"GET {url}")
            response = await client.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
                follow_redirects=True
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable(
                f"Request timed out after {self.timeout}s",
                context={**context, "timeout": self.timeout},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(
                "Provider unreachable",
                context=context,
                original_exception=e
            )

        if not response.is_success:
            raise UpstreamUnavailable(
                f"Provider returned HTTP {response.status_code}",
                context={
                    **context,
                    "status_code": response.status_code,
                    "response_body": response.text[:500]  # Truncate
                }
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(
                "Failed to parse JSON response",
                context={**context, "response_body": response.text[:500]},
                original_exception=e
            )

    async def _guarded(
        self,
        operation: Callable[[], Awaitable[FetchResult]],
        description: str
    ) -> FetchResult:
        """
        Run a lookup and turn any failure into FetchResult.failed.

        Unexpected exceptions (KeyError, TypeError, ...) come from payloads
        that do not have the expected shape and are reported as malformed.
        """
        try:
            return await operation()

        except UpstreamError as e:
            logger.error(
                f"{self.provider_name} fetch failed for {description}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            return FetchResult.failed(e)

        except ETLException as e:
            wrapped = MalformedUpstreamResponse(
                e.message,
                context={"provider": self.provider_name, **e.context},
                original_exception=e
            )
            logger.error(f"{self.provider_name} fetch failed for {description}: {e.message}")
            return FetchResult.failed(wrapped)

        except Exception as e:
            wrapped = MalformedUpstreamResponse(
                "Unexpected provider payload",
                context={"provider": self.provider_name, "lookup": description},
                original_exception=e
            )
            logger.error(
                f"{self.provider_name} fetch failed for {description}: "
                f"{type(e).__name__}: {e}"
            )
            return FetchResult.failed(wrapped)

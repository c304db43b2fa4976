"""
Base Notion Client Module

Contains core client functionality:
- Authentication headers (integration token, API version)
- Request pipeline: bulkhead -> circuit breaker -> retry with backoff
- Error extraction from Notion JSON error bodies
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from notion_sync import config
from notion_sync.constants import BREAKER_STATUS_CODES
from notion_sync.core.circuit_breaker import Bulkhead, CircuitBreaker, CircuitOpenError
from notion_sync.core.retry import call_with_retry
from notion_sync.exceptions import NotionSyncError
from notion_sync.logger import logger


class NotionApiError(NotionSyncError):
    """Non-success response from the Notion API.

    Attributes:
        status: HTTP status code
        code: Notion error code (e.g. "validation_error"), may be empty
        message: Human readable message from the error body
    """

    def __init__(self, status: int, code: str = "", message: str = ""):
        self.status = status
        self.code = code
        self.message = message
        detail = f" ({code})" if code else ""
        super().__init__(f"Notion API error {status}{detail}: {message}")


class NotionRateLimitError(NotionApiError):
    """Still rate limited (429) after all retries."""


class NotionServerError(NotionApiError):
    """500/502/504 response; counted by the circuit breaker."""


def extract_error(response: requests.Response) -> NotionApiError:
    """Build the matching NotionApiError for a failed response."""
    code = ""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        code = body.get("code") or ""
        message = body.get("message") or response.text
    else:
        message = response.text or response.reason or ""

    if response.status_code == 429:
        return NotionRateLimitError(response.status_code, code, message)
    if response.status_code in BREAKER_STATUS_CODES:
        return NotionServerError(response.status_code, code, message)
    return NotionApiError(response.status_code, code, message)


class NotionClientBase:
    """Base class for the Notion API client with authentication and resilience policies."""

    def __init__(self, api_key: Optional[str] = None,
                 notion_version: Optional[str] = None,
                 base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None,
                 max_retries: Optional[int] = None,
                 retry_base_delay: Optional[float] = None,
                 circuit_breaker: Optional[CircuitBreaker] = None,
                 bulkhead: Optional[Bulkhead] = None):
        """Initialize the Notion client.

        Args:
            api_key: Integration token (defaults to config.require_api_key())
            notion_version: Notion-Version header (defaults to config)
            base_url: API root URL (defaults to config)
            session: Optional requests session, mainly for tests
            max_retries: Retries on 409/429/503 (defaults to config)
            retry_base_delay: First backoff delay in seconds (defaults to config)
            circuit_breaker: Shared breaker (one per client by default)
            bulkhead: Shared concurrency limiter (one per client by default)
        """
        self.api_key = api_key or config.require_api_key()
        self.notion_version = notion_version or config.NOTION_VERSION
        self.base_url = (base_url or config.NOTION_BASE_URL).rstrip("/")
        self.max_retries = config.API_MAX_RETRIES if max_retries is None else max_retries
        self.retry_base_delay = config.API_RETRY_BASE_DELAY if retry_base_delay is None else retry_base_delay
        self.timeout = config.API_TIMEOUT

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json",
        })

        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_exceptions=(NotionServerError, requests.ConnectionError, requests.Timeout),
        )
        self.bulkhead = bulkhead or Bulkhead(config.MAX_PARALLEL_REQUESTS)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _quote_id(object_id: str) -> str:
        return quote(object_id, safe="")

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """One retried HTTP exchange; server errors raise so the breaker counts them."""
        response = call_with_retry(
            self.session.request, method, url,
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            timeout=self.timeout,
            **kwargs
        )
        if response.status_code in BREAKER_STATUS_CODES:
            raise extract_error(response)
        return response

    def _request(self, method: str, path: str,
                 params: Optional[Dict[str, Any]] = None,
                 json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make an API request through the resilience pipeline.

        Returns:
            Decoded JSON body ({} for empty bodies)

        Raises:
            NotionApiError: Non-success response
            CircuitOpenError: Breaker is open
            requests.RequestException: Network failure
        """
        url = self._url(path)
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        logger.debug(f"{method} {url}")
        with self.bulkhead:
            try:
                response = self.circuit_breaker.call(self._send, method, url, **kwargs)
            except CircuitOpenError:
                logger.error(f"{method} {path} rejected, circuit is open")
                raise
            except NotionApiError as e:
                logger.error(f"{method} {path} failed: {e}")
                raise

        if not 200 <= response.status_code < 300:
            error = extract_error(response)
            logger.error(f"{method} {path} failed: {error}")
            raise error

        if not response.content:
            return {}
        return response.json()

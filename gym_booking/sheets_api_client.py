"""
Sheets API Client - async HTTP client for the Google Apps Script booking sheet.
Centralizes headers, request deadlines, JSON parsing and error mapping.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

import httpx

from gym_booking.config import get_config
from gym_booking.exceptions import (
    BackendRejectedError,
    HttpStatusError,
    InvalidResponseError,
    RequestTimeout,
    TransportError,
)

logger = logging.getLogger(__name__)

APPS_SCRIPT_HOST = "script.google.com"

# Characters of a non-JSON body kept for diagnostics
SNIPPET_LENGTH = 200

DEFAULT_HEADERS = {
    "Accept": "application/json",
}

# A text/plain body keeps browser clients on the "simple request" path (no CORS
# preflight); Apps Script reads the raw body and parses it as JSON either way.
CREATE_CONTENT_TYPE = "text/plain;charset=utf-8"


def is_likely_apps_script_url(url: Optional[str]) -> bool:
    """
    Check that a URL looks like a deployed Apps Script web app.

    Expected shape: https://script.google.com/macros/s/<deployment>/exec
    """
    if not url or not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return False
    return (
        parts.scheme == "https"
        and hostname == APPS_SCRIPT_HOST
        and "/macros/s/" in parts.path
        and parts.path.endswith("/exec")
    )


@dataclass
class JsonResponse:
    """Parsed JSON body with the response metadata kept for diagnostics"""
    data: Any
    content_type: str
    status_code: int


def _rejection_reason(payload: Any) -> str:
    if isinstance(payload, dict):
        reason = payload.get("error") or payload.get("message")
        if reason:
            return str(reason)
    return "Backend did not confirm the request (ok != true)"


class SheetsAPIClient:
    """HTTP client for the booking sheet web app"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            timeout: Overall request deadline in seconds (defaults to config)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.timeout = timeout if timeout is not None else get_config().request_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Apps Script answers /exec with a redirect to its content host
            self._client = httpx.AsyncClient(
                follow_redirects=True, transport=self._transport
            )
        return self._client

    def _get_headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        """
        Get headers for request.

        Args:
            content_type: Content-Type header value (for POST requests)

        Returns:
            Headers dictionary
        """
        headers = DEFAULT_HEADERS.copy()
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def fetch_json(
        self,
        method: str,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> JsonResponse:
        """
        Send a request and parse the JSON answer.

        Args:
            method: HTTP method
            url: Full endpoint URL
            body: Payload serialized as JSON text (sent as text/plain)
            timeout: Deadline override in seconds

        Returns:
            JsonResponse with the parsed value and content-type

        Raises:
            RequestTimeout: The request did not settle before the deadline
            TransportError: Connection-level failure
            HttpStatusError: Non-2xx status
            InvalidResponseError: Body is not JSON
        """
        deadline = self.timeout if timeout is None else timeout
        content = None
        headers = self._get_headers()
        if body is not None:
            content = json.dumps(body, ensure_ascii=False)
            headers = self._get_headers(content_type=CREATE_CONTENT_TYPE)

        logger.debug(f"{method} {url}")
        try:
            response = await asyncio.wait_for(
                self._get_client().request(
                    method, url, headers=headers, content=content, timeout=deadline
                ),
                timeout=deadline,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"{method} {url} timed out after {deadline}s")
            raise RequestTimeout(deadline) from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error for {method} {url}: {e}")
            raise TransportError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning(f"HTTP {response.status_code} error for {method} {url}")
            raise HttpStatusError(response.status_code)

        content_type = response.headers.get("content-type", "")
        text = response.text
        try:
            data = json.loads(text)
        except ValueError as e:
            snippet = text[:SNIPPET_LENGTH].replace("\n", " ")
            logger.warning(f"Non-JSON response for {method} {url}: {snippet}")
            raise InvalidResponseError(response.status_code, content_type, snippet) from e

        return JsonResponse(data=data, content_type=content_type, status_code=response.status_code)

    async def list_rows(self, url: str) -> List[Dict[str, Any]]:
        """
        Fetch every booking row from the sheet.

        Expects {"ok": true, "data": [...]}.

        Raises:
            BackendRejectedError: ok is not true or data is not a list
            GatewayError: See fetch_json
        """
        response = await self.fetch_json("GET", url)
        payload = response.data
        if (
            not isinstance(payload, dict)
            or not payload.get("ok")
            or not isinstance(payload.get("data"), list)
        ):
            raise BackendRejectedError(_rejection_reason(payload))
        rows = payload["data"]
        logger.debug(f"Fetched {len(rows)} booking rows")
        return rows

    async def create_row(self, url: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append one booking row to the sheet.

        The row travels next to an action discriminator:
        {"action": "create", "booking_id": ..., "date": ..., ...}

        Raises:
            BackendRejectedError: The backend answered without ok=true
            GatewayError: See fetch_json
        """
        payload = {"action": "create", **row}
        logger.info(f"Creating booking {row.get('booking_id')} on {row.get('date')} {row.get('slot')}")
        response = await self.fetch_json("POST", url, body=payload)
        result = response.data
        if not isinstance(result, dict) or not result.get("ok"):
            raise BackendRejectedError(_rejection_reason(result))
        return result

    async def close(self) -> None:
        """Close the HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Singleton instance for convenience
_client: Optional[SheetsAPIClient] = None


def get_api_client() -> SheetsAPIClient:
    """Get singleton API client instance"""
    global _client
    if _client is None:
        _client = SheetsAPIClient()
    return _client

"""
Google Places Text Search (New) relay.

Forwards a single text search upstream with:
- API key and field mask headers
- Fixed minimum-rating filter and service-area flag
- Optional continuation token
- No retries (one outbound call per invocation)

Both relays return a RelayResult instead of raising.
"""

import logging
import threading
from typing import Any, Dict, Optional

import requests

from .config import (
    FIELD_MASK,
    INCLUDE_SERVICE_AREA_BUSINESSES,
    MIN_RATING_FILTER,
    TEXT_SEARCH_URL,
    get_api_key,
    get_request_timeout,
)
from .errors import InvalidRequest, UpstreamError
from .models import RelayResult, SearchRequest, SearchResponse, parse_page_size

logger = logging.getLogger(__name__)

UPSTREAM_FAILURE_MESSAGE = "Failed to fetch places"


def _response_details(response: requests.Response) -> Any:
    """Upstream error body as JSON when possible, else raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class PlacesTextSearchRelay:
    """
    Stateless relay to the Places searchText endpoint.

    Safe to share between sessions and threads. The only per-instance state
    is the pooled HTTP session (used read-only: no cookies or auth are set on
    it) and a lock-guarded request counter used for stats.

    Attributes:
        api_key: Places API key (None means every call fails upstream-side)
        request_count: Total outbound requests attempted
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        url: str = TEXT_SEARCH_URL,
    ):
        self.api_key = api_key or get_api_key()
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else get_request_timeout()
        self.url = url
        self.request_count = 0
        self._count_lock = threading.Lock()

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key or "",
            "X-Goog-FieldMask": ",".join(FIELD_MASK),
        }

    def build_body(self, request: SearchRequest) -> Dict[str, Any]:
        return SearchRequest(
            text_query=(request.text_query or "").strip(),
            page_size=request.page_size,
            page_token=request.page_token,
        ).to_upstream_body(MIN_RATING_FILTER, INCLUDE_SERVICE_AREA_BUSINESSES)

    def relay(self, request: SearchRequest) -> RelayResult:
        """
        Run one text search.

        Args:
            request: Query text, page size and optional continuation token

        Returns:
            RelayResult with the parsed SearchResponse (raw payload kept
            verbatim), or InvalidRequest / UpstreamError.
        """
        if not (request.text_query or "").strip():
            return RelayResult.failure(InvalidRequest("textQuery is required"))

        if not self.api_key:
            logger.error("Places search attempted without an API key")
            return RelayResult.failure(
                UpstreamError(UPSTREAM_FAILURE_MESSAGE, details="API key not configured")
            )

        body = self.build_body(request)
        logger.info(
            f"Text search '{body['textQuery']}' (pageSize={body['pageSize']}, "
            f"page_token={'yes' if 'pageToken' in body else 'no'})"
        )

        with self._count_lock:
            self.request_count += 1
        try:
            response = self.session.post(
                self.url,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Error from Places API: {e}")
            return RelayResult.failure(UpstreamError(UPSTREAM_FAILURE_MESSAGE, details=str(e)))

        if not response.ok:
            details = _response_details(response)
            logger.error(f"Error from Places API ({response.status_code}): {details}")
            return RelayResult.failure(
                UpstreamError(UPSTREAM_FAILURE_MESSAGE, status=response.status_code, details=details)
            )

        try:
            data = response.json()
        except ValueError:
            logger.error("Places API returned a non-JSON body")
            return RelayResult.failure(
                UpstreamError(
                    UPSTREAM_FAILURE_MESSAGE,
                    status=response.status_code,
                    details=response.text,
                )
            )
        if not isinstance(data, dict):
            return RelayResult.failure(
                UpstreamError(UPSTREAM_FAILURE_MESSAGE, status=response.status_code, details=data)
            )

        result = SearchResponse.from_api(data)
        logger.info(
            f"Places API returned {len(result.places)} place(s); "
            f"more pages: {result.has_more}"
        )
        return RelayResult.success(result)

    def get_stats(self) -> Dict:
        """Return current request statistics."""
        with self._count_lock:
            return {"total_requests": self.request_count}


class HttpRelayClient:
    """
    Same relay contract, spoken over HTTP to a running relay server.

    Used by the CLI when --server is given.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def relay(self, request: SearchRequest) -> RelayResult:
        text_query = (request.text_query or "").strip()
        if not text_query:
            return RelayResult.failure(InvalidRequest("textQuery is required"))

        body: Dict[str, Any] = {
            "textQuery": text_query,
            "pageSize": parse_page_size(request.page_size),
        }
        if request.page_token:
            body["pageToken"] = request.page_token

        try:
            response = self.session.post(
                f"{self.base_url}/search",
                json=body,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Relay server unreachable: {e}")
            return RelayResult.failure(UpstreamError(str(e)))

        if not response.ok:
            err = _response_details(response)
            err = err if isinstance(err, dict) else {}
            message = err.get("error") or f"Request failed with status {response.status_code}"
            if response.status_code == 400:
                return RelayResult.failure(InvalidRequest(message, err.get("details")))
            return RelayResult.failure(
                UpstreamError(message, status=response.status_code, details=err.get("details"))
            )

        try:
            data = response.json()
        except ValueError:
            return RelayResult.failure(
                UpstreamError("Relay returned a non-JSON body", status=response.status_code)
            )
        if not isinstance(data, dict):
            return RelayResult.failure(
                UpstreamError("Relay returned an unexpected body", status=response.status_code, details=data)
            )
        return RelayResult.success(SearchResponse.from_api(data))

"""
Session aggregation of paginated search results.

A LeadAggregator owns one SearchSession: the places accumulated across
"load more" actions, the latest continuation token and the last query.
Nothing is shared between aggregators, so each browser/CLI session gets
its own instance. Any relay exposing relay(SearchRequest) -> RelayResult
can back it (in-process or over HTTP).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .config import DEFAULT_MAX_ROWS
from .errors import RenderError
from .models import Place, RelayResult, ScoredPlace, SearchRequest, parse_page_size
from .score import rank_places

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = "Please enter a search query."
NO_PLACES_FOUND = "No places found."
NO_PLACES_FETCHED = "No places fetched yet."
NO_MORE_PAGES = "No more pages to load."
MORE_AVAILABLE_LABEL = 'More available via "Load more".'
LAST_PAGE_LABEL = "No more pages (no nextPageToken from API)."


class Relay(Protocol):
    def relay(self, request: SearchRequest) -> RelayResult:
        ...


@dataclass
class SearchSession:
    """Transient per-session state; never persisted."""
    places: List[Place] = field(default_factory=list)
    next_page_token: Optional[str] = None
    last_query: str = ""
    last_raw_response: Optional[Dict[str, Any]] = None

    def reset(self) -> None:
        self.places = []
        self.next_page_token = None


@dataclass
class RenderModel:
    """What the UI layer draws after one interaction."""
    rows: List[ScoredPlace] = field(default_factory=list)
    total_count: int = 0
    has_more: bool = False
    status: str = ""
    error: Optional[RenderError] = None
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LeadAggregator:
    """
    Accumulates pages of places and renders a ranked, capped view.

    Attributes:
        relay: Search backend
        session: Accumulated state for this session
        max_rows: Display cap for the ranked table
    """

    def __init__(
        self,
        relay: Relay,
        session: Optional[SearchSession] = None,
        max_rows: int = DEFAULT_MAX_ROWS,
    ):
        self.relay = relay
        self.session = session or SearchSession()
        self.max_rows = max_rows

    def submit(self, query_text: Optional[str], page_size: Any = None, is_load_more: bool = False) -> RenderModel:
        """
        Run a search (or fetch the next page) and render the result.

        Accumulation resets on a new search or a changed query. The reset
        and the append are applied only once the relay succeeds, so a failed
        action leaves the session exactly as it was.
        """
        query_text = (query_text or "").strip()
        if not query_text:
            return self._error_model(RenderError(EMPTY_QUERY_MESSAGE))

        session = self.session
        should_reset = not is_load_more or query_text != session.last_query
        page_token = None if should_reset else session.next_page_token

        request = SearchRequest(
            text_query=query_text,
            page_size=parse_page_size(page_size),
            page_token=page_token,
        )
        result = self.relay.relay(request)

        if not result.ok:
            cause = result.error
            message = cause.message if cause is not None else "Search failed"
            logger.warning(f"Search for '{query_text}' failed: {message}")
            return self._error_model(RenderError(message, cause))

        response = result.response
        if should_reset:
            session.reset()

        session.last_raw_response = response.raw
        session.last_query = query_text
        session.next_page_token = response.next_page_token

        if not response.places and not session.places:
            return RenderModel(
                status=NO_PLACES_FOUND,
                has_more=session.next_page_token is not None,
                raw_response=response.raw,
            )

        session.places.extend(response.places)
        logger.info(
            f"Accumulated {len(session.places)} place(s) for '{query_text}' "
            f"(+{len(response.places)})"
        )
        return self.render()

    def search(self, query_text: Optional[str], page_size: Any = None) -> RenderModel:
        return self.submit(query_text, page_size, is_load_more=False)

    def load_more(self, query_text: Optional[str], page_size: Any = None) -> RenderModel:
        """Fetch the next page; a no-op when the provider reported no more pages."""
        if not self.session.next_page_token:
            model = self.render()
            model.status = NO_MORE_PAGES
            return model
        return self.submit(query_text, page_size, is_load_more=True)

    def render(self, now: Optional[datetime] = None) -> RenderModel:
        """Score, rank and cap the accumulated places. No network."""
        session = self.session
        if not session.places:
            return RenderModel(
                status=NO_PLACES_FETCHED,
                has_more=session.next_page_token is not None,
                raw_response=session.last_raw_response,
            )

        rows = rank_places(session.places, limit=self.max_rows, now=now)
        has_more = session.next_page_token is not None
        more_label = MORE_AVAILABLE_LABEL if has_more else LAST_PAGE_LABEL
        return RenderModel(
            rows=rows,
            total_count=len(session.places),
            has_more=has_more,
            status=f"Fetched {len(session.places)} place(s) total. Showing {len(rows)}. {more_label}",
            raw_response=session.last_raw_response,
        )

    def _error_model(self, error: RenderError) -> RenderModel:
        session = self.session
        return RenderModel(
            total_count=len(session.places),
            has_more=session.next_page_token is not None,
            status=f"Error: {error.message}",
            error=error,
        )

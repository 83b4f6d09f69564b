"""
Data model for text-search results.

Transforms raw Places API (New) objects into immutable records and carries
the request/response values that flow between aggregator and relay.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import DEFAULT_PAGE_SIZE
from .errors import RelayError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page_size(value: Any) -> int:
    """
    Coerce a page size from user or JSON input.

    Leading integer digits are honoured ("25", "25abc", 25.0); anything
    absent, non-numeric or not positive falls back to DEFAULT_PAGE_SIZE.
    No upper bound is applied here, the provider caps it.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_PAGE_SIZE
    if isinstance(value, int):
        size = value
    elif isinstance(value, float):
        if value != value:  # NaN
            return DEFAULT_PAGE_SIZE
        size = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return DEFAULT_PAGE_SIZE
        size = int(match.group(1))
    return size if size > 0 else DEFAULT_PAGE_SIZE


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Review:
    publish_time: Optional[str] = None


@dataclass(frozen=True)
class Place:
    """A single business record as returned by the provider."""
    id: Optional[str]
    display_name: Optional[str]
    rating: Optional[float]
    user_rating_count: Optional[int]
    formatted_address: Optional[str]
    website_uri: Optional[str]
    business_status: Optional[str]
    reviews: Tuple[Review, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, place_json: Dict[str, Any]) -> "Place":
        """
        Build a Place from a Places API (New) object.

        Only the field-masked keys are read; displayName arrives as
        {"text": ..., "languageCode": ...}.
        """
        display = place_json.get("displayName")
        if isinstance(display, dict):
            name = display.get("text")
        else:
            name = display

        reviews = tuple(
            Review(publish_time=r.get("publishTime"))
            for r in (place_json.get("reviews") or [])
            if isinstance(r, dict)
        )

        return cls(
            id=place_json.get("id"),
            display_name=name,
            rating=_to_float(place_json.get("rating")),
            user_rating_count=_to_int(place_json.get("userRatingCount")),
            formatted_address=place_json.get("formattedAddress"),
            website_uri=place_json.get("websiteUri"),
            business_status=place_json.get("businessStatus"),
            reviews=reviews,
            raw=place_json,
        )


@dataclass(frozen=True)
class SearchRequest:
    text_query: Optional[str]
    page_size: int = DEFAULT_PAGE_SIZE
    page_token: Optional[str] = None

    def to_upstream_body(self, min_rating: float, include_service_area: bool = True) -> Dict[str, Any]:
        body = {
            "textQuery": self.text_query,
            "pageSize": parse_page_size(self.page_size),
            "minRating": min_rating,
            "includePureServiceAreaBusinesses": include_service_area,
        }
        if self.page_token:
            body["pageToken"] = self.page_token
        return body


@dataclass(frozen=True)
class SearchResponse:
    places: List[Place]
    next_page_token: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "SearchResponse":
        places = [
            Place.from_api(p) for p in (payload.get("places") or []) if isinstance(p, dict)
        ]
        return cls(
            places=places,
            next_page_token=payload.get("nextPageToken") or None,
            raw=payload,
        )

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None


@dataclass(frozen=True)
class ScoredPlace:
    place: Place
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "id": self.place.id,
            "name": self.place.display_name,
            "rating": self.place.rating,
            "user_rating_count": self.place.user_rating_count,
            "website_uri": self.place.website_uri,
            "formatted_address": self.place.formatted_address,
            "business_status": self.place.business_status,
        }


@dataclass(frozen=True)
class RelayResult:
    """Either a SearchResponse or a RelayError, never both."""
    response: Optional[SearchResponse] = None
    error: Optional[RelayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None

    @classmethod
    def success(cls, response: SearchResponse) -> "RelayResult":
        return cls(response=response)

    @classmethod
    def failure(cls, error: RelayError) -> "RelayResult":
        return cls(error=error)

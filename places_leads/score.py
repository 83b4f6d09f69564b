"""
Lead scoring for text-search results.

Scores are small integers used for ranking only. A place must pass the
hard gate (operational, rated 4.0+, at least 10 reviews) to earn anything;
gated places score 0 but stay in the table, ranked last.

Score components:
- Rating band:        +2 for 4.3-4.8, +1 above 4.8
- Review-count band:  +2 for 30-300, +1 above 300
- Review recency:     +2 within 60 days, +1 more within 30 days
- Website:            +1 when a website URI is present
- Penalties:          -1 above 500 reviews, -1 more for a perfect 5.0
                      with over 80 reviews

Scores are not clamped, so penalties can push a gated-in place below zero.
"""

import math
import re
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from .config import DEFAULT_MAX_ROWS
from .models import Place, Review, ScoredPlace

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

REQUIRED_STATUS = "OPERATIONAL"
MIN_RATING = 4.0
MIN_REVIEW_COUNT = 10

RATING_BAND_LOW = 4.3
RATING_BAND_HIGH = 4.8

REVIEW_BAND_LOW = 30
REVIEW_BAND_HIGH = 300
REVIEW_COUNT_PENALTY_ABOVE = 500
PERFECT_RATING_PENALTY_REVIEWS = 80

REVIEW_WARM_DAYS = 60
REVIEW_FRESH_DAYS = 30

SECONDS_PER_DAY = 60 * 60 * 24

# RFC 3339 fractions can carry nanoseconds; datetime keeps microseconds
_FRACTION = re.compile(r"\.(\d{6})\d+")


# =============================================================================
# REVIEW RECENCY
# =============================================================================

def _parse_publish_time(value: Optional[str]) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    text = _FRACTION.sub(r".\1", value.strip())
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparseable review publishTime: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_since_last_review(
    reviews: Iterable[Review],
    now: Optional[datetime] = None,
) -> float:
    """
    Days since the most recent review, rounded to the nearest whole day.

    Args:
        reviews: Reviews carrying RFC 3339 publish timestamps
        now: Reference time (defaults to current UTC time)

    Returns:
        Whole days as a float, or infinity when there are no reviews or no
        timestamp parses.
    """
    latest = None
    for review in reviews:
        published = _parse_publish_time(review.publish_time)
        if published is None:
            continue
        if latest is None or published > latest:
            latest = published

    if latest is None:
        return math.inf

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed_days = (now - latest).total_seconds() / SECONDS_PER_DAY
    # half-up rounding
    return float(math.floor(elapsed_days + 0.5))


# =============================================================================
# SCORING
# =============================================================================

def score_lead(place: Union[Place, Dict], now: Optional[datetime] = None) -> int:
    """
    Score a place as an outreach lead.

    Args:
        place: Place (or raw Places API dict)
        now: Reference time for review recency

    Returns:
        Integer score; 0 for places failing the hard gate.
    """
    if isinstance(place, dict):
        place = Place.from_api(place)

    rating = place.rating if place.rating is not None else 0.0
    reviews = place.user_rating_count if place.user_rating_count is not None else 0
    status = place.business_status or ""

    # Hard requirements
    if status != REQUIRED_STATUS:
        return 0
    if rating < MIN_RATING:
        return 0
    if reviews < MIN_REVIEW_COUNT:
        return 0

    score = 0

    if RATING_BAND_LOW <= rating <= RATING_BAND_HIGH:
        score += 2
    elif rating > RATING_BAND_HIGH:
        score += 1

    if REVIEW_BAND_LOW <= reviews <= REVIEW_BAND_HIGH:
        score += 2
    elif reviews > REVIEW_BAND_HIGH:
        score += 1

    days_since = days_since_last_review(place.reviews, now)
    if days_since <= REVIEW_WARM_DAYS:
        score += 2
    if days_since <= REVIEW_FRESH_DAYS:
        score += 1

    if place.website_uri:
        score += 1

    # "too big / too perfect"
    if reviews > REVIEW_COUNT_PENALTY_ABOVE:
        score -= 1
    if rating == 5.0 and reviews > PERFECT_RATING_PENALTY_REVIEWS:
        score -= 1

    return score


def score_places(places: Iterable[Place], now: Optional[datetime] = None) -> List[ScoredPlace]:
    """Score places in accumulation order, sharing one reference time."""
    now = now or datetime.now(timezone.utc)
    return [ScoredPlace(place=p, score=score_lead(p, now)) for p in places]


def rank_places(
    places: Iterable[Place],
    limit: Optional[int] = DEFAULT_MAX_ROWS,
    now: Optional[datetime] = None,
) -> List[ScoredPlace]:
    """
    Score and rank places, best first.

    The sort is stable: equal scores keep their accumulation order.
    A limit of None returns every place.
    """
    scored = score_places(places, now)
    scored.sort(key=lambda s: s.score, reverse=True)
    if limit is None:
        return scored
    return scored[:max(limit, 0)]


def get_scoring_summary(scored: List[ScoredPlace]) -> Dict:
    """Counts of gated, positive and negative scores."""
    total = len(scored)
    gated = sum(1 for s in scored if s.score == 0)
    positive = sum(1 for s in scored if s.score > 0)
    return {
        "total": total,
        "zero_score": gated,
        "positive_score": positive,
        "negative_score": total - gated - positive,
        "top_score": max((s.score for s in scored), default=None),
    }

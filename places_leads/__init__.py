"""
Places Lead Finder - Core Package

Relays text searches to the Google Places API (New), accumulates paginated
results per session and ranks them by a lead score.

Architecture:
    config: Environment configuration (.env, API key, port, defaults)
    errors: InvalidRequest / UpstreamError / RenderError taxonomy
    models: Place, SearchRequest, SearchResponse, ScoredPlace, RelayResult
    fetch: Text Search relay (in-process and over HTTP); one call, no retry
    score: Lead scoring and stable ranking
    aggregator: Per-session accumulation and render model
    render: Text and HTML tables
    export: JSON / CSV export of ranked rows
"""

from .errors import RelayError, InvalidRequest, UpstreamError, RenderError
from .models import (
    Place,
    Review,
    SearchRequest,
    SearchResponse,
    ScoredPlace,
    RelayResult,
    parse_page_size,
)
from .fetch import PlacesTextSearchRelay, HttpRelayClient
from .score import days_since_last_review, score_lead, score_places, rank_places
from .aggregator import LeadAggregator, SearchSession, RenderModel
from .render import format_row, render_text_table, render_results_html
from .export import export_to_json, export_to_csv

__all__ = [
    # errors
    "RelayError",
    "InvalidRequest",
    "UpstreamError",
    "RenderError",
    # models
    "Place",
    "Review",
    "SearchRequest",
    "SearchResponse",
    "ScoredPlace",
    "RelayResult",
    "parse_page_size",
    # fetch
    "PlacesTextSearchRelay",
    "HttpRelayClient",
    # score
    "days_since_last_review",
    "score_lead",
    "score_places",
    "rank_places",
    # aggregator
    "LeadAggregator",
    "SearchSession",
    "RenderModel",
    # render
    "format_row",
    "render_text_table",
    "render_results_html",
    # export
    "export_to_json",
    "export_to_csv",
]

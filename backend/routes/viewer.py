"""
GET /viewer: ranked results as an HTML table.

Each request builds its own aggregator, runs the search plus any requested
"load more" pages, and renders. No state survives the request.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse

from backend.services import relay_service
from places_leads.aggregator import LeadAggregator, RenderModel
from places_leads.config import get_max_rows
from places_leads.models import parse_page_size
from places_leads.render import render_results_html

logger = logging.getLogger(__name__)

router = APIRouter(tags=["viewer"])

MAX_VIEWER_PAGES = 10
PROMPT = "Enter a search query to begin."


def collect_pages(aggregator: LeadAggregator, query: str, page_size: Optional[int], pages: int) -> RenderModel:
    """Search, then load up to pages - 1 more pages while the provider has them."""
    model = aggregator.search(query, page_size)
    for _ in range(pages - 1):
        if not model.ok or not model.has_more:
            break
        model = aggregator.load_more(query, page_size)
        if not model.ok:
            # keep what was already accumulated on screen
            preserved = aggregator.render()
            preserved.status = model.status
            preserved.error = model.error
            return preserved
    return model


@router.get("/viewer", response_class=HTMLResponse)
def get_viewer(
    q: str = "",
    pageSize: Optional[str] = None,
    pages: int = Query(1, ge=1, le=MAX_VIEWER_PAGES),
):
    query = q.strip()
    page_size = parse_page_size(pageSize) if pageSize else None

    if not query:
        return HTMLResponse(render_results_html(RenderModel(status=PROMPT)))

    aggregator = LeadAggregator(relay_service.get_relay(), max_rows=get_max_rows())
    model = collect_pages(aggregator, query, page_size, pages)
    logger.info(f"Viewer '{query}' pages={pages}: {model.status}")
    return HTMLResponse(
        render_results_html(
            model,
            query=query,
            page_size=page_size,
            pages=pages,
            max_pages=MAX_VIEWER_PAGES,
        )
    )

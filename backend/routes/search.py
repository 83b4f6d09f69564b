"""
POST /search route.
"""

from fastapi import APIRouter

from backend.models.schemas import ErrorResponse, SearchBody
from backend.services import relay_service
from places_leads.models import SearchRequest, parse_page_size

router = APIRouter(tags=["search"])


@router.post(
    "/search",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def post_search(body: SearchBody):
    """
    Relay a text search to the Places API.

    Required: textQuery
    Optional: pageSize (default 20), pageToken

    Returns the upstream JSON unmodified (places[] and maybe nextPageToken).
    """
    request = SearchRequest(
        text_query=body.textQuery,
        page_size=parse_page_size(body.pageSize),
        page_token=body.pageToken or None,
    )
    result = relay_service.get_relay().relay(request)
    if not result.ok:
        return relay_service.error_response(result.error)
    return result.response.raw

"""
Relay service: the process-wide Places relay and error translation.

The relay is stateless, so one instance serves every request; session state
lives only in per-request aggregators.
"""

import logging
from typing import Optional

from fastapi.responses import JSONResponse

from places_leads.errors import InvalidRequest, RelayError, UpstreamError
from places_leads.fetch import PlacesTextSearchRelay

logger = logging.getLogger(__name__)

_relay: Optional[PlacesTextSearchRelay] = None


def get_relay() -> PlacesTextSearchRelay:
    global _relay
    if _relay is None:
        _relay = PlacesTextSearchRelay()
    return _relay


def status_code_for(error: RelayError) -> int:
    """
    HTTP status for a relay error.

    400 for a missing query, 502 when the provider answered with an error
    status, 500 for transport failures or missing configuration.
    """
    if isinstance(error, InvalidRequest):
        return 400
    if isinstance(error, UpstreamError) and error.status is not None:
        return 502
    return 500


def error_response(error: RelayError) -> JSONResponse:
    return JSONResponse(status_code=status_code_for(error), content=error.to_dict())

"""
Tests for the Places text-search relay and the HTTP relay client.
HTTP is mocked at the requests.Session level; no network.
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import requests

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _root)

from places_leads.config import FIELD_MASK, TEXT_SEARCH_URL
from places_leads.errors import InvalidRequest, UpstreamError
from places_leads.fetch import HttpRelayClient, PlacesTextSearchRelay
from places_leads.models import SearchRequest

PAYLOAD = {
    "places": [
        {
            "id": "abc",
            "displayName": {"text": "Smile Dental", "languageCode": "en"},
            "rating": 4.6,
            "userRatingCount": 120,
            "formattedAddress": "1 Main St, Austin, TX 78701, USA",
            "websiteUri": "https://smile.example",
            "businessStatus": "OPERATIONAL",
            "reviews": [{"publishTime": "2026-01-02T03:04:05.678901234Z"}],
        }
    ],
    "nextPageToken": "next-1",
}


def _response(status=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


def _relay(response=None, api_key="test-key"):
    session = MagicMock()
    session.post.return_value = response if response is not None else _response(200, PAYLOAD)
    return PlacesTextSearchRelay(api_key=api_key, session=session), session


def test_success_returns_payload_verbatim_and_parsed():
    relay, _ = _relay()
    result = relay.relay(SearchRequest("dentist austin", 20))

    assert result.ok
    assert result.response.raw is PAYLOAD
    assert result.response.next_page_token == "next-1"
    place = result.response.places[0]
    assert place.display_name == "Smile Dental"
    assert place.user_rating_count == 120
    assert place.reviews[0].publish_time.startswith("2026-01-02")


def test_outbound_body_and_headers():
    relay, session = _relay()
    relay.relay(SearchRequest("  dentist austin ", 15, page_token="tok"))

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0] == TEXT_SEARCH_URL
    assert kwargs["json"] == {
        "textQuery": "dentist austin",
        "pageSize": 15,
        "minRating": 4.0,
        "includePureServiceAreaBusinesses": True,
        "pageToken": "tok",
    }
    headers = kwargs["headers"]
    assert headers["X-Goog-Api-Key"] == "test-key"
    assert headers["Content-Type"] == "application/json"
    assert headers["X-Goog-FieldMask"] == ",".join(FIELD_MASK)
    assert "places.reviews.publishTime" in headers["X-Goog-FieldMask"]
    assert headers["X-Goog-FieldMask"].endswith("nextPageToken")


def test_no_page_token_omits_key_and_page_size_defaults():
    relay, session = _relay()
    relay.relay(SearchRequest("dentist austin", "abc"))

    body = session.post.call_args.kwargs["json"]
    assert "pageToken" not in body
    assert body["pageSize"] == 20


def test_empty_query_is_invalid_without_outbound_call():
    relay, session = _relay()
    for text in ("", "   ", None):
        result = relay.relay(SearchRequest(text))
        assert not result.ok
        assert isinstance(result.error, InvalidRequest)
        assert result.error.to_dict() == {"error": "textQuery is required"}
    session.post.assert_not_called()
    assert relay.get_stats()["total_requests"] == 0


def test_shared_relay_counts_every_concurrent_request():
    relay, _ = _relay()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda i: relay.relay(SearchRequest(f"dentist {i}")), range(200)))

    assert all(r.ok for r in results)
    assert relay.get_stats()["total_requests"] == 200


def test_non_2xx_maps_to_upstream_error_with_details():
    body = {"error": {"code": 403, "message": "API key not valid"}}
    relay, _ = _relay(_response(403, body))

    result = relay.relay(SearchRequest("dentist austin"))

    assert isinstance(result.error, UpstreamError)
    assert result.error.status == 403
    assert result.error.details == body
    assert result.error.message == "Failed to fetch places"


def test_non_json_error_body_uses_text():
    relay, _ = _relay(_response(500, None, text="Internal error"))
    result = relay.relay(SearchRequest("dentist austin"))
    assert result.error.status == 500
    assert result.error.details == "Internal error"


def test_transport_failure_maps_to_upstream_error():
    relay, session = _relay()
    session.post.side_effect = requests.exceptions.ConnectionError("connection refused")

    result = relay.relay(SearchRequest("dentist austin"))

    assert isinstance(result.error, UpstreamError)
    assert result.error.status is None
    assert "connection refused" in result.error.details
    # one attempt, no retry
    assert session.post.call_count == 1


def test_missing_api_key_fails_at_call_time(monkeypatch):
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    relay, session = _relay(api_key=None)

    result = relay.relay(SearchRequest("dentist austin"))

    assert isinstance(result.error, UpstreamError)
    assert result.error.details == "API key not configured"
    session.post.assert_not_called()


def test_api_key_read_from_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")
    relay, session = _relay(api_key=None)
    relay.relay(SearchRequest("dentist austin"))
    assert session.post.call_args.kwargs["headers"]["X-Goog-Api-Key"] == "env-key"


def test_no_timeout_by_default(monkeypatch):
    monkeypatch.delenv("PLACES_REQUEST_TIMEOUT", raising=False)
    relay, session = _relay()
    relay.relay(SearchRequest("dentist austin"))
    assert session.post.call_args.kwargs["timeout"] is None


# ---------------------------------------------------------------------------
# HttpRelayClient
# ---------------------------------------------------------------------------

def _client(response):
    session = MagicMock()
    session.post.return_value = response
    return HttpRelayClient("http://localhost:3000/", session=session), session


def test_http_client_success_and_body():
    client, session = _client(_response(200, PAYLOAD))

    result = client.relay(SearchRequest("dentist austin", 10, page_token="tok"))

    assert result.ok
    assert result.response.next_page_token == "next-1"
    args, kwargs = session.post.call_args
    assert args[0] == "http://localhost:3000/search"
    assert kwargs["json"] == {"textQuery": "dentist austin", "pageSize": 10, "pageToken": "tok"}


def test_http_client_maps_400_to_invalid_request():
    client, _ = _client(_response(400, {"error": "textQuery is required"}))
    result = client.relay(SearchRequest("x"))
    assert isinstance(result.error, InvalidRequest)
    assert result.error.message == "textQuery is required"


def test_http_client_maps_server_error_to_upstream_error():
    details = {"error": {"code": 403}}
    client, _ = _client(_response(502, {"error": "Failed to fetch places", "details": details}))
    result = client.relay(SearchRequest("dentist austin"))
    assert isinstance(result.error, UpstreamError)
    assert result.error.status == 502
    assert result.error.details == details


def test_http_client_error_without_json_body():
    client, _ = _client(_response(504, None, text="gateway timeout"))
    result = client.relay(SearchRequest("dentist austin"))
    assert result.error.message == "Request failed with status 504"


def test_http_client_blank_query_makes_no_call():
    client, session = _client(_response(200, PAYLOAD))
    result = client.relay(SearchRequest(""))
    assert isinstance(result.error, InvalidRequest)
    session.post.assert_not_called()

"""
Tests for table rendering and export of ranked rows.
"""

import os
import sys
import csv
import json

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _root)

from places_leads.aggregator import RenderModel
from places_leads.errors import RenderError
from places_leads.export import export_to_csv, export_to_json
from places_leads.models import Place, ScoredPlace
from places_leads.render import format_row, render_results_html, render_text_table


def _scored(score=5, **fields):
    base = {
        "id": "p1",
        "displayName": {"text": "Smile Dental"},
        "rating": 4.5,
        "userRatingCount": 50,
        "formattedAddress": "1 Main St, Austin, TX",
        "websiteUri": "https://smile.example",
        "businessStatus": "OPERATIONAL",
    }
    base.update(fields)
    return ScoredPlace(place=Place.from_api(base), score=score)


def _model(*rows, has_more=False):
    return RenderModel(
        rows=list(rows),
        total_count=len(rows),
        has_more=has_more,
        status=f"Fetched {len(rows)} place(s) total. Showing {len(rows)}.",
        raw_response={"places": []},
    )


def test_format_row_placeholders():
    row = format_row(ScoredPlace(place=Place.from_api({}), score=0))
    assert row == {
        "score": 0,
        "name": "(no name)",
        "rating": "–",
        "reviews": "–",
        "website": "",
        "address": "–",
        "status": "–",
    }


def test_format_row_values():
    row = format_row(_scored())
    assert row["name"] == "Smile Dental"
    assert row["rating"] == 4.5
    assert row["reviews"] == 50
    assert row["website"] == "https://smile.example"


def test_text_table_lists_rows_then_status():
    model = _model(_scored(8, id="a"), _scored(0, id="b", displayName={"text": "Other"}))
    text = render_text_table(model)
    lines = text.splitlines()
    assert lines[0].startswith("Score")
    assert "Smile Dental" in lines[2]
    assert "Other" in lines[3]
    assert lines[-1] == model.status


def test_text_table_without_rows_is_status_only():
    model = RenderModel(status="No places found.")
    assert render_text_table(model) == "No places found."


def test_html_escapes_user_content():
    model = _model(_scored(displayName={"text": "<script>alert('x')</script>"}, websiteUri='https://x.example/"onmouseover'))
    html = render_results_html(model, query="dent<ist>")
    assert "<script>alert" not in html
    assert "&lt;script&gt;alert(&#039;x&#039;)&lt;/script&gt;" in html
    assert 'href="https://x.example/&quot;onmouseover"' in html
    assert 'value="dent&lt;ist&gt;"' in html


def test_html_load_more_link_only_when_more_pages():
    more = render_results_html(_model(_scored(), has_more=True), query="dentist", page_size=10, pages=2)
    assert "Load more" in more
    assert "pages=3" in more
    last = render_results_html(_model(_scored()), query="dentist")
    assert "Load more</a>" not in last


def test_html_marks_errors():
    model = RenderModel(status="Error: Failed to fetch places", error=RenderError("Failed to fetch places"))
    html = render_results_html(model, query="dentist")
    assert 'class="status error"' in html


def test_export_json(tmp_path):
    model = _model(_scored(8, id="a"), _scored(3, id="b"))
    path = export_to_json(model, str(tmp_path / "out" / "leads.json"), query="dentist")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["metadata"]["query"] == "dentist"
    assert data["metadata"]["total_fetched"] == 2
    assert [lead["id"] for lead in data["leads"]] == ["a", "b"]
    assert data["leads"][0]["score"] == 8


def test_export_csv(tmp_path):
    model = _model(_scored(8, id="a"), _scored(3, id="b"))
    path = export_to_csv(model, str(tmp_path / "leads.csv"))

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["id"] for r in rows] == ["a", "b"]
    assert rows[0]["score"] == "8"
    assert rows[0]["name"] == "Smile Dental"


def test_export_csv_skips_empty(tmp_path):
    path = str(tmp_path / "empty.csv")
    export_to_csv(RenderModel(), path)
    assert not os.path.exists(path)


def test_html_links_only_web_urls():
    unsafe = _scored(id="a", websiteUri="javascript:alert(1)")
    upper = _scored(id="b", websiteUri=" JavaScript:alert(2)")
    data = _scored(id="c", websiteUri="data:text/html,<b>x</b>")
    safe = _scored(id="d", websiteUri="HTTP://plain.example/")
    html = render_results_html(_model(unsafe, upper, data, safe), query="dentist")

    assert "javascript:" not in html.lower()
    assert "data:text" not in html
    assert html.count("<a href=") == 1
    assert 'href="HTTP://plain.example/"' in html


def test_html_load_more_hidden_at_page_cap():
    model = _model(_scored(), has_more=True)
    capped = render_results_html(model, query="dentist", pages=10, max_pages=10)
    below = render_results_html(model, query="dentist", pages=9, max_pages=10)

    assert "Load more</a>" not in capped
    assert "pages=11" not in capped
    assert "pages=10" in below

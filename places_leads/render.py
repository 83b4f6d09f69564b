"""
Table rendering for ranked search results.

Produces display rows, a plain-text table for the CLI and a standalone HTML
page for the browser viewer. Deterministic; no network.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urlparse

from .aggregator import RenderModel
from .models import ScoredPlace

PLACEHOLDER = "–"
NO_NAME = "(no name)"
WEB_SCHEMES = ("http", "https")

COLUMNS = ["Score", "Name", "Rating", "Reviews", "Website", "Address", "Status"]


def format_row(scored: ScoredPlace) -> Dict[str, Any]:
    """Display values for one table row, with placeholders for missing data."""
    place = scored.place
    return {
        "score": scored.score,
        "name": place.display_name or NO_NAME,
        "rating": place.rating if place.rating is not None else PLACEHOLDER,
        "reviews": place.user_rating_count if place.user_rating_count is not None else PLACEHOLDER,
        "website": place.website_uri or "",
        "address": place.formatted_address or PLACEHOLDER,
        "status": place.business_status or PLACEHOLDER,
    }


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def render_text_table(model: RenderModel, max_width: int = 48) -> str:
    """Fixed-width table followed by the status line."""
    if not model.rows:
        return model.status

    cells: List[List[str]] = []
    for row in (format_row(s) for s in model.rows):
        cells.append([
            str(row["score"]),
            _truncate(str(row["name"]), max_width),
            str(row["rating"]),
            str(row["reviews"]),
            _truncate(row["website"] or PLACEHOLDER, max_width),
            _truncate(str(row["address"]), max_width),
            str(row["status"]),
        ])

    widths = [len(c) for c in COLUMNS]
    for line in cells:
        widths = [max(w, len(v)) for w, v in zip(widths, line)]

    def fmt(values: List[str]) -> str:
        return "  ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

    lines = [fmt(COLUMNS), fmt(["-" * w for w in widths])]
    lines.extend(fmt(line) for line in cells)
    lines.append("")
    lines.append(model.status)
    return "\n".join(lines)


def render_results_html(
    model: RenderModel,
    query: str = "",
    page_size: Optional[int] = None,
    pages: int = 1,
    max_pages: Optional[int] = None,
    title: str = "Places Lead Finder",
) -> str:
    """
    Render the viewer page: search form, ranked table, status and raw JSON.

    The "Load more" link is omitted once pages reaches max_pages.
    """
    rows_html = []
    for row in (format_row(s) for s in model.rows):
        website = row["website"]
        link = (
            f"<a href=\"{_h(website)}\" target=\"_blank\" rel=\"noopener noreferrer\">Site</a>"
            if _is_web_url(website) else PLACEHOLDER
        )
        rows_html.append(
            "<tr>"
            f"<td>{_h(row['score'])}</td>"
            f"<td>{_h(row['name'])}</td>"
            f"<td>{_h(row['rating'])}</td>"
            f"<td>{_h(row['reviews'])}</td>"
            f"<td>{link}</td>"
            f"<td>{_h(row['address'])}</td>"
            f"<td>{_h(row['status'])}</td>"
            "</tr>"
        )

    load_more = ""
    if model.has_more and query and (max_pages is None or pages < max_pages):
        params = {"q": query, "pages": pages + 1}
        if page_size:
            params["pageSize"] = page_size
        load_more = f"<p><a class=\"load-more\" href=\"/viewer?{_h(urlencode(params))}\">Load more</a></p>"

    raw = ""
    if model.raw_response is not None:
        raw = (
            "<details><summary>Latest raw response</summary>"
            f"<pre>{_h(json.dumps(model.raw_response, indent=2))}</pre></details>"
        )

    status_class = "status error" if model.error else "status"
    header = "".join(f"<th>{c}</th>" for c in COLUMNS)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{_h(title)}</title>
  <style>
    body {{ font-family: system-ui, sans-serif; margin: 2rem; color: #1a1a1a; }}
    table {{ border-collapse: collapse; width: 100%; margin-top: 1rem; }}
    th, td {{ border-bottom: 1px solid #e5e5e5; padding: 0.35rem 0.5rem; text-align: left; font-size: 0.9rem; }}
    th {{ text-transform: uppercase; letter-spacing: 0.05em; color: #555; font-size: 0.75rem; }}
    .status {{ margin-top: 1rem; color: #333; }}
    .status.error {{ color: #b00020; }}
    pre {{ background: #f6f6f6; padding: 0.75rem; overflow-x: auto; }}
  </style>
</head>
<body>
  <h1>{_h(title)}</h1>
  <form method="get" action="/viewer">
    <input type="text" name="q" value="{_h(query)}" placeholder="e.g. dentist in Austin, TX" size="40">
    <input type="number" name="pageSize" value="{_h(page_size or '')}" min="1" placeholder="20">
    <button type="submit">Search</button>
  </form>
  <p class="{status_class}">{_h(model.status)}</p>
  <table>
    <thead><tr>{header}</tr></thead>
    <tbody>{''.join(rows_html)}</tbody>
  </table>
  {load_more}
  {raw}
</body>
</html>"""


def _is_web_url(url: str) -> bool:
    if not url:
        return False
    return urlparse(url.strip()).scheme.lower() in WEB_SCHEMES


def _h(s: Any) -> str:
    """Escape for HTML text and attribute content."""
    if s is None:
        return ""
    return (
        str(s)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )

"""
Export ranked results to JSON or CSV.

Used by the CLI to hand a ranked table to other tools. Writes only when
asked; the viewer itself keeps everything in memory.
"""

import os
import csv
import json
from typing import Dict, List
from datetime import datetime, timezone
import logging

from .aggregator import RenderModel

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "score",
    "id",
    "name",
    "rating",
    "user_rating_count",
    "website_uri",
    "formatted_address",
    "business_status",
]


def export_to_json(
    model: RenderModel,
    filepath: str,
    query: str = "",
    metadata: Dict = None
) -> str:
    """
    Export a rendered result set to a JSON file.

    Args:
        model: RenderModel from the aggregator
        filepath: Output file path
        query: Query text recorded in the metadata block
        metadata: Additional metadata to include

    Returns:
        Path to saved file
    """
    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)

    output_data = {
        "metadata": {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "query": query,
            "total_fetched": model.total_count,
            "has_more": model.has_more,
            **(metadata or {})
        },
        "leads": [row.to_dict() for row in model.rows]
    }

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(output_data, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported {len(model.rows)} leads to JSON: {filepath}")
    return filepath


def export_to_csv(
    model: RenderModel,
    filepath: str,
    fields: List[str] = None
) -> str:
    """
    Export ranked rows to a CSV file, best score first.

    Returns:
        Path to saved file
    """
    if not model.rows:
        logger.warning("No places to export")
        return filepath

    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)

    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fields or CSV_FIELDS, extrasaction='ignore')
        writer.writeheader()
        for row in model.rows:
            writer.writerow(row.to_dict())

    logger.info(f"Exported {len(model.rows)} leads to CSV: {filepath}")
    return filepath

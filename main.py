#!/usr/bin/env python3
"""
Places Lead Finder - Main Entry Point

Starts the relay/viewer API under uvicorn. For one-off searches from a
terminal, use scripts/run_search.py.

Usage:
    python main.py

Environment Variables:
    GOOGLE_MAPS_API_KEY: Places API key (searches fail without it).
    PORT: Listen port (default: 3000).
"""

import logging

import uvicorn

from places_leads.config import get_port


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    port = get_port()
    logging.getLogger(__name__).info(f"Server running at http://localhost:{port}")
    uvicorn.run("backend.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()

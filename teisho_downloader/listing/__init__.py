"""
Listing page scraping: fetch the page and turn its .mp3 links into Episodes.
"""

from teisho_downloader.listing.extractor import (
    LINK_PATTERN,
    discover_episodes,
    extract_links,
    fetch_listing,
    filename_from_url,
)

__all__ = [
    "LINK_PATTERN",
    "fetch_listing",
    "extract_links",
    "filename_from_url",
    "discover_episodes",
]

"""Element-set text acquisition.

Reads three-line element sets from local files or from CelesTrak's GP
endpoint. Downloads are cached on disk for 24 hours.

Configuration via environment variables::

    export SATSCOPE_CACHE_DIR="~/.cache/satscope"
    export CELESTRAK_URL="https://celestrak.org/NORAD/elements/gp.php"

This module is the only part of satscope that does I/O; the parsing and
propagation code consumes the text it returns.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Optional

import requests

from .tle_parser import ElementSetRecord, parse_element_sets

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://celestrak.org/NORAD/elements/gp.php"

CACHE_MAX_AGE_HOURS = 24.0


class CelestrakClient:
    """Client for CelesTrak's element-set (GP) endpoint, TLE format.

    Args:
        cache_dir: Where downloads are cached. Defaults to
            ``$SATSCOPE_CACHE_DIR`` or ``data/cache``.
        base_url: GP endpoint. Defaults to ``$CELESTRAK_URL`` or
            CelesTrak's public URL.
        timeout: HTTP timeout in seconds.
    """

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        base_url: Optional[str] = None,
        timeout: int = 30,
    ):
        self.cache_dir = Path(
            cache_dir or os.environ.get("SATSCOPE_CACHE_DIR", "data/cache")
        ).expanduser()
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url or os.environ.get("CELESTRAK_URL", DEFAULT_URL)
        self.timeout = timeout
        self.session = requests.Session()

    def fetch_group(self, group: str, use_cache: bool = True) -> str:
        """Fetch a CelesTrak group (e.g. ``stations``, ``gps-ops``) as TLE text.

        Raises:
            ConnectionError: On network failure or a non-2xx response.
            ValueError: If the response is an HTML page, not element sets.
        """
        cache_file = self.cache_dir / f"{group.replace('/', '_')}.tle"

        if use_cache and cache_file.exists():
            age_hours = (time.time() - cache_file.stat().st_mtime) / 3600
            if age_hours < CACHE_MAX_AGE_HOURS:
                logger.debug("Cache hit: %s", cache_file.name)
                return cache_file.read_text()

        logger.info("Fetching CelesTrak group %s", group)
        try:
            resp = self.session.get(
                self.base_url,
                params={"GROUP": group, "FORMAT": "tle"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ConnectionError(f"CelesTrak request for {group!r} failed: {exc}") from exc

        text = check_element_text(resp.text, source=resp.url)

        if use_cache:
            cache_file.write_text(text)

        return text

    def fetch_records(self, group: str, use_cache: bool = True) -> list[ElementSetRecord]:
        """Fetch and parse a CelesTrak group."""
        return parse_element_sets(self.fetch_group(group, use_cache=use_cache))


def check_element_text(text: str, source: str = "<text>") -> str:
    """Reject HTML payloads (error pages, captive portals) posing as TLE text.

    Raises:
        ValueError: If the text looks like HTML.
    """
    if "<html" in text.lower():
        raise ValueError(f"Expected element-set text from {source}, got an HTML page")
    return text


def load_element_file(filepath: str | Path) -> list[ElementSetRecord]:
    """Load three-line element sets from a local file."""
    path = Path(filepath)
    text = check_element_text(path.read_text(), source=str(path))
    records = parse_element_sets(text)
    logger.info("Loaded %d records from %s", len(records), path)
    return records

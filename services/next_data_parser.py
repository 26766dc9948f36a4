"""Extraction of the ``__NEXT_DATA__`` bootstrap payload from Next.js pages."""

import json

from bs4 import BeautifulSoup

from crawlers.errors import FetchError


def extract_next_data(html):
    """Return the decoded ``__NEXT_DATA__`` object or a :class:`FetchError`."""
    soup = BeautifulSoup(html or "", "lxml")
    script = soup.select_one("script#__NEXT_DATA__")
    if script is None:
        return FetchError.page_not_found("__NEXT_DATA__ not found")

    try:
        return json.loads(script.string or script.get_text())
    except ValueError as exc:
        return FetchError.json_decode(str(exc))


def dig(data, *path):
    """Walk nested dicts; raises ``KeyError``/``TypeError`` when the shape is wrong."""
    current = data
    for key in path:
        current = current[key]
    return current

"""Text helpers shared by the feed and HTML parsers."""

import re

from bs4 import Comment

_WS_RE = re.compile(r"\s+", re.UNICODE)


def clean_text(value):
    """Collapse runs of whitespace and strip; non-strings become ``""``."""
    if not isinstance(value, str):
        return ""
    return _WS_RE.sub(" ", value).strip()


def node_text(node):
    """Visible text of a BeautifulSoup node, ignoring HTML comments.

    Server-rendered React markup splits text with ``<!-- -->`` markers, which
    must not leak into titles.
    """
    if node is None:
        return ""
    parts = [
        str(fragment)
        for fragment in node.find_all(string=True)
        if not isinstance(fragment, Comment)
    ]
    return clean_text("".join(parts))


def strip_cdata(value):
    """Remove ``<![CDATA[`` / ``]]>`` markers so wrapped values decode as plain text."""
    if not value:
        return ""
    return value.replace("<![CDATA[", "").replace("]]>", "")

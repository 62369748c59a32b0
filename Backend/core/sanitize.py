"""
HTML sanitization for user-submitted text.
"""
from __future__ import annotations

import html

import nh3
from django.utils.html import escape

ALLOWED_TAGS = {
    "p", "br", "strong", "em", "u",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "a",
}
ALLOWED_ATTRIBUTES = {"a": {"href", "title"}}
ALLOWED_URL_SCHEMES = {"http", "https", "mailto", "tel", "callto", "sms", "cid", "xmpp"}


def sanitize_html(dirty, tags: set[str] | None = None, attributes: dict | None = None) -> str:
    """Keep a small allow-list of formatting tags, drop everything else."""
    if not dirty or not isinstance(dirty, str):
        return ""
    return nh3.clean(
        dirty,
        tags=ALLOWED_TAGS if tags is None else tags,
        attributes=ALLOWED_ATTRIBUTES if attributes is None else attributes,
        url_schemes=ALLOWED_URL_SCHEMES,
        link_rel=None,
    )


def sanitize_text(text) -> str:
    """Remove all markup, keeping the text content."""
    if not text or not isinstance(text, str):
        return ""
    return nh3.clean(text, tags=set(), attributes={})


def escape_html(text) -> str:
    if not text or not isinstance(text, str):
        return ""
    return str(escape(text))


def to_plain_text(text) -> str:
    """Strip markup and decode entities; escape again before rendering as HTML."""
    return html.unescape(sanitize_text(text))

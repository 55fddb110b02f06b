"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Plain-text normalization for assistant replies.

The assistant answers in light markdown and may attach file-search citations
such as ``【4:0†source】``. Chat surfaces behind the gateway expect one line of
plain text, so the completed message goes through `sanitize` before it is
returned. Every step is a regex substitution; text that does not match a
pattern passes through unchanged.
"""

from __future__ import annotations

import re

_HEADING_RE = re.compile(r"^#+\s*", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
_LINK_RE = re.compile(r"\[.*?\]\((.*?)\)")
_CITATION_RE = re.compile(r"【.*?†.*?】")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_markdown(text: str) -> str:
    """Drop heading markers, unwrap bold text and collapse links to their target."""
    text = _HEADING_RE.sub("", text)
    text = _BOLD_RE.sub(r"\1", text)
    return _LINK_RE.sub(r"\1", text)


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize(text: str | None) -> str:
    """
    Convert assistant markup into a single normalized line of text.

    Steps, in order: heading markers, bold markers, links, citation markers,
    whitespace. Pure and idempotent; never raises for string input.
    """
    if not text:
        return ""
    # One pass can expose new markup (e.g. "**#x**" -> "#x"), so repeat
    # until stable. Each changing pass shortens the text or only rewrites
    # whitespace, so this terminates.
    while True:
        cleaned = normalize_whitespace(_CITATION_RE.sub("", strip_markdown(text)))
        if cleaned == text:
            return cleaned
        text = cleaned

"""Markdown to HTML rendering for release notes and commit messages."""

from __future__ import annotations

import re

import markdown as md

# Bare pull request URLs, not already a Markdown link target, an href or an autolink.
_PR_RE = re.compile(
    r"(?<!\]\()(?<!href=\")(?<!href=')(?<!<)"
    r"(https://github\.com/[\w.-]+/[\w.-]+/pull/(\d+))"
)
# Twitter/GitHub style mentions such as '@JoeBloggs'.
_USER_RE = re.compile(r"(\A|\s)@([\w-]+)")


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def link_github_references(body: str) -> str:
    """Turn bare PR URLs and @mentions into HTML links."""
    body = _PR_RE.sub(r'<a href="\1">#\2</a>', body)
    return _USER_RE.sub(r'\1<a href="https://github.com/\2">@\2</a>', body)


def render_release_body(body: str, github_links: bool = False) -> str:
    """Render a Markdown string as HTML."""
    if not body:
        return ""
    text = _normalize_newlines(body)
    if github_links:
        text = link_github_references(text)
    return md.markdown(text, extensions=["fenced_code", "tables", "sane_lists"]) + "\n"

"""Markdown post-processing: link cleanup, formatting and metadata blocks."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Optional

import mdformat

from ..errors import ConversionError
from ..models.config import format_duration
from ..models.results import FetchMethod, TimingStep

logger = logging.getLogger(__name__)

# [text](#anchor), [text]() and [text]( ), but not ![alt](...)
_JUNK_LINK_RE = re.compile(r"(?<!!)\[([^\[\]]*)\]\((?:#[^)]*|\s*)\)")


def strip_junk_links(markdown: str) -> str:
    """
    Replace links that go nowhere with their bare text.

    A link is junk when its target is empty or a same-page anchor. Images
    are left alone. Links nested inside a junk link's text are unwrapped
    too, so running this twice gives the same result as running it once.

    Examples:
        >>> strip_junk_links("[Skip](#main) to [docs](https://example.com)")
        'Skip to [docs](https://example.com)'
    """
    while True:
        stripped = _JUNK_LINK_RE.sub(r"\1", markdown)
        if stripped == markdown:
            return stripped
        markdown = stripped


def format_markdown(markdown: str) -> str:
    """
    Re-render markdown in canonical CommonMark form.

    Raises:
        ConversionError: If the markdown cannot be parsed or rendered
    """
    if not markdown.strip():
        return ""
    try:
        return str(mdformat.text(markdown))
    except Exception as e:
        logger.error(f"Failed to format markdown: {e}")
        raise ConversionError(f"formatting markdown: {e}") from e


def timeout_banner(timeout: float) -> str:
    """Notice prepended to output when the page did not finish loading."""
    return f"[webmd: page timed out after {format_duration(timeout)}; content may be incomplete]\n\n"


def build_frontmatter(
    source: str,
    fetch_method: FetchMethod,
    timed_out: bool = False,
    timing: Optional[Iterable[TimingStep]] = None,
) -> str:
    """
    Build a YAML frontmatter block describing how a page was fetched.

    Timing entries keep their recorded order and are rounded to milliseconds.

    Example output:
        ---
        source: https://example.com
        fetch_method: browser
        timed_out: false
        timing:
          fetch: 1.234s
          total: 1.5s
        ---
    """
    lines = [
        "---",
        f"source: {source}",
        f"fetch_method: {fetch_method.value}",
        f"timed_out: {'true' if timed_out else 'false'}",
    ]
    steps = list(timing or [])
    if steps:
        lines.append("timing:")
        lines.extend(f"  {step.name}: {format_duration(step.duration)}" for step in steps)
    lines.append("---")
    return "\n".join(lines) + "\n\n"

"""Pipeline steps that finish the markdown output."""

from ...conversion.postprocess import (
    build_frontmatter,
    format_markdown,
    strip_junk_links,
    timeout_banner,
)
from ...models.results import FetchMethod, TimingStep
from ..base import PageContext


class StripJunkLinksStep:
    """Unwraps links to empty targets and same-page anchors."""

    name = "strip_junk_links"
    timed = True

    def applies(self, ctx: PageContext) -> bool:
        return ctx.rendered

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.markdown = strip_junk_links(ctx.markdown or "")
        return ctx


class FormatStep:
    """Re-renders markdown in canonical CommonMark form."""

    name = "format"
    timed = True

    def applies(self, ctx: PageContext) -> bool:
        return ctx.markdown is not None

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.markdown = format_markdown(ctx.markdown or "")
        return ctx


class TimeoutBannerStep:
    """Prepends a notice when the browser hit a deadline."""

    name = "timeout_banner"
    timed = False

    def applies(self, ctx: PageContext) -> bool:
        return ctx.timed_out

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.markdown = timeout_banner(ctx.request.timeout) + (ctx.markdown or "")
        return ctx


class FrontmatterStep:
    """
    Prepends YAML frontmatter with fetch metadata.

    Records the total elapsed time as the final timing entry first, so the
    block lists every step followed by ``total``.
    """

    name = "frontmatter"
    timed = False

    def applies(self, ctx: PageContext) -> bool:
        return ctx.request.frontmatter and ctx.markdown is not None

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.timing.append(TimingStep(name="total", duration=ctx.elapsed()))
        block = build_frontmatter(
            source=ctx.url,
            fetch_method=ctx.fetch_method or FetchMethod.BROWSER,
            timed_out=ctx.timed_out,
            timing=ctx.timing,
        )
        ctx.markdown = block + (ctx.markdown or "")
        return ctx

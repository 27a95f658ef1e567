"""Pipeline steps that clean rendered HTML before conversion."""

from ...conversion.sanitizer import strip_boilerplate, strip_hidden, strip_images
from ..base import PageContext


class StripHiddenStep:
    """Removes scripts, styles, comments and content a reader never sees."""

    name = "strip_hidden"
    timed = True

    def applies(self, ctx: PageContext) -> bool:
        return ctx.rendered

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.html = strip_hidden(ctx.html or "")
        return ctx


class StripNavStep:
    """Removes navigation everywhere and header/footer/aside outside articles."""

    name = "strip_nav"
    timed = True

    def applies(self, ctx: PageContext) -> bool:
        return ctx.rendered and not ctx.request.keep_nav

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.html = strip_boilerplate(ctx.html or "")
        return ctx


class StripImagesStep:
    """Removes <img> tags unless the request keeps images."""

    name = "strip_images"
    timed = True

    def applies(self, ctx: PageContext) -> bool:
        return ctx.rendered and not ctx.request.images

    async def execute(self, ctx: PageContext) -> PageContext:
        ctx.html = strip_images(ctx.html or "")
        return ctx

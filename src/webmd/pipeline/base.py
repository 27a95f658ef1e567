"""Base classes for the conversion pipeline architecture."""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from ..models.config import FetchRequest
from ..models.results import (
    ExtractionOutcome,
    FetchMethod,
    NegotiationOutcome,
    TimingStep,
)

logger = logging.getLogger(__name__)


@dataclass
class PageContext:
    """
    Context object passed through pipeline steps.

    Contains all state for converting a single page, accumulated
    as it moves through the pipeline.

    Attributes:
        request: The conversion request
        html: Rendered HTML, rewritten in place by the sanitizer steps
        markdown: Markdown output, rewritten in place by the post-processing steps
        fetch_method: How the content was obtained
        timed_out: True if the browser hit a deadline
        negotiation: Outcome of the markdown negotiation attempt
        extraction: Outcome of the HTML to Markdown step
        timing: Durations of the steps that ran, in execution order
        error: Error message if an exception occurred
    """

    request: FetchRequest

    # Content (accumulated through pipeline)
    html: Optional[str] = None
    markdown: Optional[str] = None
    fetch_method: Optional[FetchMethod] = None
    timed_out: bool = False

    # Why each stage took the path it did
    negotiation: Optional[NegotiationOutcome] = None
    extraction: Optional[ExtractionOutcome] = None

    timing: list[TimingStep] = field(default_factory=list)
    error: Optional[str] = None

    started_at: float = field(default_factory=time.perf_counter)

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def rendered(self) -> bool:
        """True when the content came from the browser rather than negotiation."""
        return self.fetch_method == FetchMethod.BROWSER

    def elapsed(self) -> float:
        """Seconds since the pipeline started on this page."""
        return time.perf_counter() - self.started_at


@runtime_checkable
class ConversionStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a PageContext, processes it, and returns
    the (possibly modified) context.

    Error Handling Contract:
    - Steps that do not apply to a page return False from applies()
      and are neither run nor timed
    - For unexpected failures: raise an exception
    - The pipeline will catch exceptions and set ctx.error

    Example implementation:
        class UppercaseStep:
            name = "uppercase"
            timed = True

            def applies(self, ctx: PageContext) -> bool:
                return ctx.markdown is not None

            async def execute(self, ctx: PageContext) -> PageContext:
                ctx.markdown = ctx.markdown.upper()
                return ctx
    """

    name: str

    # Whether the step's duration goes into ctx.timing
    timed: bool

    def applies(self, ctx: PageContext) -> bool:
        """Return True if this step should run for the page."""
        ...

    async def execute(self, ctx: PageContext) -> PageContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The page context with accumulated state

        Returns:
            The (possibly modified) page context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Pipeline for converting a single page through multiple steps.

    Steps are executed in order. Steps that do not apply are skipped.
    If a step raises an exception, the error is captured in ctx.error
    and processing stops.

    Example:
        pipeline = ConversionPipeline(steps=[
            FetchStep(page_source=page_fetcher, negotiator=negotiator),
            StripHiddenStep(),
            ConvertStep(extractor),
            FormatStep(),
        ])

        ctx = await pipeline.execute(FetchRequest(url="https://example.com"))
        if ctx.error:
            logger.error(f"Failed: {ctx.error}")
        else:
            print(ctx.markdown)
    """

    steps: list[ConversionStep]

    async def execute(self, request: FetchRequest) -> PageContext:
        """
        Execute the pipeline for a request.

        Args:
            request: The conversion request

        Returns:
            PageContext with final state (check error for status)
        """
        ctx = PageContext(request=request)

        for step in self.steps:
            if not step.applies(ctx):
                continue

            step_start = time.perf_counter()
            try:
                ctx = await step.execute(ctx)
            except Exception as e:
                ctx.error = f"{step.name}: {e}"
                logger.error(f"Conversion of {request.url} failed at {ctx.error}")
                break

            if step.timed:
                ctx.timing.append(TimingStep(name=step.name, duration=time.perf_counter() - step_start))

        return ctx

    def add_step(self, step: ConversionStep) -> "ConversionPipeline":
        """
        Add a step to the pipeline (fluent API).

        Args:
            step: The step to add

        Returns:
            Self for chaining
        """
        self.steps.append(step)
        return self

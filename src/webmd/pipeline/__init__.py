"""Pipeline architecture for conversion operations."""

from .base import ConversionPipeline, ConversionStep, PageContext

__all__ = ["ConversionPipeline", "ConversionStep", "PageContext"]

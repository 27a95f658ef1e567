"""Pipeline steps for conversion operations."""

from .convert import ConvertStep
from .fetch import FetchStep, PageSource
from .postprocess import FormatStep, FrontmatterStep, StripJunkLinksStep, TimeoutBannerStep
from .sanitize import StripHiddenStep, StripImagesStep, StripNavStep

__all__ = [
    "ConvertStep",
    "FetchStep",
    "FormatStep",
    "FrontmatterStep",
    "PageSource",
    "StripHiddenStep",
    "StripImagesStep",
    "StripJunkLinksStep",
    "StripNavStep",
    "TimeoutBannerStep",
]

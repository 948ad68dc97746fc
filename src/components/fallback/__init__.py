"""
Fallback component - pattern and generic default metadata.
"""

from ._impl import (
    FallbackProvider,
    build_fallback_config,
    path_segments,
    render_template,
    title_from_segment,
    truncate_text,
)
from .models import FallbackConfig, FallbackSection, FallbackVariant

__all__ = [
    "FallbackConfig",
    "FallbackProvider",
    "FallbackSection",
    "FallbackVariant",
    "build_fallback_config",
    "path_segments",
    "render_template",
    "title_from_segment",
    "truncate_text",
]

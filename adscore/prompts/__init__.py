"""
Prompt templates for the AdScore creative readiness scorecard.
"""

from .scorecard import (
    CATEGORY_NAMES,
    ImagePromptSpec,
    VideoPromptSpec,
    build_system_prompt,
    copy_analysis_section,
    copy_schema_fragment,
)

__all__ = [
    "CATEGORY_NAMES",
    "ImagePromptSpec",
    "VideoPromptSpec",
    "build_system_prompt",
    "copy_analysis_section",
    "copy_schema_fragment",
]

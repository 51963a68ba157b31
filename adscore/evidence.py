"""
Evidence assembly: turn a classified asset (or sampled frames plus audio
heuristics) into one provider-neutral AnalysisPrompt.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from .audio import AudioAnalysis
from .frames import ExtractedFrame
from .media import AdCopy, MediaAsset
from .prompts.scorecard import ImagePromptSpec, VideoPromptSpec, build_system_prompt

IMAGE_INSTRUCTION = "Analyse and score this ad creative. Return only valid JSON."


@dataclass(frozen=True)
class ImageBlock:
    data: bytes
    media_type: str

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class TextBlock:
    text: str


ContentBlock = Union[ImageBlock, TextBlock]


@dataclass(frozen=True)
class AnalysisPrompt:
    """System prompt plus ordered user content for one reasoning call."""

    system: str
    blocks: Tuple[ContentBlock, ...]
    media_kind: str

    @property
    def image_count(self) -> int:
        return sum(1 for b in self.blocks if isinstance(b, ImageBlock))


def assemble_image_evidence(asset: MediaAsset, ad_copy: Optional[AdCopy] = None) -> AnalysisPrompt:
    """One image block (the creative as uploaded) followed by the instruction."""
    return AnalysisPrompt(
        system=build_system_prompt(ImagePromptSpec(ad_copy=ad_copy)),
        blocks=(
            ImageBlock(data=asset.data, media_type=asset.content_type),
            TextBlock(IMAGE_INSTRUCTION),
        ),
        media_kind="image",
    )


def video_instruction(frames: Sequence[ExtractedFrame]) -> str:
    timestamps = ", ".join(f"{f.timestamp:.1f}s" for f in frames)
    return (
        f"Analyse this video ad. {len(frames)} key frames were extracted at these "
        f"timestamps: {timestamps}. The frames are shown in chronological order.\n\n"
        "IMPORTANT:\n"
        "- The first frames (0-3s) are the opening hook: judge thumb-stop power\n"
        "- Middle frames show pacing and content flow\n"
        "- The final frames come from the last 3 seconds: judge the CTA, end card and offer clarity\n\n"
        "Give DEFINITIVE assessments of text overlays. Do not say \"verify\" or \"check\"; "
        "state whether the text IS or IS NOT clear and readable in these frames.\n\n"
        "Return only valid JSON."
    )


def assemble_video_evidence(
    frames: Sequence[ExtractedFrame],
    audio: Optional[AudioAnalysis] = None,
    ad_copy: Optional[AdCopy] = None,
) -> AnalysisPrompt:
    """Frames as image blocks in chronological order, then a text block naming their timestamps."""
    ordered = sorted(frames, key=lambda f: f.timestamp)
    blocks = [ImageBlock(data=f.image, media_type=f.media_type) for f in ordered]
    blocks.append(TextBlock(video_instruction(ordered)))
    return AnalysisPrompt(
        system=build_system_prompt(VideoPromptSpec(audio=audio, ad_copy=ad_copy)),
        blocks=tuple(blocks),
        media_kind="video",
    )


__all__ = [
    "ImageBlock",
    "TextBlock",
    "AnalysisPrompt",
    "assemble_image_evidence",
    "assemble_video_evidence",
]

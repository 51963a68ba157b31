"""
AdScore Creative Readiness Scorecard Prompt

System prompts asking the reasoning service to grade one ad creative against
eight fixed categories and return a strict JSON scorecard. There are two
variants (image and video) which share the category list, the ad copy block
and the tail of the JSON schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..audio import AudioAnalysis
from ..media import AdCopy

CATEGORY_NAMES = (
    "Thumb-Stop Power",
    "Hook Clarity",
    "Text Legibility",
    "Social Proof",
    "Product Visibility",
    "CTA Strength",
    "Emotional Trigger",
    "Platform Nativity",
)


@dataclass(frozen=True)
class ImagePromptSpec:
    ad_copy: Optional[AdCopy] = None


@dataclass(frozen=True)
class VideoPromptSpec:
    audio: Optional[AudioAnalysis] = None
    ad_copy: Optional[AdCopy] = None


PromptSpec = Union[ImagePromptSpec, VideoPromptSpec]


# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------

PERSONA = (
    "You are AdScore, a creative analyst built by a performance media buyer with "
    "over a decade of paid social spend behind them. You evaluate {subject} and "
    "decide whether each one is worth testing before the advertiser spends money."
)

READINESS_FRAMING = """You do NOT predict ROAS, CTR or any other performance metric. You assess CREATIVE READINESS: whether the ad has the fundamentals that give it a fair chance to perform."""

OFFER_AND_URGENCY_AUDIT = """- offerMentioned: Is an offer visible{where}? Look for: "free", "discount", "% off", "BOGO", "free shipping", "free gift", "save", "deal"
- urgencyPresent: Is there urgency language{where}? Look for: "limited time", "today only", "ends soon", "while supplies last", "don't miss", "last chance", "act now\""""

COPY_CRITERIA = """AD COPY REVIEW CRITERIA:
1. HOOK STRENGTH: Does the primary text open with a pattern interrupt, a curiosity hook or a benefit? The first line matters most.
2. BENEFIT CLARITY: Is the value proposition clear within the first two lines (before "...see more")?
3. HEADLINE EFFECTIVENESS: Does the headline reinforce the CTA or add urgency?
4. COPY-CREATIVE ALIGNMENT: Does the text complement the visual, or do they disagree?
5. LENGTH CHECK: Primary text over 125 characters truncates on mobile. Is the hook visible before the cut?
6. EMOJI USAGE: Are emojis used as pattern interrupts and for scanability, or overused?

Score copy alongside Hook Clarity: when copy is provided, copyCreativeAlignment carries weight in the overall score."""

COPY_SCHEMA = """
  "copyAnalysis": {
    "primaryTextScore": <1-10>,
    "primaryTextAnalysis": "<hook, benefit clarity, length and emoji usage>",
    "headlineScore": <1-10>,
    "headlineAnalysis": "<headline effectiveness and urgency>",
    "copyCreativeAlignment": <1-10>,
    "copyCreativeAlignmentReason": "<does the copy match and strengthen the visual?>",
    "copyFixes": ["<specific copy fix, e.g. 'First line is 156 chars so the hook truncates on mobile; move the benefit into the first 100 chars'>", "<fix 2>", "<fix 3>"]
  },"""

SCHEMA_TAIL = """
  "policyFlags": ["<flag 1>", "<flag 2>"] or [],
  "topFixes": [
    "<specific actionable fix 1>",
    "<specific actionable fix 2>",
    "<specific actionable fix 3>"
  ],
  "verdictReason": "<1-2 sentences on overall quality and launch readiness>",
  "whatsWorking": "<2-3 sentences on what the ad does well>",
  "executiveSummary": {
    "biggestStrength": "<5-10 words, e.g. 'Strong hook + native UGC format'>",
    "biggestRisk": "<5-10 words, e.g. 'Product appears late in first 3 seconds'>",
    "quickWin": "<5-15 words, e.g. 'Show product by 0.5s to boost conversions'>"
  },
  "scoreExplanation": {
    "scoreDriver": "<3-6 words on what lifts the score, e.g. 'strong hook clarity and CTA'>",
    "scoreDrag": "<3-6 words on what holds it back, e.g. 'late product visibility'>"
  }
}"""

JSON_ONLY = "IMPORTANT: Respond with ONLY valid JSON. No markdown, no code fences, no prose. Use exactly this structure:"


def _category_schema(reasons: Optional[dict] = None) -> str:
    reasons = reasons or {}
    rows = [
        f'    {{"name": "{name}", "score": <1-10>, "reason": "<{reasons.get(name, "1 sentence")}>"}}'
        for name in CATEGORY_NAMES
    ]
    return '  "categories": [\n' + ",\n".join(rows) + "\n  ],"


def copy_analysis_section(ad_copy: Optional[AdCopy]) -> str:
    """Criteria block plus the caller's copy, or "" when there is no copy to review."""
    if ad_copy is None or not ad_copy.has_copy:
        return ""
    details = []
    if ad_copy.primary_text:
        details.append(f'Primary Text ({len(ad_copy.primary_text)} chars): "{ad_copy.primary_text}"')
    if ad_copy.headline:
        details.append(f'Headline: "{ad_copy.headline}"')
    if ad_copy.description:
        details.append(f'Description: "{ad_copy.description}"')
    return "\nAD COPY PROVIDED:\n" + "\n".join(details) + "\n\n" + COPY_CRITERIA + "\n"


def copy_schema_fragment(ad_copy: Optional[AdCopy] = None) -> str:
    """JSON schema lines for copyAnalysis, only when copy was supplied."""
    if ad_copy is None or not ad_copy.has_copy:
        return ""
    return COPY_SCHEMA


def _weighting_note(ad_copy: Optional[AdCopy]) -> str:
    note = "Calculate overallScore as a weighted average: Thumb-Stop Power and Hook Clarity count double because they decide whether anything else gets seen."
    if ad_copy is not None and ad_copy.has_copy:
        note += " With copy provided, factor copyCreativeAlignment into the overall score."
    return note


# ---------------------------------------------------------------------------
# Image variant
# ---------------------------------------------------------------------------

IMAGE_RUBRIC = """SCORING CATEGORIES (1-10 each):

1. THUMB-STOP POWER
Would this stop a thumb in a fast-moving feed?
- High contrast or unusual colour combinations
- Human faces, especially eyes and expressions
- Pattern interrupts and visual tension
- NOT: generic stock photos, flat product shots, cluttered layouts

2. HOOK CLARITY (the 1-second test)
Is the value proposition clear without reading?
- Benefit demonstrated visually
- Before/after implied without breaking policy
- Headline under 8 words if text is present
- NOT: paragraphs of text, unclear purpose, needs context to understand

3. TEXT LEGIBILITY
Is it readable on a phone?
- Text large enough for mobile (about 24pt equivalent or more)
- Strong contrast between text and background
- No more than 2-3 competing text elements
- No decorative fonts for key information
- Text density ideally under 20% of the image

4. SOCIAL PROOF
Are there trust signals?
- Star ratings and review counts
- Testimonial snippets, "as seen on" logos, user counts ("10,000+ sold")
- Trust badges and certifications
- NOTE: not every ad needs this; score on whether it would help this ad

5. PRODUCT VISIBILITY
Is it obvious what is being sold?
- Product prominent, shown in use or in context
- NOT: tiny product in a corner, hidden by text, lifestyle shot with the product secondary

6. CTA STRENGTH
Is there a clear next step?
- Button or CTA element present
- Action language ("Shop Now" beats "Learn More")
- Placed where the eye lands (bottom centre or bottom right)
- NOTE: some native-style ads omit a CTA on purpose; score in context

7. EMOTIONAL TRIGGER
Does it pull a psychological lever?
- Pain point, aspiration, curiosity gap, fear of missing out, identity ("for people who...")
- NOT: purely rational feature lists, emotionally flat

8. PLATFORM NATIVITY
Does it look like content or like an AD?
- Feed-native (UGC style, organic look) and not over-polished
- Could believably be shared by a friend
- NOT: obvious stock imagery, heavy branding, corporate templates

AD POLICY FLAGS:
Scan for disapproval risks:
- Before/after imagery about personal attributes
- Personal attribute language ("Are you overweight?", "Do you have acne?")
- Exaggerated claims or superlatives
- Text density over 20%
- Unclear advertiser identity
- Potentially misleading elements"""


def _build_image_prompt(spec: ImagePromptSpec) -> str:
    ad_copy = spec.ad_copy
    schema = (
        "{\n"
        '  "overallScore": <number 0-100>,\n'
        '  "mediaType": "image",\n'
        '  "quickAudit": {\n'
        '    "offerMentioned": <true/false>,\n'
        '    "urgencyPresent": <true/false>\n'
        "  },\n"
        + _category_schema()
        + copy_schema_fragment(ad_copy)
        + SCHEMA_TAIL
    )
    return "\n\n".join([
        PERSONA.format(subject="ad images"),
        READINESS_FRAMING,
        IMAGE_RUBRIC,
        "QUICK AUDIT CHECKLIST:\nScan the creative and any ad copy for these binary signals:\n"
        + OFFER_AND_URGENCY_AUDIT.format(where=""),
    ]) + "\n" + copy_analysis_section(ad_copy) + "\n" + JSON_ONLY + "\n\n" + schema + "\n\n" + _weighting_note(ad_copy)


# ---------------------------------------------------------------------------
# Video variant
# ---------------------------------------------------------------------------

VIDEO_FOCUS = """VIDEO-SPECIFIC ANALYSIS:
- THE FIRST 3 SECONDS DECIDE EVERYTHING: frames at 0s, 1s, 2s and 3s show the opening
- Hook timing: does something compelling happen immediately?
- Pacing: how do scenes change across the frames?
- TEXT AND CAPTIONS: give a definitive verdict on whether overlays are clear, readable and sized for mobile. Do not ask for verification.
- END CARD / CTA: the final frames come from the last 3 seconds; judge offer clarity and call-to-action strength there"""

VIDEO_RUBRIC = """SCORING CATEGORIES (1-10 each):

1. THUMB-STOP POWER (first frame and opening)
Does the 0s frame stop a scroll?
- Opening frame works as a static thumbnail
- Immediate visual hook or pattern interrupt
- NOT: slow fade-ins, logo intros, generic establishing shots

2. HOOK CLARITY (the 3-second test)
From frames 0-3s and the audio opening, is the value proposition clear quickly?
- Benefit shown early
- Audio hook reinforces the visual hook when there is a voiceover
- NOT: long build-ups, unclear product purpose

3. TEXT LEGIBILITY
Is on-screen text readable?
- Large enough for mobile, high contrast
- Captions present for sound-off viewing

4. SOCIAL PROOF
Any trust signals in any frame?
- Ratings, review counts, testimonial clips, trust badges

5. PRODUCT VISIBILITY
Is the product clearly featured across frames, in use or in context?

6. CTA STRENGTH
Is there a clear CTA, especially in the later frames?
- End card or CTA element, action-oriented language

7. EMOTIONAL TRIGGER
Does it pull a psychological lever?
- Pain point, aspiration, transformation or results implied

8. PLATFORM NATIVITY
Does it look like feed content or like an AD?
- UGC style, organic look, suited to social

AD POLICY FLAGS:
Scan every frame for disapproval risks."""

VIDEO_CATEGORY_REASONS = {
    "Thumb-Stop Power": "1 sentence about the opening and first frame",
    "Hook Clarity": "1 sentence about the first 3 seconds, visual and audio",
    "Text Legibility": "1 sentence about on-screen text and captions",
    "Product Visibility": "1 sentence about product visibility across frames",
    "CTA Strength": "1 sentence about the end card and CTA",
    "Platform Nativity": "1 sentence about style",
}

VIDEO_HOOK_SCHEMA = """
  "hookAnalysis": {
    "firstFrameScore": <1-10>,
    "firstFrameAnalysis": "<what the viewer sees at 0s and whether it stops the scroll>",
    "threeSecondScore": <1-10>,
    "threeSecondAnalysis": "<from frames 0-3s and the audio, is the hook clear and compelling?>",
    "hookRecommendation": "<one specific change to the opening, visual or audio>"
  },"""

VIDEO_NOTES_SCHEMA = """
  "videoNotes": {
    "pacing": "<scene changes across frames>",
    "textTiming": "<text visibility across frames>",
    "ctaTiming": "<when the CTA appears>",
    "textOverlayVerdict": "<DEFINITIVE verdict, e.g. 'Text overlays are clear and readable throughout' or 'Text too small in frames at Xs' or 'No text overlays visible, relies on audio only'>",
    "endCardAnalysis": "<DEFINITIVE read of the final frames: what CTA or offer is shown and is it clear?>"
  },"""


def audio_context(audio: Optional[AudioAnalysis]) -> str:
    """Summarise the audio heuristics for the reasoning service."""
    if audio is None:
        return "AUDIO ANALYSIS: Unable to analyse audio. Recommend manual verification."

    lines = [
        "AUDIO ANALYSIS (from transcription):",
        f"- Has voiceover: {'Yes' if audio.has_voiceover else 'No'}",
        f"- Voiceover starts in first 2 seconds: {'Yes' if audio.voiceover_starts_early else 'No'}",
        f'- Opening line (first 5 seconds): "{audio.opening_line or "N/A"}"',
        f'- Transcript (first 10 seconds): "{audio.transcript or "N/A"}"',
        "",
    ]
    if audio.has_voiceover:
        lines += [
            "Factor the audio hook into your scoring:",
            "- A compelling voiceover inside the first 2 seconds should lift Thumb-Stop Power and Hook Clarity",
            "- A slow or weak voiceover opening belongs in the fixes",
            "- Judge whether the opening line is benefit-led or generic",
        ]
    else:
        lines += [
            "NOTE: No voiceover detected. Audio is music or ambient only.",
            "- Check whether captions or on-screen text carry the message for sound-off viewing",
            "- No visible captions is a critical fix: most social viewers watch with sound off",
        ]
    return "\n".join(lines)


def _build_video_prompt(spec: VideoPromptSpec) -> str:
    ad_copy = spec.ad_copy
    schema = (
        "{\n"
        '  "overallScore": <number 0-100>,\n'
        '  "mediaType": "video",\n'
        '  "quickAudit": {\n'
        '    "offerMentioned": <true/false>,\n'
        '    "urgencyPresent": <true/false>,\n'
        '    "endCardPresent": <true/false>\n'
        "  },"
        + VIDEO_HOOK_SCHEMA
        + "\n"
        + _category_schema(VIDEO_CATEGORY_REASONS)
        + copy_schema_fragment(ad_copy)
        + VIDEO_NOTES_SCHEMA
        + SCHEMA_TAIL
    )
    audit = (
        "QUICK AUDIT CHECKLIST:\nScan ALL frames and any ad copy for these binary signals:\n"
        + OFFER_AND_URGENCY_AUDIT.format(where=" in any frame or text")
        + "\n- endCardPresent: Is there a clear end card or CTA screen in the final frames? (consistent with your endCardAnalysis)"
    )
    return "\n\n".join([
        PERSONA.format(subject="ad videos"),
        "You are shown KEY FRAMES sampled from a video ad at different timestamps. "
        "Use them to judge the video's flow, pacing and effectiveness.",
        audio_context(spec.audio),
        READINESS_FRAMING,
        VIDEO_FOCUS,
        VIDEO_RUBRIC,
        audit,
    ]) + "\n" + copy_analysis_section(ad_copy) + "\n" + JSON_ONLY + "\n\n" + schema + "\n\n" + _weighting_note(ad_copy)


def build_system_prompt(spec: PromptSpec) -> str:
    """Render the system prompt for an image or video scorecard request."""
    if isinstance(spec, VideoPromptSpec):
        return _build_video_prompt(spec)
    if isinstance(spec, ImagePromptSpec):
        return _build_image_prompt(spec)
    raise TypeError(f"Unknown prompt variant: {type(spec).__name__}")


__all__ = [
    "CATEGORY_NAMES",
    "ImagePromptSpec",
    "VideoPromptSpec",
    "PromptSpec",
    "audio_context",
    "build_system_prompt",
    "copy_analysis_section",
    "copy_schema_fragment",
]

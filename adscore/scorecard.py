"""
Scorecard parsing, validation and result assembly.

The reasoning service's reply is untrusted text. It is only turned into an
AnalysisResult when every field the requested schema declares is present and
well-typed; anything else is an OracleResponseUnparseable error, never a
partially-filled result.
"""

from __future__ import annotations

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .errors import OracleResponseUnparseable
from .extraction import AUDIO_NOT_CONFIGURED, VideoEvidence
from .media import AdCopy, MediaAsset
from .prompts.scorecard import CATEGORY_NAMES
from .types import AnalysisResult, AudioSummary

logger = logging.getLogger(__name__)

MIN_CATEGORY_SCORE = 1
MAX_CATEGORY_SCORE = 10
MIN_OVERALL_SCORE = 0
MAX_OVERALL_SCORE = 100
EXPECTED_TOP_FIXES = 3

HOOK_SCORE_FIELDS = ("firstFrameScore", "threeSecondScore")
HOOK_TEXT_FIELDS = ("firstFrameAnalysis", "threeSecondAnalysis", "hookRecommendation")
COPY_SCORE_FIELDS = ("primaryTextScore", "headlineScore", "copyCreativeAlignment")
COPY_TEXT_FIELDS = ("primaryTextAnalysis", "headlineAnalysis", "copyCreativeAlignmentReason")
VIDEO_NOTE_FIELDS = ("pacing", "textTiming", "ctaTiming", "textOverlayVerdict", "endCardAnalysis")
SUMMARY_FIELDS = ("biggestStrength", "biggestRisk", "quickWin")
EXPLANATION_FIELDS = ("scoreDriver", "scoreDrag")

AUDIO_NOT_CONFIGURED_MESSAGE = "Audio analysis unavailable - transcription service not configured."
AUDIO_FAILED_MESSAGE = "Audio analysis unavailable - the audio track could not be analysed."

_CANONICAL_CATEGORIES = {name.lower(): name for name in CATEGORY_NAMES}


def strip_markdown_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ``` or ``` ... ```) from text."""
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    first_newline = cleaned.find("\n")
    if first_newline != -1:
        cleaned = cleaned[first_newline + 1:]
    else:
        # Single-line fence: ```json {...}```
        cleaned = cleaned[3:]
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]

    if cleaned.rstrip().endswith("```"):
        cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def parse_scorecard(text: str) -> Dict[str, Any]:
    """Parse the reply into a JSON object or raise OracleResponseUnparseable."""
    if not text or not text.strip():
        raise OracleResponseUnparseable("Empty response from reasoning service", raw_response=text)
    cleaned = strip_markdown_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse reasoning response: %s", text[:500])
        raise OracleResponseUnparseable(
            f"Response is not valid JSON: {e}", raw_response=text, cause=e
        ) from e
    if not isinstance(data, dict):
        raise OracleResponseUnparseable(
            f"Expected a JSON object, got {type(data).__name__}", raw_response=text
        )
    return data


# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------

def _fail(path: str, problem: str) -> OracleResponseUnparseable:
    return OracleResponseUnparseable(f"Invalid scorecard field '{path}': {problem}")


def _require(data: Dict[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise _fail(path, "missing")
    return data[key]


def _object(data: Dict[str, Any], key: str, path: Optional[str] = None) -> Dict[str, Any]:
    path = path or key
    value = _require(data, key, path)
    if not isinstance(value, dict):
        raise _fail(path, f"expected an object, got {type(value).__name__}")
    return value


def _string(data: Dict[str, Any], key: str, path: str) -> str:
    value = _require(data, key, path)
    if not isinstance(value, str):
        raise _fail(path, f"expected a string, got {type(value).__name__}")
    return value


def _boolean(data: Dict[str, Any], key: str, path: str) -> bool:
    value = _require(data, key, path)
    if not isinstance(value, bool):
        raise _fail(path, f"expected a boolean, got {type(value).__name__}")
    return value


def _score(data: Dict[str, Any], key: str, path: str, low: int, high: int) -> int:
    value = _require(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _fail(path, f"expected a number, got {type(value).__name__}")
    if not low <= value <= high:
        raise _fail(path, f"{value} is outside {low}..{high}")
    return int(round(value))


def _string_list(data: Dict[str, Any], key: str, path: str) -> List[str]:
    value = _require(data, key, path)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _fail(path, "expected a list of strings")
    return list(value)


def _strings(data: Dict[str, Any], fields: Sequence[str], prefix: str) -> Dict[str, str]:
    return {f: _string(data, f, f"{prefix}.{f}") for f in fields}


def _validate_categories(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        raise _fail("categories", "expected a list")

    by_name: Dict[str, Dict[str, Any]] = {}
    for idx, item in enumerate(raw):
        path = f"categories[{idx}]"
        if not isinstance(item, dict):
            raise _fail(path, "expected an object")
        name = _string(item, "name", f"{path}.name")
        canonical = _CANONICAL_CATEGORIES.get(name.strip().lower())
        if canonical is None:
            raise _fail(f"{path}.name", f"unknown category {name!r}")
        if canonical in by_name:
            raise _fail(f"{path}.name", f"duplicate category {name!r}")
        by_name[canonical] = {
            "name": canonical,
            "score": _score(item, "score", f"{path}.score", MIN_CATEGORY_SCORE, MAX_CATEGORY_SCORE),
            "reason": _string(item, "reason", f"{path}.reason"),
        }

    missing = [name for name in CATEGORY_NAMES if name not in by_name]
    if missing:
        raise _fail("categories", f"missing {', '.join(missing)}")
    return [by_name[name] for name in CATEGORY_NAMES]


def validate_scorecard(data: Dict[str, Any], media_kind: str, expect_copy: bool = False) -> AnalysisResult:
    """
    Check a parsed scorecard against the schema requested for ``media_kind``.

    Returns a new dict with categories in canonical order and without any
    section that does not belong to the variant (hook and video notes on
    images, copy analysis when no copy was supplied).
    """
    is_video = media_kind == "video"

    declared = _string(data, "mediaType", "mediaType")
    if declared != media_kind:
        logger.warning("Scorecard declared mediaType=%r for a %s; using %s", declared, media_kind, media_kind)

    audit_raw = _object(data, "quickAudit")
    quick_audit: Dict[str, bool] = {
        "offerMentioned": _boolean(audit_raw, "offerMentioned", "quickAudit.offerMentioned"),
        "urgencyPresent": _boolean(audit_raw, "urgencyPresent", "quickAudit.urgencyPresent"),
    }
    if is_video:
        quick_audit["endCardPresent"] = _boolean(audit_raw, "endCardPresent", "quickAudit.endCardPresent")

    result: Dict[str, Any] = {
        "overallScore": _score(data, "overallScore", "overallScore", MIN_OVERALL_SCORE, MAX_OVERALL_SCORE),
        "mediaType": media_kind,
        "quickAudit": quick_audit,
        "categories": _validate_categories(_require(data, "categories", "categories")),
    }

    if is_video:
        hook_raw = _object(data, "hookAnalysis")
        hook = {f: _score(hook_raw, f, f"hookAnalysis.{f}", MIN_CATEGORY_SCORE, MAX_CATEGORY_SCORE) for f in HOOK_SCORE_FIELDS}
        hook.update(_strings(hook_raw, HOOK_TEXT_FIELDS, "hookAnalysis"))
        result["hookAnalysis"] = {
            "firstFrameScore": hook["firstFrameScore"],
            "firstFrameAnalysis": hook["firstFrameAnalysis"],
            "threeSecondScore": hook["threeSecondScore"],
            "threeSecondAnalysis": hook["threeSecondAnalysis"],
            "hookRecommendation": hook["hookRecommendation"],
        }

    if expect_copy:
        copy_raw = _object(data, "copyAnalysis")
        copy_analysis: Dict[str, Any] = {}
        for score_field, text_field in zip(COPY_SCORE_FIELDS, COPY_TEXT_FIELDS):
            copy_analysis[score_field] = _score(
                copy_raw, score_field, f"copyAnalysis.{score_field}", MIN_CATEGORY_SCORE, MAX_CATEGORY_SCORE
            )
            copy_analysis[text_field] = _string(copy_raw, text_field, f"copyAnalysis.{text_field}")
        copy_analysis["copyFixes"] = _string_list(copy_raw, "copyFixes", "copyAnalysis.copyFixes")
        result["copyAnalysis"] = copy_analysis

    if is_video:
        result["videoNotes"] = _strings(_object(data, "videoNotes"), VIDEO_NOTE_FIELDS, "videoNotes")

    result["policyFlags"] = _string_list(data, "policyFlags", "policyFlags")
    result["topFixes"] = _string_list(data, "topFixes", "topFixes")
    if len(result["topFixes"]) != EXPECTED_TOP_FIXES:
        logger.info("Scorecard returned %d top fixes (expected %d)", len(result["topFixes"]), EXPECTED_TOP_FIXES)
    result["verdictReason"] = _string(data, "verdictReason", "verdictReason")
    result["whatsWorking"] = _string(data, "whatsWorking", "whatsWorking")
    result["executiveSummary"] = _strings(_object(data, "executiveSummary"), SUMMARY_FIELDS, "executiveSummary")
    result["scoreExplanation"] = _strings(_object(data, "scoreExplanation"), EXPLANATION_FIELDS, "scoreExplanation")

    dropped = [
        key for key in ("hookAnalysis", "videoNotes", "copyAnalysis")
        if key in data and key not in result
    ]
    if dropped:
        logger.debug("Dropped sections not requested for this %s: %s", media_kind, dropped)

    return result  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Result assembly
# ---------------------------------------------------------------------------

def unavailable_audio_summary(audio_status: str) -> AudioSummary:
    message = AUDIO_NOT_CONFIGURED_MESSAGE if audio_status == AUDIO_NOT_CONFIGURED else AUDIO_FAILED_MESSAGE
    return {
        "hasVoiceover": False,
        "voiceoverStartsEarly": False,
        "openingLine": None,
        "transcript": None,
        "audioHookScore": 0,
        "audioHookAssessment": message,
        "isMusicOnly": False,
        "available": False,
    }


def _timestamp(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def finalize_result(
    scorecard: AnalysisResult,
    *,
    asset: Optional[MediaAsset] = None,
    evidence: Optional[VideoEvidence] = None,
    ad_copy: Optional[AdCopy] = None,
    now: Optional[datetime] = None,
) -> AnalysisResult:
    """Merge the locally-produced evidence into a validated scorecard."""
    result: Dict[str, Any] = dict(scorecard)

    if scorecard.get("mediaType") == "video":
        frames = evidence.frames if evidence else []
        result["extractedFrames"] = [f.to_dict() for f in frames]
        if evidence is not None and evidence.audio is not None:
            audio = dict(evidence.audio.to_dict())
            audio["available"] = True
            result["audioAnalysis"] = audio
        else:
            status = evidence.audio_status if evidence else AUDIO_NOT_CONFIGURED
            result["audioAnalysis"] = unavailable_audio_summary(status)
    elif asset is not None:
        result["thumbnail"] = base64.b64encode(asset.data).decode("ascii")

    if ad_copy is not None and "copyAnalysis" in result:
        copy_analysis = dict(result["copyAnalysis"])
        copy_analysis["primaryTextProvided"] = ad_copy.primary_text or ""
        copy_analysis["headlineProvided"] = ad_copy.headline or ""
        copy_analysis["descriptionProvided"] = ad_copy.description or ""
        result["copyAnalysis"] = copy_analysis

    result["analyzedAt"] = _timestamp(now)
    return result  # type: ignore[return-value]


__all__ = [
    "strip_markdown_fences",
    "parse_scorecard",
    "validate_scorecard",
    "finalize_result",
    "unavailable_audio_summary",
]

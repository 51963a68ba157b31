"""
Report helpers for persisting finished analyses.

The core never talks to a database; callers hand a finished AnalysisResult
to a ReportStore. ``JsonFileReportStore`` keeps one JSON document per report
on local disk and is what the CLI uses for ``--save-dir``.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from .types import AnalysisResult

logger = logging.getLogger(__name__)

SLUG_NAME_MAX_CHARS = 30
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
MEDIA_FIELDS = ("thumbnail",)

VERDICT_THRESHOLDS = (
    (80, "READY TO SCALE"),
    (60, "READY TO TEST"),
    (40, "NEEDS WORK"),
)
LOWEST_VERDICT = "FIX BEFORE TESTING"


class ReportStore(Protocol):
    """Persistence boundary for finished reports."""

    def save(self, result: AnalysisResult, metadata: Mapping[str, Any]) -> str:
        """Persist a report and return its reference."""
        ...

    def get(self, reference: str) -> Optional[Dict[str, Any]]:
        """Return a stored report, or None if unknown."""
        ...


def generate_slug(ad_name: str) -> str:
    """
    Public, unguessable report slug.

    "Summer Sale 50% OFF!" -> "summer-sale-50-off-3fa9c1"
    """
    clean = re.sub(r"[^a-z0-9\s-]", "", (ad_name or "").lower())
    clean = re.sub(r"\s+", "-", clean)[:SLUG_NAME_MAX_CHARS]
    clean = clean or "ad"
    return f"{clean}-{secrets.token_hex(3)}"


def verdict_for_score(score: Union[int, float]) -> str:
    for threshold, verdict in VERDICT_THRESHOLDS:
        if score >= threshold:
            return verdict
    return LOWEST_VERDICT


def category_scores(result: Mapping[str, Any]) -> Dict[str, int]:
    """Flatten categories to ``{"thumb_stop_power": 7, ...}``."""
    scores: Dict[str, int] = {}
    for category in result.get("categories") or []:
        key = re.sub(r"[^a-z0-9]+", "_", category["name"].lower()).strip("_")
        scores[key] = category["score"]
    return scores


def strip_media(result: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of the result without base64 payloads (thumbnail, frame images)."""
    stripped = {k: v for k, v in result.items() if k not in MEDIA_FIELDS}
    if "extractedFrames" in stripped:
        stripped["extractedFrames"] = [
            {"timestamp": frame["timestamp"]} for frame in stripped["extractedFrames"]
        ]
    return stripped


def build_report_record(
    result: AnalysisResult,
    ad_name: str,
    *,
    user_email: Optional[str] = None,
    creative_url: Optional[str] = None,
    include_media: bool = False,
) -> Dict[str, Any]:
    """Shape a result into the record persisted for a public report."""
    overall = result["overallScore"]
    return {
        "ad_name": ad_name,
        "overall_score": overall,
        "verdict": verdict_for_score(overall),
        "media_type": result.get("mediaType"),
        "category_scores": category_scores(result),
        "user_email": user_email,
        "creative_url": creative_url,
        "report_data": dict(result) if include_media else strip_media(result),
    }


class JsonFileReportStore:
    """One ``<slug>.json`` file per report under ``root``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, slug: str) -> Path:
        return self.root / f"{slug}.json"

    def save(self, result: AnalysisResult, metadata: Mapping[str, Any]) -> str:
        ad_name = metadata.get("ad_name")
        if not ad_name:
            raise ValueError("ad_name is required to save a report")

        record = build_report_record(
            result,
            ad_name,
            user_email=metadata.get("user_email"),
            creative_url=metadata.get("creative_url"),
            include_media=bool(metadata.get("include_media", False)),
        )
        slug = generate_slug(ad_name)
        while self._path(slug).exists():
            slug = generate_slug(ad_name)

        record["slug"] = slug
        record["created_at"] = datetime.now(timezone.utc).isoformat()
        self._path(slug).write_text(json.dumps(record, indent=2), encoding="utf-8")
        logger.info("Saved report %s (score=%s, verdict=%s)", slug, record["overall_score"], record["verdict"])
        return slug

    def get(self, reference: str) -> Optional[Dict[str, Any]]:
        if not SLUG_PATTERN.match(reference or ""):
            logger.debug("Rejected malformed report reference %r", reference)
            return None
        path = self._path(reference)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))


__all__ = [
    "ReportStore",
    "JsonFileReportStore",
    "generate_slug",
    "verdict_for_score",
    "category_scores",
    "strip_media",
    "build_report_record",
]

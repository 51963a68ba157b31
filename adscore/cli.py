"""
AdScore command line.

Scores one creative from disk and prints the result as JSON.

Usage:
    adscore ad.png --headline "50% off today"
    adscore promo.mp4 --primary-text "Tired of..." --save-dir reports --ad-name "Spring Promo"

Environment:
    ANTHROPIC_API_KEY / GOOGLE_API_KEY   Reasoning service credential (required)
    OPENAI_API_KEY                       Enables audio analysis for videos
    SENTRY_DSN                           Enables error reporting
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import sentry_sdk

from .analyzer import analyze_media
from .config import describe_active_models, get_pipeline_config
from .errors import AnalysisError, UnsupportedMediaType
from .media import AdCopy, detect_content_type, media_kind, normalize_content_type
from .reports import JsonFileReportStore, strip_media, verdict_for_score

logger = logging.getLogger("adscore.cli")


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_pipeline_config().log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
        ],
    )


def _init_sentry() -> None:
    sentry_dsn = get_pipeline_config().sentry_dsn
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=os.getenv("SENTRY_ENVIRONMENT", "production"),
            release=os.getenv("SENTRY_RELEASE", "adscore@0.1.0"),
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        )
        logger.info("Sentry error tracking initialized")
    else:
        logger.debug("SENTRY_DSN not set - error tracking disabled")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Score an ad creative for launch readiness.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("path", help="Image (JPG, PNG, WebP, GIF) or video (MP4, MOV, WebM) file.")
    parser.add_argument("--content-type", help="Override the content type detected from the file name.")
    parser.add_argument("--primary-text", help="Ad primary text to review alongside the creative.")
    parser.add_argument("--headline", help="Ad headline.")
    parser.add_argument("--description", help="Ad description.")
    parser.add_argument("--save-dir", help="Save the report as JSON under this directory.")
    parser.add_argument("--ad-name", help="Report name used for the slug (required with --save-dir).")
    parser.add_argument(
        "--include-media",
        action="store_true",
        help="Keep base64 frames/thumbnail in the printed and saved output.",
    )
    args = parser.parse_args(argv)
    if args.save_dir and not args.ad_name:
        parser.error("--ad-name is required with --save-dir")
    return args


def _print_error(kind: str, message: str) -> None:
    print(json.dumps({"error": {"kind": kind, "message": message}}, indent=2))


def _resolve_content_type(override: Optional[str], path: Path) -> str:
    """An explicit --content-type must be allow-listed; otherwise use the file suffix."""
    if override:
        content_type = normalize_content_type(override)
        if media_kind(content_type) is None:
            raise UnsupportedMediaType(override)
        return content_type
    content_type = detect_content_type(None, path.name)
    if content_type is None:
        raise UnsupportedMediaType(path.suffix or None)
    return content_type


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = _parse_args(argv)
    _configure_logging()
    _init_sentry()
    logger.debug("Active models: %s", describe_active_models())

    path = Path(args.path)
    ad_copy = AdCopy.from_mapping({
        "primary_text": args.primary_text,
        "headline": args.headline,
        "description": args.description,
    })

    try:
        content_type = _resolve_content_type(args.content_type, path)
        try:
            media_bytes = path.read_bytes()
        except OSError as e:
            logger.error("Could not read %s: %s", path, e)
            _print_error("file_unreadable", f"Could not read {path}: {e.strerror or e}")
            return 1
        result = analyze_media(media_bytes, content_type, ad_copy)
    except AnalysisError as e:
        _print_error(e.kind, e.user_message)
        return 1

    output = dict(result) if args.include_media else strip_media(result)
    output["verdict"] = verdict_for_score(result["overallScore"])

    if args.save_dir:
        store = JsonFileReportStore(args.save_dir)
        output["slug"] = store.save(result, {"ad_name": args.ad_name, "include_media": args.include_media})

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Command Line Interface
======================

Usage:
    autotube safety content.json --category health
    autotube costs narration.txt
    autotube health
    autotube generate --project demo --topic "무릎 관절 건강 지키는 법" --category health
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, List

from .content.category import Category, ContentFormat, Tone
from .content.job import ContentConfig, JobStatus
from .core.config import Config, set_config, configure_logging
from .core.exceptions import AutotubeError
from .narration.strategy import NarrationStrategy
from .rendering.creatomate import CreatomateRenderer
from .safety.engine import SafetyScoringEngine
from .scripting.gemini import GeminiScriptGenerator
from .workflow.orchestrator import PipelineOrchestrator
from .workflow.store import SqliteJobStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="autotube",
        description="Automated short-form content pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s safety content.json --category health
  %(prog)s costs narration.txt
  %(prog)s generate --project demo --topic "노후 자금 계획" --category finance
        """,
    )
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    safety = subparsers.add_parser("safety", help="Score a generated script")
    safety.add_argument("file", help="JSON file with title, script, narration_text and claims")
    safety.add_argument("--category", default="general", help="Content category (default: general)")
    safety.add_argument("--json", action="store_true", help="Print the report as JSON")

    costs = subparsers.add_parser("costs", help="Compare narration costs for a text file")
    costs.add_argument("file", help="Narration text file")

    subparsers.add_parser("health", help="Check narration backends")

    generate = subparsers.add_parser("generate", help="Run the full pipeline for one topic")
    generate.add_argument("--project", required=True, help="Project ID")
    generate.add_argument("--topic", required=True, help="Video topic")
    generate.add_argument("--category", default="general", help="Content category (default: general)")
    generate.add_argument(
        "--tone",
        default=Tone.FRIENDLY.value,
        choices=[t.value for t in Tone],
        help="Narration tone (default: Friendly)",
    )
    generate.add_argument(
        "--format",
        default=ContentFormat.SHORTS.value,
        choices=[f.value for f in ContentFormat],
        help="Video format (default: Shorts)",
    )
    generate.add_argument("--language", default="ko", help="Script language (default: ko)")

    return parser.parse_args(argv)


def cmd_safety(args: argparse.Namespace, config: Config) -> int:
    content = json.loads(Path(args.file).read_text(encoding="utf-8"))
    category = Category.from_value(args.category)
    report = SafetyScoringEngine(config.safety).evaluate(content, category)

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
        return 0 if report.passed else 1

    print("=" * 50)
    print(f"Category: {category.label}")
    print(f"Score: {report.score}")
    print(f"Passed: {report.passed}")
    print(f"Auto-approved: {report.auto_approved}")
    print(f"Review required: {report.review_required}")
    print("-" * 50)
    for issue in report.issues:
        print(f"[{issue.severity.value}] {issue.description}")
    if report.disclaimer_required:
        print("-" * 50)
        print(report.disclaimer_text)
    print("=" * 50)

    return 0 if report.passed else 1


async def cmd_costs(args: argparse.Namespace, config: Config) -> int:
    text = Path(args.file).read_text(encoding="utf-8")

    async with NarrationStrategy.from_config(config) as strategy:
        estimate = strategy.estimate_cost(text)
        comparison = strategy.compare_costs(text)

    print(f"Characters: {len(text)}")
    print(f"Primary ({estimate.provider}): ${estimate.cost:.4f}")
    print(f"Free backend: ${comparison.free:.4f}")
    print(f"Paid backend: ${comparison.paid:.4f}")
    print(f"Savings: ${comparison.savings:.4f} ({comparison.savings_percent:.1f}%)")
    return 0


async def cmd_health(args: argparse.Namespace, config: Config) -> int:
    async with NarrationStrategy.from_config(config) as strategy:
        health = await strategy.health_check()

    print(json.dumps(health, ensure_ascii=False, indent=2))
    return 0 if health["status"] != "unhealthy" else 1


async def cmd_generate(args: argparse.Namespace, config: Config) -> int:
    store = SqliteJobStore(config.storage.database_path)
    orchestrator = PipelineOrchestrator(
        store=store,
        script_generator=GeminiScriptGenerator(config.script),
        narration=NarrationStrategy.from_config(config, store=store),
        renderer=CreatomateRenderer(config.rendering),
        safety_engine=SafetyScoringEngine(config.safety),
    )

    content_config = ContentConfig(
        topic=args.topic,
        category=Category.from_value(args.category),
        tone=Tone(args.tone),
        format=ContentFormat.from_value(args.format),
        language=args.language,
    )

    async with orchestrator:
        job = await orchestrator.submit(args.project, content_config)
        print(f"Job {job.job_id} submitted")
        job = await orchestrator.wait_for(job.job_id)

    print("-" * 50)
    print(f"Status: {job.status.value}")
    if job.title:
        print(f"Title: {job.title}")
    if job.video_url:
        print(f"Video URL: {job.video_url}")
    if job.error:
        print(f"Error: {job.error}")

    return 0 if job.status is JobStatus.COMPLETED else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = Config.load(args.config)
        set_config(config)

        if args.command == "safety":
            return cmd_safety(args, config)
        if args.command == "costs":
            return asyncio.run(cmd_costs(args, config))
        if args.command == "health":
            return asyncio.run(cmd_health(args, config))
        return asyncio.run(cmd_generate(args, config))

    except KeyboardInterrupt:
        print("\nCancelled")
        return 130
    except (AutotubeError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

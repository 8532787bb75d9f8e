"""CLI entry point for the autoblog engine.

Usage:
    python -m src.content_engine.main run
    python -m src.content_engine.main run --topic "Best trail shoes 2024"
    python -m src.content_engine.main serve
    python -m src.content_engine.main topics --add "How to taper for a marathon"
    python -m src.content_engine.main check
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.common.config import Settings
from src.common.logging import setup_logging
from src.content_engine.publisher.pipeline import ArticlePipeline
from src.content_engine.server import serve
from src.content_engine.social.platforms import TwitterPoster
from src.content_engine.topic_queue.queue import TopicQueue

logger = setup_logging(module_name="content_engine.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoblog",
        description="Generate, publish and promote blog articles",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the pipeline once now")
    run.add_argument("--topic", help="Write about this topic instead of the queue head")

    sub.add_parser("serve", help="Start the scheduler and liveness server")

    topics = sub.add_parser("topics", help="List or add queued topics")
    topics.add_argument("--add", metavar="TOPIC", help="Append a topic to the queue")

    sub.add_parser("check", help="Verify X/Twitter credentials")
    return parser


def cmd_run(settings: Settings, topic: str | None) -> int:
    result = ArticlePipeline.from_settings(settings).run(topic=topic)
    logger.info("Run finished at stage: %s", result.stage.value)
    for outcome in result.social_outcomes:
        status = "ok" if outcome.success else f"failed ({outcome.error})"
        logger.info("  %s: %s", outcome.platform.value, status)
    return 0 if result.published else 1


def cmd_serve(settings: Settings) -> int:
    pipeline = ArticlePipeline.from_settings(settings)
    serve(pipeline.run, settings.schedule.articles_per_day, settings.schedule.port)
    return 0


def cmd_topics(settings: Settings, add: str | None) -> int:
    queue = TopicQueue(settings.schedule.topics_file)
    if add:
        queue.add(add)
        print(f"Added: {add}")
        return 0
    pending = queue.pending()
    if not pending:
        print("Topic queue is empty")
    for i, topic in enumerate(pending, 1):
        print(f"{i:3d}. {topic}")
    return 0


def cmd_check(settings: Settings) -> int:
    poster = TwitterPoster(settings)
    if not poster.is_configured:
        logger.error("Twitter credentials are not configured")
        return 1
    return 0 if poster.verify_credentials() else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load(args.config)

    if args.command == "run":
        return cmd_run(settings, args.topic)
    if args.command == "serve":
        return cmd_serve(settings)
    if args.command == "topics":
        return cmd_topics(settings, args.add)
    return cmd_check(settings)


if __name__ == "__main__":
    sys.exit(main())

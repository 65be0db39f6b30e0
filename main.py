#!/usr/bin/env python
"""CLI for the factdesk news ingestion and fact-check pipeline."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from factdesk.config import create_from_config, get_default_config_path, load_config
from factdesk.data import Usage
from factdesk.errors import ArticleNotFoundError

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Literal["refresh", "generate", "fact-check"]
    config: Path
    log: bool = False
    log_dir: str | None = None
    store: str | None = None
    skip_refresh: bool = False
    interests: list[str] | None = None
    article_id: str | None = None
    title: str | None = None
    content: str = ""
    source: str = "unknown"
    force: bool = False

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    def config_overrides(self) -> dict[str, Any]:
        """Dotted config keys set from the command line."""
        return {
            "logging.enabled": True if self.log else None,
            "logging.log_dir": self.log_dir,
            "store.path": self.store,
        }

    @model_validator(mode="after")
    def fact_check_needs_subject(self) -> "CLIArgs":
        if self.command == "fact-check" and not (self.article_id or self.title):
            raise ValueError("fact-check requires --title or --article-id")
        return self


def _print_json(data: dict[str, Any]) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _log_usage(usage: Usage) -> None:
    logger.info("\n--- Usage Summary ---")
    logger.info(f"API calls: {len(usage.api_calls)}")
    logger.info(f"Input tokens: {usage.input_tokens:,}")
    logger.info(f"Output tokens: {usage.output_tokens:,}")
    if usage.web_searches:
        logger.info(f"Web searches: {usage.web_searches}")
    if usage.provider_requests:
        logger.info(f"Provider requests: {usage.provider_requests}")


async def run(args: CLIArgs) -> int:
    """Execute one command with the given configuration.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config, args.config_overrides())
    components = create_from_config(config)
    logger.info(f"Config: {args.config}")

    if args.command == "fact-check":
        try:
            if args.article_id and not args.title:
                result, usage = await components.fact_checker.check_article(
                    args.article_id, force=args.force
                )
            else:
                result, usage = await components.fact_checker.check(
                    args.title or "",
                    args.content,
                    args.source,
                    article_id=args.article_id,
                    force=args.force,
                )
        except ArticleNotFoundError as e:
            _print_json({"error": str(e)})
            return 1
        _print_json(result.to_dict())
        _log_usage(usage)
        return 0

    orchestrator = components.orchestrator
    if orchestrator is None:
        _print_json({"error": "Article generation unavailable: CLAUDE_API_KEY not configured"})
        return 1

    total_usage = Usage()
    if args.command == "refresh" or not args.skip_refresh:
        refresh, usage = await orchestrator.refresh_sources()
        total_usage += usage
        if args.command == "refresh":
            _print_json(refresh.to_dict())

    if args.command == "generate":
        summary, usage = await orchestrator.run(args.interests or components.interests)
        total_usage += usage
        _print_json(summary.to_dict())

    _log_usage(total_usage)
    if components.run_logger and components.run_logger.last_log_path:
        logger.info(f"\nRun log written to: {components.run_logger.last_log_path}")
    return 0


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Ingest news, write articles and fact-check them.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable per-run JSON logging",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for log files (default from config)",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="JSON file holding sources and articles; \"\" keeps them in memory",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("refresh", help="Fetch sources from all providers into the store")

    gen = sub.add_parser("generate", help="Refresh sources, then generate articles")
    gen.add_argument("--skip-refresh", action="store_true", help="Use stored sources only")
    gen.add_argument(
        "--interest",
        action="append",
        dest="interests",
        help="Reader interest (repeatable; default from config)",
    )

    fc = sub.add_parser("fact-check", help="Fact-check an article or ad hoc text")
    fc.add_argument("--article-id", help="Id of a stored article")
    fc.add_argument("--title", help="Headline to check")
    fc.add_argument("--content", default="", help="Article text")
    fc.add_argument("--source", default="unknown", help="Source label")
    fc.add_argument("--force", action="store_true", help="Bypass the verdict cache")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            log=ns.log,
            log_dir=ns.log_dir,
            store=ns.store,
            skip_refresh=getattr(ns, "skip_refresh", False),
            interests=getattr(ns, "interests", None),
            article_id=getattr(ns, "article_id", None),
            title=getattr(ns, "title", None),
            content=getattr(ns, "content", ""),
            source=getattr(ns, "source", "unknown"),
            force=getattr(ns, "force", False),
        )
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        logger.error(str(e))
        sys.exit(1)

    level = load_config(args.config, args.config_overrides()).logging.level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(message)s")

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()

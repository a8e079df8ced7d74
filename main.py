#!/usr/bin/env python3
"""TrendPilot: trending topics aggregated from Reddit, GitHub, Hacker News
and Product Hunt, summarized by a language model.

Commands:
    run         Run the pipeline once and store the result
    serve       Serve the HTTP API
    latest      Print the latest stored result
    status      Show configuration and stored-result information

Examples:
    python main.py run                    # Fetch, summarize, store
    python main.py run --stdout --no-save # Print JSON only
    python main.py serve --port 3001      # HTTP API
    python main.py latest --demo-fallback # Stored result or demo data

Environment:
    OPENROUTER_API_KEY: Required for run and serve
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from config import Config
from observability.logging import setup_logging
from storage import LATEST_FILENAME, load_latest, save_result

logger = logging.getLogger(__name__)


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Run the pipeline once.

    Returns:
        0 when the result is successful, 1 otherwise
    """
    from pipeline import run_once

    if not config.reddit_oauth_enabled:
        logger.warning("Reddit API credentials not provided, using public API")

    try:
        result = asyncio.run(run_once(config))
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130

    if args.stdout:
        print(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False))

    if not result.success:
        logger.error("Failed to fetch trends | error=%s", result.error)
        return 1

    if not args.no_save:
        path = save_result(result, config.data_dir)
        if path is None:
            return 1

    logger.info(
        "Run complete | items=%d trends=%d source=%s",
        result.total_items, len(result.trends), result.source.value,
    )
    return 0


def cmd_serve(args: argparse.Namespace, config: Config) -> int:
    """Serve the HTTP API until interrupted."""
    from server import run_server

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    run_server(config)
    return 0


def cmd_latest(args: argparse.Namespace, config: Config) -> int:
    """Print the latest stored result.

    Returns:
        0 if something was printed, 1 if nothing is stored and no demo fallback
    """
    result = load_latest(config.data_dir)
    if result is None:
        if not args.demo_fallback:
            print(f"No stored result in {config.data_dir}", file=sys.stderr)
            return 1
        from demo import demo_result
        result = demo_result()

    print(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration and stored-result information."""
    latest_path = Path(config.data_dir) / LATEST_FILENAME
    latest = load_latest(config.data_dir)

    status = {
        "config": {
            "completion_model": config.completion_model,
            "completion_base_url": config.completion_base_url,
            "completion_key_set": bool(config.completion_api_key),
            "reddit_oauth": config.reddit_oauth_enabled,
            "reddit_subreddits": config.reddit_subreddits,
            "github_token_set": bool(config.github_token),
            "producthunt_enabled": config.producthunt_enabled,
            "hn_story_limit": config.hn_story_limit,
            "enable_logfire": config.enable_logfire,
        },
        "latest": {
            "path": str(latest_path),
            "exists": latest is not None,
            "timestamp": latest.timestamp.isoformat() if latest else None,
            "source": latest.source.value if latest else None,
            "trends": len(latest.trends) if latest else 0,
            "total_items": latest.total_items if latest else 0,
            "modified": (
                datetime.fromtimestamp(latest_path.stat().st_mtime).isoformat()
                if latest is not None else None
            ),
        },
    }

    print(json.dumps(status, indent=2))
    return 0


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="TrendPilot: AI-summarized trends from tech communities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the pipeline once")
    run_parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the result to DATA_DIR",
    )
    run_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the result JSON to stdout",
    )

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default: config HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: config PORT)")

    latest_parser = subparsers.add_parser("latest", help="Print the latest stored result")
    latest_parser.add_argument(
        "--demo-fallback",
        action="store_true",
        help="Print demo data when nothing is stored",
    )

    subparsers.add_parser("status", help="Show configuration and stored-result info")

    args = parser.parse_args()

    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that call external services
    if args.command in ("run", "serve"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    commands = {
        "run": cmd_run,
        "serve": cmd_serve,
        "latest": cmd_latest,
        "status": cmd_status,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

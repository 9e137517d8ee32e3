"""Tube-Scout diagnostics entry point.

Usage:
    tube-scout --list
    tube-scout --budget
    tube-scout --tool search_videos --input '{"query": "python asyncio", "maxResults": 5}'

Builds the one client and the one registry for the process and passes them
down explicitly.
"""

import argparse
import asyncio
import json
import sys

from tube_config.settings import Settings, get_settings
from tube_obs.logging import get_logger, setup_logging
from tube_obs.tracing import setup_tracing
from tube_tools.adapters.youtube import YouTubeClientWrapper, register_youtube_tools
from tube_tools.quota import QuotaBudget
from tube_tools.registry import ToolRegistry

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tube-scout", description="YouTube tool registry diagnostics")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--list", action="store_true", help="List registered tools")
    action.add_argument("--budget", action="store_true", help="Print the daily quota budget report")
    action.add_argument("--tool", metavar="NAME", help="Execute one tool")
    parser.add_argument("--input", default="{}", help="Tool input as a JSON object (with --tool)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds")
    return parser


def build_client(settings: Settings) -> YouTubeClientWrapper:
    return YouTubeClientWrapper(
        api_key=settings.YOUTUBE_API_KEY,
        base_url=settings.YOUTUBE_BASE_URL,
        timeout_seconds=settings.YOUTUBE_TIMEOUT_SECONDS,
    )


async def run(args: argparse.Namespace, settings: Settings) -> int:
    async with build_client(settings) as client:
        registry = ToolRegistry()
        register_youtube_tools(registry, client)

        if args.list:
            print(json.dumps([d.to_dict() for d in registry.list_tools()], indent=2))
            return 0

        if args.budget:
            budget = QuotaBudget.from_descriptors(registry.list_tools(), settings.DAILY_QUOTA_LIMIT)
            print(json.dumps(budget.as_dict(), indent=2))
            return 0

        try:
            input_data = json.loads(args.input)
        except json.JSONDecodeError as e:
            print(f"--input is not valid JSON: {e}", file=sys.stderr)
            return 2

        response = await registry.execute_tool(args.tool, input_data, timeout=args.timeout)
        print(json.dumps(response.to_dict(), indent=2, default=str))
        return 0 if response.success else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    if args.tool and not settings.YOUTUBE_API_KEY:
        logger.warning("youtube_api_key_missing")

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for fetching simplified Notion page content."""

import argparse
import asyncio
import json
import logging
import sys

from ..config.config_loader import load_config
from ..utils.logging import setup_logging
from .renderer import render_markdown
from .service import NotionContentService


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch a Notion page and print its simplified content",
        prog="prd-reader",
    )

    parser.add_argument(
        "page",
        help="Notion page ID or URL",
    )

    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv, -vvv)",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "markdown"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        help="Block tree depth ceiling (default from config)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Overall deadline in seconds (default from config)",
    )

    return parser


async def run_fetch(args: argparse.Namespace) -> int:
    """
    Fetch and print a page with given arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.verbose == 0 and config.logging.verbosity:
        args.verbose = config.logging.verbosity
    setup_logging(verbosity=args.verbose, log_file=config.logging.log_file)

    service = NotionContentService.from_config(config.notion)
    try:
        content = await service.get_simplified_content(
            args.page, max_depth=args.max_depth, timeout=args.timeout
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("Fetch failed", exc_info=True)
        print(f"Error fetching page: {e}", file=sys.stderr)
        return 1
    finally:
        await service.close()

    if args.format == "markdown":
        print(render_markdown(content), end="")
    else:
        print(json.dumps(content.to_dict(), ensure_ascii=False, indent=2))

    for warning in content.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    return 0


def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(verbosity=args.verbose)

    try:
        exit_code = asyncio.run(run_fetch(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nFetch cancelled by user", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

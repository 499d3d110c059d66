# main.py

"""Entry point for the catalog_admin panel (TUI or headless commands)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("catalog_admin.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="catalog_admin",
        description="Product catalog admin panel.",
        epilog=(
            f"API: {Settings.API_BASE_URL}. "
            "Run without a command to launch the interactive TUI."
        ),
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    commands = parser.add_subparsers(dest="command")

    list_cmd = commands.add_parser("list", help="List one page of products.")
    list_cmd.add_argument(
        "--page", type=int, default=1, help="1-based page number."
    )
    list_cmd.add_argument(
        "--page-size",
        type=int,
        default=Settings.DEFAULT_PAGE_SIZE,
        dest="page_size",
        help=f"Products per page (default: {Settings.DEFAULT_PAGE_SIZE}).",
    )
    list_cmd.add_argument(
        "--limit", type=int, default=None, help="Raw limit (overrides paging)."
    )
    list_cmd.add_argument(
        "--skip", type=int, default=None, help="Raw offset (overrides paging)."
    )

    get_cmd = commands.add_parser("get", help="Show one product.")
    get_cmd.add_argument("product_id", type=int)

    search_cmd = commands.add_parser("search", help="Search products.")
    search_cmd.add_argument("query")

    add_cmd = commands.add_parser("add", help="Create a product.")
    add_cmd.add_argument(
        "--field",
        action="append",
        default=[],
        dest="fields",
        metavar="KEY=VALUE",
        help="Form field, e.g. --field title=Lamp --field price=19.99",
    )

    update_cmd = commands.add_parser("update", help="Update a product.")
    update_cmd.add_argument("product_id", type=int)
    update_cmd.add_argument(
        "--field",
        action="append",
        default=[],
        dest="fields",
        metavar="KEY=VALUE",
        help="Field to change, e.g. --field stock=0",
    )

    delete_cmd = commands.add_parser("delete", help="Delete a product.")
    delete_cmd.add_argument("product_id", type=int)

    return parser


def _run_tui() -> None:
    """Launch the interactive Textual TUI."""
    from src.ui.app import CatalogAdminApp

    try:
        app = CatalogAdminApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("catalog_admin TUI shutting down")


async def _dispatch(args: argparse.Namespace) -> int:
    """Run one headless command and return its exit code."""
    from src.cli.runner import CatalogCli

    cli = CatalogCli(output_format=args.output_format)
    try:
        if args.command == "list":
            return await cli.list_products(
                args.page, args.page_size, args.limit, args.skip
            )
        if args.command == "get":
            return await cli.get_product(args.product_id)
        if args.command == "search":
            return await cli.search(args.query)
        if args.command == "add":
            return await cli.add(args.fields)
        if args.command == "update":
            return await cli.update(args.product_id, args.fields)
        if args.command == "delete":
            return await cli.delete(args.product_id)
    finally:
        cli.client.close()
    return 2


def _run_cli(args: argparse.Namespace) -> None:
    """Run a headless command and exit."""
    exit_code = asyncio.run(_dispatch(args))
    sys.exit(exit_code)


def main() -> None:
    """Route to TUI (no command) or a headless command."""
    parser = _build_parser()
    args = parser.parse_args()
    log_file = setup_logging(console=args.command is not None)
    logger.info("catalog_admin starting, log file: %s", log_file)

    if args.command is None:
        _run_tui()
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()

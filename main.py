import sys
import argparse
import asyncio
from typing import List, Optional

# --- Settings/Logging ---
from care_site.logging.setup import setup_logging
from care_site.config.settings import settings

setup_logging()

from loguru import logger

import httpx
from rich.console import Console

from care_site.pages.base import Page, PageContext
from care_site.pages.branches import BranchDetailPage, BranchesPage
from care_site.pages.events import EventsPage
from care_site.pages.landing import LandingPage
from care_site.pages.team import TeamPage
from care_site.render.console import show_page
from care_site.storage.supabase_client import initialize_supabase

PAGES = ["home", "branches", "branch", "events", "team"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render the CARE site's data-driven pages in the terminal."
    )
    parser.add_argument("page", choices=PAGES, help="Page to render.")
    parser.add_argument(
        "slug", nargs="?", help="Branch slug (required for the 'branch' page)."
    )
    parser.add_argument(
        "--branch-id", help="Events page: show only this branch's events."
    )
    parser.add_argument(
        "--no-retry",
        action="store_true",
        help="Do not prompt to retry failed sections.",
    )
    args = parser.parse_args(argv)
    if args.page == "branch" and not args.slug:
        parser.error("the 'branch' page needs a slug")
    return args


def build_page(args: argparse.Namespace, ctx: PageContext) -> Page:
    if args.page == "home":
        return LandingPage(ctx)
    if args.page == "branches":
        return BranchesPage(ctx)
    if args.page == "branch":
        return BranchDetailPage(ctx, args.slug)
    if args.page == "events":
        branch_id = args.branch_id
        if branch_id is not None and branch_id.isdigit():
            branch_id = int(branch_id)
        return EventsPage(ctx, active_branch_id=branch_id)
    return TeamPage(ctx)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    logger.info(f"Rendering page '{args.page}'")

    supabase_client = await initialize_supabase()
    if not supabase_client:
        # Sections report the missing client as their own error state
        logger.error("Failed to initialize Supabase client; rendering error state.")

    console = Console()
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds)
    ) as http_client:
        ctx = PageContext.from_settings(supabase_client, settings, http_client)
        page = build_page(args, ctx)
        await show_page(console, page, interactive=not args.no_retry)

    return 1 if page.failed_sections else 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)

"""Terminal rendering of the site's pages with rich."""

from typing import List, Optional

from loguru import logger
from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from care_site.models.enums import ViewState
from care_site.models.view import TeamSection
from care_site.pages.base import Page
from care_site.pages.branches import BranchDetailPage, BranchesPage
from care_site.pages.events import EventCard, EventsPage
from care_site.pages.landing import LandingPage
from care_site.pages.team import TeamPage
from care_site.shell.state import Section

SITE_NAME = "CARE Nonprofit Organization"
NAV_LINKS = ["/", "/about", "/branches", "/events", "/team", "/research-competition"]

# Accent tokens mapped onto rich colour names
ACCENT_STYLES = {
    "green": "green",
    "emerald": "spring_green3",
    "teal": "dark_cyan",
    "sky": "sky_blue1",
    "blue": "blue",
    "indigo": "slate_blue1",
}


def render_chrome(console: Console, page: Page) -> None:
    """Header and navigation; shown whatever state the content is in."""
    console.rule(f"[bold green]{SITE_NAME}[/bold green]")
    console.print(Text("  ".join(NAV_LINKS), style="dim"), justify="center")
    console.print(Text(page.title, style="bold"), justify="center")


def render_section_state(console: Console, section: Section) -> bool:
    """Prints loading/error/not-found states. Returns True if content can render."""
    if section.state == ViewState.LOADING:
        console.print(f"[dim]Loading {section.name}...[/dim]")
        return False
    if section.state == ViewState.ERROR:
        console.print(
            Panel(
                f"{section.error}\n[dim]A retry is available.[/dim]",
                title="Error",
                border_style="red",
            )
        )
        return False
    return True


def image_label(image: Optional[str], fallback: str) -> str:
    return image or fallback


def render_landing(console: Console, page: LandingPage) -> None:
    if not render_section_state(console, page.gallery):
        return
    if not page.gallery.data or not page.gallery.data.urls:
        console.print("[dim]No event highlights yet.[/dim]")
        return
    for url in page.gallery.data.urls:
        console.print(f"  [link={url}]{url}[/link]")


def render_branches(console: Console, page: BranchesPage) -> None:
    if not render_section_state(console, page.branches):
        return
    if page.branches.state == ViewState.EMPTY:
        console.print("[dim]No branches listed yet.[/dim]")
        return
    table = Table(show_header=True, header_style="bold green")
    table.add_column("City")
    table.add_column("Description")
    table.add_column("Link")
    table.add_column("Image", style="dim")
    table.add_column("Theme", style="dim")
    for branch in page.branches.data:
        city = f"{branch.city} ★" if branch.featured else branch.city
        table.add_row(
            city,
            branch.description or "",
            f"/branches/{branch.slug or ''}",
            image_label(branch.image, branch.fallback_image),
            branch.color,
        )
    console.print(table)


def render_branch_detail(console: Console, page: BranchDetailPage) -> None:
    section = page.branch
    if section.state == ViewState.NOT_FOUND:
        console.print(
            Panel(
                "Branch not found.\nWe couldn't find the information you're looking for.\n"
                f"Return to All Branches: {page.back_link}",
                border_style="yellow",
            )
        )
        return
    if not render_section_state(console, section):
        return

    branch = section.data
    parts: List = [
        Text(branch.description or "", style="italic"),
        Text(f"Image: {image_label(branch.image, branch.fallback_image)}", style="dim"),
    ]
    if branch.chapters:
        parts.append(Text("\nChapters", style="bold"))
        parts.extend(Text(f"  • {chapter}") for chapter in branch.chapters)
    if branch.directors:
        parts.append(Text("\nRegional Directors", style="bold"))
        parts.extend(
            Text(f"  • {d.name} ({image_label(d.image, d.fallback_image)})")
            for d in branch.directors
        )
    title = f"{branch.city} ★" if branch.featured else branch.city
    console.print(Panel(Group(*parts), title=title, border_style="green"))
    console.print(f"[dim]← Back to all branches: {page.back_link}[/dim]")


def render_event_card(console: Console, card: EventCard) -> None:
    lines = [Text(card.event.description or "")]
    state = card.section.state
    if state == ViewState.LOADING:
        lines.append(Text("Loading images...", style="dim"))
    elif state == ViewState.ERROR:
        lines.append(Text(card.section.error or "Failed to load images", style="red"))
    elif not card.images:
        lines.append(Text("No images available", style="dim"))
    else:
        lines.append(Text(f"{len(card.images)} photos", style="dim"))
        lines.extend(Text(f"  {image.url}", style="dim") for image in card.images)
    console.print(Panel(Group(*lines), title=card.title))


def render_events(console: Console, page: EventsPage) -> None:
    if not render_section_state(console, page.listing):
        return
    if page.tabs:
        labels = ["All Branches"] + [
            f"{b.city} ★" if b.featured else b.city for b in page.tabs
        ]
        console.print(" | ".join(labels))
    if page.visible_state == ViewState.EMPTY:
        if page.active_branch_id is None:
            console.print("[dim]No events have been posted yet.[/dim]")
        else:
            console.print("[dim]No events found for this branch.[/dim]")
        return
    for section in page.visible_sections():
        console.rule(section.branch.city)
        for event in section.events:
            render_event_card(console, page.card_for(event))


def render_team_section(console: Console, section: TeamSection) -> None:
    console.rule(section.title)
    for member in section.members:
        heading = member.name
        if member.position:
            heading += f" · {member.position}"
        body = [
            Text(member.summary or ""),
            Text(
                f"Image: {image_label(member.image, member.fallback_image)}",
                style="dim",
            ),
        ]
        if member.expandable:
            body.append(Text("Read more", style="dim"))
        if member.university:
            body.append(Text(member.university, style="dim"))
        if member.social:
            for label, link in (
                ("LinkedIn", member.social.linkedin),
                ("Twitter", member.social.twitter),
            ):
                if link:
                    body.append(Text(f"{label}: {link}", style="dim"))
        border = ACCENT_STYLES.get(member.accent, "green")
        console.print(Panel(Group(*body), title=heading, border_style=border))


async def render_team(console: Console, page: TeamPage) -> None:
    for section in page.categories.values():
        if section.state == ViewState.ERROR:
            render_section_state(console, section)
    for team_section in await page.visible_sections():
        render_team_section(console, team_section)


async def render_page(console: Console, page: Page) -> None:
    render_chrome(console, page)
    if isinstance(page, LandingPage):
        render_landing(console, page)
    elif isinstance(page, BranchDetailPage):
        render_branch_detail(console, page)
    elif isinstance(page, BranchesPage):
        render_branches(console, page)
    elif isinstance(page, EventsPage):
        render_events(console, page)
    elif isinstance(page, TeamPage):
        await render_team(console, page)
    else:
        raise TypeError(f"No renderer for {type(page).__name__}")


async def show_page(console: Console, page: Page, interactive: bool = True) -> None:
    """Mounts, renders, and offers a retry while sections are failing."""
    with console.status(f"Loading {page.title}..."):
        await page.mount()
    await render_page(console, page)

    while interactive and page.failed_sections:
        names = ", ".join(s.name for s in page.failed_sections)
        if not Confirm.ask(f"Retry {names}?", console=console, default=True):
            break
        with console.status("Retrying..."):
            await page.retry_failed()
        await render_page(console, page)

    if page.failed_sections:
        logger.warning(
            f"Page '{page.title}' finished with failed sections: "
            f"{[s.name for s in page.failed_sections]}"
        )
    page.teardown()

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from heromarket.domain.models.character import Character, Item
from heromarket.domain.models.listing import MarketListing


_STAT_ORDER = ("strength", "agility", "intelligence", "vitality", "luck")


def _format_time(epoch_seconds: int) -> str:
    return datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _format_item(item: Item | None) -> str:
    if item is None:
        return "-"
    return f"{item.name} ({item.rarity.value})"


def character_panel(character: Character) -> Panel:
    stats = Table(show_header=True, header_style="bold")
    for label in _STAT_ORDER:
        stats.add_column(label[:3].upper(), justify="right")
    stats.add_row(*(str(getattr(character.stats, label)) for label in _STAT_ORDER))

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Owner", character.owner)
    summary.add_row("Class", character.character_class.value.title())
    summary.add_row("Level", f"{character.level} ({character.experience} xp)")
    summary.add_row("Created", _format_time(character.creation_date))
    summary.add_row("Last trained", _format_time(character.last_training))
    summary.add_row(
        "Equipment",
        ", ".join(
            f"{slot}: {_format_item(getattr(character.equipment, slot))}" for slot in ("weapon", "armor", "accessory")
        ),
    )

    parts = [summary, stats]
    if character.training_history:
        history = Table(title="Training", show_header=True, header_style="bold")
        history.add_column("When")
        history.add_column("Stat")
        history.add_column("Gain", justify="right")
        for session in character.training_history:
            history.add_row(_format_time(session.timestamp), session.stat_trained.value, f"+{session.gain}")
        parts.append(history)

    return Panel(Group(*parts), title=f"[bold yellow]#{character.id} {character.name}[/bold yellow]", border_style="yellow")


def listings_table(listings: Sequence[MarketListing]) -> Table:
    table = Table(title="Market", header_style="bold green")
    table.add_column("Listing", justify="right")
    table.add_column("Character", justify="right")
    table.add_column("Seller")
    table.add_column("Price", justify="right")
    table.add_column("Listed")
    for listing in listings:
        table.add_row(
            str(listing.id),
            str(listing.character_id),
            listing.seller,
            str(listing.price),
            _format_time(listing.listing_date),
        )
    if not listings:
        table.caption = "No active listings."
    return table


def listing_panel(listing: MarketListing) -> Panel:
    return Panel.fit(
        f"Listing [bold]#{listing.id}[/bold] for character #{listing.character_id}\n"
        f"Seller: {listing.seller}\nPrice: {listing.price}\nStatus: {listing.status.value}",
        border_style="green",
    )

from __future__ import annotations

import argparse
import os
import shlex
from typing import Callable, Sequence

from rich.console import Console

from heromarket.application.dtos import (
    CreateCharacterPayload,
    ListCharacterPayload,
    OperationResult,
    PurchaseCharacterPayload,
    TrainCharacterPayload,
)
from heromarket.application.gateway import MarketGateway
from heromarket.domain.models.character import CharacterClass, Stat
from heromarket.presentation.views import character_panel, listing_panel, listings_table


DEFAULT_PRINCIPAL = "anonymous"


class _ShellArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ValueError(message)


def build_parser(parser_class: type[argparse.ArgumentParser] = argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser = parser_class(prog="heromarket", description="Create, train and trade characters")
    parser.add_argument(
        "--as",
        dest="principal",
        default=os.getenv("HEROMARKET_PRINCIPAL", DEFAULT_PRINCIPAL),
        help="Caller principal (defaults to HEROMARKET_PRINCIPAL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a character")
    create.add_argument("name")
    create.add_argument("character_class", choices=[item.value for item in CharacterClass])

    train = sub.add_parser("train", help="Train one stat of a character you own")
    train.add_argument("character_id", type=int)
    train.add_argument("stat", choices=[item.value for item in Stat])

    list_cmd = sub.add_parser("list", help="Offer a character you own for sale")
    list_cmd.add_argument("character_id", type=int)
    list_cmd.add_argument("price", type=int)

    buy = sub.add_parser("buy", help="Purchase an active listing")
    buy.add_argument("listing_id", type=int)

    show = sub.add_parser("show", help="Show one character")
    show.add_argument("character_id", type=int)

    sub.add_parser("market", help="Show active listings")
    sub.add_parser("shell", help="Run several commands against one store")

    migrate = sub.add_parser("migrate", help="Create the SQL tables")
    migrate.add_argument("--database-url", default=None)
    return parser


def _report(console: Console, result: OperationResult, render: Callable[[object], object]) -> int:
    if not result.ok:
        console.print(f"[bold red]{result.error}[/bold red]: {result.message}")
        return 1
    console.print(render(result.value))
    return 0


def run_command(gateway: MarketGateway, args: argparse.Namespace, console: Console) -> int:
    caller = str(args.principal)
    command = args.command

    if command == "create":
        result = gateway.create_character(CreateCharacterPayload(args.name, args.character_class), caller)
        return _report(console, result, character_panel)
    if command == "train":
        result = gateway.train_character(TrainCharacterPayload(args.character_id, args.stat), caller)
        return _report(console, result, character_panel)
    if command == "list":
        result = gateway.list_character(ListCharacterPayload(args.character_id, args.price), caller)
        return _report(console, result, listing_panel)
    if command == "buy":
        result = gateway.purchase_character(PurchaseCharacterPayload(args.listing_id), caller)
        return _report(console, result, character_panel)
    if command == "show":
        return _report(console, gateway.get_character(args.character_id), character_panel)
    if command == "market":
        console.print(listings_table(gateway.get_market_listings()))
        return 0
    raise ValueError(f"Unknown command: {command}")


def run_shell(
    gateway: MarketGateway,
    console: Console,
    *,
    principal: str,
    read_line: Callable[[str], str] = input,
) -> int:
    parser = build_parser(_ShellArgumentParser)
    console.print("[bold yellow]heromarket shell[/bold yellow] (type 'quit' to leave, 'as NAME' to switch caller)")
    last_status = 0
    while True:
        try:
            line = read_line(f"{principal}> ").strip()
        except EOFError:
            return last_status
        if not line:
            continue
        if line in {"quit", "exit"}:
            return last_status

        try:
            words = shlex.split(line)
            if words[:1] == ["as"] and len(words) == 2:
                principal = words[1]
                continue
            args = parser.parse_args(["--as", principal, *words])
        except SystemExit:
            last_status = 2
            continue
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            last_status = 2
            continue
        if args.command in {"shell", "migrate"}:
            console.print(f"[red]'{args.command}' is not available inside the shell[/red]")
            last_status = 2
            continue
        last_status = run_command(gateway, args, console)


def run_migrate(database_url: str | None, console: Console) -> int:
    from heromarket.infrastructure.db.sql.connection import resolve_database_url
    from heromarket.infrastructure.db.sql.schema import apply_schema

    try:
        url = resolve_database_url(database_url)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red] Without a database URL the market runs in memory and needs no schema.")
        return 2
    executed = apply_schema(url)
    console.print(f"Executed {executed} schema statement(s) successfully.")
    return 0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)

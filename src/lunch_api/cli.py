"""lunch-api: CLI for scheduled lunch jobs."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date
from enum import Enum
from pathlib import Path
from typing import TypeVar

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from .common.errors import AppError
from .common.logging import setup_logging
from .db import DatabaseConfig, create_schema, db, session_scope
from .features.groups.service import GroupsService
from .features.orders.service import OrdersService
from .features.talabat.client import TalabatClient
from .features.talabat.schemas import RestaurantSync
from .features.talabat.service import TalabatService
from .features.voting.service import VotingService
from .settings import Settings, get_settings

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Lunch API CLI for database setup, scheduled jobs and Talabat sync.",
)


class ExportFormat(str, Enum):
    TEXT = "text"
    CSV = "csv"
    JSON = "json"


def parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise typer.BadParameter("Use YYYY-MM-DD.", param_hint="--date") from None


def _run(work: Callable[[AsyncSession, Settings], Awaitable[T]]) -> T:
    """Run ``work`` in one committed unit of work against the configured database."""

    settings = get_settings()
    setup_logging(settings)

    async def _main() -> T:
        db.init(DatabaseConfig.from_settings(settings))
        try:
            if settings.database_create_all:
                await create_schema(db.engine)
            async with session_scope() as session:
                return await work(session, settings)
        finally:
            await db.dispose()

    try:
        return asyncio.run(_main())
    except AppError as exc:
        typer.echo(f"❌ {exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="init-db", help="Create any missing database tables.")
def init_db() -> None:
    settings = get_settings()
    setup_logging(settings)

    async def _create() -> None:
        db.init(DatabaseConfig.from_settings(settings))
        try:
            await create_schema(db.engine)
        finally:
            await db.dispose()

    asyncio.run(_create())
    typer.echo("✅ Database schema is up to date.")


@app.command(name="close-expired-groups", help="Close every open group past its end time.")
def close_expired_groups() -> None:
    async def work(session: AsyncSession, settings: Settings) -> int:
        return await GroupsService(session=session, settings=settings).close_expired_groups()

    closed = _run(work)
    typer.echo(f"Closed {closed} expired group(s).")


@app.command(name="close-voting", help="End voting for a day and record the winner.")
def close_voting(
    day: str | None = typer.Option(None, "--date", help="Voting date (YYYY-MM-DD, default: today)."),
) -> None:
    target = parse_day(day)

    async def work(session: AsyncSession, settings: Settings):
        return await VotingService(session=session, settings=settings).close_voting(target)

    winner = _run(work)
    typer.echo(
        f"Winner for {winner.date.isoformat()}: {winner.restaurant.name} "
        f"({winner.vote_count} vote(s))."
    )


@app.command(name="export-orders", help="Export the day's orders for the winning restaurant.")
def export_orders(
    day: str | None = typer.Option(None, "--date", help="Order date (YYYY-MM-DD, default: today)."),
    fmt: ExportFormat = typer.Option(ExportFormat.TEXT, "--format", case_sensitive=False),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout."),
) -> None:
    target = parse_day(day)

    async def work(session: AsyncSession, settings: Settings) -> str:
        service = OrdersService(session=session, settings=settings)
        return await service.export_orders(target, fmt.value)

    rendered = _run(work)
    if output is None:
        typer.echo(rendered)
        return
    output.write_text(rendered, encoding="utf-8")
    typer.echo(f"Wrote {fmt.value} export to {output}.", err=True)


@app.command(name="sync-restaurant", help="Import a Talabat restaurant and its menu.")
def sync_restaurant(
    talabat_id: str = typer.Argument(..., help="Restaurant id on Talabat."),
) -> None:
    async def work(session: AsyncSession, settings: Settings) -> RestaurantSync:
        async with TalabatClient.from_settings(settings) as client:
            service = TalabatService(session=session, settings=settings, client=client)
            return await service.sync_restaurant(talabat_id)

    result = _run(work)
    verb = "Created" if result.created else "Updated"
    typer.echo(f"{verb} {result.restaurant.name} with {len(result.menu_items)} menu item(s).")


if __name__ == "__main__":
    app()

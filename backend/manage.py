"""Management commands for the parlor booking backend."""

from __future__ import annotations

import logging

import click

from parlor_booking.db.seed import ensure_default_services
from parlor_booking.db.session import create_tables, get_engine

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("create-tables")
def create_tables_command() -> None:
    """Create every table that does not exist yet."""
    create_tables()
    url = get_engine().url.render_as_string(hide_password=True)
    click.echo(f"Tables created on {url}")


@cli.command("seed-services")
@click.option(
    "--create-tables/--no-create-tables",
    "with_tables",
    default=True,
    help="Create missing tables before seeding.",
)
def seed_services(with_tables: bool) -> None:
    """Insert the default parlor services when the catalog is empty."""
    if with_tables:
        create_tables()
    created = ensure_default_services()
    if created:
        click.echo(f"Seeded {created} services")
    else:
        click.echo("Services already present; nothing to seed")


if __name__ == "__main__":
    cli()

"""Administrative command line for the pharmacy platform.

Commands:
    import-medications  Load a JSON list of medications into the catalog
    seed                Load the bundled starter catalog
    create-admin        Create or promote the back-office administrator
"""

import asyncio
import os

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pharmacy.api.middleware.logging import setup_logging
from pharmacy.services.database import DatabaseManager
from pharmacy.services.medication_import import MedicationImporter, load_entries
from pharmacy.services.seed import seed_catalog
from pharmacy.services.users import UserRepository

console = Console()

DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_ADMIN_PASSWORD = "Admin123!"


async def _with_session(database_url: str, work, create_tables: bool = False):
    """Run ``work(session)`` against a fresh database manager."""
    db_manager = DatabaseManager(database_url, pool_size=2, max_overflow=0)
    await db_manager.initialize_async()
    try:
        if create_tables:
            await db_manager.create_tables()
        async with db_manager.get_async_session() as session:
            return await work(session)
    finally:
        await db_manager.close()


@click.group()
@click.option(
    "--database-url",
    envvar="DATABASE_URL",
    required=True,
    help="Database connection string (defaults to DATABASE_URL).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, database_url: str, verbose: bool):
    """Pharmacy back-office tasks."""
    setup_logging(
        log_level="DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING"),
        log_format=os.getenv("LOG_FORMAT", "console"),
    )
    ctx.obj = {"database_url": database_url}


@cli.command("import-medications")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, default=False, help="Validate and report without writing.")
@click.pass_context
def import_medications(ctx: click.Context, file: str, dry_run: bool):
    """Import medications from a JSON FILE.

    Prices may be strings such as "$12.99". Entries whose name already exists
    in the catalog are skipped.
    """
    try:
        records = load_entries(file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[bold cyan]Importing {len(records)} medications from {file}[/bold cyan]")
    if dry_run:
        console.print("[yellow]Dry run: nothing will be written[/yellow]")

    async def work(session):
        return await MedicationImporter(session, dry_run=dry_run).run(records)

    result = asyncio.run(_with_session(ctx.obj["database_url"], work))

    table = Table(title="Import summary")
    table.add_column("Outcome", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("[green]Imported[/green]", str(len(result.imported)))
    table.add_row("[yellow]Skipped (already present)[/yellow]", str(len(result.skipped)))
    table.add_row("[red]Failed[/red]", str(len(result.failed)))
    console.print(table)

    for name, error in result.failed:
        console.print(f"  [red]✗[/red] {escape(name)}: {escape(error)}")

    if result.failed:
        ctx.exit(1)


@cli.command()
@click.option(
    "--create-tables",
    is_flag=True,
    default=False,
    help="Create missing tables first (development databases only).",
)
@click.pass_context
def seed(ctx: click.Context, create_tables: bool):
    """Load the starter catalog when no categories exist."""

    async def work(session):
        return await seed_catalog(session)

    categories, medications = asyncio.run(
        _with_session(ctx.obj["database_url"], work, create_tables=create_tables)
    )

    if categories == 0 and medications == 0:
        console.print("[yellow]Catalog already populated; nothing to seed[/yellow]")
    else:
        console.print(
            f"[bold green]Seeded {categories} categories and {medications} medications[/bold green]"
        )


@cli.command("create-admin")
@click.option("--email", default=DEFAULT_ADMIN_EMAIL, show_default=True)
@click.option("--password", default=DEFAULT_ADMIN_PASSWORD, show_default=True)
@click.pass_context
def create_admin(ctx: click.Context, email: str, password: str):
    """Create the administrator account, or promote an existing user."""

    async def work(session):
        return await UserRepository(session).ensure_admin(
            email,
            password,
            first_name="Admin",
            last_name="User",
        )

    user, created = asyncio.run(_with_session(ctx.obj["database_url"], work))

    table = Table(show_header=False)
    table.add_row("Email", user.email)
    table.add_row("Username", user.username)
    table.add_row("Role", user.role)
    console.print(table)

    if created:
        console.print("[bold green]Admin user created[/bold green]")
    else:
        console.print("[bold yellow]Existing user promoted to admin[/bold yellow]")


if __name__ == "__main__":
    cli()

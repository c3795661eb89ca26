"""
Tableside CLI.

Command-line interface for common operator tasks: schema creation, demo
data, table occupancy and a health probe of a running API.
"""

import sys
import time

import httpx
import typer
from rich.console import Console
from rich.table import Table as RichTable
from sqlalchemy import select

from shared.config.settings import settings
from shared.infrastructure.db import Database, transaction
from rest_api.models import Base, Location, Table

app = typer.Typer(
    name="tableside",
    help="Tableside table check-in and group ordering CLI",
    add_completion=False,
)
console = Console()


def _database(url: str | None) -> Database:
    return Database(url or settings.database_url)


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init(
    database_url: str = typer.Option(None, "--database-url", help="Override DATABASE_URL"),
):
    """Create all missing tables."""
    database = _database(database_url)
    try:
        Base.metadata.create_all(bind=database.engine)
        console.print("[green]✓ Schema created/verified[/green]")
    finally:
        database.dispose()


@app.command()
def db_seed(
    tables: int = typer.Option(8, help="Number of demo tables"),
    capacity: int = typer.Option(4, help="Seats per demo table"),
    location_name: str = typer.Option("Demo Bistro", help="Demo location name"),
    database_url: str = typer.Option(None, "--database-url", help="Override DATABASE_URL"),
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding production"),
):
    """Seed a demo location with numbered tables."""
    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)
    if tables < 1 or capacity < 1:
        console.print("[red]--tables and --capacity must be positive[/red]")
        raise typer.Exit(1)

    database = _database(database_url)
    try:
        Base.metadata.create_all(bind=database.engine)
        with database.session() as db, transaction(db, "seed demo data"):
            location = db.scalar(select(Location).where(Location.name == location_name))
            if location is None:
                location = Location(name=location_name)
                db.add(location)
                db.flush()

            existing = set(
                db.execute(select(Table.number).where(Table.location_id == location.id)).scalars()
            )
            created = 0
            for n in range(1, tables + 1):
                if str(n) in existing:
                    continue
                db.add(Table(location_id=location.id, number=str(n), capacity=capacity))
                created += 1
            location_id = location.id

        console.print(
            f"[green]✓ Location {location_id} '{location_name}': {created} tables created[/green]"
        )
    finally:
        database.dispose()


# =============================================================================
# Table Commands
# =============================================================================

@app.command()
def tables(
    location_id: int = typer.Argument(..., help="Location id"),
    database_url: str = typer.Option(None, "--database-url", help="Override DATABASE_URL"),
):
    """Show occupancy of every table of a location."""
    from rest_api.services.domain import TableService
    from shared.utils.exceptions import NotFoundError

    database = _database(database_url)
    try:
        with database.session() as db:
            try:
                availability = TableService(db).get_table_availability(location_id)
            except NotFoundError as e:
                console.print(f"[red]✗ {e}[/red]")
                raise typer.Exit(1)
    finally:
        database.dispose()

    table = RichTable(title=f"Tables of location {location_id}")
    table.add_column("Table", style="cyan")
    table.add_column("Seats", justify="right")
    table.add_column("Occupied", justify="right")
    table.add_column("Session", style="yellow")
    table.add_column("Status")

    for t in availability:
        status = "[green]available[/green]" if t.is_available else "[red]full[/red]"
        table.add_row(
            t.number,
            str(t.capacity),
            str(t.occupancy),
            str(t.session_id) if t.session_id else "-",
            status,
        )

    console.print(table)


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    url: str = typer.Option(
        f"http://localhost:{settings.rest_api_port}/api/health/detailed",
        help="Detailed health endpoint",
    ),
):
    """Check a running REST API and its database."""
    table = RichTable(title="Service Health")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    start = time.time()
    try:
        response = httpx.get(url, timeout=5.0)
    except httpx.HTTPError as e:
        table.add_row("REST API", f"✗ {type(e).__name__}", "-")
        console.print(table)
        raise typer.Exit(1)
    elapsed = (time.time() - start) * 1000

    body = response.json()
    api_status = "✓ Healthy" if response.status_code == 200 else f"✗ Status {response.status_code}"
    table.add_row("REST API", api_status, f"{elapsed:.0f}ms")
    for name, dep in body.get("dependencies", {}).items():
        latency = dep.get("latency_ms")
        table.add_row(
            name,
            "✓ Healthy" if dep.get("status") == "healthy" else f"✗ {dep.get('error', 'unhealthy')}",
            f"{latency}ms" if latency is not None else "-",
        )

    console.print(table)
    if response.status_code != 200:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = RichTable(title="Tableside Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()

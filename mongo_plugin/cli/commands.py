"""
CLI commands for the MongoDB plugin.

Provides command-line access to connectivity checks, collection and
index management, and server/database/collection statistics.
"""

import asyncio
from functools import wraps
from typing import Any, Callable

import click
from bson import json_util
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mongo_plugin import __version__
from mongo_plugin.config.logging import configure_logging
from mongo_plugin.config.settings import MongoConfig, get_settings
from mongo_plugin.db.client import Client, new_client
from mongo_plugin.db.errors import MongoClientError, MongoConnectionError
from mongo_plugin.db.indexes import ensure_indexes

console = Console()


def async_command(f: Callable) -> Callable:
    """Decorator to run async functions in Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def with_client(f: Callable) -> Callable:
    """
    Decorator that connects, passes the Client to the command and closes it.

    Client errors are printed and turned into exit status 1.
    """

    @wraps(f)
    async def wrapper(cfg: MongoConfig, *args, **kwargs):
        client: Client | None = None
        try:
            client = await new_client(cfg)
            return await f(client, *args, **kwargs)
        except MongoConnectionError as e:
            console.print("[red]Connection error:[/red]", escape(str(e)))
            raise click.exceptions.Exit(1) from e
        except MongoClientError as e:
            console.print("[red]Error:[/red]", escape(str(e)))
            raise click.exceptions.Exit(1) from e
        finally:
            if client is not None:
                await client.close()

    return wrapper


def _format_value(value: Any, limit: int = 60) -> str:
    if isinstance(value, dict):
        return f"{{{len(value)} fields}}"
    if isinstance(value, list):
        return f"[{len(value)} items]"
    text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _print_document(title: str, document: dict[str, Any], as_json: bool) -> None:
    if as_json:
        console.print_json(json_util.dumps(document))
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in document.items():
        table.add_row(key, _format_value(value))

    console.print(table)


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="mongo-plugin")
@click.option("--uri", default=None, help="Connection string (overrides MONGO_URI).")
@click.option("--database", "-d", default=None, help="Database name (overrides MONGO_DATABASE).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Logging level (overrides APP_LOG_LEVEL).",
)
@click.pass_context
def cli(ctx: click.Context, uri: str | None, database: str | None, log_level: str | None):
    """MongoDB Plugin - CLI Interface.

    Check connectivity, manage collections and indexes, and view statistics.
    """
    overrides: dict[str, Any] = {}
    if uri:
        overrides["uri"] = uri
    if database:
        overrides["database"] = database

    try:
        settings = get_settings()
        config = settings.mongo.to_config(**overrides)
    except ValidationError as e:
        console.print("[red]Configuration error:[/red]", escape(str(e)))
        raise click.exceptions.Exit(1) from e

    configure_logging(log_level or settings.app.log_level)
    ctx.obj = config


# =============================================================================
# Connection Commands
# =============================================================================


@cli.command("ping")
@click.pass_obj
@async_command
@with_client
async def ping(client: Client):
    """Ping the server."""
    await client.ping()
    console.print(f"[green]✓[/green] Connected to MongoDB (database: {client.config.database})")


@cli.command("status")
@click.pass_obj
@async_command
@with_client
async def status(client: Client):
    """Check connection health and latency."""
    health = await client.health_check()

    if health["healthy"]:
        console.print(
            Panel(
                f"[green]Connected[/green]\n"
                f"Server: MongoDB {health.get('server_version', 'unknown')}\n"
                f"Latency: {health.get('latency_ms', 'N/A')} ms",
                title="Database Status",
                border_style="green",
            )
        )
    else:
        console.print(
            Panel(
                f"[red]Unhealthy[/red]\nError: {health.get('error', 'Unknown')}",
                title="Database Status",
                border_style="red",
            )
        )
        raise click.exceptions.Exit(1)


# =============================================================================
# Collection Commands
# =============================================================================


@cli.group()
def collections():
    """Collection management commands."""
    pass


@collections.command("list")
@click.pass_obj
@async_command
@with_client
async def collections_list(client: Client):
    """List collections of the database."""
    names = await client.list_collections()

    table = Table(title=f"Collections ({len(names)})", box=box.ROUNDED)
    table.add_column("Name", style="cyan")
    for name in sorted(names):
        table.add_row(name)

    console.print(table)


@collections.command("create")
@click.argument("name")
@click.pass_obj
@async_command
@with_client
async def collections_create(client: Client, name: str):
    """Create a collection."""
    await client.create_collection(name)
    console.print(f"[green]Collection '{name}' created.[/green]")


@collections.command("drop")
@click.argument("name")
@click.confirmation_option(prompt="Are you sure you want to drop this collection?")
@click.pass_obj
@async_command
@with_client
async def collections_drop(client: Client, name: str):
    """Drop a collection and all its documents."""
    await client.drop_collection(name)
    console.print(f"[green]Collection '{name}' dropped.[/green]")


@collections.command("exists")
@click.argument("name")
@click.pass_obj
@async_command
@with_client
async def collections_exists(client: Client, name: str):
    """Check whether a collection exists (exit status 1 if not)."""
    if await client.has_collection(name):
        console.print(f"[green]Collection '{name}' exists.[/green]")
        return

    console.print(f"[yellow]Collection '{name}' does not exist.[/yellow]")
    raise click.exceptions.Exit(1)


# =============================================================================
# Index Commands
# =============================================================================


@cli.group()
def indexes():
    """Index management commands."""
    pass


@indexes.command("list")
@click.argument("collection")
@click.pass_obj
@async_command
@with_client
async def indexes_list(client: Client, collection: str):
    """List index names of a collection."""
    names = await client.list_indexes(collection)

    table = Table(title=f"Indexes on {collection} ({len(names)})", box=box.ROUNDED)
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)

    console.print(table)


@indexes.command("drop")
@click.argument("collection")
@click.argument("name")
@click.pass_obj
@async_command
@with_client
async def indexes_drop(client: Client, collection: str, name: str):
    """Drop an index by name."""
    await client.drop_index(collection, name)
    console.print(f"[green]Index '{name}' dropped from '{collection}'.[/green]")


@indexes.command("init")
@click.pass_obj
@async_command
@with_client
async def indexes_init(client: Client):
    """Create baseline collections and indexes."""
    console.print("[yellow]Initializing database...[/yellow]")

    results = await ensure_indexes(client)

    table = Table(title="Created Indexes", box=box.ROUNDED)
    table.add_column("Collection", style="cyan")
    table.add_column("Indexes", style="green")

    for collection, names in results.items():
        table.add_row(collection, ", ".join(names))

    console.print(table)
    console.print("[green]Database initialized successfully![/green]")


# =============================================================================
# Statistics Commands
# =============================================================================


@cli.group()
def stats():
    """Server, database and collection statistics."""
    pass


@stats.command("server")
@click.option("--json", "as_json", is_flag=True, help="Print the full reply as JSON")
@click.pass_obj
@async_command
@with_client
async def stats_server(client: Client, as_json: bool):
    """Show serverStatus."""
    document = await client.get_server_status()
    _print_document("Server Status", document, as_json)


@stats.command("db")
@click.option("--json", "as_json", is_flag=True, help="Print the full reply as JSON")
@click.pass_obj
@async_command
@with_client
async def stats_db(client: Client, as_json: bool):
    """Show dbStats for the database."""
    document = await client.get_database_stats()
    _print_document(f"Database Stats: {client.config.database}", document, as_json)


@stats.command("collection")
@click.argument("collection")
@click.option("--json", "as_json", is_flag=True, help="Print the full reply as JSON")
@click.pass_obj
@async_command
@with_client
async def stats_collection(client: Client, collection: str, as_json: bool):
    """Show collStats for a collection."""
    document = await client.get_collection_stats(collection)
    _print_document(f"Collection Stats: {collection}", document, as_json)

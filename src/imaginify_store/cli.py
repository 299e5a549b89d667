"""Command-line interface for the Imaginify persistence layer."""

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .actions import get_user_by_id, update_credits
from .actions.result import ActionResult
from .database.connection import ConnectionManager
from .database.init import DatabaseInitializer
from .logging import get_logger

app = typer.Typer(
    name="imaginify-store",
    help="Imaginify persistence layer CLI",
    add_completion=False
)
console = Console()
logger = get_logger(__name__)

T = TypeVar("T")


def get_manager() -> ConnectionManager:
    """Build the connection manager used by a single CLI invocation."""
    return ConnectionManager()


def run_with_manager(operation: Callable[[ConnectionManager], Awaitable[T]]) -> T:
    """Run an async operation against a fresh manager, closing it afterwards."""
    
    async def _run() -> T:
        manager = get_manager()
        try:
            return await operation(manager)
        finally:
            await manager.close()
    
    return asyncio.run(_run())


def print_user(user: dict) -> None:
    table = Table(title=f"User {user.get('clerkId')}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in user.items():
        table.add_row(key, str(value))
    console.print(table)


def exit_on_failure(result: ActionResult[Any]) -> None:
    if not result.ok:
        console.print(f"[red]❌ {result.error.message}[/red]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[green]imaginify-store v{__version__}[/green]")


@app.command()
def setup() -> None:
    """Create collections and indexes."""
    console.print("Setting up MongoDB collections...")
    
    try:
        created = run_with_manager(lambda manager: DatabaseInitializer(manager).initialize_all())
    except Exception as e:
        console.print(f"❌ Setup failed: {e}")
        raise typer.Exit(1)
    
    console.print(f"✅ Database setup completed! ({len(created)} indexes)")


@app.command()
def health(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON")
) -> None:
    """Check database connectivity."""
    status = run_with_manager(lambda manager: DatabaseInitializer(manager).health_check())
    
    if as_json:
        console.print_json(json.dumps(status))
    else:
        table = Table(title="Health")
        table.add_column("Service", style="cyan")
        table.add_column("Status")
        table.add_column("Details")
        for service, info in status.items():
            colour = "green" if info["status"] == "healthy" else "red"
            table.add_row(service, f"[{colour}]{info['status']}[/{colour}]", json.dumps(info["details"]))
        console.print(table)
    
    if status["mongodb"]["status"] != "healthy":
        raise typer.Exit(1)


@app.command("get-user")
def get_user(
    clerk_id: str = typer.Argument(..., help="External user identifier")
) -> None:
    """Show a user record."""
    result = run_with_manager(lambda manager: get_user_by_id(manager, clerk_id))
    exit_on_failure(result)
    print_user(result.value)


@app.command()
def credits(
    clerk_id: str = typer.Argument(..., help="External user identifier"),
    amount: int = typer.Argument(..., help="Credits to add (negative to deduct)")
) -> None:
    """Adjust a user's credit balance."""
    result = run_with_manager(lambda manager: update_credits(manager, clerk_id, amount))
    exit_on_failure(result)
    console.print(f"✅ Credit balance is now {result.value['creditBalance']}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

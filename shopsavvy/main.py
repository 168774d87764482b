"""Main entry point for the shopsavvy command line tool.

Sets up the Typer CLI application, wires the client and console display
together (Composition Root), defines CLI commands, and delegates execution
to the CommandHandler.
"""

import asyncio
import logging
from typing import Annotated, Any, Awaitable, Callable, Coroutine, Dict, List, Optional

import typer

from shopsavvy.core.client import VERSION, ShopSavvyClient
from shopsavvy.core.command_handler import CommandHandler
from shopsavvy.domain.errors import ConfigurationError
from shopsavvy.domain.models.common import MonitoringFrequency
from shopsavvy.infrastructure.cli.display import ConsoleDisplay
from shopsavvy.infrastructure.config.settings import get_config, load_configuration
from shopsavvy.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, setup_logging

logger = logging.getLogger(__name__)

# Options given to the callback, read by the commands
_state: Dict[str, Any] = {"api_key": None}


# --- Dependency Wiring ---

def create_command_handler(api_key: Optional[str] = None) -> CommandHandler:
    """Creates the client and display and wires them into a CommandHandler.

    Raises:
        ConfigurationError: If no usable API key is configured.
    """
    client = ShopSavvyClient.from_settings(api_key)
    return CommandHandler(client=client, ui=ConsoleDisplay())


def configure_logging(verbose: bool = False) -> None:
    load_configuration()
    level = "DEBUG" if verbose else get_config("logging.level", "WARNING")
    setup_logging(
        log_level=level,
        log_format=get_config("logging.format", DEFAULT_LOG_FORMAT),
        log_file=get_config("logging.file"),
    )


# --- Helper for Running Async Commands ---

def run_async(coro: Coroutine[Any, Any, int]) -> int:
    """Runs an async command from a sync Typer command and returns its exit code."""
    return asyncio.run(coro)


def _run(command: Callable[[CommandHandler], Awaitable[int]]) -> None:
    try:
        handler = create_command_handler(_state["api_key"])
    except ConfigurationError as e:
        logger.error(f"Initialization failed: {e}")
        ConsoleDisplay().display_error(str(e))
        raise typer.Exit(code=1)

    async def execute() -> int:
        try:
            return await command(handler)
        finally:
            await handler.close()

    exit_code = run_async(execute())
    if exit_code:
        raise typer.Exit(code=exit_code)


# --- Typer App Definition ---

app = typer.Typer(
    name="shopsavvy",
    help="ShopSavvy Data API: product details, live offers and price history from the command line.",
    add_completion=False,
)

RetailerOption = Annotated[
    Optional[str],
    typer.Option("--retailer", "-r", help="Only include offers from this retailer (e.g. 'amazon').")
]

IdentifiersArgument = Annotated[
    List[str],
    typer.Argument(help="Barcodes, ASINs, URLs, model numbers or ShopSavvy product IDs.")
]


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Keywords to search for.")],
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", min=1, help="Maximum number of results.")] = None,
    offset: Annotated[Optional[int], typer.Option("--offset", min=0, help="Pagination offset.")] = None,
):
    """Search products by keyword."""
    _run(lambda handler: handler.handle_search(query, limit=limit, offset=offset))


@app.command()
def product(identifiers: IdentifiersArgument):
    """Show product details (several identifiers are sent in one request)."""
    _run(lambda handler: handler.handle_product(identifiers))


@app.command()
def offers(
    identifier: Annotated[str, typer.Argument(help="Product identifier.")],
    retailer: RetailerOption = None,
):
    """Show current offers for a product, cheapest first."""
    _run(lambda handler: handler.handle_offers(identifier, retailer=retailer))


@app.command()
def history(
    identifier: Annotated[str, typer.Argument(help="Product identifier.")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD). Defaults to 30 days before --end.")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD). Defaults to today.")] = None,
    retailer: RetailerOption = None,
):
    """Show the price history of a product."""
    _run(lambda handler: handler.handle_history(identifier, start_date=start, end_date=end, retailer=retailer))


@app.command()
def batch(
    identifiers: IdentifiersArgument,
    concurrency: Annotated[Optional[int], typer.Option("--concurrency", "-c", help="Maximum requests in flight.")] = None,
    with_offers: Annotated[bool, typer.Option("--offers", help="Fetch current offers instead of product details.")] = False,
    retailer: RetailerOption = None,
):
    """Look up many products concurrently, one request per identifier."""
    _run(lambda handler: handler.handle_batch(identifiers, concurrency_limit=concurrency, offers=with_offers, retailer=retailer))


@app.command()
def schedule(
    identifiers: IdentifiersArgument,
    frequency: Annotated[MonitoringFrequency, typer.Option("--frequency", "-f", help="Refresh frequency.")] = MonitoringFrequency.DAILY,
    retailer: RetailerOption = None,
):
    """Schedule products for price monitoring."""
    _run(lambda handler: handler.handle_schedule(identifiers, frequency, retailer=retailer))


@app.command()
def scheduled():
    """List products scheduled for monitoring."""
    _run(lambda handler: handler.handle_scheduled())


@app.command()
def unschedule(identifiers: IdentifiersArgument):
    """Remove products from monitoring."""
    _run(lambda handler: handler.handle_unschedule(identifiers))


@app.command()
def usage():
    """Show API credit usage for the current billing period."""
    _run(lambda handler: handler.handle_usage())


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"shopsavvy {VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", envvar="SHOPSAVVY_API_KEY", help="ShopSavvy API key (ss_live_... or ss_test_...).")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit.")
    ] = None,
):
    """Global options shared by every command."""
    configure_logging(verbose)
    _state["api_key"] = api_key
    logger.debug(f"CLI options: api_key set={bool(api_key)}, verbose={verbose}")


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()

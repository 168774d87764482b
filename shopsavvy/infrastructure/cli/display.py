import logging
from typing import Any, List, Optional, Sequence

from rich.box import HEAVY, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shopsavvy.domain.interfaces.user_interface import UserInterface
from shopsavvy.domain.models.products import (
    ApiResponse,
    OfferWithHistory,
    ProductDetails,
    ProductWithOffers,
    ScheduledProduct,
    UsageInfo,
)
from shopsavvy.domain.models.results import BatchResult

logger = logging.getLogger(__name__)


def _money(price: Optional[float], currency: Optional[str]) -> str:
    if price is None:
        return "-"
    return f"{price:,.2f} {currency or ''}".strip()


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self.console = console or Console()

    def display_products(self, products: List[ProductDetails], **kwargs: Any) -> None:
        if not products:
            self.display_info("No products found.")
            return
        table = Table(title=kwargs.get("title", "Products"), box=SIMPLE)
        table.add_column("Title", style="bold")
        table.add_column("Brand")
        table.add_column("Barcode")
        table.add_column("ASIN")
        table.add_column("ShopSavvy ID", style="dim")
        for product in products:
            table.add_row(product.title, product.brand or "-", product.barcode or "-", product.amazon or "-", product.shopsavvy)
        self.console.print(table)

    def display_offers(self, products: List[ProductWithOffers], **kwargs: Any) -> None:
        if not products:
            self.display_info("No offers found.")
            return
        for product in products:
            table = Table(title=product.title, box=SIMPLE)
            table.add_column("Retailer", style="bold")
            table.add_column("Price", justify="right")
            table.add_column("Availability")
            table.add_column("Condition")
            table.add_column("Updated", style="dim")
            # Cheapest first; offers without a price go last
            for offer in sorted(product.offers, key=lambda o: (o.price is None, o.price or 0.0)):
                table.add_row(
                    offer.retailer or "-",
                    _money(offer.price, offer.currency),
                    offer.availability or "-",
                    offer.condition or "-",
                    offer.timestamp or "-",
                )
            self.console.print(table)

    def display_price_history(self, offers: List[OfferWithHistory], **kwargs: Any) -> None:
        if not offers:
            self.display_info("No price history found.")
            return
        for offer in offers:
            table = Table(title=f"{offer.retailer or 'Unknown retailer'} ({offer.id})", box=SIMPLE)
            table.add_column("Date")
            table.add_column("Price", justify="right")
            table.add_column("Availability")
            for entry in offer.price_history:
                table.add_row(entry.date, _money(entry.price, offer.currency), entry.availability)
            self.console.print(table)

    def display_batch(self, identifiers: Sequence[str], result: BatchResult[Any], **kwargs: Any) -> None:
        table = Table(title=kwargs.get("title", "Batch results"), box=SIMPLE)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Identifier", style="bold")
        table.add_column("Status")
        table.add_column("Attempts", justify="right")
        table.add_column("Details")
        for index, (identifier, outcome) in enumerate(zip(identifiers, result)):
            if outcome.ok:
                details = "-"
                value = outcome.value
                if isinstance(value, ApiResponse) and isinstance(value.data, list) and value.data:
                    details = getattr(value.data[0], "title", "-")
                status = Text("ok", style="green")
            else:
                details = outcome.error.message if outcome.error else "-"
                status = Text(outcome.error.kind.value if outcome.error else "error", style="red")
            table.add_row(str(index), identifier, status, str(outcome.attempts), details)
        self.console.print(table)
        self.console.print(f"{len(result.succeeded)} succeeded, {len(result.failed)} failed")

    def display_scheduled(self, scheduled: List[ScheduledProduct], **kwargs: Any) -> None:
        if not scheduled:
            self.display_info("No products are scheduled for monitoring.")
            return
        table = Table(title="Scheduled products", box=SIMPLE)
        table.add_column("Identifier", style="bold")
        table.add_column("Frequency")
        table.add_column("Retailer")
        table.add_column("Last refreshed", style="dim")
        for item in scheduled:
            table.add_row(item.identifier, item.frequency, item.retailer or "all", item.last_refreshed or "never")
        self.console.print(table)

    def display_usage(self, usage: UsageInfo, **kwargs: Any) -> None:
        period = usage.current_period
        body = (
            f"Period: {period.start_date} → {period.end_date}\n"
            f"Credits: {period.credits_used} used / {period.credits_limit} "
            f"({period.credits_remaining} remaining, {usage.usage_percentage:.1f}%)\n"
            f"Requests made: {period.requests_made}"
        )
        self.console.print(Panel(Text(body), title="[bold blue]API usage[/bold blue]", border_style="blue", box=SIMPLE))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), calls the matching
ShopSavvyClient method and hands the result to the UserInterface. Classified
API errors and configuration errors are reported to the user and turned into
a non-zero exit code instead of a traceback.
"""

import logging
from datetime import date, timedelta
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from shopsavvy.core.client import ShopSavvyClient
from shopsavvy.domain.errors import ConfigurationError, ShopSavvyApiError
from shopsavvy.domain.interfaces.user_interface import UserInterface
from shopsavvy.domain.models.common import MonitoringFrequency

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXIT_OK = 0
EXIT_FAILURE = 1
DEFAULT_HISTORY_DAYS = 30


class CommandHandler:
    """Handles incoming commands and delegates to the API client."""

    def __init__(self, client: ShopSavvyClient, ui: UserInterface):
        self.client = client
        self.ui = ui

    async def close(self) -> None:
        await self.client.aclose()

    async def _guard(self, command: str, call: Callable[[], Awaitable[T]], show: Callable[[T], int]) -> int:
        """Runs one client call, reporting classified failures to the UI."""
        logger.info(f"Handling '{command}' command.")
        try:
            result = await call()
        except ShopSavvyApiError as e:
            logger.error(f"'{command}' failed after retries: {e!r}")
            self.ui.display_error(f"{e.message} ({e.kind.value})")
            return EXIT_FAILURE
        except ConfigurationError as e:
            logger.error(f"'{command}' rejected: {e}")
            self.ui.display_error(str(e))
            return EXIT_FAILURE
        return show(result)

    def _show_credits(self, credits_used: int, credits_remaining: int) -> None:
        if credits_used or credits_remaining:
            self.ui.display_info(f"Credits used: {credits_used}, remaining: {credits_remaining}")

    async def handle_search(self, query: str, limit: Optional[int] = None, offset: Optional[int] = None) -> int:
        def show(result) -> int:
            self.ui.display_products(result.data, title=f"Search results for '{query}'")
            if result.pagination:
                p = result.pagination
                self.ui.display_info(f"Showing {p.returned} of {p.total} (offset {p.offset})")
            self._show_credits(result.credits_used, result.credits_remaining)
            return EXIT_OK

        return await self._guard("search", lambda: self.client.search_products(query, limit=limit, offset=offset), show)

    async def handle_product(self, identifiers: Sequence[str]) -> int:
        def show(response) -> int:
            self.ui.display_products(response.data)
            self._show_credits(response.credits_used, response.credits_remaining)
            return EXIT_OK

        if len(identifiers) == 1:
            call = lambda: self.client.get_product_details(identifiers[0])
        else:
            call = lambda: self.client.get_product_details_batch(identifiers)
        return await self._guard("product", call, show)

    async def handle_offers(self, identifier: str, retailer: Optional[str] = None) -> int:
        def show(response) -> int:
            self.ui.display_offers(response.data)
            self._show_credits(response.credits_used, response.credits_remaining)
            return EXIT_OK

        return await self._guard("offers", lambda: self.client.get_current_offers(identifier, retailer=retailer), show)

    async def handle_history(
        self,
        identifier: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        retailer: Optional[str] = None,
    ) -> int:
        """Price history; the window defaults to the last 30 days."""
        end = end_date or date.today().isoformat()
        try:
            start = start_date or (date.fromisoformat(end) - timedelta(days=DEFAULT_HISTORY_DAYS)).isoformat()
        except ValueError:
            self.ui.display_error(f"Invalid end date '{end}', expected YYYY-MM-DD.")
            return EXIT_FAILURE

        def show(response) -> int:
            self.ui.display_price_history(response.data)
            self._show_credits(response.credits_used, response.credits_remaining)
            return EXIT_OK

        return await self._guard(
            "history", lambda: self.client.get_price_history(identifier, start, end, retailer=retailer), show
        )

    async def handle_batch(
        self,
        identifiers: List[str],
        concurrency_limit: Optional[int] = None,
        offers: bool = False,
        retailer: Optional[str] = None,
    ) -> int:
        """One request per identifier; exits non-zero if any of them failed."""
        def show(result) -> int:
            self.ui.display_batch(identifiers, result, title="Offers" if offers else "Products")
            if not result.all_succeeded:
                self.ui.display_warning(f"{len(result.failed)} of {len(result)} lookups failed.")
                return EXIT_FAILURE
            return EXIT_OK

        if offers:
            call = lambda: self.client.get_current_offers_many(identifiers, retailer=retailer, concurrency_limit=concurrency_limit)
        else:
            call = lambda: self.client.get_product_details_many(identifiers, concurrency_limit=concurrency_limit)
        return await self._guard("batch", call, show)

    async def handle_schedule(self, identifiers: Sequence[str], frequency: MonitoringFrequency, retailer: Optional[str] = None) -> int:
        if len(identifiers) == 1:
            def show_one(response) -> int:
                status = "scheduled" if response.data.scheduled else "not scheduled"
                self.ui.display_info(f"{identifiers[0]}: {status} ({frequency})")
                return EXIT_OK

            return await self._guard(
                "schedule",
                lambda: self.client.schedule_product_monitoring(identifiers[0], frequency, retailer=retailer),
                show_one,
            )

        def show_many(response) -> int:
            for item in response.data:
                status = "scheduled" if item.scheduled else "not scheduled"
                self.ui.display_info(f"{item.identifier}: {status} ({frequency})")
            return EXIT_OK

        return await self._guard(
            "schedule",
            lambda: self.client.schedule_product_monitoring_batch(identifiers, frequency, retailer=retailer),
            show_many,
        )

    async def handle_scheduled(self) -> int:
        def show(response) -> int:
            self.ui.display_scheduled(response.data)
            return EXIT_OK

        return await self._guard("scheduled", self.client.get_scheduled_products, show)

    async def handle_unschedule(self, identifiers: Sequence[str]) -> int:
        if len(identifiers) == 1:
            def show_one(response) -> int:
                self.ui.display_info(f"{identifiers[0]}: {'removed' if response.data.removed else 'not removed'}")
                return EXIT_OK

            return await self._guard(
                "unschedule", lambda: self.client.remove_product_from_schedule(identifiers[0]), show_one
            )

        def show_many(response) -> int:
            for item in response.data:
                self.ui.display_info(f"{item.identifier}: {'removed' if item.removed else 'not removed'}")
            return EXIT_OK

        return await self._guard(
            "unschedule", lambda: self.client.remove_products_from_schedule(identifiers), show_many
        )

    async def handle_usage(self) -> int:
        def show(response) -> int:
            self.ui.display_usage(response.data)
            return EXIT_OK

        return await self._guard("usage", self.client.get_usage, show)

"""Interface for presenting API results to the user.

Defines the contract for displaying products, offers, batch outcomes,
errors and informational messages, allowing different UI implementations
(e.g., rich console, plain JSON).
"""

import abc
from typing import Any, List, Sequence

from shopsavvy.domain.models.products import (
    OfferWithHistory,
    ProductDetails,
    ProductWithOffers,
    ScheduledProduct,
    UsageInfo,
)
from shopsavvy.domain.models.results import BatchResult


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_products(self, products: List[ProductDetails], **kwargs: Any) -> None:
        """Displays product details.

        Args:
            products: Products to show.
            **kwargs: Additional arguments (e.g. title).
        """
        pass

    @abc.abstractmethod
    def display_offers(self, products: List[ProductWithOffers], **kwargs: Any) -> None:
        """Displays the current offers of each product."""
        pass

    @abc.abstractmethod
    def display_price_history(self, offers: List[OfferWithHistory], **kwargs: Any) -> None:
        """Displays historical prices per offer."""
        pass

    @abc.abstractmethod
    def display_batch(self, identifiers: Sequence[str], result: BatchResult[Any], **kwargs: Any) -> None:
        """Displays one row per identifier with its success or failure."""
        pass

    @abc.abstractmethod
    def display_scheduled(self, scheduled: List[ScheduledProduct], **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_usage(self, usage: UsageInfo, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user."""
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

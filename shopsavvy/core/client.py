"""ShopSavvy Data API client.

Every endpoint method builds an operation (one HTTP attempt plus response
decoding) and hands it to the RequestExecutor, so all calls share the same
classification and retry behaviour. The `*_many` helpers fan one request per
identifier out through the BatchOrchestrator and return a positional
BatchResult aligned with the input identifiers.
"""

import asyncio
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

import httpx

from shopsavvy.core.client_config import ClientConfig
from shopsavvy.domain.errors import (
    BatchConfigurationError,
    InvalidApiKeyError,
    MissingApiKeyError,
    ResponseParseError,
)
from shopsavvy.domain.events.api_events import EventListener
from shopsavvy.domain.interfaces.transport import HttpTransport
from shopsavvy.domain.models.common import MonitoringFrequency, OutputFormat
from shopsavvy.domain.models.products import (
    ApiResponse,
    OfferWithHistory,
    ProductDetails,
    ProductSearchResult,
    ProductWithOffers,
    RemoveBatchResponse,
    RemoveResponse,
    ScheduleBatchResponse,
    ScheduledProduct,
    ScheduleResponse,
    UsageInfo,
)
from shopsavvy.domain.models.results import BatchResult
from shopsavvy.infrastructure.config.settings import get_client_config
from shopsavvy.infrastructure.http.httpx_transport import HttpxTransport
from shopsavvy.infrastructure.resilience.api_retry import Operation, RequestExecutor, Sleeper
from shopsavvy.infrastructure.resilience.batch import BatchOrchestrator
from shopsavvy.infrastructure.resilience.error_classifier import error_from_response
from shopsavvy.infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

VERSION = "1.0.1"
API_KEY_PATTERN = re.compile(r"^ss_(live|test)_[a-zA-Z0-9]+$")

T = TypeVar("T")
FormatArg = Union[OutputFormat, str, None]


def validate_api_key(api_key: Optional[str]) -> str:
    """Checks presence and shape of an API key.

    Raises:
        MissingApiKeyError: If the key is empty.
        InvalidApiKeyError: If it does not look like ss_live_... / ss_test_...
    """
    if not api_key:
        raise MissingApiKeyError()
    if not API_KEY_PATTERN.match(api_key):
        raise InvalidApiKeyError()
    return api_key


def _params(**kwargs: Any) -> Dict[str, str]:
    """Query parameters with None values dropped and enums rendered as their wire value."""
    return {key: str(value) for key, value in kwargs.items() if value is not None}


def _identifier_list(identifiers: Sequence[str]) -> List[str]:
    if isinstance(identifiers, (str, bytes)):
        raise BatchConfigurationError("identifiers must be a sequence of strings, not a single string")
    items = list(identifiers)
    for index, identifier in enumerate(items):
        if not isinstance(identifier, str) or not identifier:
            raise BatchConfigurationError(f"identifier {index} must be a non-empty string, got {identifier!r}")
    return items


def _envelope_list(item_parser: Callable[[Dict[str, Any]], T]) -> Callable[[Dict[str, Any]], ApiResponse[List[T]]]:
    def parse(payload: Dict[str, Any]) -> ApiResponse[List[T]]:
        return ApiResponse.from_dict(payload, lambda data: [item_parser(item) for item in data or []])
    return parse


def _envelope_one(item_parser: Callable[[Dict[str, Any]], T]) -> Callable[[Dict[str, Any]], ApiResponse[T]]:
    def parse(payload: Dict[str, Any]) -> ApiResponse[T]:
        return ApiResponse.from_dict(payload, lambda data: item_parser(data or {}))
    return parse


class ShopSavvyClient:
    """Asynchronous client for the ShopSavvy Data API.

    Example:
        async with ShopSavvyClient("ss_live_your_api_key_here") as client:
            product = await client.get_product_details("012345678901")
            print(product.data[0].title)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[HttpTransport] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        event_listener: Optional[EventListener] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initializes the client.

        Args:
            api_key: ShopSavvy API key. Ignored when `config` is given.
            config: Full client configuration.
            transport: HTTP transport override (defaults to HttpxTransport).
            http_transport: Low-level httpx transport for the default HttpxTransport
                (e.g. httpx.MockTransport in tests).
            event_listener: Optional callback receiving request/batch events.
            sleep: Non-blocking delay primitive used between retries.

        Raises:
            MissingApiKeyError, InvalidApiKeyError: On a bad API key.
        """
        self.config = config or ClientConfig(api_key=api_key or "")
        validate_api_key(self.config.api_key)

        self.transport = transport or HttpxTransport(
            base_url=self.config.base_url,
            headers=self.default_headers(),
            timeout=self.config.timeout,
            http_transport=http_transport,
        )
        rate_limiter = None
        if self.config.rate_limit is not None:
            rate_limiter = RateLimiter(
                max_requests=self.config.rate_limit.max_requests,
                time_window=self.config.rate_limit.time_window,
            )
        self.executor = RequestExecutor(
            policy=self.config.retry,
            rate_limiter=rate_limiter,
            event_listener=event_listener,
            sleep=sleep,
        )
        self.batch = BatchOrchestrator(self.executor, default_concurrency_limit=self.config.concurrency_limit)
        logger.info(f"ShopSavvyClient initialized for {self.config.base_url}")

    @classmethod
    def from_settings(cls, api_key: Optional[str] = None, **kwargs: Any) -> "ShopSavvyClient":
        """Builds a client from environment, .env and YAML settings."""
        return cls(config=get_client_config(api_key), **kwargs)

    def default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "User-Agent": f"ShopSavvy-Python-SDK/{VERSION}",
        }

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "ShopSavvyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # --- Request plumbing ---

    def _operation(
        self,
        method: str,
        endpoint: str,
        parse: Callable[[Dict[str, Any]], T],
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Operation[T]:
        """Builds a re-invokable operation: one HTTP attempt plus decoding."""

        async def operation() -> T:
            response = await self.transport.request(method, endpoint, params=params, json_body=body)
            if not response.is_success:
                raise error_from_response(response.status_code, response.headers, response.text)
            try:
                payload = json.loads(response.text)
                return parse(payload)
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                logger.debug(f"Raw response body from {method} {endpoint}: {response.text[:500]!r}")
                raise ResponseParseError(f"Invalid response from {method} {endpoint}: {e}", status_code=response.status_code) from e

        operation.__name__ = f"{method} {endpoint}"
        return operation

    async def _request(
        self,
        method: str,
        endpoint: str,
        parse: Callable[[Dict[str, Any]], T],
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> T:
        op = self._operation(method, endpoint, parse, params=params, body=body)
        return await self.executor.execute(op, endpoint=f"{method} {endpoint}")

    # --- Search & product details ---

    async def search_products(self, query: str, limit: Optional[int] = None, offset: Optional[int] = None) -> ProductSearchResult:
        """Search for products by keyword.

        Args:
            query: Search query or keyword.
            limit: Optional maximum number of results.
            offset: Optional pagination offset.
        """
        return await self._request(
            "GET", "/products/search", ProductSearchResult.from_dict,
            params=_params(q=query, limit=limit, offset=offset),
        )

    async def get_product_details(self, identifier: str, format: FormatArg = None) -> ApiResponse[List[ProductDetails]]:
        """Look up product details by identifier.

        Args:
            identifier: Barcode, ASIN, URL, model number, or ShopSavvy product ID.
            format: Optional output format.
        """
        return await self._request(
            "GET", "/products", _envelope_list(ProductDetails.from_dict),
            params=_params(ids=identifier, format=format),
        )

    async def get_product_details_batch(self, identifiers: Sequence[str], format: FormatArg = None) -> ApiResponse[List[ProductDetails]]:
        """Look up details for several products in a single request."""
        return await self._request(
            "GET", "/products", _envelope_list(ProductDetails.from_dict),
            params=_params(ids=",".join(_identifier_list(identifiers)), format=format),
        )

    async def get_product_details_many(
        self,
        identifiers: Sequence[str],
        format: FormatArg = None,
        concurrency_limit: Optional[int] = None,
    ) -> BatchResult[ApiResponse[List[ProductDetails]]]:
        """One concurrent request per identifier; result i belongs to identifiers[i]."""
        parse = _envelope_list(ProductDetails.from_dict)
        ops = [
            self._operation("GET", "/products", parse, params=_params(ids=identifier, format=format))
            for identifier in _identifier_list(identifiers)
        ]
        return await self.batch.run_batch(ops, concurrency_limit, endpoint="GET /products")

    # --- Offers & history ---

    async def get_current_offers(
        self, identifier: str, retailer: Optional[str] = None, format: FormatArg = None
    ) -> ApiResponse[List[ProductWithOffers]]:
        """Get current offers for a product, optionally filtered by retailer."""
        return await self._request(
            "GET", "/products/offers", _envelope_list(ProductWithOffers.from_dict),
            params=_params(ids=identifier, retailer=retailer, format=format),
        )

    async def get_current_offers_batch(
        self, identifiers: Sequence[str], retailer: Optional[str] = None, format: FormatArg = None
    ) -> ApiResponse[List[ProductWithOffers]]:
        return await self._request(
            "GET", "/products/offers", _envelope_list(ProductWithOffers.from_dict),
            params=_params(ids=",".join(_identifier_list(identifiers)), retailer=retailer, format=format),
        )

    async def get_current_offers_many(
        self,
        identifiers: Sequence[str],
        retailer: Optional[str] = None,
        format: FormatArg = None,
        concurrency_limit: Optional[int] = None,
    ) -> BatchResult[ApiResponse[List[ProductWithOffers]]]:
        parse = _envelope_list(ProductWithOffers.from_dict)
        ops = [
            self._operation("GET", "/products/offers", parse, params=_params(ids=identifier, retailer=retailer, format=format))
            for identifier in _identifier_list(identifiers)
        ]
        return await self.batch.run_batch(ops, concurrency_limit, endpoint="GET /products/offers")

    async def get_price_history(
        self,
        identifier: str,
        start_date: str,
        end_date: str,
        retailer: Optional[str] = None,
        format: FormatArg = None,
    ) -> ApiResponse[List[OfferWithHistory]]:
        """Get price history for a product.

        Args:
            identifier: Product identifier.
            start_date: Start date (YYYY-MM-DD).
            end_date: End date (YYYY-MM-DD).
            retailer: Optional retailer to filter by.
            format: Optional output format.
        """
        return await self._request(
            "GET", "/products/offers/history", _envelope_list(OfferWithHistory.from_dict),
            params=_params(ids=identifier, start_date=start_date, end_date=end_date, retailer=retailer, format=format),
        )

    async def get_price_history_many(
        self,
        identifiers: Sequence[str],
        start_date: str,
        end_date: str,
        retailer: Optional[str] = None,
        concurrency_limit: Optional[int] = None,
    ) -> BatchResult[ApiResponse[List[OfferWithHistory]]]:
        parse = _envelope_list(OfferWithHistory.from_dict)
        ops = [
            self._operation(
                "GET", "/products/offers/history", parse,
                params=_params(ids=identifier, start_date=start_date, end_date=end_date, retailer=retailer),
            )
            for identifier in _identifier_list(identifiers)
        ]
        return await self.batch.run_batch(ops, concurrency_limit, endpoint="GET /products/offers/history")

    # --- Monitoring ---

    async def schedule_product_monitoring(
        self, identifier: str, frequency: Union[MonitoringFrequency, str], retailer: Optional[str] = None
    ) -> ApiResponse[ScheduleResponse]:
        """Schedule product monitoring at the given refresh frequency."""
        body: Dict[str, Any] = {"identifier": identifier, "frequency": str(frequency)}
        if retailer:
            body["retailer"] = retailer
        return await self._request("POST", "/products/schedule", _envelope_one(ScheduleResponse.from_dict), body=body)

    async def schedule_product_monitoring_batch(
        self, identifiers: Sequence[str], frequency: Union[MonitoringFrequency, str], retailer: Optional[str] = None
    ) -> ApiResponse[List[ScheduleBatchResponse]]:
        body: Dict[str, Any] = {"identifiers": ",".join(_identifier_list(identifiers)), "frequency": str(frequency)}
        if retailer:
            body["retailer"] = retailer
        return await self._request("POST", "/products/schedule", _envelope_list(ScheduleBatchResponse.from_dict), body=body)

    async def get_scheduled_products(self) -> ApiResponse[List[ScheduledProduct]]:
        """Get all scheduled products."""
        return await self._request("GET", "/products/scheduled", _envelope_list(ScheduledProduct.from_dict))

    async def remove_product_from_schedule(self, identifier: str) -> ApiResponse[RemoveResponse]:
        return await self._request(
            "DELETE", "/products/schedule", _envelope_one(RemoveResponse.from_dict),
            body={"identifier": identifier},
        )

    async def remove_products_from_schedule(self, identifiers: Sequence[str]) -> ApiResponse[List[RemoveBatchResponse]]:
        return await self._request(
            "DELETE", "/products/schedule", _envelope_list(RemoveBatchResponse.from_dict),
            body={"identifiers": ",".join(_identifier_list(identifiers))},
        )

    # --- Account ---

    async def get_usage(self) -> ApiResponse[UsageInfo]:
        """Get API usage and credit information."""
        return await self._request("GET", "/usage", _envelope_one(UsageInfo.from_dict))

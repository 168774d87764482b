"""ShopSavvy Data API SDK.

Access product data, pricing information and price history across
thousands of retailers, with automatic retries on transient failures and
bounded-concurrency batch lookups.

Quick start:

    import asyncio
    from shopsavvy import ShopSavvyClient

    async def main():
        async with ShopSavvyClient("ss_live_your_api_key_here") as client:
            product = await client.get_product_details("012345678901")
            print(product.data[0].title)

            results = await client.get_product_details_many(["012345678901", "B08N5WRWNW"])
            for identifier, outcome in zip(["012345678901", "B08N5WRWNW"], results):
                print(identifier, "ok" if outcome.ok else outcome.error)

    asyncio.run(main())
"""

from shopsavvy.core.client import VERSION, ShopSavvyClient
from shopsavvy.core.client_config import ClientConfig, RateLimitSettings
from shopsavvy.domain.errors import (
    ApiTimeoutError,
    AuthenticationError,
    BatchConfigurationError,
    ConfigurationError,
    ErrorKind,
    InvalidApiKeyError,
    MissingApiKeyError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ResponseParseError,
    ShopSavvyApiError,
    UnknownApiError,
    ValidationError,
)
from shopsavvy.domain.models.common import MonitoringFrequency, OutputFormat, RetryDecision, RetryPolicyConfig
from shopsavvy.domain.models.products import (
    ApiMeta,
    ApiResponse,
    Offer,
    OfferWithHistory,
    PaginationInfo,
    PriceHistoryEntry,
    ProductDetails,
    ProductSearchResult,
    ProductWithOffers,
    RemoveBatchResponse,
    RemoveResponse,
    ScheduleBatchResponse,
    ScheduledProduct,
    ScheduleResponse,
    UsageInfo,
    UsagePeriod,
)
from shopsavvy.domain.models.results import BatchResult, Outcome
from shopsavvy.infrastructure.resilience.api_retry import RequestExecutor
from shopsavvy.infrastructure.resilience.batch import BatchOrchestrator
from shopsavvy.infrastructure.resilience.retry_policy import decide

__version__ = VERSION

__all__ = [
    "VERSION",
    "ShopSavvyClient",
    "ClientConfig",
    "RateLimitSettings",
    "RetryPolicyConfig",
    "RetryDecision",
    "decide",
    "RequestExecutor",
    "BatchOrchestrator",
    "BatchResult",
    "Outcome",
    "ErrorKind",
    "ShopSavvyApiError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "NetworkError",
    "ApiTimeoutError",
    "UnknownApiError",
    "ResponseParseError",
    "ConfigurationError",
    "MissingApiKeyError",
    "InvalidApiKeyError",
    "BatchConfigurationError",
    "OutputFormat",
    "MonitoringFrequency",
    "ApiMeta",
    "ApiResponse",
    "ProductDetails",
    "Offer",
    "PriceHistoryEntry",
    "ProductWithOffers",
    "OfferWithHistory",
    "ScheduledProduct",
    "UsagePeriod",
    "UsageInfo",
    "PaginationInfo",
    "ProductSearchResult",
    "ScheduleResponse",
    "ScheduleBatchResponse",
    "RemoveResponse",
    "RemoveBatchResponse",
]

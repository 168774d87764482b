#!/usr/bin/env python3
"""
Examples of programmatic usage of the ShopSavvy SDK.

Demonstrates single lookups, bounded-concurrency fan-out with per-item
results, and running your own operations through the retrying executor.
Requires SHOPSAVVY_API_KEY in the environment or a .env file.

Usage:
    python examples.py
"""

import asyncio

from shopsavvy import BatchOrchestrator, RequestExecutor, RetryPolicyConfig, ShopSavvyClient
from shopsavvy.domain.errors import ShopSavvyApiError
from shopsavvy.domain.events.api_events import DomainEvent
from shopsavvy.infrastructure.monitoring.logger_setup import setup_logging

IDENTIFIERS = ["012345678901", "B08N5WRWNW", "not-a-real-product"]


def print_event(event: DomainEvent) -> None:
    print(f"  [event] {type(event).__name__}")


async def example_single_lookup(client: ShopSavvyClient):
    """Look up one product and its cheapest offer."""
    print("\n=== Single lookup ===")
    try:
        response = await client.get_current_offers(IDENTIFIERS[0])
    except ShopSavvyApiError as e:
        print(f"Lookup failed ({e.kind.value}): {e.message}")
        return
    for product in response.data:
        priced = [offer for offer in product.offers if offer.price is not None]
        if priced:
            best = min(priced, key=lambda offer: offer.price)
            print(f"{product.title}: best price {best.price} {best.currency or ''} at {best.retailer}")
    print(f"Credits remaining: {response.credits_remaining}")


async def example_many_lookups(client: ShopSavvyClient):
    """One request per identifier; a failure only affects its own slot."""
    print("\n=== Concurrent lookups ===")
    results = await client.get_product_details_many(IDENTIFIERS, concurrency_limit=2)
    for identifier, outcome in zip(IDENTIFIERS, results):
        if outcome.ok:
            titles = ", ".join(product.title for product in outcome.value.data)
            print(f"{identifier}: {titles} (attempts: {outcome.attempts})")
        else:
            print(f"{identifier}: {outcome.error.kind.value} - {outcome.error.message}")


async def example_custom_operations():
    """The executor and orchestrator work with any zero-argument coroutine factory."""
    print("\n=== Custom operations ===")
    executor = RequestExecutor(
        policy=RetryPolicyConfig(max_attempts=2, initial_delay=0.1, max_delay=1.0),
        event_listener=print_event,
    )
    orchestrator = BatchOrchestrator(executor, default_concurrency_limit=3)

    def make_op(n: int):
        async def op():
            await asyncio.sleep(0.01 * n)
            return n * n
        return op

    result = await orchestrator.run_batch([make_op(n) for n in range(5)])
    print(f"Squares: {result.values()}")


async def main():
    setup_logging(log_level="WARNING")
    async with ShopSavvyClient.from_settings(event_listener=print_event) as client:
        await example_single_lookup(client)
        await example_many_lookups(client)
    await example_custom_operations()


if __name__ == "__main__":
    asyncio.run(main())

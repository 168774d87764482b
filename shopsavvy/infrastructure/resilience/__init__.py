"""API Resilience Implementations.

Contains the retry policy, the retrying request executor, the bounded
concurrency batch orchestrator and the client-side rate limiter.
Bounded Context: API Resilience
"""

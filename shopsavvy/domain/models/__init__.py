"""Domain models: API payloads and resilience value objects."""

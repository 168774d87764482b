"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the SDK to the outside world (HTTP, configuration sources, the
console) and hosts the resilience services.
"""

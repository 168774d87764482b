"""Domain Event definitions.

Represents significant occurrences during request execution (attempts,
retries, batch progress) that observers may react to.
"""

"""Domain Interfaces (Ports):

Defines the contracts (Abstract Base Classes) that infrastructure components
must implement. The client and resilience services depend on these
interfaces, not on concrete implementations.
"""

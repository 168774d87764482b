"""Core Application Layer: the API client and the CLI command handler.

Connects the domain layer with the infrastructure layer through interfaces.
"""

"""Retry asyncio operations with configurable backoff, delay caps and retry hooks."""

__version__ = "0.5.1"
"""Errors raised at the strategy configuration boundary."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Unknown profile identifier or invalid leverage ceiling.

    Fatal to the single request that raised it, never to the process.
    """

    def __init__(self, message: str, *, value: object = None) -> None:
        super().__init__(message)
        self.value: object = value

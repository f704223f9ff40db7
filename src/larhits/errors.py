"""Fatal-condition hierarchy for larhits.

Every error here means "processing cannot continue for this run"; the
driver catches :class:`StopProcessingError` and shuts down gracefully.
"""

from __future__ import annotations


class StopProcessingError(Exception):
    """Base class for conditions that stop event processing."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(description)


class ConfigurationError(StopProcessingError):
    """Invalid or missing geometry / run configuration."""


class MixedViewError(StopProcessingError):
    """Hits of more than one view found in a single view sequence."""


class EmptyHitsError(StopProcessingError):
    """Quantizer/merger invoked with no hits."""


class DegenerateMergeError(StopProcessingError):
    """Merge candidate pair with a non-positive energy sum."""


class InvalidDepositError(StopProcessingError):
    """Deposit that cannot yield a physical hit (non-positive energy)."""

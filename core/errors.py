"""
Exception taxonomy. Per-port network conditions are never raised; they are
recorded as PortState values on a ProbeOutcome.
"""


class ScanError(Exception):
    """Base class for scanner errors."""


class ConfigError(ScanError, ValueError):
    """Invalid scan parameters, raised before any probe is issued."""


class TargetError(ScanError, ValueError):
    """Target cannot be resolved or is outside the allowlist."""


class AggregationError(ScanError):
    """Outcome accounting broke: unknown port, duplicate, or missing results."""

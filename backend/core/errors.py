"""
Error taxonomy for chart configuration.
"""


class ChartConfigError(Exception):
    """Base class for chart configuration errors."""
    pass


class InvalidInputError(ChartConfigError, ValueError):
    """Fields or records are empty or malformed. Fatal to the invocation."""
    pass


class UnresolvableAxisError(ChartConfigError):
    """X and Y resolved to the same field although two fields were available.

    This indicates a defect in axis selection, never a user-facing condition.
    """
    pass

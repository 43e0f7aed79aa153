"""
Exception types raised by the pipeline.

All errors derive from ``PipelineError`` (itself a ``ValueError``) so callers
can catch the whole family, or a single category, as they need.
"""


class PipelineError(ValueError):
    """Base class for every failure surfaced by the pipeline."""


class SchemaError(PipelineError):
    """An expected column is missing or holds values of the wrong type."""


class ParseError(PipelineError):
    """A date or timestamp value does not match any accepted format."""


class InvalidInputError(PipelineError):
    """A precondition of a derived feature or of the join is violated."""


class AggregationError(PipelineError):
    """An aggregate cannot be computed from the available records."""


class NoData(AggregationError):
    """No record carries the field an aggregate was requested over."""


class InsufficientData(AggregationError):
    """Too few qualifying records for the requested aggregate."""

"""Exceptions raised by livechart."""


class LivechartError(Exception):
    """Base class for livechart errors."""


class InvalidRecordError(LivechartError, ValueError):
    """Raised when a raw record cannot be read as a candle at all."""

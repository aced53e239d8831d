"""livechart - normalization, merge and geometry engine for live price charts."""

__version__ = "0.1.0"

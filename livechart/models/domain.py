"""Price domain model."""

from pydantic import BaseModel, Field

# Raw ranges below this are shown with the "micro movements" badge
MICRO_RANGE = 0.001


class PriceDomain(BaseModel):
    """Padded price interval used to scale the vertical axis."""

    min: float = Field(..., description="Padded lower bound")
    max: float = Field(..., description="Padded upper bound")
    raw_min: float = Field(..., description="Lowest price in the window")
    raw_max: float = Field(..., description="Highest price in the window")

    model_config = {"frozen": True}

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def raw_range(self) -> float:
        return self.raw_max - self.raw_min

    @property
    def is_micro(self) -> bool:
        """True when the unpadded range is a sub-pip movement."""
        return self.raw_range < MICRO_RANGE

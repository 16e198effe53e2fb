"""Models emitted by the performance regression detector."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegressionEvent(BaseModel):
    """A metric observation that exceeded its baseline by more than the threshold.

    ``regression`` and ``threshold`` are percentages (``30.0`` means 30%).
    """

    model_config = ConfigDict(frozen=True)

    metric: str
    current: float
    baseline: float
    regression: float
    threshold: float
    timestamp: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

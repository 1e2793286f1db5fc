"""Result types for progress analytics."""

from dataclasses import dataclass
from datetime import date
from typing import Literal

Pace = Literal["on_track", "too_fast", "too_slow", "insufficient_data"]


@dataclass(frozen=True)
class AveragePoint:
    """Trailing average weight on a weigh-in date."""

    date: str
    avg: float


@dataclass(frozen=True)
class CutProgress:
    """Progress toward the goal weight."""

    total_to_lose: float
    lost: float
    remaining: float
    progress_percent: float
    days_in: int
    weekly_loss_rate: float
    expected_weekly_loss: float
    weekly_percent: float
    estimated_weeks_left: float
    projected_end_date: date | None
    pace: Pace


@dataclass(frozen=True)
class TdeeEstimate:
    """Maintenance calories inferred from intake and weight change."""

    tdee: float
    mean_intake: float
    weight_change: float
    days: int
    intake_days: int
    window_start: str
    window_end: str


@dataclass(frozen=True)
class EnergyTargets:
    """Calculator output for a new cut."""

    bmr: float
    tdee: int
    deficit: int
    target_calories: int
    target_protein: int
    expected_weekly_loss: float

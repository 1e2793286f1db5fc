"""The per-user application document."""

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import Field

from cutboard.domain.plans import CamelModel, DaySnapshot, MealPlan

CURRENT_MIGRATION_VERSION = 5

DayType = Literal["A", "B"]


class Profile(CamelModel):
    """User profile and cut targets."""

    name: str = ""
    start_weight: float = 90
    current_weight: float = 90
    goal_weight: float = 82
    start_date: str = Field(default_factory=lambda: date.today().isoformat())
    calorie_target: float = 1700
    protein_target: float = 157
    tdee: float = 2125
    calculated_tdee: float | None = None
    show_photos_tab: bool = True
    blur_photos: bool = False


class WeightEntry(CamelModel):
    """A single weigh-in."""

    date: str
    weight: float


class ShoppingState(CamelModel):
    """Shopping list planning state."""

    plan_days: dict[str, int] = Field(default_factory=dict)
    at_home: dict[str, float] = Field(default_factory=dict)
    checked_items: list[str] = Field(default_factory=list)


class AppData(CamelModel):
    """Whole-user document persisted as one JSON blob."""

    profile: Profile = Field(default_factory=Profile)
    weights: list[WeightEntry] = Field(default_factory=list)
    checklist: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    extra_calories: dict[str, float] = Field(default_factory=dict)
    day_types: dict[str, DayType] = Field(default_factory=dict)
    meal_plans: dict[str, MealPlan] = Field(default_factory=dict)
    day_plan_ids: dict[str, str] = Field(default_factory=dict)
    day_snapshots: dict[str, dict[str, DaySnapshot]] = Field(default_factory=dict)
    shopping: ShoppingState = Field(default_factory=ShoppingState)
    migration_version: int | None = CURRENT_MIGRATION_VERSION
    last_sync: str | None = None

    def to_json_dict(self) -> dict[str, object]:
        """Serialize with camelCase keys for storage and sync."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def default_document(today: date | None = None) -> AppData:
    """Return a fresh document with default profile values."""
    start = today or date.today()
    return AppData(profile=Profile(start_date=start.isoformat()))


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format a UTC timestamp the way browsers serialize dates."""
    value = (moment or datetime.now(tz=UTC)).astimezone(UTC)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_day(value: str) -> date:
    """Parse a calendar day, ignoring any time part of an ISO timestamp."""
    return date.fromisoformat(value[:10])


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp, returning None when missing or invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed

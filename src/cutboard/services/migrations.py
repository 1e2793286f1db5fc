"""Schema migration for stored user documents."""

import logging
from datetime import date
from typing import Any

from pydantic import ValidationError

from cutboard.domain.document import (
    CURRENT_MIGRATION_VERSION,
    AppData,
    default_document,
)
from cutboard.domain.plans import DEFAULT_PLAN_A, DEFAULT_PLAN_B, copy_meals

_logger = logging.getLogger(__name__)

_OBJECT_PARTS = (
    "profile",
    "mealPlans",
    "dayPlanIds",
    "dayTypes",
    "checklist",
    "daySnapshots",
    "extraCalories",
)


class DocumentError(ValueError):
    """Raised when a stored document cannot be turned into a valid AppData."""


def migrate_document(raw: dict[str, Any] | None, today: date | None = None) -> AppData:
    """Merge a stored document over defaults and upgrade legacy shapes."""
    current_day = today or date.today()
    data = raw or {}
    if not isinstance(data, dict):
        raise DocumentError("Stored document is not a JSON object")
    _check_parts(data)

    try:
        merged = _merge_over_defaults(data, current_day)
    except (AttributeError, TypeError, ValueError) as exc:
        _logger.warning("Stored document has an invalid shape: %s", exc)
        raise DocumentError(str(exc)) from exc

    try:
        return AppData.model_validate(merged)
    except ValidationError as exc:
        _logger.warning("Stored document failed validation: %s", exc)
        raise DocumentError(str(exc)) from exc


def is_legacy_checklist(checklist: object) -> bool:
    """Return True for the flat ``{date: [item ids]}`` checklist shape."""
    if not isinstance(checklist, dict) or not checklist:
        return False
    first_value = next(iter(checklist.values()))
    return isinstance(first_value, list)


def is_legacy_snapshots(snapshots: object) -> bool:
    """Return True for the flat ``{date: DaySnapshot}`` snapshot shape."""
    if not isinstance(snapshots, dict) or not snapshots:
        return False
    first_value = next(iter(snapshots.values()))
    return (
        isinstance(first_value, dict)
        and "planId" in first_value
        and "meals" in first_value
    )


def _check_parts(data: dict[str, Any]) -> None:
    for key in _OBJECT_PARTS:
        value = data.get(key)
        if value is not None and not isinstance(value, dict):
            raise DocumentError(f"Stored {key} is not a JSON object")
    version = data.get("migrationVersion")
    if version is not None and (
        isinstance(version, bool) or not isinstance(version, int)
    ):
        raise DocumentError("Stored migrationVersion is not an integer")


def _merge_over_defaults(data: dict[str, Any], current_day: date) -> dict[str, Any]:
    defaults = default_document(current_day).to_json_dict()
    # Any legacy day type other than "A" meant plan B.
    day_types = {
        day: "A" if day_type == "A" else "B"
        for day, day_type in (data.get("dayTypes") or {}).items()
    }
    merged: dict[str, Any] = {
        **defaults,
        **{key: value for key, value in data.items() if value is not None},
        "profile": {**defaults["profile"], **(data.get("profile") or {})},
        "mealPlans": data.get("mealPlans") or {},
        "dayPlanIds": dict(data.get("dayPlanIds") or {}),
        "dayTypes": day_types,
        "checklist": {},
        "daySnapshots": {},
    }
    day_plan_ids: dict[str, str] = data.get("dayPlanIds") or {}

    checklist = data.get("checklist")
    if checklist and is_legacy_checklist(checklist):
        for day, items in checklist.items():
            plan_id = day_plan_ids.get(day) or _legacy_plan_id(day_types.get(day))
            merged["checklist"][day] = {plan_id: items}
    elif checklist:
        merged["checklist"] = checklist

    snapshots = data.get("daySnapshots")
    if snapshots and is_legacy_snapshots(snapshots):
        for day, snapshot in snapshots.items():
            plan_id = (
                snapshot.get("planId")
                or day_plan_ids.get(day)
                or _legacy_plan_id(day_types.get(day))
            )
            merged["daySnapshots"][day] = {plan_id: snapshot}
    elif snapshots:
        merged["daySnapshots"] = {
            day: dict(per_plan) for day, per_plan in snapshots.items()
        }

    version = data.get("migrationVersion")
    needs_migration = not version or version < CURRENT_MIGRATION_VERSION
    if needs_migration and day_types:
        _snapshot_legacy_day_types(merged, day_types, current_day.isoformat())

    merged["migrationVersion"] = CURRENT_MIGRATION_VERSION
    return merged


def _legacy_plan_id(day_type: str | None) -> str:
    return DEFAULT_PLAN_B.id if day_type == "B" else DEFAULT_PLAN_A.id


def _snapshot_legacy_day_types(
    merged: dict[str, Any], day_types: dict[str, str], today: str
) -> None:
    # Today's plan stays live; only past and future legacy days are frozen.
    for day, day_type in day_types.items():
        if day == today:
            continue
        plan = DEFAULT_PLAN_A if day_type == "A" else DEFAULT_PLAN_B
        merged["dayPlanIds"].setdefault(day, plan.id)
        per_plan = merged["daySnapshots"].setdefault(day, {})
        if plan.id in per_plan:
            continue
        per_plan[plan.id] = {
            "planId": plan.id,
            "planName": plan.name,
            "meals": [
                meal.model_dump(mode="json", by_alias=True, exclude_none=True)
                for meal in copy_meals(plan.meals)
            ],
            "overrides": [],
        }

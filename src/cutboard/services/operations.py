"""Pure document operations.

Every function takes the current :class:`AppData` and returns a new one; the
input is never mutated. Nested containers are rebuilt along the changed path
and meal lists are copied by value when snapshotted, so a snapshot never
aliases the plan it was taken from.
"""

from cutboard.domain.document import AppData, DayType, ShoppingState, WeightEntry
from cutboard.domain.plans import (
    DEFAULT_PLAN_A,
    DEFAULT_PLAN_B,
    DEFAULT_PLANS,
    DaySnapshot,
    ItemOverride,
    MealPlan,
    copy_meals,
)

MAX_SHOPPING_DAYS = 14


class LastPlanError(ValueError):
    """Raised when deleting the only remaining meal plan."""


def update_profile(doc: AppData, **changes: object) -> AppData:
    """Merge profile field changes."""
    return doc.model_copy(update={"profile": doc.profile.model_copy(update=changes)})


def add_weight(doc: AppData, day: str, weight: float) -> AppData:
    """Record a weigh-in, replacing any entry for the same date."""
    entry = WeightEntry(date=day, weight=weight)
    if any(existing.date == day for existing in doc.weights):
        weights = [
            entry if existing.date == day else existing for existing in doc.weights
        ]
    else:
        weights = sorted([*doc.weights, entry], key=lambda existing: existing.date)
    return doc.model_copy(
        update={
            "weights": weights,
            "profile": doc.profile.model_copy(update={"current_weight": weight}),
        }
    )


def day_plan_id(doc: AppData, day: str) -> str:
    """Return the plan chosen for a day, falling back to the legacy day type."""
    if day in doc.day_plan_ids:
        return doc.day_plan_ids[day]
    legacy_type = doc.day_types.get(day)
    if legacy_type:
        return DEFAULT_PLAN_A.id if legacy_type == "A" else DEFAULT_PLAN_B.id
    return DEFAULT_PLAN_A.id


def set_day_plan_id(doc: AppData, day: str, plan_id: str) -> AppData:
    """Select the plan for a day and keep the legacy day type in step."""
    return doc.model_copy(
        update={
            "day_plan_ids": {**doc.day_plan_ids, day: plan_id},
            "day_types": {
                **doc.day_types,
                day: "A" if plan_id == DEFAULT_PLAN_A.id else "B",
            },
        }
    )


def day_type(doc: AppData, day: str) -> DayType:
    """Return the legacy day type, defaulting to A."""
    return doc.day_types.get(day, "A")


def set_day_type(doc: AppData, day: str, value: DayType) -> AppData:
    """Set the legacy day type."""
    return doc.model_copy(update={"day_types": {**doc.day_types, day: value}})


def checklist_items(doc: AppData, day: str, plan_id: str | None = None) -> list[str]:
    """Return checked item ids for a day and plan."""
    effective = plan_id or day_plan_id(doc, day)
    return list(doc.checklist.get(day, {}).get(effective, []))


def set_checklist_items(doc: AppData, day: str, items: list[str]) -> AppData:
    """Replace the checked items for the day's plan."""
    plan_id = day_plan_id(doc, day)
    day_checklist = doc.checklist.get(day, {})
    return doc.model_copy(
        update={
            "checklist": {
                **doc.checklist,
                day: {**day_checklist, plan_id: list(items)},
            }
        }
    )


def toggle_checklist_item(doc: AppData, day: str, item_id: str) -> AppData:
    """Check or uncheck an item for the day's plan."""
    current = checklist_items(doc, day)
    if item_id in current:
        items = [existing for existing in current if existing != item_id]
    else:
        items = [*current, item_id]
    return set_checklist_items(doc, day, items)


def set_extra_calories(doc: AppData, day: str, calories: float) -> AppData:
    """Record off-plan calories for a day."""
    return doc.model_copy(
        update={"extra_calories": {**doc.extra_calories, day: calories}}
    )


def find_plan(doc: AppData, plan_id: str) -> MealPlan:
    """Resolve a plan id to a stored plan, a built-in plan, or plan A."""
    return doc.meal_plans.get(plan_id) or DEFAULT_PLANS.get(plan_id) or DEFAULT_PLAN_A


def list_plans(doc: AppData) -> list[MealPlan]:
    """Return stored plans, or the built-in plans when none are stored."""
    if doc.meal_plans:
        return list(doc.meal_plans.values())
    return list(DEFAULT_PLANS.values())


def save_plan(doc: AppData, plan: MealPlan) -> AppData:
    """Create or replace a plan."""
    return doc.model_copy(update={"meal_plans": {**doc.meal_plans, plan.id: plan}})


def delete_plan(doc: AppData, plan_id: str) -> AppData:
    """Remove a plan; at least one stored plan must remain."""
    if plan_id in doc.meal_plans and len(doc.meal_plans) <= 1:
        raise LastPlanError("At least one meal plan must be kept")
    remaining = {key: plan for key, plan in doc.meal_plans.items() if key != plan_id}
    return doc.model_copy(update={"meal_plans": remaining})


def day_snapshot(
    doc: AppData, day: str, plan_id: str | None = None
) -> DaySnapshot | None:
    """Return the snapshot for a day and plan, if taken."""
    effective = plan_id or day_plan_id(doc, day)
    return doc.day_snapshots.get(day, {}).get(effective)


def day_plan(doc: AppData, day: str) -> MealPlan:
    """Return the plan as it stands for a day, preferring the snapshot."""
    plan_id = day_plan_id(doc, day)
    snapshot = day_snapshot(doc, day, plan_id)
    if snapshot is not None:
        return MealPlan(
            id=snapshot.plan_id,
            name=snapshot.plan_name or "Snapshot",
            meals=snapshot.meals,
        )
    return find_plan(doc, plan_id)


def ensure_day_snapshot(doc: AppData, day: str) -> AppData:
    """Freeze the day's plan by value unless a snapshot already exists."""
    plan_id = day_plan_id(doc, day)
    if day_snapshot(doc, day, plan_id) is not None:
        return doc
    plan = find_plan(doc, plan_id)
    snapshot = DaySnapshot(
        plan_id=plan.id,
        plan_name=plan.name,
        meals=copy_meals(plan.meals),
        overrides=[],
    )
    return _put_snapshot(doc, day, plan_id, snapshot)


def day_overrides(doc: AppData, day: str) -> list[ItemOverride]:
    """Return overrides recorded on the day's snapshot."""
    snapshot = day_snapshot(doc, day)
    return list(snapshot.overrides) if snapshot else []


def set_day_override(
    doc: AppData,
    day: str,
    item_id: str,
    quantity: float | None = None,
    alternative_id: str | None = None,
) -> AppData:
    """Merge an override into the day's snapshot; no-op without a snapshot."""
    plan_id = day_plan_id(doc, day)
    snapshot = day_snapshot(doc, day, plan_id)
    if snapshot is None:
        return doc
    updates: dict[str, object] = {}
    if quantity is not None:
        updates["quantity"] = quantity
    if alternative_id is not None:
        updates["alternative_id"] = alternative_id

    if any(override.item_id == item_id for override in snapshot.overrides):
        overrides = [
            override.model_copy(update=updates)
            if override.item_id == item_id
            else override
            for override in snapshot.overrides
        ]
    else:
        overrides = [*snapshot.overrides, ItemOverride(item_id=item_id, **updates)]
    return _put_snapshot(
        doc, day, plan_id, snapshot.model_copy(update={"overrides": overrides})
    )


def remove_day_override(doc: AppData, day: str, item_id: str) -> AppData:
    """Drop an override from the day's snapshot."""
    plan_id = day_plan_id(doc, day)
    snapshot = day_snapshot(doc, day, plan_id)
    if snapshot is None:
        return doc
    overrides = [
        override for override in snapshot.overrides if override.item_id != item_id
    ]
    return _put_snapshot(
        doc, day, plan_id, snapshot.model_copy(update={"overrides": overrides})
    )


def set_shopping_plan_days(doc: AppData, plan_id: str, days: int) -> AppData:
    """Set how many days of a plan to shop for."""
    clamped = max(0, min(MAX_SHOPPING_DAYS, days))
    shopping = doc.shopping.model_copy(
        update={"plan_days": {**doc.shopping.plan_days, plan_id: clamped}}
    )
    return doc.model_copy(update={"shopping": shopping})


def set_shopping_at_home(doc: AppData, item_key: str, quantity: float) -> AppData:
    """Record how much of an item is already at home."""
    shopping = doc.shopping.model_copy(
        update={"at_home": {**doc.shopping.at_home, item_key: max(0, quantity)}}
    )
    return doc.model_copy(update={"shopping": shopping})


def toggle_shopping_item(doc: AppData, item_key: str) -> AppData:
    """Check or uncheck an item on the shopping list."""
    checked = doc.shopping.checked_items
    if item_key in checked:
        items = [existing for existing in checked if existing != item_key]
    else:
        items = [*checked, item_key]
    shopping = doc.shopping.model_copy(update={"checked_items": items})
    return doc.model_copy(update={"shopping": shopping})


def reset_shopping(doc: AppData) -> AppData:
    """Clear planned days, at-home quantities and checks."""
    return doc.model_copy(update={"shopping": ShoppingState()})


def _put_snapshot(
    doc: AppData, day: str, plan_id: str, snapshot: DaySnapshot
) -> AppData:
    return doc.model_copy(
        update={
            "day_snapshots": {
                **doc.day_snapshots,
                day: {**doc.day_snapshots.get(day, {}), plan_id: snapshot},
            }
        }
    )

"""Render a meal plan for sharing."""

import json

from cutboard.domain.plans import (
    MealItem,
    MealPlan,
    format_number,
    item_totals,
    plan_totals,
    round_half_up,
)

EXPORT_FORMATS = ("json", "table", "text")


class UnknownExportFormatError(ValueError):
    """Raised for an export format other than json, table or text."""


def export_plan(plan: MealPlan, export_format: str) -> str:
    """Render a plan with its totals in the requested format."""
    if export_format == "json":
        return _export_json(plan)
    if export_format == "table":
        return _export_table(plan)
    if export_format == "text":
        return _export_text(plan)
    raise UnknownExportFormatError(f"Unknown export format: {export_format}")


def _export_json(plan: MealPlan) -> str:
    totals = plan_totals(plan)
    payload = {
        "name": plan.name,
        "totals": {
            "kcal": _number(totals.calories),
            "protein": _number(round_half_up(totals.protein, 1)),
            "carbs": _number(round_half_up(totals.carbs, 1)),
            "fat": _number(round_half_up(totals.fat, 1)),
        },
        "meals": [
            {
                "name": meal.name,
                "time": meal.time,
                "items": [_item_payload(item) for item in meal.items],
            }
            for meal in plan.meals
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _item_payload(item: MealItem) -> dict[str, object]:
    totals = item_totals(item)
    return {
        "name": item.name,
        "quantity": _number(item.quantity),
        "unit": item.unit,
        "kcal": _number(totals.calories),
        "protein": _number(totals.protein),
        "carbs": _number(totals.carbs),
        "fat": _number(totals.fat),
    }


def _export_table(plan: MealPlan) -> str:
    totals = plan_totals(plan)
    lines = [
        f"# {plan.name}",
        "",
        f"**Gesamt:** {format_number(totals.calories)} kcal"
        f" | {_whole(totals.protein)}g Protein"
        f" | {_whole(totals.carbs)}g Carbs"
        f" | {_whole(totals.fat)}g Fett",
        "",
        "| Mahlzeit | Item | kcal | Protein | Carbs | Fett |",
        "|----------|------|------|---------|-------|------|",
    ]
    for meal in plan.meals:
        for item in meal.items:
            item_total = item_totals(item)
            lines.append(
                f"| {meal.name}"
                f" | {format_number(item.quantity)}{item.unit} {item.name}"
                f" | {format_number(item_total.calories)}"
                f" | {format_number(item_total.protein)}g"
                f" | {format_number(item_total.carbs)}g"
                f" | {format_number(item_total.fat)}g |"
            )
    return "\n".join(lines) + "\n"


def _export_text(plan: MealPlan) -> str:
    totals = plan_totals(plan)
    lines = [
        plan.name,
        "=" * len(plan.name),
        f"Gesamt: {format_number(totals.calories)} kcal"
        f", {_whole(totals.protein)}g P"
        f", {_whole(totals.carbs)}g C"
        f", {_whole(totals.fat)}g F",
        "",
    ]
    for meal in plan.meals:
        time = f" ({meal.time})" if meal.time else ""
        lines.append(f"{meal.name}{time}:")
        for item in meal.items:
            item_total = item_totals(item)
            lines.append(
                f"  - {format_number(item.quantity)}{item.unit} {item.name}"
                f" ({format_number(item_total.calories)} kcal,"
                f" {format_number(item_total.protein)}g P)"
            )
        lines.append("")
    return "\n".join(lines).strip()


def _whole(value: float) -> str:
    return format_number(round_half_up(value))


def _number(value: float) -> int | float:
    return int(value) if value == int(value) else value

"""Shopping list aggregation across planned days."""

from dataclasses import dataclass, field

from cutboard.domain.document import AppData
from cutboard.domain.plans import MealItem, MealPlan, format_number, item_totals
from cutboard.services.operations import list_plans

EXCLUDED_ITEMS = ("omega-3", "omega3", "supplement", "vitamin", "algenöl")
PIECE_UNITS = {"Stück", "Portion"}


@dataclass
class PlanSource:
    """Contribution of one plan to an aggregated item."""

    plan_name: str
    total_quantity: float
    per_day: float
    unit: str


@dataclass
class AlternativeOption:
    """Total for one interchangeable option of a grouped item."""

    name: str
    quantity: float
    unit: str


@dataclass
class ShoppingItem:
    """Aggregated line on the shopping list."""

    id: str
    name: str
    total_quantity: float
    unit: str
    sources: list[PlanSource] = field(default_factory=list)
    has_alternatives: bool = False
    alternatives: list[AlternativeOption] = field(default_factory=list)
    home_quantity: float = 0
    needed: float = 0
    checked: bool = False


@dataclass
class ShoppingList:
    """Items still to buy plus planning totals."""

    items: list[ShoppingItem]
    total_days: int
    total_calories: float
    checked_count: int


def is_excluded(item: MealItem) -> bool:
    """Return True for supplements that are not bought per plan day."""
    name = item.name.lower()
    return any(excluded in name for excluded in EXCLUDED_ITEMS)


def aggregate_items(
    plans: list[MealPlan], plan_days: dict[str, int]
) -> list[ShoppingItem]:
    """Sum item quantities over plans multiplied by their planned days.

    Items with alternatives are merged under their group name and carry a
    per-option breakdown. Grouped items sort first, then by name.
    """
    items: dict[str, ShoppingItem] = {}
    for plan in plans:
        days = plan_days.get(plan.id, 0)
        if days == 0:
            continue
        for meal in plan.meals:
            for item in meal.items:
                if is_excluded(item):
                    continue
                _add_item(items, plan, item, days)

    return sorted(
        items.values(), key=lambda entry: (not entry.has_alternatives, entry.name)
    )


def shopping_list(doc: AppData) -> ShoppingList:
    """Build the list of items still needed after subtracting stock at home."""
    plans = list_plans(doc)
    state = doc.shopping
    checked = set(state.checked_items)
    needed = []
    for item in aggregate_items(plans, state.plan_days):
        item.home_quantity = state.at_home.get(item.id, 0)
        item.needed = max(0, item.total_quantity - item.home_quantity)
        item.checked = item.id in checked
        if item.needed > 0:
            needed.append(item)
    return ShoppingList(
        items=needed,
        total_days=sum(state.plan_days.values()),
        total_calories=total_calories(plans, state.plan_days),
        checked_count=sum(1 for item in needed if item.checked),
    )


def total_calories(plans: list[MealPlan], plan_days: dict[str, int]) -> float:
    """Return calories across all planned days, supplements included."""
    total = 0.0
    for plan in plans:
        days = plan_days.get(plan.id, 0)
        for meal in plan.meals:
            for item in meal.items:
                total += item_totals(item).calories * days
    return total


def format_quantity(quantity: float, unit: str) -> str:
    """Format a quantity as kg, L, a piece count, or the raw unit."""
    if unit == "g" and quantity >= 1000:
        return f"{quantity / 1000:.1f}".removesuffix(".0") + "kg"
    if unit == "ml" and quantity >= 1000:
        return f"{quantity / 1000:.1f}".removesuffix(".0") + "L"
    if unit in PIECE_UNITS:
        return f"{format_number(quantity)}×"
    return f"{format_number(quantity)}{unit}"


def at_home_step(unit: str) -> int:
    """Return the increment used when adjusting stock at home."""
    return 50 if unit in {"g", "ml"} else 1


def _add_item(
    items: dict[str, ShoppingItem], plan: MealPlan, item: MealItem, days: int
) -> None:
    has_alternatives = bool(item.alternatives)
    name = item.group_name or item.name
    key = (name if has_alternatives else item.name).lower()
    quantity = item.quantity * days

    options = []
    if has_alternatives:
        options = [
            AlternativeOption(option.name, option.quantity * days, option.unit)
            for option in [item, *(item.alternatives or [])]
        ]

    existing = items.get(key)
    if existing is None:
        items[key] = ShoppingItem(
            id=key,
            name=name,
            total_quantity=quantity,
            unit=item.unit,
            sources=[PlanSource(plan.name, quantity, item.quantity, item.unit)],
            has_alternatives=has_alternatives,
            alternatives=options,
        )
        return

    existing.total_quantity += quantity
    source = next(
        (entry for entry in existing.sources if entry.plan_name == plan.name), None
    )
    if source is None:
        existing.sources.append(
            PlanSource(plan.name, quantity, item.quantity, item.unit)
        )
    else:
        source.total_quantity += quantity
        source.per_day += item.quantity

    if has_alternatives and existing.alternatives:
        for option in options:
            match = next(
                (
                    entry
                    for entry in existing.alternatives
                    if entry.name.lower() == option.name.lower()
                ),
                None,
            )
            if match is None:
                existing.alternatives.append(option)
            else:
                match.quantity += option.quantity

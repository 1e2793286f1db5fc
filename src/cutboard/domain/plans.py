"""Meal plan, snapshot and override models."""

import math
from dataclasses import dataclass
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PER_100_UNITS = {"g", "ml"}


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class MealItem(CamelModel):
    """Single food line in a meal, with optional alternatives."""

    id: str
    name: str
    quantity: float = 0
    unit: str = "g"
    calories_per: float = 0
    protein_per: float = 0
    carbs_per: float = 0
    fat_per: float = 0
    alternatives: list["MealItem"] | None = None
    group_name: str | None = None


class Meal(CamelModel):
    """A meal slot within a plan."""

    id: str
    name: str
    time: str = ""
    icon: str = "sun"
    items: list[MealItem] = Field(default_factory=list)


class MealPlan(CamelModel):
    """Editable meal plan."""

    id: str
    name: str
    meals: list[Meal] = Field(default_factory=list)


class ItemOverride(CamelModel):
    """Per-day change to a snapshot item."""

    item_id: str
    quantity: float | None = None
    alternative_id: str | None = None


class DaySnapshot(CamelModel):
    """Point-in-time copy of a plan for one day."""

    plan_id: str
    plan_name: str | None = None
    meals: list[Meal] = Field(default_factory=list)
    overrides: list[ItemOverride] = Field(default_factory=list)


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macros for an item, meal or plan."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
        )

    def scaled(self, factor: float) -> "MacroTotals":
        """Return totals multiplied by a factor."""
        return MacroTotals(
            calories=self.calories * factor,
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
        )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's Math.round, away from banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float) -> str:
    """Render whole numbers without a trailing '.0'."""
    return str(int(value)) if value == int(value) else str(value)


def item_totals(item: MealItem) -> MacroTotals:
    """Return totals for an item's quantity."""
    divisor = 100 if item.unit in PER_100_UNITS else 1
    ratio = item.quantity / divisor
    return MacroTotals(
        calories=round_half_up(item.calories_per * ratio),
        protein=round_half_up(item.protein_per * ratio, 1),
        carbs=round_half_up(item.carbs_per * ratio, 1),
        fat=round_half_up(item.fat_per * ratio, 1),
    )


def meal_totals(meal: Meal) -> MacroTotals:
    """Sum item totals for a meal."""
    total = MacroTotals()
    for item in meal.items:
        total = total + item_totals(item)
    return total


def plan_totals(plan: MealPlan | DaySnapshot) -> MacroTotals:
    """Sum meal totals for a plan or snapshot."""
    total = MacroTotals()
    for meal in plan.meals:
        total = total + meal_totals(meal)
    return total


def apply_override(item: MealItem, override: ItemOverride | None) -> MealItem:
    """Return the item as eaten on a day with the override applied."""
    if override is None:
        return item
    effective = item
    if override.alternative_id:
        for alternative in item.alternatives or []:
            if alternative.id == override.alternative_id:
                effective = alternative
                break
    if override.quantity is not None:
        effective = effective.model_copy(update={"quantity": override.quantity})
    return effective


def new_id() -> str:
    """Return a fresh identifier for plans, meals and items."""
    return uuid4().hex


def create_empty_plan(name: str) -> MealPlan:
    """Create a plan with no meals."""
    return MealPlan(id=new_id(), name=name, meals=[])


def create_empty_meal(name: str = "Neue Mahlzeit") -> Meal:
    """Create a meal with no items."""
    return Meal(id=new_id(), name=name, time="", icon="sun", items=[])


def create_empty_item(name: str = "") -> MealItem:
    """Create an item with neutral values."""
    return MealItem(id=new_id(), name=name, quantity=100, unit="g")


def clone_meal(meal: Meal) -> Meal:
    """Deep-copy a meal, assigning fresh ids to it and its items."""
    return Meal(
        id=new_id(),
        name=meal.name,
        time=meal.time,
        icon=meal.icon,
        items=[_clone_item(item) for item in meal.items],
    )


def clone_plan(plan: MealPlan) -> MealPlan:
    """Deep-copy a plan for editing, keeping the plan id."""
    return plan.model_copy(deep=True)


def copy_meals(meals: list[Meal]) -> list[Meal]:
    """Copy meals by value."""
    return [meal.model_copy(deep=True) for meal in meals]


def _clone_item(item: MealItem) -> MealItem:
    alternatives = (
        [_clone_item(alt) for alt in item.alternatives]
        if item.alternatives is not None
        else None
    )
    return item.model_copy(
        deep=True, update={"id": new_id(), "alternatives": alternatives}
    )


def _item(  # noqa: PLR0913
    item_id: str,
    name: str,
    quantity: float,
    unit: str,
    per: tuple[float, float, float, float],
    alternatives: list[MealItem] | None = None,
    group_name: str | None = None,
) -> MealItem:
    calories, protein, carbs, fat = per
    return MealItem(
        id=item_id,
        name=name,
        quantity=quantity,
        unit=unit,
        calories_per=calories,
        protein_per=protein,
        carbs_per=carbs,
        fat_per=fat,
        alternatives=alternatives,
        group_name=group_name,
    )


def _breakfast(prefix: str) -> Meal:
    return Meal(
        id=f"{prefix}-breakfast",
        name="Frühstück (Pre-Workout)",
        time="08:00",
        icon="sunrise",
        items=[
            _item(
                f"{prefix}-oats",
                "Haferflocken",
                80,
                "g",
                (375, 13.8, 65, 7.5),
                alternatives=[
                    _item(
                        f"{prefix}-toast",
                        "Toastbrötchen (Weizen)",
                        2,
                        "Stück",
                        (110, 3.5, 20, 1),
                    )
                ],
                group_name="Kohlenhydrate",
            ),
            _item(f"{prefix}-eggs", "Eier (L)", 3, "Stück", (77, 6.7, 0.3, 5.3)),
            _item(f"{prefix}-exquisa", "Exquisa 0,2%", 30, "g", (50, 10, 3.3, 0)),
            _item(f"{prefix}-ham", "Backschinken", 50, "g", (110, 18, 2, 4)),
        ],
    )


def _snack(prefix: str, grams: float) -> Meal:
    return Meal(
        id=f"{prefix}-snack",
        name="Snack",
        time="20:00",
        icon="cookie",
        items=[
            _item(
                f"{prefix}-skyr",
                "Skyr Natur",
                grams,
                "g",
                (65, 11, 4, 0),
                alternatives=[
                    _item(
                        f"{prefix}-quark",
                        "Magerquark",
                        grams,
                        "g",
                        (67, 12, 4, 0.2),
                    )
                ],
                group_name="Milchprodukt",
            )
        ],
    )


DEFAULT_PLAN_A = MealPlan(
    id="plan-a",
    name="Tag A",
    meals=[
        _breakfast("a"),
        Meal(
            id="a-lunch",
            name="Mittag (Post-Workout)",
            time="13:00",
            icon="sun",
            items=[
                _item(
                    "a-iglo-italiano",
                    "Iglo Schlemmer-Filet Italiano",
                    1,
                    "Portion",
                    (320, 35, 15, 8),
                    alternatives=[
                        _item(
                            "a-iglo-broccoli",
                            "Iglo Schlemmer-Filet Broccoli",
                            1,
                            "Portion",
                            (310, 33, 14, 7),
                        ),
                        _item(
                            "a-iglo-champignon",
                            "Iglo Schlemmer-Filet Champignon",
                            1,
                            "Portion",
                            (305, 32, 13, 8),
                        ),
                    ],
                    group_name="Iglo Schlemmer-Filet",
                ),
                _item(
                    "a-potatoes",
                    "Kartoffeln",
                    250,
                    "g",
                    (60, 1.6, 12, 0),
                    alternatives=[
                        _item(
                            "a-sweet-potato",
                            "Süßkartoffel",
                            200,
                            "g",
                            (85, 1.5, 19, 0),
                        )
                    ],
                    group_name="Beilage",
                ),
            ],
        ),
        Meal(
            id="a-dinner",
            name="Abendessen",
            time="18:00",
            icon="sunset",
            items=[
                _item(
                    "a-chicken",
                    "Hähnchenbrust",
                    200,
                    "g",
                    (110, 23, 0, 1.5),
                    alternatives=[
                        _item("a-turkey", "Putenbrust", 200, "g", (105, 22, 0, 1)),
                        _item("a-shrimp", "Garnelen", 225, "g", (89, 20, 0.4, 0.9)),
                    ],
                    group_name="Protein",
                ),
                _item(
                    "a-veggies",
                    "Frosta Gemüsepfanne",
                    240,
                    "g",
                    (54, 1.7, 7.3, 1.7),
                ),
            ],
        ),
        _snack("a", 200),
    ],
)

DEFAULT_PLAN_B = MealPlan(
    id="plan-b",
    name="Tag B",
    meals=[
        _breakfast("b"),
        Meal(
            id="b-lunch",
            name="Mittag (Post-Workout)",
            time="13:00",
            icon="sun",
            items=[
                _item(
                    "b-chicken",
                    "Hähnchenbrust",
                    200,
                    "g",
                    (110, 23, 0, 1.5),
                    alternatives=[
                        _item("b-fish", "Weißfisch", 275, "g", (80, 18, 0, 0.7)),
                    ],
                    group_name="Protein",
                ),
                _item(
                    "b-rice",
                    "Reis (trocken)",
                    70,
                    "g",
                    (350, 7, 77, 1.4),
                    alternatives=[
                        _item(
                            "b-pasta",
                            "Nudeln (trocken)",
                            70,
                            "g",
                            (350, 13, 70, 2.5),
                        )
                    ],
                    group_name="Kohlenhydrate",
                ),
            ],
        ),
        Meal(
            id="b-dinner",
            name="Abendessen",
            time="18:00",
            icon="sunset",
            items=[
                _item(
                    "b-beef",
                    "Rinderhack Light (5%)",
                    175,
                    "g",
                    (120, 21.7, 0, 3.4),
                ),
                _item(
                    "b-veggies",
                    "Frosta Gemüsepfanne",
                    240,
                    "g",
                    (54, 1.7, 7.3, 1.7),
                ),
            ],
        ),
        _snack("b", 150),
    ],
)

DEFAULT_PLANS = {plan.id: plan for plan in (DEFAULT_PLAN_A, DEFAULT_PLAN_B)}

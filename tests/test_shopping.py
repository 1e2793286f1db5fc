"""Tests for shopping list aggregation."""

from cutboard.domain.document import default_document
from cutboard.domain.plans import MealPlan
from cutboard.services import operations
from cutboard.services.shopping import (
    aggregate_items,
    at_home_step,
    format_quantity,
    is_excluded,
    shopping_list,
    total_calories,
)
from tests.conftest import TODAY, make_item, make_plan


def _plans() -> list[MealPlan]:
    quark = make_item("quark", name="Magerquark", quantity=200, per=(67, 12, 4, 0.2))
    skyr = make_item(
        "skyr",
        name="Skyr Natur",
        quantity=200,
        per=(65, 11, 4, 0),
        alternatives=[quark],
        group_name="Milchprodukt",
    )
    eggs = (77, 7, 0, 5)
    plan_a = make_plan(
        "plan-a",
        "Tag A",
        skyr,
        make_item("eggs", name="Eier (L)", quantity=3, unit="Stück", per=eggs),
        make_item("omega", name="Omega-3 Kapseln", quantity=2, unit="Stück"),
    )
    plan_b = make_plan(
        "plan-b",
        "Tag B",
        make_item("b-skyr", name="Skyr Natur", quantity=150, per=(65, 11, 4, 0)),
        make_item("b-eggs", name="Eier (L)", quantity=2, unit="Stück", per=eggs),
    )
    return [plan_a, plan_b]


def test_is_excluded_matches_supplements() -> None:
    assert is_excluded(make_item("x", name="Omega-3 Kapseln"))
    assert is_excluded(make_item("x", name="Vitamin D3"))
    assert not is_excluded(make_item("x", name="Skyr Natur"))


def test_aggregate_items_multiplies_by_plan_days() -> None:
    items = aggregate_items(_plans(), {"plan-a": 3, "plan-b": 2})

    by_id = {item.id: item for item in items}
    assert set(by_id) == {"milchprodukt", "eier (l)", "skyr natur"}
    eggs = by_id["eier (l)"]
    assert eggs.total_quantity == 13
    assert [(source.plan_name, source.per_day) for source in eggs.sources] == [
        ("Tag A", 3),
        ("Tag B", 2),
    ]
    assert by_id["skyr natur"].total_quantity == 300


def test_grouped_items_carry_alternative_breakdown_and_sort_first() -> None:
    items = aggregate_items(_plans(), {"plan-a": 2})

    assert items[0].name == "Milchprodukt"
    assert items[0].has_alternatives
    assert [(option.name, option.quantity) for option in items[0].alternatives] == [
        ("Skyr Natur", 400),
        ("Magerquark", 400),
    ]
    assert [item.name for item in items[1:]] == ["Eier (L)"]


def test_group_name_labels_items_without_alternatives() -> None:
    cottage = make_item("cottage", name="Hüttenkäse", quantity=200, group_name="Käse")

    items = aggregate_items([make_plan("plan-a", "Tag A", cottage)], {"plan-a": 2})

    assert [(item.id, item.name) for item in items] == [("hüttenkäse", "Käse")]
    assert not items[0].has_alternatives


def test_plans_without_days_are_skipped() -> None:
    assert aggregate_items(_plans(), {"plan-a": 0}) == []


def test_shopping_list_subtracts_stock_at_home() -> None:
    doc = default_document(TODAY)
    for plan in _plans():
        doc = operations.save_plan(doc, plan)
    doc = operations.set_shopping_plan_days(doc, "plan-a", 2)
    doc = operations.set_shopping_at_home(doc, "milchprodukt", 100)
    doc = operations.set_shopping_at_home(doc, "eier (l)", 10)
    doc = operations.toggle_shopping_item(doc, "milchprodukt")

    result = shopping_list(doc)

    assert [item.id for item in result.items] == ["milchprodukt"]
    assert result.items[0].needed == 300
    assert result.items[0].home_quantity == 100
    assert result.items[0].checked
    assert result.checked_count == 1
    assert result.total_days == 2


def test_shopping_list_uses_builtin_plans_when_none_are_stored() -> None:
    doc = operations.set_shopping_plan_days(default_document(TODAY), "plan-b", 1)

    result = shopping_list(doc)

    assert result.total_days == 1
    assert result.total_calories > 0
    assert any(item.name == "Protein" for item in result.items)


def test_total_calories_include_supplements() -> None:
    plans = _plans()

    total = total_calories(plans, {"plan-a": 1})

    assert total == 130 + 231 + 200


def test_format_quantity() -> None:
    assert format_quantity(1500, "g") == "1.5kg"
    assert format_quantity(2000, "ml") == "2L"
    assert format_quantity(600, "g") == "600g"
    assert format_quantity(4, "Stück") == "4×"
    assert format_quantity(2, "Portion") == "2×"
    assert format_quantity(2.5, "EL") == "2.5EL"


def test_at_home_step() -> None:
    assert at_home_step("g") == 50
    assert at_home_step("ml") == 50
    assert at_home_step("Stück") == 1

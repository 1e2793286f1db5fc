"""Tests for meal plan export."""

import json

import pytest

from cutboard.domain.plans import MealPlan
from cutboard.services.plan_export import UnknownExportFormatError, export_plan
from tests.conftest import make_item, make_plan


@pytest.fixture
def plan() -> MealPlan:
    return make_plan(
        "p",
        "Tag A",
        make_item("chicken", quantity=200, per=(110, 23, 0, 1.5)),
        make_item(
            "eggs", name="Eier", quantity=2, unit="Stück", per=(77, 6.7, 0.3, 5.3)
        ),
    )


def test_export_json(plan: MealPlan) -> None:
    output = export_plan(plan, "json")

    payload = json.loads(output)
    assert "Hähnchenbrust" in output
    assert payload["name"] == "Tag A"
    assert payload["totals"]["kcal"] == 374
    assert payload["totals"]["protein"] == pytest.approx(59.4)
    assert payload["meals"][0]["name"] == "Mittag"
    assert payload["meals"][0]["time"] == "13:00"
    assert payload["meals"][0]["items"][0] == {
        "name": "Hähnchenbrust",
        "quantity": 200,
        "unit": "g",
        "kcal": 220,
        "protein": 46,
        "carbs": 0,
        "fat": 3,
    }


def test_export_table(plan: MealPlan) -> None:
    output = export_plan(plan, "table")

    lines = output.splitlines()
    assert lines[0] == "# Tag A"
    assert lines[2] == "**Gesamt:** 374 kcal | 59g Protein | 1g Carbs | 14g Fett"
    assert lines[4] == "| Mahlzeit | Item | kcal | Protein | Carbs | Fett |"
    assert lines[6] == "| Mittag | 200g Hähnchenbrust | 220 | 46g | 0g | 3g |"
    assert lines[7] == "| Mittag | 2Stück Eier | 154 | 13.4g | 0.6g | 10.6g |"
    assert output.endswith("\n")


def test_export_text(plan: MealPlan) -> None:
    output = export_plan(plan, "text")

    assert output == (
        "Tag A\n"
        "=====\n"
        "Gesamt: 374 kcal, 59g P, 1g C, 14g F\n"
        "\n"
        "Mittag (13:00):\n"
        "  - 200g Hähnchenbrust (220 kcal, 46g P)\n"
        "  - 2Stück Eier (154 kcal, 13.4g P)"
    )


def test_unknown_format_is_rejected(plan: MealPlan) -> None:
    with pytest.raises(UnknownExportFormatError):
        export_plan(plan, "pdf")

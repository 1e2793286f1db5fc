"""Progress analytics over weigh-ins and checklists."""

from datetime import date, timedelta
from typing import Literal

from cutboard.domain.analytics import (
    AveragePoint,
    CutProgress,
    EnergyTargets,
    Pace,
    TdeeEstimate,
)
from cutboard.domain.document import AppData, Profile, WeightEntry, parse_day
from cutboard.domain.plans import (
    MacroTotals,
    apply_override,
    item_totals,
    round_half_up,
)
from cutboard.services import operations

KCAL_PER_KG = 7700
LB_PER_KG = 2.20462
MIN_DAYS_FOR_RATE = 7
MAX_PROJECTION_WEEKS = 52
ON_TRACK_MIN_PERCENT = 0.4
ON_TRACK_MAX_PERCENT = 1.2
ACTIVITY_LEVELS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

Sex = Literal["male", "female"]


def moving_average(weights: list[WeightEntry], days: int = 7) -> list[AveragePoint]:
    """Return the trailing mean over the last ``days`` entries for each weigh-in."""
    points = []
    for index, entry in enumerate(weights):
        window = weights[max(0, index - days + 1) : index + 1]
        avg = sum(item.weight for item in window) / len(window)
        points.append(AveragePoint(date=entry.date, avg=round_half_up(avg, 1)))
    return points


def day_intake(doc: AppData, day: str) -> MacroTotals:
    """Return calories and macros eaten on a day, including extra calories."""
    checked = set(operations.checklist_items(doc, day))
    overrides = {
        override.item_id: override for override in operations.day_overrides(doc, day)
    }
    total = MacroTotals()
    for meal in operations.day_plan(doc, day).meals:
        for item in meal.items:
            if item.id not in checked:
                continue
            total = total + item_totals(apply_override(item, overrides.get(item.id)))
    extra = doc.extra_calories.get(day, 0)
    return total + MacroTotals(calories=extra)


def has_intake(doc: AppData, day: str) -> bool:
    """Return True when anything was checked or extra calories were logged."""
    return bool(operations.checklist_items(doc, day)) or bool(
        doc.extra_calories.get(day)
    )


def cut_progress(profile: Profile, today: date | None = None) -> CutProgress:
    """Summarize progress toward the goal weight."""
    today = today or date.today()
    total_to_lose = profile.start_weight - profile.goal_weight
    lost = profile.start_weight - profile.current_weight
    remaining = profile.current_weight - profile.goal_weight
    progress = (lost / total_to_lose) * 100 if total_to_lose > 0 else 0
    days_in = max(0, (today - parse_day(profile.start_date)).days)

    weekly_rate = (lost / days_in) * 7 if days_in > MIN_DAYS_FOR_RATE else 0
    expected = expected_weekly_loss(profile.tdee - profile.calorie_target)
    weekly_percent = (
        (weekly_rate / profile.current_weight) * 100 if profile.current_weight else 0
    )

    projection_rate = weekly_rate if weekly_rate > 0 else expected
    weeks_left = remaining / projection_rate if projection_rate > 0 else 0
    end_date = None
    if 0 < weeks_left < MAX_PROJECTION_WEEKS:
        end_date = today + timedelta(days=round(weeks_left * 7))

    return CutProgress(
        total_to_lose=total_to_lose,
        lost=lost,
        remaining=remaining,
        progress_percent=min(100, max(0, progress)),
        days_in=days_in,
        weekly_loss_rate=weekly_rate,
        expected_weekly_loss=expected,
        weekly_percent=weekly_percent,
        estimated_weeks_left=max(0, weeks_left),
        projected_end_date=end_date,
        pace=_pace(weekly_percent, days_in),
    )


def expected_weekly_loss(daily_deficit: float) -> float:
    """Return kilograms lost per week for a daily calorie deficit."""
    return daily_deficit * 7 / KCAL_PER_KG


def adaptive_tdee(
    doc: AppData, today: date | None = None, window_days: int = 14
) -> TdeeEstimate | None:
    """Estimate maintenance calories from intake and weight change.

    The window ends today. At least two weigh-ins on different days and one
    day with logged intake are required; otherwise None is returned.
    """
    today = today or date.today()
    start = today - timedelta(days=window_days - 1)
    in_window = [
        entry
        for entry in doc.weights
        if start <= parse_day(entry.date) <= today
    ]
    if len(in_window) < 2:
        return None
    first, last = in_window[0], in_window[-1]
    days = (parse_day(last.date) - parse_day(first.date)).days
    if days <= 0:
        return None

    intakes = []
    for offset in range(window_days):
        day = (start + timedelta(days=offset)).isoformat()
        if has_intake(doc, day):
            intakes.append(day_intake(doc, day).calories)
    if not intakes:
        return None

    mean_intake = sum(intakes) / len(intakes)
    weight_change = last.weight - first.weight
    tdee = mean_intake - (weight_change * KCAL_PER_KG) / days
    return TdeeEstimate(
        tdee=tdee,
        mean_intake=mean_intake,
        weight_change=weight_change,
        days=days,
        intake_days=len(intakes),
        window_start=first.date,
        window_end=last.date,
    )


def compliance(doc: AppData, today: date | None = None, days: int = 7) -> int:
    """Count days in the trailing window where every plan item was checked."""
    today = today or date.today()
    completed = 0
    for offset in range(days):
        day = (today - timedelta(days=offset)).isoformat()
        item_ids = {
            item.id
            for meal in operations.day_plan(doc, day).meals
            for item in meal.items
        }
        if item_ids and item_ids <= set(operations.checklist_items(doc, day)):
            completed += 1
    return completed


def weigh_in_streak(weights: list[WeightEntry], today: date | None = None) -> int:
    """Return the number of consecutive days with a weigh-in, ending today."""
    today = today or date.today()
    logged = {entry.date for entry in weights}
    streak = 0
    while (today - timedelta(days=streak)).isoformat() in logged:
        streak += 1
    return streak


def energy_targets(
    weight_kg: float,
    height_cm: float,
    age: int,
    sex: Sex,
    activity_level: float,
    deficit_percent: float = 20,
    goal_weight_kg: float | None = None,
) -> EnergyTargets:
    """Compute Mifflin-St Jeor BMR and the derived cut targets."""
    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age
    bmr += 5 if sex == "male" else -161
    tdee = int(round_half_up(bmr * activity_level))
    deficit = int(round_half_up(tdee * deficit_percent / 100))
    protein = int(round_half_up((goal_weight_kg or weight_kg) * LB_PER_KG))
    return EnergyTargets(
        bmr=bmr,
        tdee=tdee,
        deficit=deficit,
        target_calories=tdee - deficit,
        target_protein=protein,
        expected_weekly_loss=round_half_up(expected_weekly_loss(deficit), 2),
    )


def _pace(weekly_percent: float, days_in: int) -> Pace:
    if days_in <= MIN_DAYS_FOR_RATE or weekly_percent <= 0:
        return "insufficient_data"
    if weekly_percent > ON_TRACK_MAX_PERCENT:
        return "too_fast"
    if weekly_percent < ON_TRACK_MIN_PERCENT:
        return "too_slow"
    return "on_track"

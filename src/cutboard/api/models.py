"""Pydantic request models for the HTTP API."""

from typing import Literal

from pydantic import BaseModel, Field

ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]


class DeletePhotoRequest(BaseModel):
    """Body of a photo deletion request."""

    url: str | None = None


class CalculatorRequest(BaseModel):
    """Inputs for the energy target calculator, in metric units."""

    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    age: int = Field(gt=0)
    sex: Literal["male", "female"] = "male"
    activity: ActivityLevel = "moderate"
    deficit_percent: float = Field(default=20, ge=0, lt=100)
    goal_weight_kg: float | None = Field(default=None, gt=0)

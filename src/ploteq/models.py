"""Pydantic v2 schema models for ploteq plot documents."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_RESOLUTION = 20
MIN_RESOLUTION = 2
MAX_RESOLUTION = 998

AXES: tuple[str, str, str] = ("X", "Y", "Z")


class Bounds(BaseModel):
    """Sampling interval of one independent variable.

    Equality compares both ends; ordering compares interval width.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    min: float
    max: float

    @model_validator(mode="before")
    @classmethod
    def _accept_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"bounds must be a [min, max] pair, got {len(data)} values")
            return {"min": data[0], "max": data[1]}
        return data

    @property
    def width(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        return min(max(value, self.min), self.max)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return self.width < other.width

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return self.width <= other.width

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return self.width > other.width

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return self.width >= other.width


class PlotSpec(BaseModel):
    """A plot document: one expression, its bounds and sampling options."""

    model_config = ConfigDict(extra="forbid")

    version: str
    name: str | None = None
    expression: str
    bounds: list[Bounds] = Field(min_length=1)
    points_per_curve: int = DEFAULT_RESOLUTION
    curves_per_surface: int = DEFAULT_RESOLUTION
    wrap_points: bool = False
    wrap_curves: bool = False
    max_values: dict[Literal["X", "Y", "Z"], Bounds] = Field(default_factory=dict)
    seed: int | None = Field(default=None, ge=0)
    workers: int = Field(default=1, ge=1)
    sliders: dict[str, float] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, v: Any) -> Any:
        # Unquoted YAML versions arrive as floats
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def dimension(self) -> int:
        return len(self.bounds) + 1

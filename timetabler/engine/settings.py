"""Tunable parameters for the genetic scheduler."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FitnessWeights(BaseModel):
    """Weights of the fitness components and the per-clash penalties."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    staff_preference: float = Field(default=10, ge=0)
    workload_balance: float = Field(default=8, ge=0)
    time_distribution: float = Field(default=6, ge=0)
    classroom_utilization: float = Field(default=4, ge=0)
    day_balance: float = Field(default=5, ge=0)
    # Only applies when the request carries scheduling preferences
    slot_preference: float = Field(default=3, ge=0)

    staff_clash: float = Field(default=50, ge=0, description="Penalty per same-slot staff pair")
    classroom_clash: float = Field(default=30, ge=0, description="Penalty per same-slot classroom pair")


class GeneticSettings(BaseModel):
    """Population and operator settings for one search run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    population_size: int = Field(default=50, ge=2, le=2000)
    generations: int = Field(default=100, ge=0, le=5000)
    elite_count: int = Field(default=10, ge=0, le=500)
    tournament_size: int = Field(default=3, ge=1, le=50)
    mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    time_limit_seconds: Optional[float] = Field(default=None, gt=0)
    seed: Optional[int] = Field(default=None, ge=0)
    weights: FitnessWeights = Field(default_factory=FitnessWeights)

    @model_validator(mode="after")
    def validate_relationships(self) -> "GeneticSettings":
        if self.elite_count >= self.population_size:
            raise ValueError("elite_count must be less than population_size")
        if self.tournament_size > self.population_size:
            raise ValueError("tournament_size cannot exceed population_size")
        return self

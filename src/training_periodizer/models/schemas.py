"""Pydantic schemas for API input/output."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .program import ProgramDefinition


class ProgramDefinitionInput(BaseModel):
    """Request body for program creation."""
    goal: str = Field(..., description="strength, hypertrophy, endurance, power, weight_loss, general_fitness")
    level: str = Field(..., description="beginner, intermediate, advanced, elite")
    split: str = Field("full_body", description="full_body, upper_lower, push_pull_legs, push_pull, body_part")
    duration_weeks: int = Field(..., ge=1, description="Program length in weeks")
    sessions_per_week: int = Field(..., ge=1, le=7, description="Training sessions per week")
    deload_cadence: int = Field(0, ge=0, description="Weeks between deloads, 0 for none")
    progression: str = Field("linear", description="linear, wave, step")
    user_id: str = Field("anonymous", min_length=1)
    name: Optional[str] = Field(None, max_length=200)
    exercise_plan: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Split session label -> exercise ids. Empty lets the catalog choose.",
    )
    include_techniques: bool = True

    def to_definition(self) -> ProgramDefinition:
        return ProgramDefinition.from_dict(self.model_dump())


class SessionOutcomeInput(BaseModel):
    """Request body for recording a logged session."""
    user_id: str = Field(..., min_length=1)
    muscle_group_set_counts: Dict[str, int] = Field(default_factory=dict)
    average_rir_per_group: Dict[str, float] = Field(default_factory=dict)
    performed_at: Optional[datetime] = None
    week_index: Optional[int] = Field(None, ge=1)


class FatigueStateOutput(BaseModel):
    """Fatigue state returned after recording a session."""
    muscle_group: str
    score: float
    status: str
    trend: str
    consecutive_high_sessions: int
    at_risk: bool
    version: int


class SessionOutcomeResponse(BaseModel):
    """Response for a recorded session."""
    program_id: str
    states: List[FatigueStateOutput]
    forced_deload_weeks: List[int]


class SetPrescriptionOutput(BaseModel):
    """A single set target."""
    set_number: int
    reps_min: int
    reps_max: int
    target_rir: int
    rest_seconds: int


class TechniqueOutput(BaseModel):
    """Catalog technique returned by recommendations."""
    key: str
    name: str
    category: str
    difficulty: str
    suitable_exercises: List[str]
    rep_range: List[int]
    set_range: List[int]
    rir_range: List[int]
    rest_range: Optional[List[int]] = None
    weekly_frequency: List[int]
    description: str = ""
    implementation_notes: str = ""

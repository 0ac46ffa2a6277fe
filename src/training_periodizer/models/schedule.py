"""Schedule models: weeks, days, exercise slots and set prescriptions."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from .exercise import MuscleGroup
from .program import ProgramDefinition


class PhaseTag(str, Enum):
    """Training phase of a microcycle."""
    ACCUMULATION = "accumulation"        # Volume focus
    INTENSIFICATION = "intensification"  # Intensity focus, end of a block
    DELOAD = "deload"                    # Reduced volume/intensity for recovery
    MAINTENANCE = "maintenance"          # Trailing partial block


class DayType(str, Enum):
    """Training type of a planned session."""
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"
    POWER = "power"
    CARDIO = "cardio"
    REST = "rest"


class DeloadReason(str, Enum):
    """Why a microcycle is a deload."""
    SCHEDULED = "scheduled"  # Placed by the deload cadence
    FATIGUE = "fatigue"      # Forced by the fatigue estimator


@dataclass(frozen=True)
class WeekMultipliers:
    """Volume/intensity modulation applied to a week's baseline targets."""
    volume: float = 1.0
    intensity: float = 1.0

    def to_dict(self) -> Dict[str, float]:
        return {"volume": self.volume, "intensity": self.intensity}


@dataclass(frozen=True)
class SetPrescription:
    """Target for a single working set."""
    set_number: int
    reps_min: int
    reps_max: int
    target_rir: int  # Reps in reserve, 0-5
    rest_seconds: int

    @property
    def rep_range(self) -> str:
        if self.reps_min == self.reps_max:
            return str(self.reps_min)
        return f"{self.reps_min}-{self.reps_max}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "set_number": self.set_number,
            "reps_min": self.reps_min,
            "reps_max": self.reps_max,
            "target_rir": self.target_rir,
            "rest_seconds": self.rest_seconds,
        }


@dataclass(frozen=True)
class ExerciseSlot:
    """One exercise assignment within a training day."""
    slot_id: str
    exercise_id: str
    sets: Tuple[SetPrescription, ...]
    technique: Optional[str] = None  # Technique name from the catalog

    @property
    def set_count(self) -> int:
        return len(self.sets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot_id": self.slot_id,
            "exercise_id": self.exercise_id,
            "sets": [s.to_dict() for s in self.sets],
            "technique": self.technique,
        }


@dataclass(frozen=True)
class TrainingDay:
    """A planned session (or rest day) within a microcycle."""
    position: int  # 1-7 within the week
    day_type: DayType
    session_label: Optional[str] = None  # Split session, e.g. "upper"
    muscle_groups: Tuple[MuscleGroup, ...] = ()
    slots: Tuple[ExerciseSlot, ...] = ()

    @property
    def is_rest_day(self) -> bool:
        return self.day_type == DayType.REST

    def find_slot(self, slot_id: str) -> Optional[ExerciseSlot]:
        for slot in self.slots:
            if slot.slot_id == slot_id:
                return slot
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "day_type": self.day_type.value,
            "is_rest_day": self.is_rest_day,
            "session_label": self.session_label,
            "muscle_groups": [m.value for m in self.muscle_groups],
            "slots": [s.to_dict() for s in self.slots],
        }


@dataclass(frozen=True)
class Microcycle:
    """One week of a program."""
    week_index: int  # 1-based
    phase: PhaseTag
    volume_multiplier: float
    intensity_multiplier: float
    is_deload: bool
    days: Tuple[TrainingDay, ...] = ()
    deload_reason: Optional[DeloadReason] = None

    @property
    def multipliers(self) -> WeekMultipliers:
        return WeekMultipliers(self.volume_multiplier, self.intensity_multiplier)

    @property
    def training_days(self) -> List[TrainingDay]:
        return [d for d in self.days if not d.is_rest_day]

    def day(self, position: int) -> Optional[TrainingDay]:
        for d in self.days:
            if d.position == position:
                return d
        return None

    def with_days(self, days: Tuple[TrainingDay, ...]) -> "Microcycle":
        return replace(self, days=days)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_index": self.week_index,
            "phase": self.phase.value,
            "volume_multiplier": self.volume_multiplier,
            "intensity_multiplier": self.intensity_multiplier,
            "is_deload": self.is_deload,
            "deload_reason": self.deload_reason.value if self.deload_reason else None,
            "days": [d.to_dict() for d in self.days],
        }


@dataclass(frozen=True)
class SkippedSlot:
    """A slot that could not be filled because its exercise id did not resolve."""
    week_index: int
    day_position: int
    exercise_id: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_index": self.week_index,
            "day_position": self.day_position,
            "exercise_id": self.exercise_id,
            "reason": self.reason,
        }


@dataclass
class ProgramWithSchedule:
    """
    A program definition together with its expanded schedule.

    ``microcycles`` is the schedule as originally planned. Weeks forced to
    deload after scheduling are tracked in ``deload_overrides`` and applied
    when the effective schedule is resolved.
    """
    definition: ProgramDefinition
    microcycles: List[Microcycle]
    skipped_slots: List[SkippedSlot] = field(default_factory=list)
    deload_overrides: Set[int] = field(default_factory=set)
    current_week: int = 0  # Latest week with a logged session
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def program_id(self) -> str:
        return self.definition.program_id

    @property
    def user_id(self) -> str:
        return self.definition.user_id

    def week(self, week_index: int) -> Optional[Microcycle]:
        if 1 <= week_index <= len(self.microcycles):
            return self.microcycles[week_index - 1]
        return None

    @property
    def deload_weeks(self) -> List[int]:
        """Weeks that are deloads, scheduled or forced."""
        return sorted(
            {m.week_index for m in self.microcycles if m.is_deload} | self.deload_overrides
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "program_id": self.program_id,
            "definition": self.definition.to_dict(),
            "microcycles": [m.to_dict() for m in self.microcycles],
            "skipped_slots": [s.to_dict() for s in self.skipped_slots],
            "deload_overrides": sorted(self.deload_overrides),
            "deload_weeks": self.deload_weeks,
            "current_week": self.current_week,
            "created_at": self.created_at.isoformat(),
        }

"""Program definition models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar
import uuid

from ..exceptions import InvalidProgramDefinitionError


class TrainingGoal(str, Enum):
    """Primary goal of a training program."""
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"
    POWER = "power"
    WEIGHT_LOSS = "weight_loss"
    GENERAL_FITNESS = "general_fitness"


class TrainingLevel(str, Enum):
    """Training experience of the program owner."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"


class SplitType(str, Enum):
    """How muscle groups are distributed over the training days of a week."""
    FULL_BODY = "full_body"
    UPPER_LOWER = "upper_lower"
    PUSH_PULL_LEGS = "push_pull_legs"
    PUSH_PULL = "push_pull"
    BODY_PART = "body_part"


class ProgressionShape(str, Enum):
    """Rule for how volume/intensity multipliers change week to week."""
    LINEAR = "linear"   # Steady climb, reset after each deload
    WAVE = "wave"       # Repeating moderate -> high -> very high pattern
    STEP = "step"       # Flat inside a block, jump at each deload


E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Coerce ``value`` into ``enum_cls`` or raise InvalidProgramDefinitionError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidProgramDefinitionError(
            f"Invalid {field_name} '{value}'. Expected one of: {allowed}",
            field=field_name,
        ) from None


def _parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise InvalidProgramDefinitionError(f"{field_name} must be an integer", field=field_name)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidProgramDefinitionError(
            f"{field_name} must be an integer, got {value!r}",
            field=field_name,
        ) from None
    if parsed != value and not isinstance(value, str):
        raise InvalidProgramDefinitionError(
            f"{field_name} must be a whole number, got {value!r}",
            field=field_name,
        )
    return parsed


@dataclass(frozen=True)
class ProgramDefinition:
    """
    High-level description of a training program.

    Immutable once the program has been instantiated. Structural limits
    (frequency vs. rest days, cadence vs. duration) are checked by the
    scheduler, which has access to the configured limits.
    """
    goal: TrainingGoal
    level: TrainingLevel
    split: SplitType
    duration_weeks: int
    sessions_per_week: int
    deload_cadence: int  # Weeks between deloads, 0 = never
    progression: ProgressionShape
    user_id: str = "anonymous"
    program_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = None
    # Split session label -> ordered exercise ids. Empty = pick from the catalog.
    exercise_plan: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    include_techniques: bool = True

    def exercises_for(self, session_label: str) -> Optional[Tuple[str, ...]]:
        """Explicit exercise ids for a split session, or None when not specified."""
        for label, exercise_ids in self.exercise_plan:
            if label == session_label:
                return exercise_ids
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProgramDefinition":
        """
        Build a definition from loosely typed input (API payloads, CLI args).

        Every enum field is matched exhaustively; unknown values raise
        InvalidProgramDefinitionError instead of being defaulted.
        """
        required = (
            "goal", "level", "split", "duration_weeks",
            "sessions_per_week", "deload_cadence", "progression",
        )
        missing = [key for key in required if data.get(key) is None]
        if missing:
            raise InvalidProgramDefinitionError(
                f"Missing required field(s): {', '.join(missing)}",
                field=missing[0],
            )

        plan_input = data.get("exercise_plan") or {}
        if not isinstance(plan_input, Mapping):
            raise InvalidProgramDefinitionError(
                "exercise_plan must map session labels to exercise id lists",
                field="exercise_plan",
            )
        exercise_plan = tuple(
            (str(label), tuple(str(ex_id) for ex_id in ids))
            for label, ids in sorted(plan_input.items())
        )

        kwargs: Dict[str, Any] = {
            "goal": parse_enum(TrainingGoal, data["goal"], "goal"),
            "level": parse_enum(TrainingLevel, data["level"], "level"),
            "split": parse_enum(SplitType, data["split"], "split"),
            "duration_weeks": _parse_int(data["duration_weeks"], "duration_weeks"),
            "sessions_per_week": _parse_int(data["sessions_per_week"], "sessions_per_week"),
            "deload_cadence": _parse_int(data["deload_cadence"], "deload_cadence"),
            "progression": parse_enum(ProgressionShape, data["progression"], "progression"),
            "exercise_plan": exercise_plan,
            "include_techniques": bool(data.get("include_techniques", True)),
        }
        if data.get("user_id"):
            kwargs["user_id"] = str(data["user_id"])
        if data.get("program_id"):
            kwargs["program_id"] = str(data["program_id"])
        if data.get("name"):
            kwargs["name"] = str(data["name"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "program_id": self.program_id,
            "user_id": self.user_id,
            "name": self.name,
            "goal": self.goal.value,
            "level": self.level.value,
            "split": self.split.value,
            "duration_weeks": self.duration_weeks,
            "sessions_per_week": self.sessions_per_week,
            "deload_cadence": self.deload_cadence,
            "progression": self.progression.value,
            "exercise_plan": {label: list(ids) for label, ids in self.exercise_plan},
            "include_techniques": self.include_techniques,
        }

"""
Program service.

Library entry point for host applications. Wires the scheduler,
prescription engine, technique engine and fatigue estimator together with
the exercise catalog and the program/fatigue repositories.
"""

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union
import logging
import threading

from ..catalog.exercises import ExerciseCatalogAdapter
from ..config import Settings
from ..db.repositories.base import FatigueStateRepository, Repository
from ..db.repositories.memory import InMemoryFatigueStateRepository, InMemoryProgramRepository
from ..exceptions import (
    ProgramNotFoundError,
    SlotNotFoundError,
    StaleFatigueStateError,
    UnknownExerciseReferenceError,
    ValidationError,
)
from ..models.exercise import ExerciseCategory, ExerciseInfo, LoggedSet, MuscleGroup
from ..models.fatigue import FatigueState, SessionOutcome
from ..models.program import ProgramDefinition, TrainingGoal, TrainingLevel
from ..models.schedule import (
    DeloadReason,
    ExerciseSlot,
    Microcycle,
    PhaseTag,
    ProgramWithSchedule,
    SetPrescription,
    SkippedSlot,
    TrainingDay,
)
from ..models.technique import Technique
from ..utils import as_utc
from .base import BaseService
from .fatigue import FatigueReadinessEstimator
from .prescription import PrescriptionRulesEngine
from .scheduler import PeriodizationScheduler, deload_multipliers
from .techniques import TechniqueRecommendationEngine, TechniqueUsage


E = TypeVar("E", bound=Enum)

# Attempts per session before a stale write is surfaced to the caller
MAX_SAVE_ATTEMPTS = 3


def slot_id_for(week_index: int, day_position: int, ordinal: int) -> str:
    return f"w{week_index:02d}d{day_position}s{ordinal}"


def _coerce(enum_cls: Type[E], value: Union[E, str], field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field} '{value}'. Expected one of: {allowed}",
            field=field,
        ) from None


class ProgramService(BaseService):
    """
    Creates programs and keeps their prescriptions in line with fatigue.

    Example:
        service = ProgramService()
        program = service.create_program(definition)
        service.record_session_outcome(
            user_id, program.program_id, {"chest": 12}, {"chest": 1.0}
        )
        sets = service.get_effective_prescription(program.program_id, 2, 1, "w02d1s1")
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scheduler: Optional[PeriodizationScheduler] = None,
        prescription_engine: Optional[PrescriptionRulesEngine] = None,
        technique_engine: Optional[TechniqueRecommendationEngine] = None,
        fatigue_estimator: Optional[FatigueReadinessEstimator] = None,
        exercise_adapter: Optional[ExerciseCatalogAdapter] = None,
        program_repository: Optional[Repository[ProgramWithSchedule]] = None,
        fatigue_repository: Optional[FatigueStateRepository] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, logger=logger)
        self.scheduler = scheduler or PeriodizationScheduler(settings=self.settings)
        self.prescription_engine = prescription_engine or PrescriptionRulesEngine()
        self.technique_engine = technique_engine or TechniqueRecommendationEngine()
        self.fatigue_estimator = fatigue_estimator or FatigueReadinessEstimator(settings=self.settings)
        self.exercise_adapter = exercise_adapter or ExerciseCatalogAdapter()
        self.programs = program_repository or InMemoryProgramRepository()
        self.fatigue_states = fatigue_repository or InMemoryFatigueStateRepository()
        self._program_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Program creation
    # ------------------------------------------------------------------

    def create_program(self, definition: Union[ProgramDefinition, Mapping[str, Any]]) -> ProgramWithSchedule:
        """
        Expand a definition into a full schedule and store it.

        Slots whose exercise id does not resolve are left out of the
        schedule and listed in ``skipped_slots``.

        Raises:
            InvalidProgramDefinitionError: if the definition is malformed
        """
        if not isinstance(definition, ProgramDefinition):
            definition = ProgramDefinition.from_dict(definition)

        skeleton = self.scheduler.expand(definition)
        plan = self._resolve_exercise_plan(definition, skeleton)

        microcycles: List[Microcycle] = []
        skipped: List[SkippedSlot] = []
        for microcycle in skeleton:
            filled, week_skips = self._fill_week(definition, microcycle, plan)
            microcycles.append(filled)
            skipped.extend(week_skips)

        program = ProgramWithSchedule(
            definition=definition,
            microcycles=microcycles,
            skipped_slots=skipped,
        )
        self.programs.save(program)

        self.logger.info(
            "Created program %s for user %s: %s/%s, %d weeks, deloads at %s",
            program.program_id,
            program.user_id,
            definition.goal.value,
            definition.split.value,
            definition.duration_weeks,
            program.deload_weeks,
        )
        return program

    def _resolve_exercise_plan(
        self,
        definition: ProgramDefinition,
        skeleton: List[Microcycle],
    ) -> Dict[str, List[Tuple[str, Optional[ExerciseInfo]]]]:
        """
        Exercises for each split session, resolved once per program.

        Unresolvable ids stay in the plan with no info so their slots can be
        reported as skipped.
        """
        plan: Dict[str, List[Tuple[str, Optional[ExerciseInfo]]]] = {}
        days = skeleton[0].training_days if skeleton else []

        for day in days:
            label = day.session_label or day.day_type.value
            if label in plan:
                continue
            explicit = definition.exercises_for(label)
            if explicit is None:
                chosen = self.exercise_adapter.select_for_muscle_groups(day.muscle_groups)
                plan[label] = [(e.exercise_id, e) for e in chosen]
                continue

            entries: List[Tuple[str, Optional[ExerciseInfo]]] = []
            for exercise_id in explicit:
                try:
                    entries.append((exercise_id, self.exercise_adapter.resolve(exercise_id)))
                except UnknownExerciseReferenceError as e:
                    self.logger.warning(
                        "Program %s: skipping unknown exercise '%s' in %s sessions",
                        definition.program_id,
                        e.exercise_id,
                        label,
                    )
                    entries.append((exercise_id, None))
            plan[label] = entries

        return plan

    def _fill_week(
        self,
        definition: ProgramDefinition,
        microcycle: Microcycle,
        plan: Dict[str, List[Tuple[str, Optional[ExerciseInfo]]]],
    ) -> Tuple[Microcycle, List[SkippedSlot]]:
        usage = TechniqueUsage()
        annotate = definition.include_techniques and not microcycle.is_deload
        skipped: List[SkippedSlot] = []
        days: List[TrainingDay] = []

        for day in microcycle.days:
            if day.is_rest_day:
                days.append(day)
                continue

            sets = tuple(
                self.prescription_engine.prescribe(
                    day.day_type, microcycle.is_deload, microcycle.multipliers
                )
            )
            label = day.session_label or day.day_type.value
            entries = plan.get(label, [])
            technique_from = len(entries) - self.settings.techniques_per_session

            slots: List[ExerciseSlot] = []
            for ordinal, (exercise_id, info) in enumerate(entries, start=1):
                if info is None:
                    skipped.append(
                        SkippedSlot(
                            week_index=microcycle.week_index,
                            day_position=day.position,
                            exercise_id=exercise_id,
                            reason=f"Unknown exercise reference '{exercise_id}'",
                        )
                    )
                    continue
                technique = None
                if annotate and ordinal > technique_from:
                    technique = self._pick_technique(definition, info, usage)
                slots.append(
                    ExerciseSlot(
                        slot_id=slot_id_for(microcycle.week_index, day.position, ordinal),
                        exercise_id=exercise_id,
                        sets=sets,
                        technique=technique.name if technique else None,
                    )
                )
            days.append(replace(day, slots=tuple(slots)))

        return microcycle.with_days(tuple(days)), skipped

    def _pick_technique(
        self,
        definition: ProgramDefinition,
        exercise: ExerciseInfo,
        usage: TechniqueUsage,
    ) -> Optional[Technique]:
        candidates = self.technique_engine.recommend(
            definition.level, definition.goal, exercise.categories, usage
        )
        if not candidates:
            return None
        # Catalog name order decides between equally suitable techniques
        choice = candidates[0]
        usage.record(choice)
        return choice

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_program(self, program_id: str) -> ProgramWithSchedule:
        """
        Raises:
            ProgramNotFoundError: if no such program is stored
        """
        program = self.programs.get(program_id)
        if program is None:
            raise ProgramNotFoundError(program_id)
        return program

    def recommend_techniques(
        self,
        level: Union[TrainingLevel, str],
        goal: Union[TrainingGoal, str],
        exercise_category: Union[ExerciseCategory, str],
    ) -> List[Technique]:
        """Techniques suitable for a level, goal and exercise category, ordered by name."""
        return self.technique_engine.recommend(
            _coerce(TrainingLevel, level, "level"),
            _coerce(TrainingGoal, goal, "goal"),
            _coerce(ExerciseCategory, exercise_category, "exercise_category"),
        )

    def effective_microcycle(self, program_id: str, week_index: int) -> Microcycle:
        """
        A week as it should be trained now.

        Weeks forced to deload by fatigue are re-prescribed with deload
        multipliers and lose their technique annotations.

        Raises:
            ProgramNotFoundError: if no such program is stored
            ValidationError: if the week is outside the program
        """
        program = self.get_program(program_id)
        microcycle = program.week(week_index)
        if microcycle is None:
            raise ValidationError(
                f"Week {week_index} is outside program {program_id} "
                f"(1-{program.definition.duration_weeks})",
                field="week_index",
            )
        if microcycle.is_deload or week_index not in program.deload_overrides:
            return microcycle
        return self._as_forced_deload(program, microcycle)

    def effective_schedule(self, program_id: str) -> List[Microcycle]:
        """Every week of a program with fatigue-forced deloads applied."""
        program = self.get_program(program_id)
        return [self.effective_microcycle(program_id, m.week_index) for m in program.microcycles]

    def _as_forced_deload(self, program: ProgramWithSchedule, microcycle: Microcycle) -> Microcycle:
        multipliers = deload_multipliers(program.definition.level)
        days = []
        for day in microcycle.days:
            if day.is_rest_day:
                days.append(day)
                continue
            sets = tuple(self.prescription_engine.prescribe(day.day_type, True, multipliers))
            slots = tuple(replace(slot, sets=sets, technique=None) for slot in day.slots)
            days.append(replace(day, slots=slots))
        return replace(
            microcycle,
            phase=PhaseTag.DELOAD,
            volume_multiplier=multipliers.volume,
            intensity_multiplier=multipliers.intensity,
            is_deload=True,
            deload_reason=DeloadReason.FATIGUE,
            days=tuple(days),
        )

    def get_effective_prescription(
        self,
        program_id: str,
        week_index: int,
        day_index: int,
        slot_id: str,
    ) -> List[SetPrescription]:
        """
        Current set targets for one slot, honouring fatigue-forced deloads.

        Raises:
            ProgramNotFoundError: if no such program is stored
            SlotNotFoundError: if the week, day or slot does not exist
        """
        program = self.get_program(program_id)
        if program.week(week_index) is None:
            raise SlotNotFoundError(slot_id, week_index, day_index)
        day = self.effective_microcycle(program_id, week_index).day(day_index)
        slot = day.find_slot(slot_id) if day else None
        if slot is None:
            raise SlotNotFoundError(slot_id, week_index, day_index)
        return list(slot.sets)

    def get_fatigue_states(self, user_id: str, program_id: str) -> List[FatigueState]:
        return self.fatigue_states.list_for_program(user_id, program_id)

    # ------------------------------------------------------------------
    # Fatigue
    # ------------------------------------------------------------------

    def record_session_outcome(
        self,
        user_id: str,
        program_id: str,
        muscle_group_set_counts: Mapping[str, int],
        average_rir_per_group: Mapping[str, float],
        performed_at: Optional[datetime] = None,
        week_index: Optional[int] = None,
    ) -> List[FatigueState]:
        """
        Fold a logged session into the fatigue state of each trained group.

        When any group reaches deload_triggered, the week after the logged
        one is forced to deload. A session logged in a deload week resets
        every trained group, and every group still waiting on that deload,
        to normal. The session is applied all or nothing.

        Args:
            user_id: Owner of the program
            program_id: Program the session belongs to
            muscle_group_set_counts: Working sets per muscle group
            average_rir_per_group: Average RIR per muscle group; missing groups use the default band
            performed_at: Session time, defaults to now; naive times are read as UTC
            week_index: Program week the session belongs to, defaults to the latest logged week

        Returns:
            The saved states, ordered by muscle group

        Raises:
            ProgramNotFoundError: if the program does not exist for this user
            ValidationError: on unknown muscle groups or an out-of-range week
            StaleFatigueStateError: if concurrent writers keep winning the race
        """
        return self.record_outcome(
            SessionOutcome(
                user_id=user_id,
                program_id=program_id,
                muscle_group_set_counts=dict(muscle_group_set_counts),
                average_rir_per_group=dict(average_rir_per_group or {}),
                performed_at=as_utc(performed_at),
                week_index=week_index,
            )
        )

    def record_outcome(self, outcome: SessionOutcome) -> List[FatigueState]:
        """Apply a SessionOutcome; see record_session_outcome."""
        program = self.get_program(outcome.program_id)
        if program.user_id != outcome.user_id:
            raise ProgramNotFoundError(outcome.program_id, details={"user_id": outcome.user_id})

        week = outcome.week_index or max(program.current_week, 1)
        if program.week(week) is None:
            raise ValidationError(
                f"Week {week} is outside program {outcome.program_id} "
                f"(1-{program.definition.duration_weeks})",
                field="week_index",
            )
        outcome = replace(
            outcome,
            muscle_group_set_counts=self._validated_counts(outcome.muscle_group_set_counts),
            average_rir_per_group=self._validated_rir(outcome.average_rir_per_group),
            performed_at=as_utc(outcome.performed_at),
            week_index=week,
            is_deload_week=week in program.deload_weeks,
        )

        states = self._save_outcome(outcome)

        with self._program_lock:
            program.current_week = max(program.current_week, week)
            if self.fatigue_estimator.deload_recommended(states):
                self._force_next_deload(program, week, states)
            self.programs.save(program)

        return states

    def record_logged_sets(
        self,
        user_id: str,
        program_id: str,
        logs: Iterable[LoggedSet],
        performed_at: Optional[datetime] = None,
        week_index: Optional[int] = None,
    ) -> List[FatigueState]:
        """Aggregate raw logged sets by muscle group and record them as one session."""
        load = self.exercise_adapter.aggregate_session_logs(logs)
        return self.record_outcome(
            SessionOutcome(
                user_id=user_id,
                program_id=program_id,
                muscle_group_set_counts=load.set_counts,
                average_rir_per_group=load.average_rir,
                performed_at=as_utc(performed_at),
                week_index=week_index,
            )
        )

    def _validated_counts(self, counts: Mapping[str, int]) -> Dict[str, int]:
        result = {}
        for group, set_count in counts.items():
            muscle = _coerce(MuscleGroup, group, "muscle_group")
            if isinstance(set_count, bool) or not isinstance(set_count, int) or set_count < 0:
                raise ValidationError(
                    f"Set count for {muscle.value} must be a non-negative integer, got {set_count!r}",
                    field="muscle_group_set_counts",
                )
            result[muscle.value] = set_count
        return dict(sorted(result.items()))

    def _validated_rir(self, rir: Mapping[str, Optional[float]]) -> Dict[str, float]:
        result = {}
        for group, value in rir.items():
            muscle = _coerce(MuscleGroup, group, "muscle_group")
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(
                    f"Average RIR for {muscle.value} must be a number, got {value!r}",
                    field="average_rir_per_group",
                )
            result[muscle.value] = float(value)
        return result

    def _save_outcome(self, outcome: SessionOutcome) -> List[FatigueState]:
        """
        Read-modify-write every affected group as one compare-and-swap batch.

        The batch is recomputed from fresh reads on a version conflict.
        """
        user_id, program_id = outcome.user_id, outcome.program_id
        attempt = 1
        while True:
            counts = dict(outcome.muscle_group_set_counts)
            if outcome.is_deload_week:
                for state in self.fatigue_states.list_for_program(user_id, program_id):
                    if state.deload_triggered:
                        counts.setdefault(state.muscle_group, 0)

            updates = [
                self.fatigue_estimator.apply_session(
                    self.fatigue_states.load_or_new(user_id, program_id, group),
                    set_count,
                    outcome.average_rir_per_group.get(group),
                    outcome.performed_at,
                    outcome.is_deload_week,
                )
                for group, set_count in sorted(counts.items())
            ]
            try:
                return self.fatigue_states.save_many(updates)
            except StaleFatigueStateError as e:
                if attempt >= MAX_SAVE_ATTEMPTS:
                    raise
                attempt += 1
                self.logger.warning(
                    "Retrying fatigue update for %s (attempt %d)", e.details["key"], attempt
                )

    def _force_next_deload(
        self,
        program: ProgramWithSchedule,
        week: int,
        states: List[FatigueState],
    ) -> None:
        next_week = program.week(week + 1)
        if next_week is None:
            self.logger.info(
                "Program %s: deload triggered in its final week, no week left to override",
                program.program_id,
            )
            return
        if next_week.week_index in program.deload_weeks:
            return
        program.deload_overrides.add(next_week.week_index)
        self.logger.info(
            "Program %s: week %d forced to deload by fatigue in %s",
            program.program_id,
            next_week.week_index,
            ", ".join(s.muscle_group for s in states if s.deload_triggered),
        )

"""
Prescription rules engine.

Turns a day type plus the week's multipliers into concrete set targets.

Base table (non-deload):

    day type      reps    RIR   rest (s)   baseline sets
    strength      4-6     1-2   150-210    3
    hypertrophy   8-12    1-3   60-120     4
    endurance     12-20   2-3   30-60      3
    power         3-5     2-3   120-180    3

Cardio days use the endurance row; rest days have no sets.

Intensity progress maps the intensity multiplier 1.0 -> 1.1 onto 0 -> 1.
Target RIR walks from the top of the RIR range down to the bottom and rest
walks from the bottom of the rest range up to the top as progress rises.

Deload weeks keep the rep range, cut sets to two thirds (never below 2),
add RIR (+2 strength/power, +1 hypertrophy/endurance) and use minimum rest.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models.schedule import DayType, SetPrescription, WeekMultipliers
from ..utils import clamp, clamp_int, round_half_up, round_to


MIN_SETS = 2
MAX_SETS = 6
MIN_RIR = 0
MAX_RIR = 5
# Intensity multiplier at which RIR reaches the bottom of its range
FULL_INTENSITY_SPAN = 0.1


@dataclass(frozen=True)
class DayTypeTargets:
    """Rep, RIR and rest ranges plus the baseline set count for one day type."""
    reps: Tuple[int, int]
    rir: Tuple[int, int]
    rest_seconds: Tuple[int, int]
    baseline_sets: int
    deload_rir_bonus: int


PRESCRIPTION_TABLE: Dict[DayType, DayTypeTargets] = {
    DayType.STRENGTH: DayTypeTargets((4, 6), (1, 2), (150, 210), 3, 2),
    DayType.HYPERTROPHY: DayTypeTargets((8, 12), (1, 3), (60, 120), 4, 1),
    DayType.ENDURANCE: DayTypeTargets((12, 20), (2, 3), (30, 60), 3, 1),
    DayType.POWER: DayTypeTargets((3, 5), (2, 3), (120, 180), 3, 2),
}
PRESCRIPTION_TABLE[DayType.CARDIO] = PRESCRIPTION_TABLE[DayType.ENDURANCE]


def targets_for(day_type: DayType) -> Optional[DayTypeTargets]:
    """Table row for a day type; None for rest days."""
    return PRESCRIPTION_TABLE.get(day_type)


def intensity_progress(intensity_multiplier: float) -> float:
    """Position of the intensity multiplier within the 1.0 -> 1.1 span, clamped to [0, 1]."""
    raw = round_to((intensity_multiplier - 1.0) / FULL_INTENSITY_SPAN, 6)
    return clamp(raw, 0.0, 1.0)


def working_set_count(baseline: int, volume_multiplier: float) -> int:
    """Baseline sets scaled by volume, half-up, clamped to [2, 6]."""
    return clamp_int(round_half_up(baseline * volume_multiplier), MIN_SETS, MAX_SETS)


def deload_set_count(non_deload_sets: int) -> int:
    return max(MIN_SETS, (non_deload_sets * 2) // 3)


class PrescriptionRulesEngine:
    """
    Stateless prescription calculator.

    ``prescribe`` is a pure function of its arguments and never raises.
    """

    def __init__(self, table: Optional[Dict[DayType, DayTypeTargets]] = None) -> None:
        self._table = dict(table) if table is not None else dict(PRESCRIPTION_TABLE)

    def prescribe(
        self,
        day_type: DayType,
        is_deload: bool,
        multipliers: WeekMultipliers,
    ) -> List[SetPrescription]:
        """
        Compute the ordered set targets for one exercise slot.

        Args:
            day_type: Type of the training day
            is_deload: Whether the week is a deload week
            multipliers: The week's volume/intensity multipliers

        Returns:
            One SetPrescription per working set, empty for rest days
        """
        targets = self._table.get(day_type)
        if targets is None:
            return []

        progress = intensity_progress(multipliers.intensity)
        rir_low, rir_high = targets.rir
        rest_low, rest_high = targets.rest_seconds

        sets = working_set_count(targets.baseline_sets, multipliers.volume)
        rir = rir_high - round_half_up(progress * (rir_high - rir_low))
        rest = rest_low + round_half_up(progress * (rest_high - rest_low))

        if is_deload:
            sets = deload_set_count(sets)
            rir = rir + targets.deload_rir_bonus
            rest = rest_low

        rir = clamp_int(rir, MIN_RIR, MAX_RIR)
        reps_min, reps_max = targets.reps

        return [
            SetPrescription(
                set_number=i,
                reps_min=reps_min,
                reps_max=reps_max,
                target_rir=rir,
                rest_seconds=rest,
            )
            for i in range(1, sets + 1)
        ]

"""
Fatigue & readiness estimator.

Accumulates a rolling training-stress score per muscle group from logged
sessions and walks a small state machine:

    normal -> elevated (score >= T1)
    elevated -> high (score >= T2)
    high -> deload_triggered (K consecutive sessions in high)

deload_triggered holds until a session from a deload week is logged, which
clears the rolling history and returns the group to normal.

Stress per session = sets x RIR-band weight x stress-per-set. Lower RIR
(closer to failure) and more sets mean more stress.
"""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional
import logging

from ..config import Settings
from ..models.fatigue import (
    FatigueState,
    FatigueStatus,
    FatigueThresholds,
    FatigueTrend,
    StressEntry,
)
from ..utils import clamp, clamp_int, round_half_up, round_to
from .base import BaseService


MAX_SCORE = 100.0

# Stress weight by RIR band (0 = failure)
RIR_BAND_WEIGHTS: Dict[int, float] = {
    0: 1.5,
    1: 1.3,
    2: 1.1,
    3: 0.9,
    4: 0.7,
    5: 0.5,
}
DEFAULT_RIR_BAND = 2


def rir_band(average_rir: Optional[float]) -> int:
    """Half-up band of an average RIR, clamped to 0-5; unknown RIR uses band 2."""
    if average_rir is None:
        return DEFAULT_RIR_BAND
    return clamp_int(round_half_up(average_rir), 0, 5)


def classify_trend(previous: float, current: float, tolerance: float) -> FatigueTrend:
    if current > previous + tolerance:
        return FatigueTrend.INCREASING
    if current < previous - tolerance:
        return FatigueTrend.DECREASING
    return FatigueTrend.STABLE


class FatigueReadinessEstimator(BaseService):
    """Deterministic per-muscle-group fatigue accumulator."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        thresholds: Optional[FatigueThresholds] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, logger=logger)
        self._thresholds = thresholds or FatigueThresholds.from_settings(self.settings)

    @property
    def thresholds(self) -> FatigueThresholds:
        return self._thresholds

    def stress_delta(self, set_count: int, average_rir: Optional[float]) -> float:
        """Stress contributed by ``set_count`` working sets at ``average_rir``."""
        sets = max(0, int(set_count))
        weight = RIR_BAND_WEIGHTS[rir_band(average_rir)]
        return round_to(sets * weight * self._thresholds.stress_per_set, 3)

    def apply_session(
        self,
        state: FatigueState,
        set_count: int,
        average_rir: Optional[float],
        performed_at: datetime,
        is_deload_week: bool = False,
    ) -> FatigueState:
        """
        Fold one logged session into a muscle group's state.

        Returns a new state with the same version; the repository bumps the
        version when the state is saved.
        """
        if is_deload_week:
            return self._reset(state, performed_at)

        cutoff = performed_at - timedelta(days=self._thresholds.window_days)
        history = tuple(e for e in state.history if e.performed_at > cutoff)
        history += (StressEntry(performed_at, self.stress_delta(set_count, average_rir)),)

        score = round_to(clamp(sum(e.stress for e in history), 0.0, MAX_SCORE), 2)
        trend = classify_trend(state.score, score, self._thresholds.trend_tolerance)

        if state.status == FatigueStatus.DELOAD_TRIGGERED:
            # Stays triggered until the deload week is logged
            return replace(
                state,
                score=score,
                trend=trend,
                history=history,
                updated_at=performed_at,
            )

        status, streak = self._classify(score, state.consecutive_high_sessions)
        if status != state.status:
            self.logger.debug(
                "%s: %s -> %s (score %.1f)",
                state.key,
                state.status.value,
                status.value,
                score,
            )
        if status == FatigueStatus.DELOAD_TRIGGERED:
            self.logger.info(
                "Deload triggered for %s after %d consecutive high-fatigue sessions",
                state.key,
                streak,
            )

        return replace(
            state,
            score=score,
            status=status,
            trend=trend,
            consecutive_high_sessions=streak,
            history=history,
            updated_at=performed_at,
        )

    def _classify(self, score: float, streak: int):
        t = self._thresholds
        if score >= t.high:
            streak += 1
            if streak >= t.consecutive_high_sessions:
                return FatigueStatus.DELOAD_TRIGGERED, streak
            return FatigueStatus.HIGH, streak
        if score >= t.elevated:
            return FatigueStatus.ELEVATED, 0
        return FatigueStatus.NORMAL, 0

    def _reset(self, state: FatigueState, performed_at: datetime) -> FatigueState:
        if state.deload_triggered:
            self.logger.info("Deload week logged for %s, fatigue reset", state.key)
        return replace(
            state,
            score=0.0,
            status=FatigueStatus.NORMAL,
            trend=classify_trend(state.score, 0.0, self._thresholds.trend_tolerance),
            consecutive_high_sessions=0,
            history=(),
            updated_at=performed_at,
        )

    @staticmethod
    def deload_recommended(states: Iterable[FatigueState]) -> bool:
        """True when any tracked group has triggered a deload."""
        return any(s.deload_triggered for s in states)

    @staticmethod
    def risk_flags(states: Iterable[FatigueState]) -> Dict[str, bool]:
        """Muscle group -> at-risk flag."""
        return {s.muscle_group: s.at_risk for s in states}

    @staticmethod
    def groups_at_risk(states: Iterable[FatigueState]) -> List[str]:
        return sorted(s.muscle_group for s in states if s.at_risk)

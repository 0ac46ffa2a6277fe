"""Fatigue tracking models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..utils.dates import utc_now


class FatigueStatus(str, Enum):
    """Per-muscle-group fatigue state."""
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH = "high"
    DELOAD_TRIGGERED = "deload_triggered"  # Terminal until a deload week is logged


class FatigueTrend(str, Enum):
    """Direction of the rolling score since the previous session."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass(frozen=True)
class StressEntry:
    """Stress contributed by one session to one muscle group."""
    performed_at: datetime
    stress: float


@dataclass(frozen=True)
class FatigueState:
    """
    Rolling fatigue for one (user, program, muscle group) key.

    ``version`` is bumped by every save; repositories reject saves whose
    expected version does not match the stored one.
    """
    user_id: str
    program_id: str
    muscle_group: str
    score: float = 0.0  # Rolling stress, 0-100
    status: FatigueStatus = FatigueStatus.NORMAL
    trend: FatigueTrend = FatigueTrend.STABLE
    consecutive_high_sessions: int = 0
    history: Tuple[StressEntry, ...] = ()
    version: int = 0
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return f"{self.user_id}:{self.program_id}:{self.muscle_group}"

    @property
    def deload_triggered(self) -> bool:
        return self.status == FatigueStatus.DELOAD_TRIGGERED

    @property
    def at_risk(self) -> bool:
        """Risk flag: high fatigue or a pending deload."""
        return self.status in (FatigueStatus.HIGH, FatigueStatus.DELOAD_TRIGGERED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "program_id": self.program_id,
            "muscle_group": self.muscle_group,
            "score": self.score,
            "status": self.status.value,
            "trend": self.trend.value,
            "consecutive_high_sessions": self.consecutive_high_sessions,
            "at_risk": self.at_risk,
            "version": self.version,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class SessionOutcome:
    """Per-muscle-group work performed in one logged session."""
    user_id: str
    program_id: str
    muscle_group_set_counts: Dict[str, int]
    average_rir_per_group: Dict[str, float]
    performed_at: datetime = field(default_factory=utc_now)
    week_index: Optional[int] = None
    is_deload_week: bool = False


@dataclass(frozen=True)
class FatigueThresholds:
    """Tunable thresholds for the fatigue state machine."""
    elevated: float = 40.0  # T1
    high: float = 70.0  # T2
    consecutive_high_sessions: int = 3  # K
    window_days: int = 7
    stress_per_set: float = 3.0
    trend_tolerance: float = 2.0

    @classmethod
    def from_settings(cls, settings) -> "FatigueThresholds":
        return cls(
            elevated=settings.fatigue_elevated_threshold,
            high=settings.fatigue_high_threshold,
            consecutive_high_sessions=settings.consecutive_high_sessions,
            window_days=settings.fatigue_window_days,
            stress_per_set=settings.stress_per_set,
            trend_tolerance=settings.trend_tolerance,
        )

"""Builders for test data."""

from training_periodizer.models.program import ProgramDefinition


def make_definition(**overrides) -> ProgramDefinition:
    """Hypertrophy / intermediate / 8 weeks / 4 sessions / deload every 4th week / wave."""
    data = {
        "goal": "hypertrophy",
        "level": "intermediate",
        "split": "full_body",
        "duration_weeks": 8,
        "sessions_per_week": 4,
        "deload_cadence": 4,
        "progression": "wave",
        "user_id": "user-1",
        "program_id": "program-1",
    }
    data.update(overrides)
    return ProgramDefinition.from_dict(data)

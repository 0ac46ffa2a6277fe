"""Tests for the technique catalog and recommendation engine."""

import pytest

from training_periodizer.catalog import DEFAULT_TECHNIQUES, TechniqueCatalog, get_default_catalog
from training_periodizer.exceptions import ValidationError
from training_periodizer.models import (
    ExerciseCategory,
    TechniqueCategory,
    TechniqueDifficulty,
    TrainingGoal,
    TrainingLevel,
)
from training_periodizer.services import TechniqueRecommendationEngine, TechniqueUsage


@pytest.fixture
def engine():
    return TechniqueRecommendationEngine()


def names(techniques):
    return [t.name for t in techniques]


def record(**overrides):
    data = {
        "key": "slow_negatives",
        "name": "Slow Negatives",
        "category": "time_under_tension",
        "difficulty": "intermediate",
        "suitable_exercises": ["compound"],
        "rep_range": [6, 10],
        "set_range": [2, 3],
        "rir_range": [1, 3],
        "weekly_frequency": [1, 2],
    }
    data.update(overrides)
    return data


class TestTechniqueCatalog:
    """Tests for the catalog itself."""

    def test_default_catalog_is_name_ordered(self):
        catalog = get_default_catalog()
        listed = names(catalog.all())

        assert len(catalog) == len(DEFAULT_TECHNIQUES)
        assert listed == sorted(listed)

    def test_default_catalog_is_cached(self):
        assert get_default_catalog() is get_default_catalog()

    def test_lookup(self):
        catalog = get_default_catalog()

        assert "rest_pause" in catalog
        assert catalog.get("rest_pause").name == "Rest-Pause"
        assert catalog.by_name("Drop Sets").key == "drop_set"
        assert catalog.get("missing") is None

    def test_every_difficulty_is_represented(self):
        difficulties = {t.difficulty for t in get_default_catalog()}
        assert difficulties == set(TechniqueDifficulty)

    def test_by_category(self):
        metabolic = get_default_catalog().by_category(TechniqueCategory.METABOLIC)
        assert names(metabolic) == ["EMOM", "Giant Sets", "Supersets"]

    def test_custom_records(self):
        catalog = TechniqueCatalog.from_records([record()])

        technique = catalog.get("slow_negatives")
        assert technique.rep_range == (6, 10)
        assert technique.weekly_ceiling == 2
        assert technique.rest_range is None

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValidationError):
            TechniqueCatalog.from_records([record(), record(name="Other")])

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            TechniqueCatalog.from_records([record(category="cardio")])

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            TechniqueCatalog.from_records([record(rep_range=[10, 6])])

        assert exc_info.value.details["field"] == "rep_range"

    def test_missing_key_rejected(self):
        with pytest.raises(ValidationError):
            TechniqueCatalog.from_records([record(key="")])


class TestRecommend:
    """Tests for TechniqueRecommendationEngine.recommend."""

    def test_beginner_strength_compound(self, engine):
        result = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.STRENGTH, ExerciseCategory.COMPOUND)
        assert names(result) == ["Partial Reps", "Post-Exhaustion", "Rest-Pause"]

    def test_elite_strength_compound(self, engine):
        result = engine.recommend(TrainingLevel.ELITE, TrainingGoal.STRENGTH, ExerciseCategory.COMPOUND)
        assert names(result) == [
            "Cluster Sets",
            "Eccentric Overload",
            "Mechanical Drop Set",
            "Pre-Exhaustion",
        ]

    def test_endurance_isolation(self, engine):
        result = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.ENDURANCE, ExerciseCategory.ISOLATION)
        assert names(result) == ["Isometric Holds", "Supersets", "Tempo Training"]

    @pytest.mark.parametrize("goal", list(TrainingGoal))
    @pytest.mark.parametrize("category", list(ExerciseCategory))
    def test_beginners_never_get_advanced_techniques(self, engine, goal, category):
        for technique in engine.recommend(TrainingLevel.BEGINNER, goal, category):
            assert technique.difficulty == TechniqueDifficulty.INTERMEDIATE

    @pytest.mark.parametrize("goal", list(TrainingGoal))
    def test_elite_never_gets_intermediate_techniques(self, engine, goal):
        for technique in engine.recommend(TrainingLevel.ELITE, goal, ExerciseCategory.COMPOUND):
            assert technique.difficulty != TechniqueDifficulty.INTERMEDIATE

    def test_any_of_several_categories_matches(self, engine):
        single = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.STRENGTH, ExerciseCategory.COMPOUND)
        several = engine.recommend(
            TrainingLevel.BEGINNER,
            TrainingGoal.STRENGTH,
            frozenset({ExerciseCategory.COMPOUND, ExerciseCategory.CABLE}),
        )

        assert "Drop Sets" in names(several)
        assert set(names(single)) < set(names(several))

    def test_weekly_ceiling(self, engine):
        usage = TechniqueUsage()
        rest_pause = get_default_catalog().get("rest_pause")
        usage.record(rest_pause)

        first = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.STRENGTH, ExerciseCategory.COMPOUND, usage)
        assert "Rest-Pause" in names(first)

        usage.record(rest_pause)
        second = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.STRENGTH, ExerciseCategory.COMPOUND, usage)
        assert "Rest-Pause" not in names(second)

        usage.reset()
        assert usage.used(rest_pause) == 0

    def test_empty_result_is_not_an_error(self):
        engine = TechniqueRecommendationEngine(TechniqueCatalog.from_records([record()]))
        assert engine.recommend(TrainingLevel.ELITE, TrainingGoal.POWER, ExerciseCategory.CABLE) == []

    def test_custom_catalog(self):
        engine = TechniqueRecommendationEngine(TechniqueCatalog.from_records([record()]))
        result = engine.recommend(TrainingLevel.BEGINNER, TrainingGoal.HYPERTROPHY, ExerciseCategory.COMPOUND)

        assert names(result) == ["Slow Negatives"]

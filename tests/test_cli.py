"""Tests for the command line interface."""

import json

import pytest

from training_periodizer.cli import build_parser, main


class TestExpand:
    """Tests for the expand command."""

    def test_prints_every_week(self, capsys):
        code = main([
            "expand", "--goal", "hypertrophy", "--level", "intermediate",
            "--weeks", "8", "--sessions", "4", "--cadence", "4", "--progression", "wave",
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert out.count("DELOAD") == 2
        assert "accumulation" in out

    def test_details(self, capsys):
        main([
            "expand", "--goal", "strength", "--level", "beginner",
            "--weeks", "4", "--sessions", "3", "--details",
        ])

        out = capsys.readouterr().out
        assert "Week 1 slots" in out
        assert "w01d1s1" in out

    def test_json_output(self, capsys):
        main([
            "expand", "--goal", "strength", "--level", "beginner", "--split", "upper_lower",
            "--weeks", "6", "--sessions", "4", "--cadence", "3", "--json",
        ])

        data = json.loads(capsys.readouterr().out)
        assert data["deload_weeks"] == [3, 6]
        assert data["definition"]["split"] == "upper_lower"

    def test_invalid_definition(self, capsys):
        code = main([
            "expand", "--goal", "strength", "--level", "beginner",
            "--weeks", "4", "--sessions", "7",
        ])

        assert code == 1
        assert "sessions_per_week" in capsys.readouterr().err

    def test_unknown_choice_exits(self):
        with pytest.raises(SystemExit):
            main(["expand", "--goal", "yoga", "--level", "beginner", "--weeks", "4", "--sessions", "3"])


class TestTechniques:
    """Tests for the techniques command."""

    def test_lists_techniques(self, capsys):
        code = main(["techniques", "--level", "beginner", "--goal", "strength"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Rest-Pause" in out
        assert "Eccentric Overload" not in out


class TestPrescribe:
    """Tests for the prescribe command."""

    def test_strength(self, capsys):
        code = main(["prescribe", "--day-type", "strength"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Set 3: 4-6 reps @ RIR 2, rest 150s" in out
        assert "Set 4" not in out

    def test_deload(self, capsys):
        main(["prescribe", "--day-type", "hypertrophy", "--deload"])

        out = capsys.readouterr().out
        assert "(deload)" in out
        assert "Set 2: 8-12 reps @ RIR 4, rest 60s" in out

    def test_rest_day(self, capsys):
        main(["prescribe", "--day-type", "rest"])
        assert "no sets" in capsys.readouterr().out


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([
            "expand", "--goal", "power", "--level", "elite", "-w", "12", "-s", "3",
        ])

        assert args.split == "full_body"
        assert args.cadence == 0
        assert args.progression == "linear"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

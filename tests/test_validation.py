"""Tests for the validation framework and the mission schema rules."""

import math

import pytest

from pymalmo import (
    MissionSpec, MissionValidator, MissionValidationError, ValidationSeverity,
    Placement, ServerQuitFromTimeUp, ModifierList, AgentSection,
)
from pymalmo.classes.agents import Grid, GridPoint, ObservationFromGrid
from pymalmo.misc.validation_framework import NumericValidator, PositionValidator


def codes(result):
    return [issue.code for issue in result.issues]


# ── Generic validators ───────────────────────────

class TestPositionValidator:
    def test_valid_position(self):
        assert PositionValidator().validate((1, 2.5, -3)).is_valid

    def test_not_a_triple(self):
        result = PositionValidator().validate((1, 2))
        assert result.has_critical
        assert not result.is_valid

    def test_non_numeric_coordinate(self):
        result = PositionValidator().validate((1, "2", 3))
        assert codes(result) == ["bad-type"]
        assert result.issues[0].field == "y"

    def test_infinite_coordinate(self):
        result = PositionValidator().validate((math.inf, 0, math.nan))
        assert codes(result) == ["not-finite", "not-finite"]


class TestNumericValidator:
    def test_range_is_a_warning(self):
        result = NumericValidator(min_value=0, max_value=10).validate(11)
        assert result.is_valid
        assert result.has_warnings

    def test_negative_and_zero_are_errors(self):
        assert not NumericValidator(allow_negative=False).validate(-1).is_valid
        assert not NumericValidator(allow_zero=False).validate(0).is_valid

    def test_multiple_of(self):
        assert codes(NumericValidator(multiple_of=4).validate(322)) == ["not-multiple"]
        assert NumericValidator(multiple_of=4).validate(320).issues == []

    def test_strict_mode_promotes_warnings(self):
        result = NumericValidator(strict=True, max_value=10).validate(11)
        assert not result.is_valid
        assert result.errors_count == 1
        assert result.warnings_count == 0


# ── Schema walk ──────────────────────────────────

class TestMissionValidator:
    def test_default_mission_is_clean(self, spec):
        assert MissionValidator().validate(spec.mission).issues == []

    def test_not_a_mission(self):
        result = MissionValidator().validate("<Mission/>")
        assert result.has_critical

    def test_invalid_game_mode(self, spec):
        spec.mission.agent_sections[0].mode = "Hardcore"
        result = spec.validate()
        assert codes(result) == ["invalid-enum"]
        assert result.issues[0].field == "Mission/AgentSection[0]/@mode"

    def test_invalid_modifier_list_type(self, spec):
        handler = spec.mission.agent_sections[0].agent_handlers.continuous_movement_commands
        handler.modifier_list = ModifierList(type="maybe-list", commands=["move"])
        assert "invalid-enum" in codes(spec.validate())

    def test_wrong_value_type(self, spec):
        spec.request_video(320, 240)
        spec.mission.agent_sections[0].agent_handlers.video_producer.width = "320"
        result = spec.validate()
        assert codes(result) == ["bad-type"]
        assert not result.is_valid

    def test_wrong_child_type(self, spec):
        spec.mission.server_section.server_handlers.world_generator = Placement(x=0, y=0, z=0)
        assert "bad-type" in codes(spec.validate())

    def test_missing_required_values(self, spec):
        spec.mission.agent_sections[0].name = None
        spec.mission.server_section.server_handlers.world_generator = None
        result = spec.validate()
        assert codes(result).count("missing-required") == 2
        fields = {issue.field for issue in result.issues}
        assert "Mission/AgentSection[0]/Name" in fields
        assert "Mission/ServerSection/ServerHandlers" in fields

    def test_no_agents(self, spec):
        spec.mission.agent_sections.clear()
        result = spec.validate()
        assert codes(result) == ["too-few"]

    def test_empty_grid_observation(self, spec):
        spec.mission.agent_sections[0].agent_handlers.observation_from_grid = ObservationFromGrid()
        assert codes(spec.validate()) == ["too-few"]


# ── Schema rules ─────────────────────────────────

class TestMissionRules:
    def test_time_limit_must_be_positive(self, spec):
        spec.time_limit_in_seconds(0)
        result = spec.validate()
        assert codes(result) == ["out-of-range"]
        assert result.issues[0].field == "Mission/ServerSection/ServerHandlers/ServerQuitFromTimeUp/@timeLimitMs"

    def test_start_time_outside_a_day_is_a_warning(self, spec):
        spec.set_time_of_day(30000, True)
        result = spec.validate()
        assert result.is_valid
        assert codes(result) == ["out-of-range"]
        assert result.issues[0].severity == ValidationSeverity.WARNING

    def test_negative_sphere_radius(self, spec):
        spec.draw_sphere(0, 0, 0, -1, "stone")
        assert not spec.validate().is_valid

    def test_non_finite_start(self, spec):
        spec.start_at(math.nan, 4, 0)
        result = spec.validate()
        assert codes(result) == ["not-finite"]
        assert result.issues[0].field == "Mission/AgentSection[0]/AgentStart/Placement.x"

    def test_inverted_grid_is_a_warning(self, spec):
        spec.observe_grid(2, 0, 0, -2, 0, 0, "flipped")
        result = spec.validate()
        assert result.is_valid
        assert codes(result) == ["inverted-grid"]

    def test_grid_without_corners_is_reported_once(self, spec):
        spec.mission.agent_sections[0].agent_handlers.observation_from_grid = ObservationFromGrid(
            grids=[Grid(name="broken", min=GridPoint(x=0, y=0, z=0))])
        assert codes(spec.validate()) == ["missing-required"]

    def test_empty_verb(self, spec):
        handler = spec.mission.agent_sections[0].agent_handlers.continuous_movement_commands
        handler.modifier_list = ModifierList(type="allow-list", commands=["move", " "])
        result = spec.validate()
        assert codes(result) == ["empty-verb"]
        assert result.issues[0].field.endswith("ModifierList/command[1]")

    def test_duplicate_agent_name(self, spec):
        spec.mission.agent_sections.append(AgentSection(name="Cristina"))
        result = spec.validate()
        assert result.is_valid
        assert codes(result) == ["duplicate-agent-name"]


# ── Strict mode and errors ───────────────────────

class TestStrictMode:
    def test_warnings_fail_strict_validation(self):
        spec = MissionSpec(verbose=False, strict=True)
        spec.observe_grid(1, 0, 0, 0, 0, 0, "flipped")
        result = spec.validate()
        assert not result.is_valid
        assert result.errors_count == 1

    def test_strict_construction_from_xml(self):
        lenient = MissionSpec(verbose=False)
        lenient.set_time_of_day(99999, False)
        xml = lenient.get_as_xml()
        assert MissionSpec.from_xml(xml, verbose=False).validate().has_warnings
        with pytest.raises(MissionValidationError):
            MissionSpec.from_xml(xml, verbose=False, strict=True)


class TestMissionValidationError:
    def test_message_lists_errors(self, spec):
        spec.mission.server_section.server_handlers.server_quit_from_time_up = ServerQuitFromTimeUp(time_limit_ms=-5)
        spec.mission.agent_sections[0].mode = "Hardcore"
        error = MissionValidationError(spec.validate())
        lines = str(error).splitlines()
        assert lines[0] == "✗ Validation failed: 2 errors"
        assert any("@timeLimitMs" in line for line in lines[1:])
        assert any("Hardcore" in line for line in lines[1:])
        assert error.result.errors_count == 2

    def test_is_a_value_error(self):
        assert issubclass(MissionValidationError, ValueError)

    def test_invalid_xml_raises_on_construction(self):
        xml = MissionSpec(verbose=False).get_as_xml().replace('mode="Survival"', 'mode="Hardcore"')
        with pytest.raises(MissionValidationError, match="Hardcore"):
            MissionSpec(xml, validate=True, verbose=False)
        assert MissionSpec(xml, validate=False, verbose=False).mission.agent_sections[0].mode == "Hardcore"

    def test_failed_validation_logs_a_warning(self, spec, capsys):
        spec.mission.agent_sections[0].mode = "Hardcore"
        spec.validate()
        assert "Validation failed" in capsys.readouterr().err

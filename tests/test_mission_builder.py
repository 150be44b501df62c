"""Tests for MissionSpec: defaults, server and agent setters, command handlers, information getters."""

import pytest

from conftest import NS, local, xml_root
from pymalmo import (
    MissionSpec, DEFAULT_GENERATOR_STRING, DEFAULT_AGENT_NAME,
    FlatWorldGenerator, DefaultWorldGenerator, FileWorldGenerator, ModifierList,
)


# ── Defaults ─────────────────────────────────────

class TestDefaultMission:
    def test_single_agent_with_default_name(self, spec):
        assert spec.get_number_of_agents() == 1
        agent = spec.mission.agent_sections[0]
        assert agent.name == DEFAULT_AGENT_NAME
        assert agent.mode == "Survival"

    def test_flat_world_and_ten_second_limit(self, spec):
        root = xml_root(spec)
        flat = root.find("m:ServerSection/m:ServerHandlers/m:FlatWorldGenerator", NS)
        assert flat is not None
        assert flat.get("generatorString") == DEFAULT_GENERATOR_STRING
        quit_elem = root.find("m:ServerSection/m:ServerHandlers/m:ServerQuitFromTimeUp", NS)
        assert quit_elem.get("timeLimitMs") == "10000"

    def test_continuous_movement_allowed_by_default(self, spec):
        assert spec.get_list_of_command_handlers(0) == ["ContinuousMovement"]
        assert spec.get_allowed_commands(0, "ContinuousMovement") == []

    def test_no_video_by_default(self, spec):
        assert spec.is_video_requested(0) is False
        with pytest.raises(RuntimeError):
            spec.get_video_width(0)

    def test_default_mission_is_valid(self, spec):
        result = spec.validate()
        assert result.is_valid
        assert result.issues == []

    def test_summary_defaults_to_empty(self, spec):
        assert spec.get_summary() == ""
        spec.set_summary("Find the diamond")
        assert spec.get_summary() == "Find the diamond"
        assert xml_root(spec).find("m:About/m:Summary", NS).text == "Find the diamond"


# ── Server settings ──────────────────────────────

class TestServerSettings:
    def test_time_limit_in_milliseconds(self, spec):
        spec.time_limit_in_seconds(2.5)
        assert spec.mission.server_section.server_handlers.server_quit_from_time_up.time_limit_ms == 2500
        quit_elem = xml_root(spec).find(".//m:ServerQuitFromTimeUp", NS)
        assert quit_elem.get("timeLimitMs") == "2500"

    def test_create_default_terrain_replaces_flat_world(self, spec):
        spec.create_default_terrain()
        handlers = xml_root(spec).find("m:ServerSection/m:ServerHandlers", NS)
        assert handlers.find("m:FlatWorldGenerator", NS) is None
        assert handlers.find("m:DefaultWorldGenerator", NS) is not None

    def test_world_seed_and_force_reset(self, spec):
        spec.set_world_seed(1234)
        spec.force_world_reset()
        flat = xml_root(spec).find(".//m:FlatWorldGenerator", NS)
        assert flat.get("seed") == "1234"
        assert flat.get("forceReset") == "true"

    def test_world_seed_needs_a_generated_world(self, spec):
        spec.mission.server_section.server_handlers.world_generator = FileWorldGenerator(src="saves/arena")
        with pytest.raises(RuntimeError):
            spec.set_world_seed("abc")

    def test_set_time_of_day(self, spec):
        spec.set_time_of_day(12000, False)
        time_elem = xml_root(spec).find("m:ServerSection/m:ServerInitialConditions/m:Time", NS)
        assert time_elem.find("m:StartTime", NS).text == "12000"
        assert time_elem.find("m:AllowPassageOfTime", NS).text == "false"

    def test_set_time_of_day_twice_keeps_one_time_element(self, spec):
        spec.set_time_of_day(0, True)
        spec.set_time_of_day(18000, True)
        times = xml_root(spec).findall(".//m:ServerInitialConditions/m:Time", NS)
        assert len(times) == 1
        assert times[0].find("m:StartTime", NS).text == "18000"

    def test_draw_commands_keep_call_order(self, spec):
        spec.draw_block(1, 2, 3, "stone")
        spec.draw_cuboid(0, 0, 0, 4, 1, 4, "glass")
        spec.draw_item(2, 5, 2, "diamond")
        spec.draw_sphere(10, 20, 10, 3, "lava")
        spec.draw_line(0, 0, 0, 9, 0, 0, "gold_block")

        decorator = xml_root(spec).find(".//m:DrawingDecorator", NS)
        assert [local(e.tag) for e in decorator] == [
            "DrawBlock", "DrawCuboid", "DrawItem", "DrawSphere", "DrawLine"
        ]
        block = decorator[0]
        assert (block.get("x"), block.get("y"), block.get("z"), block.get("type")) == ("1", "2", "3", "stone")
        assert decorator[3].get("radius") == "3"
        assert decorator[4].get("x2") == "9"

    def test_drawing_decorator_is_created_once(self, spec):
        spec.draw_block(0, 0, 0, "dirt")
        spec.draw_block(1, 0, 0, "dirt")
        assert len(xml_root(spec).findall(".//m:DrawingDecorator", NS)) == 1


# ── Agent settings ───────────────────────────────

class TestAgentSettings:
    def test_start_at(self, spec):
        spec.start_at(0.5, 227, 0.5)
        placement = xml_root(spec).find(".//m:AgentStart/m:Placement", NS)
        assert placement.get("x") == "0.5"
        assert placement.get("y") == "227"
        assert placement.get("yaw") is None

    def test_start_at_with_pitch_and_yaw(self, spec):
        spec.start_at_with_pitch_and_yaw(1, 2, 3, pitch=30, yaw=90)
        placement = spec.mission.agent_sections[0].agent_start.placement
        assert (placement.pitch, placement.yaw) == (30, 90)

    def test_end_at_is_repeatable(self, spec):
        spec.end_at(1, 2, 3)
        spec.end_at(4, 5, 6, tolerance=0.5)
        markers = xml_root(spec).findall(".//m:AgentQuitFromReachingPosition/m:Marker", NS)
        assert len(markers) == 2
        assert markers[0].get("tolerance") is None
        assert markers[1].get("tolerance") == "0.5"

    def test_game_modes(self, spec):
        spec.set_mode_to_creative()
        assert xml_root(spec).find("m:AgentSection", NS).get("mode") == "Creative"
        spec.set_mode_to_spectator()
        assert spec.mission.agent_sections[0].mode == "Spectator"

    def test_request_video(self, spec):
        spec.request_video(320, 240)
        assert spec.is_video_requested(0)
        assert spec.get_video_width(0) == 320
        assert spec.get_video_height(0) == 240
        assert spec.get_video_channels(0) == 3
        video = xml_root(spec).find(".//m:VideoProducer", NS)
        assert video.get("want_depth") == "false"
        assert video.find("m:Width", NS).text == "320"

    def test_request_video_with_depth(self, spec):
        spec.request_video_with_depth(640, 480)
        assert spec.get_video_channels(0) == 4
        assert xml_root(spec).find(".//m:VideoProducer", NS).get("want_depth") == "true"

    def test_odd_video_size_is_a_warning(self, spec, capsys):
        spec.request_video(322, 241)
        err = capsys.readouterr().err
        assert "divisible by 4" in err
        assert "divisible by 2" in err
        result = spec.validate()
        assert result.is_valid
        assert len(result.get_issues_by_code("not-multiple")) == 2

    def test_odd_video_size_fails_in_strict_mode(self):
        strict = MissionSpec(verbose=False, strict=True)
        strict.request_video(322, 240)
        assert not strict.validate().is_valid

    def test_reward_for_reaching_position(self, spec):
        spec.reward_for_reaching_position(1, 2, 3, 100, 0.5)
        spec.reward_for_reaching_position(4, 5, 6, -10, 1)
        markers = xml_root(spec).findall(".//m:RewardForReachingPosition/m:Marker", NS)
        assert [m.get("reward") for m in markers] == ["100", "-10"]
        assert markers[0].get("tolerance") == "0.5"

    def test_simple_observations_are_idempotent(self, spec):
        for _ in range(2):
            spec.observe_recent_commands()
            spec.observe_hot_bar()
            spec.observe_full_inventory()
            spec.observe_chat()
        handlers = xml_root(spec).find(".//m:AgentHandlers", NS)
        tags = [local(e.tag) for e in handlers]
        for tag in ("ObservationFromRecentCommands", "ObservationFromHotBar",
                    "ObservationFromFullInventory", "ObservationFromChat"):
            assert tags.count(tag) == 1

    def test_observe_grid(self, spec):
        spec.observe_grid(-1, -1, -1, 1, -1, 1, "floor3x3")
        spec.observe_grid(-2, 0, -2, 2, 0, 2, "level")
        grids = xml_root(spec).findall(".//m:ObservationFromGrid/m:Grid", NS)
        assert [g.get("name") for g in grids] == ["floor3x3", "level"]
        assert grids[0].find("m:min", NS).get("x") == "-1"
        assert grids[0].find("m:max", NS).get("z") == "1"

    def test_inverted_grid_logs_a_warning(self, spec, capsys):
        spec.observe_grid(1, 0, 0, -1, 0, 0, "backwards")
        assert "backwards" in capsys.readouterr().err

    def test_observe_distance(self, spec):
        spec.observe_distance(10.5, 4, -3.5, "Goal")
        marker = xml_root(spec).find(".//m:ObservationFromDistance/m:Marker", NS)
        assert marker.get("name") == "Goal"
        assert marker.get("z") == "-3.5"

    def test_agent_setters_need_an_agent(self):
        empty = MissionSpec(verbose=False)
        empty.mission.agent_sections.clear()
        with pytest.raises(IndexError):
            empty.start_at(0, 0, 0)


# ── Command handlers ─────────────────────────────

class TestCommandHandlers:
    def test_allow_verb_creates_allow_list(self, spec):
        spec.allow_continuous_movement_command("move")
        spec.allow_continuous_movement_command("turn")
        assert spec.get_allowed_commands(0, "ContinuousMovement") == ["move", "turn"]
        modifiers = xml_root(spec).find(".//m:ContinuousMovementCommands/m:ModifierList", NS)
        assert modifiers.get("type") == "allow-list"
        assert [c.text for c in modifiers.findall("m:command", NS)] == ["move", "turn"]

    def test_verb_is_listed_once(self, spec):
        spec.allow_discrete_movement_command("movenorth")
        spec.allow_discrete_movement_command("movenorth")
        assert spec.get_allowed_commands(0, "DiscreteMovement") == ["movenorth"]

    def test_allow_list_replaces_deny_list(self, spec):
        handler = spec.mission.agent_sections[0].agent_handlers.continuous_movement_commands
        handler.modifier_list = ModifierList(type="deny-list", commands=["attack", "jump"])
        spec.allow_continuous_movement_command("move")
        assert handler.modifier_list.type == "allow-list"
        assert handler.modifier_list.commands == ["move"]

    def test_deny_list_reports_no_allowed_commands(self, spec):
        handler = spec.mission.agent_sections[0].agent_handlers.continuous_movement_commands
        handler.modifier_list = ModifierList(type="deny-list", commands=["attack"])
        assert spec.get_allowed_commands(0, "ContinuousMovement") == []

    def test_allow_all_keeps_existing_list(self, spec):
        spec.allow_inventory_command("selectInventoryItem")
        spec.allow_all_inventory_commands()
        assert spec.get_allowed_commands(0, "Inventory") == ["selectInventoryItem"]

    def test_remove_all_then_add_exactly_what_is_wanted(self, spec):
        spec.allow_all_chat_commands()
        spec.remove_all_command_handlers()
        assert spec.get_list_of_command_handlers(0) == []

        spec.allow_all_absolute_movement_commands()
        spec.allow_all_discrete_movement_commands()
        spec.allow_all_chat_commands()
        # Reported in schema order, not call order
        assert spec.get_list_of_command_handlers(0) == ["DiscreteMovement", "AbsoluteMovement", "Chat"]

    def test_absolute_movement_verb(self, spec):
        spec.allow_absolute_movement_command("tpx")
        modifiers = xml_root(spec).find(".//m:AbsoluteMovementCommands/m:ModifierList", NS)
        assert modifiers.find("m:command", NS).text == "tpx"

    def test_empty_verb_rejected(self, spec):
        with pytest.raises(ValueError):
            spec.allow_inventory_command("")

    def test_unknown_or_missing_handler(self, spec):
        with pytest.raises(ValueError, match="Unknown command handler"):
            spec.get_allowed_commands(0, "Teleport")
        with pytest.raises(ValueError, match="no Chat command handler"):
            spec.get_allowed_commands(0, "Chat")


# ── Information ──────────────────────────────────

MULTI_AGENT_XML = """<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<Mission xmlns="http://ProjectMalmo.microsoft.com">
  <About><Summary>Two agents</Summary></About>
  <ServerSection>
    <ServerHandlers>
      <DefaultWorldGenerator seed="42"/>
    </ServerHandlers>
  </ServerSection>
  <AgentSection mode="Creative">
    <Name>Alpha</Name>
    <AgentStart/>
    <AgentHandlers>
      <VideoProducer want_depth="true"><Width>160</Width><Height>120</Height></VideoProducer>
      <ContinuousMovementCommands/>
    </AgentHandlers>
  </AgentSection>
  <AgentSection>
    <Name>Beta</Name>
    <AgentStart/>
    <AgentHandlers>
      <DiscreteMovementCommands>
        <ModifierList type="allow-list"><command>movenorth</command></ModifierList>
      </DiscreteMovementCommands>
    </AgentHandlers>
  </AgentSection>
</Mission>"""


class TestInformation:
    def test_per_role_queries(self):
        spec = MissionSpec(MULTI_AGENT_XML, validate=True, verbose=False)
        assert spec.get_number_of_agents() == 2
        assert spec.is_video_requested(0)
        assert not spec.is_video_requested(1)
        assert spec.get_video_channels(0) == 4
        assert (spec.get_video_width(0), spec.get_video_height(0)) == (160, 120)
        assert spec.get_list_of_command_handlers(1) == ["DiscreteMovement"]
        assert spec.get_allowed_commands(1, "DiscreteMovement") == ["movenorth"]

    def test_second_agent_defaults_to_survival(self):
        spec = MissionSpec(MULTI_AGENT_XML, verbose=False)
        assert spec.mission.agent_sections[1].mode == "Survival"

    def test_role_out_of_range(self, spec):
        with pytest.raises(IndexError):
            spec.is_video_requested(1)
        with pytest.raises(IndexError):
            spec.get_video_height(-1)

    def test_setters_only_touch_first_agent(self):
        spec = MissionSpec(MULTI_AGENT_XML, verbose=False)
        spec.request_video(320, 240)
        assert spec.get_video_width(0) == 320
        assert not spec.is_video_requested(1)


# ── Files and logging ────────────────────────────

class TestSaveAndLoad:
    def test_save_then_from_file(self, spec, tmp_path):
        spec.set_summary("Saved")
        spec.draw_block(0, 0, 0, "stone")
        path = spec.save(str(tmp_path / "nested" / "mission.xml"))
        loaded = MissionSpec.from_file(path, verbose=False)
        assert loaded.get_summary() == "Saved"
        assert loaded.mission == spec.mission

    def test_quiet_builder_prints_nothing(self, capsys):
        quiet = MissionSpec(verbose=False)
        quiet.time_limit_in_seconds(5)
        quiet.request_video(320, 240)
        assert capsys.readouterr().out == ""

    def test_verbose_builder_reports_changes(self, capsys):
        loud = MissionSpec(verbose=True)
        loud.time_limit_in_seconds(5)
        out = capsys.readouterr().out
        assert "[pymalmo] [MissionSpec]" in out
        assert "Time limit set to 5s" in out


def test_generators_are_schema_types(spec):
    assert isinstance(spec.mission.server_section.server_handlers.world_generator, FlatWorldGenerator)
    spec.create_default_terrain()
    assert isinstance(spec.mission.server_section.server_handlers.world_generator, DefaultWorldGenerator)

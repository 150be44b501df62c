"""
Core module for constructing, editing and saving mission XML documents.

MissionSpec is a builder over the schema binding in pymalmo.classes: every
setter mutates the document tree, every getter reads it back, and
get_as_xml() serializes it.
"""

import os
from typing import List, Optional, Type, Union

from pymalmo.classes.mission_objects import (
    Mission, About,
    DEFAULT_GENERATOR_STRING, DEFAULT_TIME_LIMIT_MS, DEFAULT_AGENT_NAME,
)
from pymalmo.classes.world import (
    FlatWorldGenerator, DefaultWorldGenerator,
    DrawingDecorator, DrawBlock, DrawCuboid, DrawItem, DrawSphere, DrawLine,
    ServerSection, ServerHandlers, ServerInitialConditions, ServerQuitFromTimeUp, Time,
)
from pymalmo.classes.agents import (
    AgentSection, AgentStart, AgentHandlers, Placement,
    ObservationFromRecentCommands, ObservationFromHotBar, ObservationFromFullInventory,
    ObservationFromChat, ObservationFromGrid, Grid, GridPoint,
    ObservationFromDistance, NamedPoint,
    VideoProducer, RewardForReachingPosition, PointWithReward,
    AgentQuitFromReachingPosition, PointWithToleranceAndDescription,
    CommandHandler, ModifierList, ContinuousMovementCommands, DiscreteMovementCommands,
    AbsoluteMovementCommands, InventoryCommands, ChatCommands,
    COMMAND_HANDLER_FIELDS, ALLOW_LIST, DENY_LIST,
)
from pymalmo.misc.logger import create_logger
from pymalmo.misc.validation_framework import (
    MissionValidator, MissionValidationError, ValidationResult, format_issue
)
from pymalmo.parsers.xml_codec import parse_mission, serialize_mission


class MissionSpec:
    """
    Specifies a mission to be run.

    MissionSpec() builds the default mission: a flat world, a 10 second time
    limit, and one agent with continuous movement commands. MissionSpec(xml)
    wraps an existing document instead.

    Agent-level setters only touch the first agent. For multi-agent missions,
    specify the other agents in the XML.
    """

    def __init__(self,
                 xml: Optional[Union[str, bytes]] = None,
                 validate: bool = False,
                 verbose: bool = True,
                 strict: bool = False):
        """Initializes a mission, either the default one or one read from XML.

        Args:
            xml: The full XML of the mission. None builds the default mission.
            validate: If True, raise MissionValidationError when the XML does
                not satisfy the schema.
            verbose: If False, informational logging is suppressed.
            strict: If True, validation warnings count as errors.

        Raises:
            MissionXMLError: If the XML is malformed or not a Mission document.
            MissionValidationError: If validate is True and the XML is not compliant.
        """
        self.verbose = verbose
        self.strict = strict
        self.logger = create_logger(verbose=verbose, name="MissionSpec")
        self._parse_report = None

        if xml is None:
            self.mission = self._default_mission()
            return

        self.mission, self._parse_report = parse_mission(xml)
        if validate:
            result = self.validate()
            if not result.is_valid:
                raise MissionValidationError(result)
        elif self._parse_report.unknown_elements:
            self.logger.debug(
                f"Kept {len(self._parse_report.unknown_elements)} element(s) not covered by the schema binding")
        self.logger.info(f"Mission loaded ({self.get_number_of_agents()} agent(s)).")

    @classmethod
    def from_xml(cls, xml: Union[str, bytes], validate: bool = True, **kwargs) -> "MissionSpec":
        """Constructs a mission from XML, validating by default."""
        return cls(xml, validate=validate, **kwargs)

    @classmethod
    def from_file(cls, path: str, validate: bool = True, **kwargs) -> "MissionSpec":
        """Reads a mission XML file from disk."""
        with open(path, "rb") as f:
            data = f.read()
        return cls(data, validate=validate, **kwargs)

    @staticmethod
    def _default_mission() -> Mission:
        handlers = ServerHandlers(
            world_generator=FlatWorldGenerator(generator_string=DEFAULT_GENERATOR_STRING),
            server_quit_from_time_up=ServerQuitFromTimeUp(time_limit_ms=DEFAULT_TIME_LIMIT_MS),
        )
        mission = Mission(about=About(summary=""))
        mission.server_section.server_handlers = handlers
        mission.agent_sections.append(AgentSection(
            name=DEFAULT_AGENT_NAME,
            agent_handlers=AgentHandlers(continuous_movement_commands=ContinuousMovementCommands()),
        ))
        return mission

    # ========== Serialization ==========

    def get_as_xml(self, pretty_print: bool = True) -> str:
        """Gets the mission specification as an XML string.

        Args:
            pretty_print: If True, add indentation and newlines to make it more readable.
        """
        return serialize_mission(self.mission, pretty_print)

    def save(self, path: str, pretty_print: bool = True) -> str:
        """Writes the mission XML to `path` (UTF-8, LF line endings) and returns the path."""
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "wb") as f:
            f.write(self.get_as_xml(pretty_print).encode("utf-8"))
        self.logger.info(f"Mission saved '{path}'")
        return path

    def validate(self) -> ValidationResult:
        """Checks the document against the schema. Issues are logged; nothing is raised."""
        result = MissionValidator(strict=self.strict, report=self._parse_report).validate(self.mission)
        for issue in result.issues:
            self.logger.debug(format_issue(issue))
        if not result.is_valid:
            self.logger.warning(result.get_summary())
        return result

    # ========== Internal helpers ==========

    @property
    def _server_section(self) -> ServerSection:
        if self.mission.server_section is None:
            self.mission.server_section = ServerSection()
        return self.mission.server_section

    @property
    def _server_handlers(self) -> ServerHandlers:
        section = self._server_section
        if section.server_handlers is None:
            section.server_handlers = ServerHandlers()
        return section.server_handlers

    def _agent(self, role: int) -> AgentSection:
        sections = self.mission.agent_sections
        if not 0 <= role < len(sections):
            raise IndexError(f"Role {role} is out of range: mission has {len(sections)} agent(s).")
        return sections[role]

    @property
    def _first_agent(self) -> AgentSection:
        return self._agent(0)

    @property
    def _agent_handlers(self) -> AgentHandlers:
        agent = self._first_agent
        if agent.agent_handlers is None:
            agent.agent_handlers = AgentHandlers()
        return agent.agent_handlers

    @property
    def _agent_start(self) -> AgentStart:
        agent = self._first_agent
        if agent.agent_start is None:
            agent.agent_start = AgentStart()
        return agent.agent_start

    def _drawing_decorator(self) -> DrawingDecorator:
        handlers = self._server_handlers
        if handlers.drawing_decorator is None:
            handlers.drawing_decorator = DrawingDecorator()
        return handlers.drawing_decorator

    def _initial_time(self) -> Time:
        section = self._server_section
        if section.server_initial_conditions is None:
            section.server_initial_conditions = ServerInitialConditions()
        conditions = section.server_initial_conditions
        if conditions.time is None:
            conditions.time = Time()
        return conditions.time

    # ========== Settings for the server ==========

    def set_summary(self, summary: str):
        """Sets the mission summary shown to the agents."""
        if self.mission.about is None:
            self.mission.about = About()
        self.mission.about.summary = summary

    def get_summary(self) -> str:
        """Returns the mission summary."""
        about = self.mission.about
        return about.summary if about is not None and about.summary is not None else ""

    def time_limit_in_seconds(self, s: float):
        """Sets the time limit for the mission, in seconds."""
        self._server_handlers.server_quit_from_time_up = ServerQuitFromTimeUp(time_limit_ms=s * 1000.0)
        self.logger.info(f"Time limit set to {s}s")

    def create_default_terrain(self):
        """Instead of the default flat world, make a world using Minecraft's terrain generator."""
        self._server_handlers.world_generator = DefaultWorldGenerator()
        self.logger.info("World generator set to DefaultWorldGenerator")

    def set_world_seed(self, seed: str):
        """Sets the seed of the current flat or default world generator."""
        generator = self._server_handlers.world_generator
        if not isinstance(generator, (FlatWorldGenerator, DefaultWorldGenerator)):
            raise RuntimeError("The world seed can only be set on a flat or default world generator.")
        generator.seed = str(seed)

    def force_world_reset(self):
        """Forces the world to be regenerated when the mission starts."""
        generator = self._server_handlers.world_generator
        if generator is None:
            raise RuntimeError("The mission has no world generator.")
        generator.force_reset = True

    def set_time_of_day(self, t: int, allow_time_to_pass: bool):
        """Sets the time of day for the start of the mission.

        Args:
            t: Time of day in ticks (thousandths of an hour since dawn).
               0 = Dawn, 6000 = Noon, 12000 = Sunset, 18000 = Midnight.
            allow_time_to_pass: If False then the sun does not move.
        """
        time = self._initial_time()
        time.start_time = int(t)
        time.allow_passage_of_time = bool(allow_time_to_pass)
        self.logger.info(f"Start time set to {t}")

    def draw_block(self, x: int, y: int, z: int, block_type: str):
        """Draws a single block at (x, y, z)."""
        self._drawing_decorator().draw_objects.append(DrawBlock(x=x, y=y, z=z, type=block_type))

    def draw_cuboid(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, block_type: str):
        """Draws a solid cuboid between two corners, inclusive."""
        self._drawing_decorator().draw_objects.append(
            DrawCuboid(x1=x1, y1=y1, z1=z1, x2=x2, y2=y2, z2=z2, type=block_type))

    def draw_item(self, x: int, y: int, z: int, item_type: str):
        """Drops an item at (x, y, z)."""
        self._drawing_decorator().draw_objects.append(DrawItem(x=x, y=y, z=z, type=item_type))

    def draw_sphere(self, x: int, y: int, z: int, radius: int, block_type: str):
        """Draws a solid sphere of blocks centred on (x, y, z)."""
        self._drawing_decorator().draw_objects.append(
            DrawSphere(x=x, y=y, z=z, radius=radius, type=block_type))

    def draw_line(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, block_type: str):
        """Draws a line of blocks between two end points."""
        self._drawing_decorator().draw_objects.append(
            DrawLine(x1=x1, y1=y1, z1=z1, x2=x2, y2=y2, z2=z2, type=block_type))

    # ========== Settings for the agents ==========

    def start_at(self, x: float, y: float, z: float):
        """Sets the start location for the agent."""
        self._agent_start.placement = Placement(x=x, y=y, z=z)
        self.logger.info(f"Agent start set to ({x}, {y}, {z})")

    def start_at_with_pitch_and_yaw(self, x: float, y: float, z: float, pitch: float, yaw: float):
        """Sets the start location and look direction for the agent."""
        self._agent_start.placement = Placement(x=x, y=y, z=z, yaw=yaw, pitch=pitch)
        self.logger.info(f"Agent start set to ({x}, {y}, {z}) facing yaw={yaw}, pitch={pitch}")

    def end_at(self, x: float, y: float, z: float, tolerance: Optional[float] = None):
        """Adds a position that ends the mission for the agent.

        Can be called more than once if several positions end the mission.
        """
        handlers = self._agent_handlers
        if handlers.agent_quit_from_reaching_position is None:
            handlers.agent_quit_from_reaching_position = AgentQuitFromReachingPosition()
        handlers.agent_quit_from_reaching_position.markers.append(
            PointWithToleranceAndDescription(x=x, y=y, z=z, tolerance=tolerance))
        self.logger.info(f"Added goal position ({x}, {y}, {z})")

    def set_mode_to_creative(self):
        """Creative mode lets the agent fly and not take damage."""
        self._first_agent.mode = "Creative"
        self.logger.info("Agent mode set to Creative")

    def set_mode_to_spectator(self):
        """Spectator mode lets the agent fly and pass through objects."""
        self._first_agent.mode = "Spectator"
        self.logger.info("Agent mode set to Spectator")

    def _set_video(self, width: int, height: int, want_depth: bool):
        if width % 4 != 0:
            self.logger.warning(f"Video width {width} is not divisible by 4")
        if height % 2 != 0:
            self.logger.warning(f"Video height {height} is not divisible by 2")
        self._agent_handlers.video_producer = VideoProducer(want_depth=want_depth, width=width, height=height)
        self.logger.info(f"Video requested: {width}x{height}{' with depth' if want_depth else ''}")

    def request_video(self, width: int, height: int):
        """Asks for RGB image data to be sent for the agent.

        Args:
            width: Width of the image in pixels. Should be divisible by 4.
            height: Height of the image in pixels. Should be divisible by 2.
        """
        self._set_video(width, height, want_depth=False)

    def request_video_with_depth(self, width: int, height: int):
        """Like request_video, but adds a depth channel (RGBD)."""
        self._set_video(width, height, want_depth=True)

    def reward_for_reaching_position(self, x: float, y: float, z: float, amount: float, tolerance: float):
        """Sends `amount` to the agent when it comes within `tolerance` (Euclidean) of (x, y, z)."""
        handlers = self._agent_handlers
        if handlers.reward_for_reaching_position is None:
            handlers.reward_for_reaching_position = RewardForReachingPosition()
        handlers.reward_for_reaching_position.markers.append(
            PointWithReward(x=x, y=y, z=z, reward=amount, tolerance=tolerance))
        self.logger.info(f"Added reward of {amount} at ({x}, {y}, {z})")

    def observe_recent_commands(self):
        """Adds 'CommandsSinceLastObservation' to the observations."""
        handlers = self._agent_handlers
        if handlers.observation_from_recent_commands is None:
            handlers.observation_from_recent_commands = ObservationFromRecentCommands()

    def observe_hot_bar(self):
        """Adds the contents of the hot-bar to the observations."""
        handlers = self._agent_handlers
        if handlers.observation_from_hot_bar is None:
            handlers.observation_from_hot_bar = ObservationFromHotBar()

    def observe_full_inventory(self):
        """Adds the full item inventory to the observations."""
        handlers = self._agent_handlers
        if handlers.observation_from_full_inventory is None:
            handlers.observation_from_full_inventory = ObservationFromFullInventory()

    def observe_chat(self):
        """Adds chat messages to the observations."""
        handlers = self._agent_handlers
        if handlers.observation_from_chat is None:
            handlers.observation_from_chat = ObservationFromChat()

    def observe_grid(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, name: str):
        """Asks for the block types in a cuboid relative to the agent, as a JSON array called `name`."""
        if x1 > x2 or y1 > y2 or z1 > z2:
            self.logger.warning(f"Grid '{name}' has a min corner beyond its max corner")
        handlers = self._agent_handlers
        if handlers.observation_from_grid is None:
            handlers.observation_from_grid = ObservationFromGrid()
        handlers.observation_from_grid.grids.append(Grid(
            name=name, min=GridPoint(x=x1, y=y1, z=z1), max=GridPoint(x=x2, y=y2, z=z2)))

    def observe_distance(self, x: float, y: float, z: float, name: str):
        """Asks for the Euclidean distance to (x, y, z), observed as 'distanceFrom<name>'."""
        handlers = self._agent_handlers
        if handlers.observation_from_distance is None:
            handlers.observation_from_distance = ObservationFromDistance()
        handlers.observation_from_distance.markers.append(NamedPoint(x=x, y=y, z=z, name=name))

    # ========== Settings for the agents: command handlers ==========

    def remove_all_command_handlers(self):
        """Removes every command handler from the first agent."""
        handlers = self._agent_handlers
        for field_name in COMMAND_HANDLER_FIELDS.values():
            setattr(handlers, field_name, None)
        self.logger.info("Removed all command handlers")

    def _ensure_handler(self, field_name: str, handler_cls: Type[CommandHandler]) -> CommandHandler:
        handlers = self._agent_handlers
        handler = getattr(handlers, field_name)
        if handler is None:
            handler = handler_cls()
            setattr(handlers, field_name, handler)
        return handler

    def _allow_verb(self, field_name: str, handler_cls: Type[CommandHandler], verb: str):
        if not verb:
            raise ValueError("Command verb must be a non-empty string.")
        handler = self._ensure_handler(field_name, handler_cls)
        _put_verb_on_list(handler, verb, ALLOW_LIST, DENY_LIST)

    def allow_all_continuous_movement_commands(self):
        """Adds a continuous movement handler with no allow-list or deny-list, if none is present."""
        self._ensure_handler("continuous_movement_commands", ContinuousMovementCommands)

    def allow_continuous_movement_command(self, verb: str):
        """Adds `verb` (e.g. "move") to the continuous movement allow-list.

        When an allow-list is present only the listed commands are allowed. A
        deny-list on the handler is replaced.
        """
        self._allow_verb("continuous_movement_commands", ContinuousMovementCommands, verb)

    def allow_all_discrete_movement_commands(self):
        self._ensure_handler("discrete_movement_commands", DiscreteMovementCommands)

    def allow_discrete_movement_command(self, verb: str):
        """Adds `verb` (e.g. "movenorth") to the discrete movement allow-list."""
        self._allow_verb("discrete_movement_commands", DiscreteMovementCommands, verb)

    def allow_all_absolute_movement_commands(self):
        self._ensure_handler("absolute_movement_commands", AbsoluteMovementCommands)

    def allow_absolute_movement_command(self, verb: str):
        """Adds `verb` (e.g. "tpx") to the absolute movement allow-list."""
        self._allow_verb("absolute_movement_commands", AbsoluteMovementCommands, verb)

    def allow_all_inventory_commands(self):
        self._ensure_handler("inventory_commands", InventoryCommands)

    def allow_inventory_command(self, verb: str):
        """Adds `verb` (e.g. "selectInventoryItem") to the inventory allow-list."""
        self._allow_verb("inventory_commands", InventoryCommands, verb)

    def allow_all_chat_commands(self):
        self._ensure_handler("chat_commands", ChatCommands)

    # ========== Information ==========

    def get_number_of_agents(self) -> int:
        """Returns the number of agents involved in this mission."""
        return len(self.mission.agent_sections)

    def _video(self, role: int) -> VideoProducer:
        handlers = self._agent(role).agent_handlers
        video = handlers.video_producer if handlers is not None else None
        if video is None:
            raise RuntimeError(f"No video has been requested for role {role}.")
        return video

    def is_video_requested(self, role: int) -> bool:
        """True if video was requested for the agent at index `role`."""
        handlers = self._agent(role).agent_handlers
        return handlers is not None and handlers.video_producer is not None

    def get_video_width(self, role: int) -> int:
        return self._video(role).width

    def get_video_height(self, role: int) -> int:
        return self._video(role).height

    def get_video_channels(self, role: int) -> int:
        """Returns 3 for RGB, 4 for RGBD."""
        return 4 if self._video(role).want_depth else 3

    def get_list_of_command_handlers(self, role: int) -> List[str]:
        """Names of the command handlers present for an agent, e.g. ["ContinuousMovement"]."""
        handlers = self._agent(role).agent_handlers
        if handlers is None:
            return []
        return [name for name, field_name in COMMAND_HANDLER_FIELDS.items()
                if getattr(handlers, field_name) is not None]

    def get_allowed_commands(self, role: int, command_handler: str) -> List[str]:
        """Verbs on the allow-list of the named handler.

        Empty when the handler allows everything or carries a deny-list.

        Raises:
            ValueError: If the handler name is unknown or the handler is not present.
        """
        if command_handler not in COMMAND_HANDLER_FIELDS:
            raise ValueError(f"Unknown command handler '{command_handler}'. "
                             f"Valid names: {', '.join(COMMAND_HANDLER_FIELDS)}")
        handlers = self._agent(role).agent_handlers
        handler = getattr(handlers, COMMAND_HANDLER_FIELDS[command_handler]) if handlers is not None else None
        if handler is None:
            raise ValueError(f"Role {role} has no {command_handler} command handler.")
        modifiers = handler.modifier_list
        if modifiers is None or modifiers.type != ALLOW_LIST:
            return []
        return list(modifiers.commands)


def _put_verb_on_list(handler: CommandHandler, verb: str, on_list: str, off_list: str):
    """Adds `verb` to the `on_list` of a handler, replacing an `off_list` if one is present."""
    modifiers = handler.modifier_list
    if modifiers is None:
        modifiers = handler.modifier_list = ModifierList(type=on_list)
    elif modifiers.type == off_list:
        modifiers.type = on_list
        modifiers.commands.clear()
    if verb not in modifiers.commands:
        modifiers.commands.append(verb)

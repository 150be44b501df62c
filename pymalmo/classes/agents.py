# pymalmo/classes/agents.py
"""Agent-side schema elements: start state, observations, video, rewards, quits and command handlers."""
from dataclasses import dataclass
from typing import List, Optional

from pymalmo.classes.base import (
    SchemaObject, attribute, text_element, text_elements, child, children
)

GAME_MODES = ("Survival", "Creative", "Adventure", "Spectator")
ALLOW_LIST = "allow-list"
DENY_LIST = "deny-list"


# --- Start state ---
@dataclass
class Placement(SchemaObject):
    TAG = "Placement"
    x: Optional[float] = attribute("x", float, required=True)
    y: Optional[float] = attribute("y", float, required=True)
    z: Optional[float] = attribute("z", float, required=True)
    yaw: Optional[float] = attribute("yaw", float)
    pitch: Optional[float] = attribute("pitch", float)


@dataclass
class AgentStart(SchemaObject):
    TAG = "AgentStart"
    placement: Optional[Placement] = child(Placement)


# --- Observations ---
@dataclass
class ObservationFromRecentCommands(SchemaObject):
    """Adds 'CommandsSinceLastObservation' to the observation JSON."""
    TAG = "ObservationFromRecentCommands"


@dataclass
class ObservationFromHotBar(SchemaObject):
    """Adds 'Hotbar_<n>_size' / 'Hotbar_<n>_item' entries."""
    TAG = "ObservationFromHotBar"


@dataclass
class ObservationFromFullInventory(SchemaObject):
    """Adds 'Inventory_<n>_size' / 'Inventory_<n>_item' entries."""
    TAG = "ObservationFromFullInventory"


@dataclass
class ObservationFromChat(SchemaObject):
    TAG = "ObservationFromChat"


@dataclass
class GridPoint(SchemaObject):
    x: Optional[int] = attribute("x", int, required=True)
    y: Optional[int] = attribute("y", int, required=True)
    z: Optional[int] = attribute("z", int, required=True)


@dataclass
class Grid(SchemaObject):
    """Cuboid of block types relative to the agent, reported as a JSON array under `name`."""
    TAG = "Grid"
    name: Optional[str] = attribute("name", required=True)
    min: Optional[GridPoint] = child(GridPoint, required=True, tag="min")
    max: Optional[GridPoint] = child(GridPoint, required=True, tag="max")


@dataclass
class ObservationFromGrid(SchemaObject):
    TAG = "ObservationFromGrid"
    grids: List[Grid] = children(Grid, min_occurs=1)


@dataclass
class NamedPoint(SchemaObject):
    """Observed as 'distanceFrom<name>'."""
    TAG = "Marker"
    x: Optional[float] = attribute("x", float, required=True)
    y: Optional[float] = attribute("y", float, required=True)
    z: Optional[float] = attribute("z", float, required=True)
    name: Optional[str] = attribute("name", required=True)


@dataclass
class ObservationFromDistance(SchemaObject):
    TAG = "ObservationFromDistance"
    markers: List[NamedPoint] = children(NamedPoint, min_occurs=1)


# --- Video ---
@dataclass
class VideoProducer(SchemaObject):
    TAG = "VideoProducer"
    want_depth: Optional[bool] = attribute("want_depth", bool, default=False)
    viewpoint: Optional[int] = attribute("viewpoint", int)
    width: Optional[int] = text_element("Width", int, required=True)
    height: Optional[int] = text_element("Height", int, required=True)


# --- Rewards and quits ---
@dataclass
class PointWithReward(SchemaObject):
    TAG = "Marker"
    x: Optional[float] = attribute("x", float, required=True)
    y: Optional[float] = attribute("y", float, required=True)
    z: Optional[float] = attribute("z", float, required=True)
    reward: Optional[float] = attribute("reward", float, required=True)
    tolerance: Optional[float] = attribute("tolerance", float, required=True)
    oneshot: Optional[bool] = attribute("oneshot", bool)


@dataclass
class RewardForReachingPosition(SchemaObject):
    TAG = "RewardForReachingPosition"
    markers: List[PointWithReward] = children(PointWithReward, min_occurs=1)


@dataclass
class PointWithToleranceAndDescription(SchemaObject):
    TAG = "Marker"
    x: Optional[float] = attribute("x", float, required=True)
    y: Optional[float] = attribute("y", float, required=True)
    z: Optional[float] = attribute("z", float, required=True)
    tolerance: Optional[float] = attribute("tolerance", float)
    description: Optional[str] = attribute("description")


@dataclass
class AgentQuitFromReachingPosition(SchemaObject):
    TAG = "AgentQuitFromReachingPosition"
    markers: List[PointWithToleranceAndDescription] = children(PointWithToleranceAndDescription, min_occurs=1)


# --- Command handlers ---
@dataclass
class ModifierList(SchemaObject):
    """Allow-list or deny-list of command verbs."""
    TAG = "ModifierList"
    type: Optional[str] = attribute("type", required=True, choices=(ALLOW_LIST, DENY_LIST))
    commands: List[str] = text_elements("command")


@dataclass
class CommandHandler(SchemaObject):
    """Base for command handlers; with no ModifierList every verb is allowed."""
    modifier_list: Optional[ModifierList] = child(ModifierList)


@dataclass
class ContinuousMovementCommands(CommandHandler):
    TAG = "ContinuousMovementCommands"
    turn_speed_degs: Optional[int] = attribute("turnSpeedDegs", int)


@dataclass
class DiscreteMovementCommands(CommandHandler):
    TAG = "DiscreteMovementCommands"
    auto_jump: Optional[bool] = attribute("autoJump", bool)
    auto_fall: Optional[bool] = attribute("autoFall", bool)


@dataclass
class AbsoluteMovementCommands(CommandHandler):
    TAG = "AbsoluteMovementCommands"


@dataclass
class InventoryCommands(CommandHandler):
    TAG = "InventoryCommands"


@dataclass
class ChatCommands(CommandHandler):
    TAG = "ChatCommands"


@dataclass
class SimpleCraftCommands(CommandHandler):
    TAG = "SimpleCraftCommands"


@dataclass
class MissionQuitCommands(CommandHandler):
    TAG = "MissionQuitCommands"
    quit_description: Optional[str] = attribute("quitDescription")


# Handler short names used by the information getters, in schema order
COMMAND_HANDLER_FIELDS = {
    "ContinuousMovement": "continuous_movement_commands",
    "DiscreteMovement": "discrete_movement_commands",
    "AbsoluteMovement": "absolute_movement_commands",
    "Inventory": "inventory_commands",
    "Chat": "chat_commands",
    "SimpleCraft": "simple_craft_commands",
    "MissionQuit": "mission_quit_commands",
}


@dataclass
class AgentHandlers(SchemaObject):
    TAG = "AgentHandlers"
    observation_from_recent_commands: Optional[ObservationFromRecentCommands] = child(ObservationFromRecentCommands)
    observation_from_hot_bar: Optional[ObservationFromHotBar] = child(ObservationFromHotBar)
    observation_from_full_inventory: Optional[ObservationFromFullInventory] = child(ObservationFromFullInventory)
    observation_from_chat: Optional[ObservationFromChat] = child(ObservationFromChat)
    observation_from_grid: Optional[ObservationFromGrid] = child(ObservationFromGrid)
    observation_from_distance: Optional[ObservationFromDistance] = child(ObservationFromDistance)
    video_producer: Optional[VideoProducer] = child(VideoProducer)
    reward_for_reaching_position: Optional[RewardForReachingPosition] = child(RewardForReachingPosition)
    agent_quit_from_reaching_position: Optional[AgentQuitFromReachingPosition] = child(AgentQuitFromReachingPosition)
    continuous_movement_commands: Optional[ContinuousMovementCommands] = child(ContinuousMovementCommands)
    discrete_movement_commands: Optional[DiscreteMovementCommands] = child(DiscreteMovementCommands)
    absolute_movement_commands: Optional[AbsoluteMovementCommands] = child(AbsoluteMovementCommands)
    inventory_commands: Optional[InventoryCommands] = child(InventoryCommands)
    chat_commands: Optional[ChatCommands] = child(ChatCommands)
    simple_craft_commands: Optional[SimpleCraftCommands] = child(SimpleCraftCommands)
    mission_quit_commands: Optional[MissionQuitCommands] = child(MissionQuitCommands)

    def command_handlers(self) -> List[CommandHandler]:
        """Present command handlers, in schema order."""
        return [getattr(self, f) for f in COMMAND_HANDLER_FIELDS.values() if getattr(self, f) is not None]


@dataclass
class AgentSection(SchemaObject):
    TAG = "AgentSection"
    mode: Optional[str] = attribute("mode", default="Survival", choices=GAME_MODES)
    name: Optional[str] = text_element("Name", required=True)
    agent_start: Optional[AgentStart] = child(AgentStart, required=True, create=True)
    agent_handlers: Optional[AgentHandlers] = child(AgentHandlers, required=True, create=True)

# pymalmo/classes/world.py
"""Server-side schema elements: world generation, drawing, time and quit conditions."""
from dataclasses import dataclass
from typing import List, Optional, Union

from pymalmo.classes.base import (
    SchemaObject, attribute, text_element, child, choice, children
)

WEATHER_TYPES = ("normal", "clear", "rain", "thunder")


# --- World generators ---
@dataclass
class FlatWorldGenerator(SchemaObject):
    """Superflat world built from a Minecraft generator string."""
    TAG = "FlatWorldGenerator"
    generator_string: Optional[str] = attribute("generatorString")
    seed: Optional[str] = attribute("seed")
    force_reset: Optional[bool] = attribute("forceReset", bool)


@dataclass
class DefaultWorldGenerator(SchemaObject):
    """Minecraft's own terrain generator."""
    TAG = "DefaultWorldGenerator"
    seed: Optional[str] = attribute("seed")
    force_reset: Optional[bool] = attribute("forceReset", bool)


@dataclass
class FileWorldGenerator(SchemaObject):
    """World loaded from a saved map directory."""
    TAG = "FileWorldGenerator"
    src: Optional[str] = attribute("src", required=True)
    force_reset: Optional[bool] = attribute("forceReset", bool)


WorldGenerator = Union[FlatWorldGenerator, DefaultWorldGenerator, FileWorldGenerator]


# --- Drawing objects ---
@dataclass
class DrawBlock(SchemaObject):
    TAG = "DrawBlock"
    x: Optional[int] = attribute("x", int, required=True)
    y: Optional[int] = attribute("y", int, required=True)
    z: Optional[int] = attribute("z", int, required=True)
    type: Optional[str] = attribute("type", required=True)


@dataclass
class DrawItem(SchemaObject):
    TAG = "DrawItem"
    x: Optional[int] = attribute("x", int, required=True)
    y: Optional[int] = attribute("y", int, required=True)
    z: Optional[int] = attribute("z", int, required=True)
    type: Optional[str] = attribute("type", required=True)


@dataclass
class DrawCuboid(SchemaObject):
    """Solid box between two corners (inclusive)."""
    TAG = "DrawCuboid"
    x1: Optional[int] = attribute("x1", int, required=True)
    y1: Optional[int] = attribute("y1", int, required=True)
    z1: Optional[int] = attribute("z1", int, required=True)
    x2: Optional[int] = attribute("x2", int, required=True)
    y2: Optional[int] = attribute("y2", int, required=True)
    z2: Optional[int] = attribute("z2", int, required=True)
    type: Optional[str] = attribute("type", required=True)


@dataclass
class DrawSphere(SchemaObject):
    TAG = "DrawSphere"
    x: Optional[int] = attribute("x", int, required=True)
    y: Optional[int] = attribute("y", int, required=True)
    z: Optional[int] = attribute("z", int, required=True)
    radius: Optional[int] = attribute("radius", int, required=True)
    type: Optional[str] = attribute("type", required=True)


@dataclass
class DrawLine(SchemaObject):
    TAG = "DrawLine"
    x1: Optional[int] = attribute("x1", int, required=True)
    y1: Optional[int] = attribute("y1", int, required=True)
    z1: Optional[int] = attribute("z1", int, required=True)
    x2: Optional[int] = attribute("x2", int, required=True)
    y2: Optional[int] = attribute("y2", int, required=True)
    z2: Optional[int] = attribute("z2", int, required=True)
    type: Optional[str] = attribute("type", required=True)


DrawObject = Union[DrawBlock, DrawItem, DrawCuboid, DrawSphere, DrawLine]


@dataclass
class DrawingDecorator(SchemaObject):
    """Ordered list of draw commands applied after world generation."""
    TAG = "DrawingDecorator"
    draw_objects: List[DrawObject] = children(DrawBlock, DrawItem, DrawCuboid, DrawSphere, DrawLine)


# --- Quit conditions ---
@dataclass
class ServerQuitFromTimeUp(SchemaObject):
    TAG = "ServerQuitFromTimeUp"
    time_limit_ms: Optional[float] = attribute("timeLimitMs", float, required=True)
    description: Optional[str] = attribute("description")


@dataclass
class ServerQuitWhenAnyAgentFinishes(SchemaObject):
    TAG = "ServerQuitWhenAnyAgentFinishes"
    description: Optional[str] = attribute("description")


# --- Initial conditions ---
@dataclass
class Time(SchemaObject):
    """Time of day in ticks: 0 = dawn, 6000 = noon, 12000 = sunset, 18000 = midnight."""
    TAG = "Time"
    start_time: Optional[int] = text_element("StartTime", int)
    allow_passage_of_time: Optional[bool] = text_element("AllowPassageOfTime", bool)


@dataclass
class ServerInitialConditions(SchemaObject):
    TAG = "ServerInitialConditions"
    time: Optional[Time] = child(Time)
    weather: Optional[str] = text_element("Weather", choices=WEATHER_TYPES)
    allow_spawning: Optional[bool] = text_element("AllowSpawning", bool)


@dataclass
class ServerHandlers(SchemaObject):
    TAG = "ServerHandlers"
    world_generator: Optional[WorldGenerator] = choice(
        FlatWorldGenerator, DefaultWorldGenerator, FileWorldGenerator, required=True
    )
    drawing_decorator: Optional[DrawingDecorator] = child(DrawingDecorator)
    server_quit_from_time_up: Optional[ServerQuitFromTimeUp] = child(ServerQuitFromTimeUp)
    server_quit_when_any_agent_finishes: Optional[ServerQuitWhenAnyAgentFinishes] = child(ServerQuitWhenAnyAgentFinishes)


@dataclass
class ServerSection(SchemaObject):
    TAG = "ServerSection"
    server_initial_conditions: Optional[ServerInitialConditions] = child(ServerInitialConditions)
    server_handlers: Optional[ServerHandlers] = child(ServerHandlers, required=True, create=True)

__version__ = "0.1.0"

# --- Core Mission Building ---
from .parsers.mission_builder import MissionSpec
from .parsers.xml_codec import MissionXMLError, parse_mission, serialize_mission

# --- Validation ---
from .misc.validation_framework import (
    MissionValidator,
    MissionValidationError,
    ValidationResult,
    ValidationIssue,
    ValidationSeverity
)

# --- Schema Binding ---
from .classes.mission_objects import (
    Mission,
    About,
    ModSettings,
    XML_NAMESPACE,
    DEFAULT_GENERATOR_STRING,
    DEFAULT_TIME_LIMIT_MS,
    DEFAULT_AGENT_NAME
)
from .classes.world import (
    ServerSection,
    ServerHandlers,
    ServerInitialConditions,
    Time,
    FlatWorldGenerator,
    DefaultWorldGenerator,
    FileWorldGenerator,
    DrawingDecorator,
    DrawBlock,
    DrawCuboid,
    DrawItem,
    DrawSphere,
    DrawLine,
    ServerQuitFromTimeUp,
    ServerQuitWhenAnyAgentFinishes
)
from .classes.agents import (
    AgentSection,
    AgentStart,
    AgentHandlers,
    Placement,
    VideoProducer,
    ModifierList,
    COMMAND_HANDLER_FIELDS
)

from .misc.logger import create_logger
_logger = create_logger(verbose=False, name="pymalmo")
_logger.info(f"pymalmo {__version__} loaded.")

# --- Visualization (Optional) ---
from .visualization import Map2DVisualizer, save_mission_map, MATPLOTLIB_AVAILABLE

if MATPLOTLIB_AVAILABLE:
    _logger.info("  -> 2D Visualization available (matplotlib detected)")

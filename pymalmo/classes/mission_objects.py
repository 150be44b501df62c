# pymalmo/classes/mission_objects.py
from dataclasses import dataclass
from typing import List, Optional

from pymalmo.classes.base import SchemaObject, text_element, child, children
from pymalmo.classes.world import ServerSection
from pymalmo.classes.agents import AgentSection

# --- Document constants ---
XML_NAMESPACE = "http://ProjectMalmo.microsoft.com"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = f"{XML_NAMESPACE} Mission.xsd"

# --- Defaults for a freshly built mission ---
DEFAULT_GENERATOR_STRING = "3;7,220*1,5*3,2;3;,biome_1"
DEFAULT_TIME_LIMIT_MS = 10000
DEFAULT_AGENT_NAME = "Cristina"


@dataclass
class About(SchemaObject):
    TAG = "About"
    summary: Optional[str] = text_element("Summary", default="", required=True)
    description: Optional[str] = text_element("Description")


@dataclass
class ModSettings(SchemaObject):
    TAG = "ModSettings"
    ms_per_tick: Optional[int] = text_element("MsPerTick", int)
    prioritise_offscreen_rendering: Optional[bool] = text_element("PrioritiseOffscreenRendering", bool)


@dataclass
class Mission(SchemaObject):
    """Root of the mission document."""
    TAG = "Mission"
    about: Optional[About] = child(About, required=True, create=True)
    mod_settings: Optional[ModSettings] = child(ModSettings)
    server_section: Optional[ServerSection] = child(ServerSection, required=True, create=True)
    agent_sections: List[AgentSection] = children(AgentSection, min_occurs=1)

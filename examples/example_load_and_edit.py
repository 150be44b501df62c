"""
Example: load an existing mission XML, inspect it, and tighten its command set.
"""
import os
import sys

# Add pymalmo to path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pymalmo import MissionSpec, MissionValidationError

MISSION_XML = '''<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<Mission xmlns="http://ProjectMalmo.microsoft.com" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <About><Summary>Find the exit</Summary></About>
  <ServerSection>
    <ServerHandlers>
      <FlatWorldGenerator generatorString="3;7,2*3,2;1;"/>
      <ServerQuitFromTimeUp timeLimitMs="30000"/>
      <ServerQuitWhenAnyAgentFinishes/>
    </ServerHandlers>
  </ServerSection>
  <AgentSection mode="Survival">
    <Name>Explorer</Name>
    <AgentStart><Placement x="0.5" y="4" z="0.5"/></AgentStart>
    <AgentHandlers>
      <ObservationFromFullStats/>
      <VideoProducer><Width>640</Width><Height>480</Height></VideoProducer>
      <ContinuousMovementCommands>
        <ModifierList type="deny-list"><command>attack</command></ModifierList>
      </ContinuousMovementCommands>
    </AgentHandlers>
  </AgentSection>
</Mission>'''


def main():
    # ObservationFromFullStats is not modelled, so strict schema checking rejects it
    try:
        MissionSpec(MISSION_XML, validate=True, verbose=False)
    except MissionValidationError as e:
        print(f"Validation rejected the document:\n{e}")

    # Without validation it is kept verbatim and written back out
    spec = MissionSpec(MISSION_XML, validate=False)
    print(f"Summary: {spec.get_summary()}")
    print(f"Agents: {spec.get_number_of_agents()}")
    print(f"Video: {spec.get_video_width(0)}x{spec.get_video_height(0)}, "
          f"{spec.get_video_channels(0)} channels")
    print(f"Handlers: {spec.get_list_of_command_handlers(0)}")

    # Replacing the deny-list with an allow-list
    spec.allow_continuous_movement_command("move")
    spec.allow_continuous_movement_command("turn")
    print(f"Allowed: {spec.get_allowed_commands(0, 'ContinuousMovement')}")
    print(spec.get_as_xml(pretty_print=True))


if __name__ == "__main__":
    main()

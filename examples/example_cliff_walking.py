"""
Example: a small cliff-walking mission built with MissionSpec.

The agent starts on a stone platform surrounded by lava and must reach a
gold block. Only discrete movement is allowed.
"""
import os
import sys

# Add pymalmo to path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pymalmo import MissionSpec


def main():
    spec = MissionSpec(verbose=True)
    spec.set_summary("Cliff walking")
    spec.time_limit_in_seconds(60)
    spec.set_time_of_day(6000, allow_time_to_pass=False)

    # Lava pit with a walkable stone strip and a goal block
    spec.draw_cuboid(-2, 226, -2, 12, 226, 8, "lava")
    spec.draw_cuboid(0, 226, 0, 10, 226, 1, "stone")
    spec.draw_block(10, 226, 1, "gold_block")

    spec.start_at_with_pitch_and_yaw(0.5, 227, 0.5, pitch=30, yaw=-90)
    spec.end_at(10.5, 227, 1.5, tolerance=0.5)
    spec.reward_for_reaching_position(10.5, 227, 1.5, amount=100, tolerance=0.5)

    spec.remove_all_command_handlers()
    for verb in ("movenorth", "movesouth", "moveeast", "movewest"):
        spec.allow_discrete_movement_command(verb)

    spec.observe_grid(-1, -1, -1, 1, -1, 1, "floor3x3")
    spec.request_video(320, 240)

    result = spec.validate()
    print(result.get_summary())

    output_path = spec.save(os.path.join("out", "cliff_walking.xml"))
    print(f"Mission saved to: {output_path}")
    print(spec.get_as_xml(pretty_print=True))


if __name__ == "__main__":
    main()

"""
Example demonstrating the 2D mission plan with matplotlib.

Draws a small arena, places goal and reward markers, then saves a top-down
image of everything the mission will build.
"""
import os
import sys

# Add pymalmo to path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from pymalmo import MissionSpec, save_mission_map


def main():
    print("=" * 60)
    print("2D MISSION PLAN EXAMPLE")
    print("=" * 60)

    spec = MissionSpec(verbose=True)
    spec.set_summary("Arena with a hill")
    spec.draw_cuboid(-10, 226, -10, 10, 226, 10, "grass")
    spec.draw_sphere(4, 226, 4, 3, "dirt")
    spec.draw_line(-8, 227, -8, 8, 227, -8, "fence")
    spec.draw_item(0, 227, 5, "diamond")

    spec.start_at_with_pitch_and_yaw(0.5, 227, 0.5, pitch=0, yaw=180)
    spec.end_at(-6.5, 227, 6.5, tolerance=1.5)
    spec.reward_for_reaching_position(4.5, 230, 4.5, amount=25, tolerance=2)
    spec.observe_distance(-6.5, 227, 6.5, "Goal")
    spec.observe_grid(-2, -1, -2, 2, -1, 2, "floor5x5")

    os.makedirs("out", exist_ok=True)
    path = save_mission_map(spec, os.path.join("out", "arena_plan.png"))
    print(f"✓ Plan saved to {path}")


if __name__ == "__main__":
    main()

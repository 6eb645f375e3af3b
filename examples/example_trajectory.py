"""
Example: Projecting an SBET Trajectory to UTM.

Reads the platform trajectory from an SBET file, projects its WGS84
latitude/longitude into a UTM zone and writes one row per sample. Useful
for overlaying the flight line on point clouds delivered in UTM.

Run from repository root:
    python examples/example_trajectory.py
    python examples/example_trajectory.py SBET --utm-zone 11 -d 100

Columns:
    Time (GPS seconds), Easting, Northing, Elevation (m),
    Roll, Pitch, Yaw (degrees)
"""

import argparse

import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from leeward.sim import DEFAULT_UTM_ZONE, simulate_flight_line
from leeward.trajectory import Trajectory

CSV_HEADER = ["Time", "Easting", "Northing", "Elevation", "Roll", "Pitch", "Yaw"]


def trajectory_rows(trajectory: Trajectory, decimation: int = 1) -> np.ndarray:
    """One row per kept sample, in the order of ``CSV_HEADER``."""
    poses = list(trajectory)[::decimation]
    rows = np.zeros((len(poses), len(CSV_HEADER)))
    for i, pose in enumerate(tqdm(poses, desc="Projecting", unit="pose")):
        rows[i, :4] = [pose.time, pose.position.x, pose.position.y, pose.position.z]
        rows[i, 4:] = pose.orientation.to_degrees()
    return rows


def plot_trajectory(rows: np.ndarray, output_file: str) -> None:
    easting = rows[:, 1] - rows[0, 1]
    northing = rows[:, 2] - rows[0, 2]
    time = rows[:, 0] - rows[0, 0]

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    ax = axes[0]
    ax.plot(easting, northing, "b-", linewidth=2)
    ax.plot(easting[0], northing[0], "go", markersize=8, label="Start")
    ax.plot(easting[-1], northing[-1], "rs", markersize=8, label="End")
    ax.set_xlabel("Easting offset [m]", fontsize=12)
    ax.set_ylabel("Northing offset [m]", fontsize=12)
    ax.set_title("Ground track", fontsize=14, fontweight="bold")
    ax.axis("equal")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    for column, name in zip(range(4, 7), ["Roll", "Pitch", "Yaw"]):
        ax.plot(time, rows[:, column], linewidth=1.5, label=name)
    ax.set_xlabel("Time [s]", fontsize=12)
    ax.set_ylabel("Attitude [deg]", fontsize=12)
    ax.set_title("Platform attitude", fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    print(f"Plot saved as: {output_file}")


def main():
    """Run the trajectory projection example."""
    parser = argparse.ArgumentParser(
        description="Project an SBET trajectory into UTM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inline simulated flight line
  python example_trajectory.py

  # Your own SBET, every 100th sample
  python example_trajectory.py sbet.out --utm-zone 11 -d 100 -o sbet.csv
        """,
    )
    parser.add_argument("sbet", nargs="?", default=None, help="SBET file")
    parser.add_argument(
        "--utm-zone", type=int, default=DEFAULT_UTM_ZONE,
        help=f"UTM zone of the projection (default: {DEFAULT_UTM_ZONE})",
    )
    parser.add_argument(
        "-d", "--decimation", type=int, default=1, help="Use every n-th sample (default: 1)"
    )
    parser.add_argument(
        "-o", "--output", type=str, default="trajectory.csv",
        help="CSV output (default: trajectory.csv)",
    )
    parser.add_argument(
        "--plot", type=str, default="trajectory.png",
        help="Plot output, empty to disable (default: trajectory.png)",
    )
    args = parser.parse_args()

    if args.decimation < 1:
        parser.error("decimation must be at least 1")

    print("=" * 70)
    print("TRAJECTORY PROJECTION")
    print("=" * 70)

    if args.sbet:
        trajectory = Trajectory.from_sbet(args.sbet, args.utm_zone)
    else:
        trajectory = Trajectory(simulate_flight_line())
    if not len(trajectory):
        print("Error: the trajectory is empty")
        return

    print(f"\n{len(trajectory)} samples, "
          f"{trajectory.end_time - trajectory.start_time:.2f} s, UTM zone {args.utm_zone}")

    rows = trajectory_rows(trajectory, args.decimation)
    np.savetxt(
        args.output, rows, fmt="%.12g", delimiter=",", header=",".join(CSV_HEADER), comments=""
    )
    print(f"\nCSV saved as: {args.output}")

    if args.plot:
        plot_trajectory(rows, args.plot)


if __name__ == "__main__":
    main()

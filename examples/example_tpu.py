"""
Example: Total Propagated Uncertainty of Lidar Points.

Propagates the standard deviation of every variable of the lidar equation
(GNSS, IMU, boresight, lever arm, range, scan angle) to the geolocated
points and writes one row of sigma values per point.

Run from repository root:
    python examples/example_tpu.py
    python examples/example_tpu.py SBET LAS CONFIG -d 100 -o tpu.csv
    python examples/example_tpu.py --normal 0 0 1

Mathematical Formulation:
    Σ = Aᵀ · E · A
    A: 14 x 3 partial derivatives of the point, E: diagonal variances.
    With a surface normal, the range variance grows with incidence angle ι:
        σ_ρ² = σ_range² + (ρ · γ/4 · tan ι)²
"""

import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from leeward.config import load_config
from leeward.io import load_measurements
from leeward.lidar import uncertainty
from leeward.sim import simulate_flight_line, simulate_measurements

CSV_HEADER = [
    "X",
    "Y",
    "Z",
    "ScanAngle",
    "sigmaX",
    "sigmaY",
    "sigmaHorizontal",
    "sigmaVertical",
    "sigmaMagnitude",
    "IncidenceAngle",
]


def compute_tpu(measurements, normal=None, quiet=False):
    """Uncertainty of every measurement, in order."""
    return [
        uncertainty(m, normal)
        for m in tqdm(measurements, desc="TPU", unit="pt", disable=quiet)
    ]


def write_csv(path: str, measurements, results) -> None:
    rows = np.array([
        [
            measurement.measured_point.x,
            measurement.measured_point.y,
            measurement.measured_point.z,
            np.degrees(measurement.scan_angle()),
            result.x,
            result.y,
            result.horizontal,
            result.vertical,
            result.total,
            np.nan if result.incidence_angle is None else np.degrees(result.incidence_angle),
        ]
        for measurement, result in zip(measurements, results)
    ])
    np.savetxt(path, rows, fmt="%.12g", delimiter=",", header=",".join(CSV_HEADER), comments="")


def plot_tpu(measurements, results, output_file: str) -> None:
    scan_angles = np.degrees([m.scan_angle() for m in measurements])
    horizontal = np.array([r.horizontal for r in results])
    vertical = np.array([r.vertical for r in results])
    xs = np.array([m.measured_point.x for m in measurements])
    ys = np.array([m.measured_point.y for m in measurements])

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))

    ax = axes[0]
    ax.scatter(scan_angles, horizontal * 100, s=8, c="blue", label="Horizontal")
    ax.scatter(scan_angles, vertical * 100, s=8, c="red", label="Vertical")
    ax.set_xlabel("Scan angle [deg]", fontsize=12)
    ax.set_ylabel("1-sigma uncertainty [cm]", fontsize=12)
    ax.set_title("TPU across the swath", fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    sc = ax.scatter(xs - xs.min(), ys - ys.min(), c=vertical * 100, s=8, cmap="viridis")
    fig.colorbar(sc, ax=ax, label="Vertical sigma [cm]")
    ax.set_xlabel("Easting offset [m]", fontsize=12)
    ax.set_ylabel("Northing offset [m]", fontsize=12)
    ax.set_title("Vertical TPU map", fontsize=14, fontweight="bold")
    ax.axis("equal")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    print(f"Plot saved as: {output_file}")


def main():
    """Run the TPU example."""
    parser = argparse.ArgumentParser(
        description="Total propagated uncertainty of lidar points",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inline simulated flight line
  python example_tpu.py

  # Flat ground, incidence-angle-dependent range error
  python example_tpu.py --normal 0 0 1

  # Your own data, every 100th point
  python example_tpu.py sbet.out points.las config.toml -d 100 -o tpu.csv
        """,
    )
    parser.add_argument("files", nargs="*", help="SBET, LAS and config files")
    parser.add_argument(
        "-d", "--decimation", type=int, default=1, help="Use every n-th point (default: 1)"
    )
    parser.add_argument(
        "--normal", type=float, nargs=3, default=None, metavar=("NX", "NY", "NZ"),
        help="Surface normal in the projected frame, for every point",
    )
    parser.add_argument(
        "-o", "--output", type=str, default="tpu.csv", help="CSV output (default: tpu.csv)"
    )
    parser.add_argument(
        "--plot", type=str, default="tpu.png",
        help="Plot output, empty to disable (default: tpu.png)",
    )
    args = parser.parse_args()

    if args.files and len(args.files) != 3:
        parser.error("expected SBET, LAS and CONFIG files")
    if args.decimation < 1:
        parser.error("decimation must be at least 1")

    print("=" * 70)
    print("TOTAL PROPAGATED UNCERTAINTY")
    print("=" * 70)

    if args.files:
        sbet, las, config_path = (Path(f) for f in args.files)
        config = load_config(config_path)
        measurements = load_measurements(
            sbet, las, config, decimation=args.decimation, skip_missing=True, quiet=False
        )
    else:
        poses = simulate_flight_line(duration=1.0)
        measurements = simulate_measurements(poses=poses)[:: args.decimation]
    if not measurements:
        print("Error: no points fall within the trajectory")
        return

    normal = np.array(args.normal) if args.normal is not None else None
    results = compute_tpu(measurements, normal)

    horizontal = np.array([r.horizontal for r in results])
    vertical = np.array([r.vertical for r in results])
    print(f"\nResults ({len(results)} points):")
    print(f"  Horizontal sigma: mean={horizontal.mean():.4f} m, max={horizontal.max():.4f} m")
    print(f"  Vertical sigma:   mean={vertical.mean():.4f} m, max={vertical.max():.4f} m")

    write_csv(args.output, measurements, results)
    print(f"\nCSV saved as: {args.output}")

    if args.plot:
        plot_tpu(measurements, results, args.plot)


if __name__ == "__main__":
    main()

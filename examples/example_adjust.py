"""
Example: Boresight and Lever Arm Calibration.

Estimates the boresight angles (and optionally the lever arm) of an
airborne lidar system by Gauss-Newton adjustment of the lidar equation
over a batch of measurements.

Run from repository root:
    python examples/example_adjust.py
    python examples/example_adjust.py --data data/sim/leeward_flight_line
    python examples/example_adjust.py SBET LAS CONFIG --decimation 100 --lever-arm

Demonstrates:
    - Joining LAS returns with SBET poses (Trajectory.measurement)
    - Boresight-only Gauss-Newton adjustment (Adjust)
    - Alternating boresight / lever arm adjustment (align)
    - Iteration history and singular-matrix recovery

Measurement Model:
    p = g + N · R_imu · (B · s(ρ, α) - l)
    Residual: r = calculated - measured
    Update:   v ← v - (JᵀJ)⁻¹ Jᵀ r
"""

import argparse
import json
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from leeward.config import load_config, save_config
from leeward.estimators import align
from leeward.exceptions import SingularMatrixError
from leeward.io import load_measurements
from leeward.sim import simulate_measurements, simulation_config
from leeward.variables import BORESIGHT_VARIABLES


def inline_measurements(seed: int = 42):
    """Simulated flight line measured with a misaligned boresight.

    Returns:
        measurements: Measurements carrying the misaligned configuration.
        true_config: Configuration the returns were generated with.
    """
    true_config = simulation_config()
    rng = np.random.default_rng(seed)
    offsets = np.radians(rng.uniform(-0.5, 0.5, size=3))
    guess = true_config.with_values(
        BORESIGHT_VARIABLES, true_config.values(BORESIGHT_VARIABLES) + offsets
    )
    measurements = simulate_measurements(true_config, guess, noise=0.05, seed=seed)
    return measurements, true_config


def dataset_paths(data_dir: Path):
    return data_dir / "sbet.out", data_dir / "points.las", data_dir / "config.json"


def print_config(label: str, config) -> None:
    roll, pitch, yaw = config.boresight.to_degrees()
    print(f"  {label}")
    print(f"    Boresight (deg): roll={roll:+.5f} pitch={pitch:+.5f} yaw={yaw:+.5f}")
    print(
        f"    Lever arm (m):   x={config.lever_arm.x:+.4f} "
        f"y={config.lever_arm.y:+.4f} z={config.lever_arm.z:+.4f}"
    )


def plot_history(history, output_file: str) -> None:
    iterations = [record.iteration for record in history]
    rmses = [record.rmse for record in history]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.semilogy(iterations, rmses, "bo-", linewidth=2, markersize=6)
    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Residual norm [m]", fontsize=12)
    ax.set_title("Boresight Adjustment Convergence", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    print(f"Plot saved as: {output_file}")


def run(measurements, lever_arm: bool, output: str, plot: str, true_config=None) -> None:
    print("=" * 70)
    print("BORESIGHT ADJUSTMENT")
    print("=" * 70)
    print(f"\nMeasurements: {len(measurements)}")
    print_config("Initial configuration", measurements[0].config)

    def report(round_, adjust):
        names = ", ".join(str(v) for v in adjust.variables)
        print(f"  Round #{round_}: [{names}] rmse={adjust.rmse:.6f}")

    print(f"\nAdjusting {'boresight and lever arm' if lever_arm else 'boresight'}...")
    try:
        adjust = align(measurements, lever_arm=lever_arm, callback=report)
    except SingularMatrixError as e:
        print(f"\nAdjustment failed: {e}")
        if e.adjust is None:
            raise
        print("  Keeping the last successful iteration")
        adjust = e.adjust

    history = adjust.history
    print(f"\nResults:")
    print(f"  Iterations:   {len(history) - 1}")
    print(f"  Initial rmse: {history[0].rmse:.6f}")
    print(f"  Final rmse:   {adjust.rmse:.6f}")
    print_config("Adjusted configuration", adjust.config)
    if true_config is not None:
        error = np.degrees(
            adjust.config.values(BORESIGHT_VARIABLES) - true_config.values(BORESIGHT_VARIABLES)
        )
        print(f"  Boresight error (deg): {np.array2string(error, precision=6)}")

    save_config(adjust.config, output)
    print(f"\nAdjusted config saved as: {output}")

    if plot:
        plot_history(history, plot)

    summary = {
        "n_measurements": len(measurements),
        "iterations": len(history) - 1,
        "rmse": {"initial": history[0].rmse, "final": adjust.rmse},
        "config": adjust.config.to_dict(),
    }
    print(f"\n[ADJUST_SUMMARY] {json.dumps(summary)}")


def main():
    """Run the boresight calibration example."""
    parser = argparse.ArgumentParser(
        description="Boresight and lever arm calibration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with inline simulated data (default)
  python example_adjust.py

  # Run with a generated dataset
  python example_adjust.py --data data/sim/leeward_flight_line

  # Run with your own files, also adjusting the lever arm
  python example_adjust.py sbet.out points.las config.toml -d 100 --lever-arm
        """,
    )
    parser.add_argument("files", nargs="*", help="SBET, LAS and config files")
    parser.add_argument("--data", type=str, default=None, help="Dataset directory")
    parser.add_argument(
        "-d", "--decimation", type=int, default=1, help="Use every n-th point (default: 1)"
    )
    parser.add_argument(
        "--lever-arm", action="store_true", help="Alternate with lever arm adjustment"
    )
    parser.add_argument(
        "-o", "--output", type=str, default="adjusted_config.json",
        help="Adjusted configuration output (default: adjusted_config.json)",
    )
    parser.add_argument(
        "--plot", type=str, default="adjust_history.png",
        help="Convergence plot output, empty to disable (default: adjust_history.png)",
    )
    args = parser.parse_args()

    if args.files and len(args.files) != 3:
        parser.error("expected SBET, LAS and CONFIG files")
    if args.decimation < 1:
        parser.error("decimation must be at least 1")

    true_config = None
    if args.files or args.data:
        if args.files:
            sbet, las, config_path = (Path(f) for f in args.files)
        else:
            sbet, las, config_path = dataset_paths(Path(args.data))
        config = load_config(config_path)
        measurements = load_measurements(
            sbet, las, config, decimation=args.decimation, skip_missing=True, quiet=False
        )
        if not measurements:
            print("Error: no points fall within the trajectory")
            return
    else:
        measurements, true_config = inline_measurements()

    run(measurements, args.lever_arm, args.output, args.plot, true_config)


if __name__ == "__main__":
    main()

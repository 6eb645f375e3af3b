"""
Example: Analytic vs. Numerical Partial Derivatives.

Writes, for every point, the 42 analytic partial derivatives of the
calculated point together with central finite-difference estimates, and
reports the largest disagreement per partial.

Run from repository root:
    python examples/example_partials.py
    python examples/example_partials.py SBET LAS CONFIG -d 100 -o partials.csv

Range and scan angle are derived from the other variables, so they have no
finite-difference column.
"""

import argparse
from pathlib import Path

import numpy as np
from tqdm import tqdm

from leeward.config import load_config
from leeward.io import load_measurements
from leeward.lidar import Partial
from leeward.sim import simulate_flight_line, simulate_measurements


def csv_header():
    header = ["X", "Y", "Z"]
    for partial in Partial.all():
        header.append(f"{partial} analytical")
        if not partial.is_derived:
            header.append(f"{partial} numerical")
    return header


def partial_rows(measurements, quiet=False):
    """Yield (row, {partial: |analytic - numerical|}) for each measurement."""
    for measurement in tqdm(measurements, desc="Partials", unit="pt", disable=quiet):
        point = measurement.measured_point
        row = [point.x, point.y, point.z]
        differences = {}
        for partial in Partial.all():
            analytic = measurement.partial(partial.dimension, partial.variable)
            row.append(analytic)
            numerical = measurement.finite_difference(partial.dimension, partial.variable)
            if numerical is not None:
                row.append(numerical)
                differences[partial] = abs(analytic - numerical)
        yield row, differences


def main():
    """Run the partial derivative comparison."""
    parser = argparse.ArgumentParser(
        description="Analytic vs. numerical partial derivatives of the lidar equation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="*", help="SBET, LAS and config files")
    parser.add_argument(
        "-d", "--decimation", type=int, default=1, help="Use every n-th point (default: 1)"
    )
    parser.add_argument(
        "-o", "--output", type=str, default="partials.csv",
        help="CSV output (default: partials.csv)",
    )
    args = parser.parse_args()

    if args.files and len(args.files) != 3:
        parser.error("expected SBET, LAS and CONFIG files")
    if args.decimation < 1:
        parser.error("decimation must be at least 1")

    print("=" * 70)
    print("PARTIAL DERIVATIVES")
    print("=" * 70)

    if args.files:
        sbet, las, config_path = (Path(f) for f in args.files)
        config = load_config(config_path)
        measurements = load_measurements(
            sbet, las, config, decimation=args.decimation, skip_missing=True, quiet=False
        )
    else:
        poses = simulate_flight_line(duration=0.5)
        measurements = simulate_measurements(poses=poses)[:: args.decimation]

    if not measurements:
        print("Error: no points fall within the trajectory")
        return

    rows = []
    worst = {}
    for row, differences in partial_rows(measurements):
        rows.append(row)
        for partial, difference in differences.items():
            worst[partial] = max(worst.get(partial, 0.0), difference)
    np.savetxt(
        args.output,
        np.array(rows),
        fmt="%.12g",
        delimiter=",",
        header=",".join(csv_header()),
        comments="",
    )
    print(f"\nCSV saved as: {args.output}")

    if worst:
        print(f"\nLargest |analytic - numerical| per partial ({len(measurements)} points):")
        for partial, difference in sorted(worst.items(), key=lambda item: -item[1])[:10]:
            print(f"  {str(partial):24s} {difference:.3e}")
        print(f"  Overall maximum: {np.max(list(worst.values())):.3e}")


if __name__ == "__main__":
    main()

"""Generate a Synthetic Lidar Flight Line Dataset.

Creates an airborne lidar dataset with:
    - A straight flight line with attitude wobble (SBET trajectory)
    - Returns forward-modeled onto flat ground through the lidar equation
    - The true and a deliberately misaligned system configuration

Saves to: data/sim/leeward_flight_line/
    sbet.out          : trajectory, binary SBET records
    points.las        : point cloud (LAS 1.4, point format 6)
    config.json       : misaligned configuration, input for the examples
    true_config.json  : configuration the returns were generated with
    dataset.json      : generation parameters
"""

import argparse
import json
from pathlib import Path

import numpy as np

from leeward.config import save_config
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.io import write_las, write_sbet
from leeward.sim import (
    DEFAULT_START,
    DEFAULT_START_TIME,
    poses_to_sbet_records,
    simulate_flight_line,
    simulate_points,
    simulation_config,
)
from leeward.variables import BORESIGHT_VARIABLES, LEVER_ARM_VARIABLES


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'baseline': {
        'description': 'Small boresight misalignment, no noise',
        'boresight_error': [0.05, -0.03, 0.1],
        'lever_arm_error': [0.0, 0.0, 0.0],
        'noise': 0.0,
    },
    'noisy': {
        'description': 'Boresight misalignment with 5 cm point noise',
        'boresight_error': [0.05, -0.03, 0.1],
        'lever_arm_error': [0.0, 0.0, 0.0],
        'noise': 0.05,
    },
    'lever_arm': {
        'description': 'Boresight and horizontal lever arm misalignment',
        'boresight_error': [0.05, -0.03, 0.1],
        'lever_arm_error': [0.1, -0.1, 0.0],
        'noise': 0.01,
    },
}


# ============================================================================
# DATA GENERATION
# ============================================================================

def generate_dataset(
    output_dir: str = "data/sim/leeward_flight_line",
    seed: int = 42,
    duration: float = 10.0,
    rate: float = 200.0,
    speed: float = 60.0,
    heading_deg: float = 0.0,
    height: float = 2687.59,
    boresight_deg=(0.0, 0.0, 90.0),
    lever_arm=(0.0, 0.0, 0.0),
    boresight_error_deg=(0.05, -0.03, 0.1),
    lever_arm_error_m=(0.0, 0.0, 0.0),
    pose_step: int = 10,
    n_scan_angles: int = 25,
    noise: float = 0.0,
) -> None:
    """Generate and save a synthetic flight line.

    Args:
        output_dir: Output directory path.
        seed: Random seed for the point noise.
        duration: Flight line duration (seconds).
        rate: Trajectory rate (Hz).
        speed: Ground speed (m/s).
        heading_deg: Flight direction, clockwise from north (degrees).
        height: Flying height above the ground plane (m).
        boresight_deg: True boresight roll, pitch, yaw (degrees).
        lever_arm: True lever arm x, y, z (m).
        boresight_error_deg: Misalignment added to the boresight in
            config.json (degrees).
        lever_arm_error_m: Misalignment added to the lever arm in
            config.json (m).
        pose_step: Fire the scan fan from every n-th pose.
        n_scan_angles: Scan angles per fan, spread over 60-120 degrees.
        noise: Point noise standard deviation (m).
    """
    print(f"\n{'='*70}")
    print(f"Generating Synthetic Lidar Flight Line")
    print(f"{'='*70}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    true_config = simulation_config(
        boresight=Rotation.from_degrees(*boresight_deg), lever_arm=Point(*lever_arm)
    )
    config = true_config.with_values(
        BORESIGHT_VARIABLES,
        true_config.values(BORESIGHT_VARIABLES) + np.radians(boresight_error_deg),
    ).with_values(
        LEVER_ARM_VARIABLES,
        true_config.values(LEVER_ARM_VARIABLES) + np.array(lever_arm_error_m),
    )

    # 1. Trajectory
    print(f"\n1. Generating trajectory...")
    print(f"   Duration: {duration} s at {rate} Hz")
    poses = simulate_flight_line(
        start=DEFAULT_START.with_z(height),
        heading=float(np.radians(heading_deg)),
        speed=speed,
        duration=duration,
        rate=rate,
        start_time=DEFAULT_START_TIME,
    )
    write_sbet(output_path / "sbet.out", poses_to_sbet_records(poses, true_config.utm_zone))
    print(f"   Saved: sbet.out ({len(poses)} records)")

    # 2. Points
    print(f"\n2. Generating lidar returns...")
    scan_angles = np.radians(np.linspace(60.0, 120.0, n_scan_angles))
    points = simulate_points(
        poses, true_config, scan_angles, pose_step=pose_step, noise=noise, seed=seed
    )
    write_las(output_path / "points.las", points)
    print(f"   Saved: points.las ({len(points)} points)")

    # 3. Configuration
    print(f"\n3. Saving configuration...")
    save_config(config, output_path / "config.json")
    save_config(true_config, output_path / "true_config.json")
    print(f"   Saved: config.json, true_config.json")

    info = {
        "dataset_info": {
            "description": "Synthetic airborne lidar flight line over flat ground",
            "seed": seed,
            "duration_sec": duration,
            "num_poses": len(poses),
            "num_points": len(points),
        },
        "trajectory": {
            "rate_hz": rate,
            "speed_mps": speed,
            "heading_deg": heading_deg,
            "height_m": height,
        },
        "scanner": {
            "scan_angles_deg": [60.0, 120.0, n_scan_angles],
            "pose_step": pose_step,
            "noise_m": noise,
        },
        "misalignment": {
            "boresight_deg": list(boresight_error_deg),
            "lever_arm_m": list(lever_arm_error_m),
        },
        "coordinate_frame": {
            "description": "UTM easting/northing/height, body frame NED",
            "utm_zone": true_config.utm_zone,
            "units": "meters, radians",
        },
    }
    with open(output_path / "dataset.json", "w") as f:
        json.dump(info, f, indent=2)
    print(f"   Saved: dataset.json")

    print(f"\n{'='*70}")
    print(f"Dataset generation complete!")
    print(f"{'='*70}")
    print(f"Output directory: {output_path.absolute()}")
    print(f"\nTry:")
    print(f"  python examples/example_adjust.py --data {output_dir}")
    print(f"\n")


# ============================================================================
# COMMAND-LINE INTERFACE
# ============================================================================

def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic lidar flight line dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate with default parameters
  python %(prog)s

  # Use a preset configuration
  python %(prog)s --preset noisy --output data/sim/leeward_noisy

Available presets: """ + ", ".join(PRESETS.keys())
    )
    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='data/sim/leeward_flight_line',
        help='Output directory (default: data/sim/leeward_flight_line)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for reproducibility (default: 42)'
    )

    traj_group = parser.add_argument_group('Trajectory Parameters')
    traj_group.add_argument(
        '--duration', type=float, default=10.0,
        help='Flight line duration in seconds (default: 10.0)'
    )
    traj_group.add_argument(
        '--rate', type=float, default=200.0,
        help='Trajectory rate in Hz (default: 200.0)'
    )
    traj_group.add_argument(
        '--speed', type=float, default=60.0,
        help='Ground speed in m/s (default: 60.0)'
    )
    traj_group.add_argument(
        '--heading', type=float, default=0.0,
        help='Heading in degrees clockwise from north (default: 0.0)'
    )
    traj_group.add_argument(
        '--height', type=float, default=2687.59,
        help='Flying height above ground in meters (default: 2687.59)'
    )

    scan_group = parser.add_argument_group('Scanner Parameters')
    scan_group.add_argument(
        '--pose-step', type=int, default=10,
        help='Fire a scan fan every n-th pose (default: 10)'
    )
    scan_group.add_argument(
        '--scan-angles', type=int, default=25,
        help='Scan angles per fan (default: 25)'
    )
    scan_group.add_argument(
        '--noise', type=float, default=0.0,
        help='Point noise std in meters (default: 0.0)'
    )
    scan_group.add_argument(
        '--boresight-error', type=float, nargs=3, default=[0.05, -0.03, 0.1],
        metavar=('ROLL', 'PITCH', 'YAW'),
        help='Boresight misalignment in degrees (default: 0.05 -0.03 0.1)'
    )
    scan_group.add_argument(
        '--lever-arm-error', type=float, nargs=3, default=[0.0, 0.0, 0.0],
        metavar=('X', 'Y', 'Z'),
        help='Lever arm misalignment in meters (default: 0 0 0)'
    )

    args = parser.parse_args()

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}")
        for key, value in preset_config.items():
            if key != 'description':
                setattr(args, key, value)

    if args.duration <= 0:
        parser.error("Duration must be positive")
    if args.rate <= 0:
        parser.error("Rate must be positive")
    if args.pose_step < 1:
        parser.error("Pose step must be at least 1")

    generate_dataset(
        output_dir=args.output,
        seed=args.seed,
        duration=args.duration,
        rate=args.rate,
        speed=args.speed,
        heading_deg=args.heading,
        height=args.height,
        pose_step=args.pose_step,
        n_scan_angles=args.scan_angles,
        noise=args.noise,
        boresight_error_deg=args.boresight_error,
        lever_arm_error_m=args.lever_arm_error,
    )


if __name__ == "__main__":
    main()

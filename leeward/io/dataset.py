"""Building measurement batches from SBET and LAS files."""

from pathlib import Path
from typing import List, Union

from tqdm import tqdm

from leeward.config.config import Config
from leeward.exceptions import MissingTimeError, PoseNotFoundError
from leeward.io.las import read_las
from leeward.lidar.measurement import Measurement
from leeward.trajectory.trajectory import Trajectory


def load_measurements(
    sbet: Union[str, Path],
    las: Union[str, Path],
    config: Config,
    decimation: int = 1,
    use_scan_angle: bool = True,
    skip_missing: bool = False,
    quiet: bool = True,
) -> List[Measurement]:
    """Join every (decimated) LAS return with its SBET pose.

    Args:
        sbet: Path to the trajectory file.
        las: Path to the point cloud.
        config: Configuration given to every measurement. Its UTM zone is
            used to project the trajectory.
        decimation: Keep every ``decimation``-th return.
        use_scan_angle: Use the scan angles recorded in the LAS file.
        skip_missing: Drop returns without time or trajectory pose instead
            of raising.
        quiet: Hide the progress bar.

    Returns:
        List of measurements, in file order.

    Raises:
        MissingTimeError: A return has no GPS time (unless skip_missing).
        PoseNotFoundError: A return falls outside the trajectory (unless
            skip_missing).
    """
    trajectory = Trajectory.from_sbet(sbet, config.utm_zone)
    points = read_las(las, use_scan_angle=use_scan_angle, decimation=decimation)
    measurements = []
    for point in tqdm(points, desc="Measurements", disable=quiet):
        try:
            measurements.append(trajectory.measurement(point, config))
        except (MissingTimeError, PoseNotFoundError):
            if not skip_missing:
                raise
    return measurements

"""File input and output.

- SBET trajectory files (read_sbet, write_sbet)
- LAS point clouds (read_las, write_las)
- load_measurements: join a LAS file with an SBET file
"""

from leeward.io.dataset import load_measurements
from leeward.io.las import read_las, write_las
from leeward.io.sbet import SBET_DTYPE, SBET_FIELDS, empty_sbet_records, read_sbet, write_sbet

__all__ = [
    # SBET
    "SBET_DTYPE",
    "SBET_FIELDS",
    "empty_sbet_records",
    "read_sbet",
    "write_sbet",
    # LAS
    "read_las",
    "write_las",
    # Batches
    "load_measurements",
]

"""Unit tests for SBET reading and writing."""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from leeward.io.sbet import SBET_DTYPE, SBET_FIELDS, empty_sbet_records, read_sbet, write_sbet


class TestSbet:
    def test_record_layout(self):
        assert len(SBET_FIELDS) == 17
        assert SBET_DTYPE.itemsize == 17 * 8
        assert SBET_FIELDS[0] == "time"
        assert SBET_FIELDS[9] == "heading"

    def test_round_trip(self, tmp_path):
        records = empty_sbet_records(5)
        rng = np.random.default_rng(42)
        for name in SBET_FIELDS:
            records[name] = rng.normal(size=5)
        path = tmp_path / "sbet.out"

        write_sbet(path, records)

        assert path.stat().st_size == 5 * 136
        assert_array_equal(read_sbet(path), records)

    def test_little_endian_layout(self, tmp_path):
        records = empty_sbet_records(1)
        records["time"] = 400825.80649
        records["latitude"] = 0.659
        path = tmp_path / "sbet.out"

        write_sbet(path, records)

        raw = np.fromfile(path, dtype="<f8")
        assert raw[0] == 400825.80649
        assert raw[1] == 0.659

    def test_truncated_file(self, tmp_path):
        path = tmp_path / "sbet.out"
        path.write_bytes(b"\x00" * 100)

        with pytest.raises(ValueError, match="not a multiple"):
            read_sbet(path)

    def test_missing_fields(self, tmp_path):
        records = np.zeros(2, dtype=[("time", "<f8")])

        with pytest.raises(ValueError, match="missing SBET fields"):
            write_sbet(tmp_path / "sbet.out", records)

"""Unit tests for variables, dimensions and partials."""

import pytest

from leeward.variables import (
    BORESIGHT_VARIABLES,
    LEVER_ARM_VARIABLES,
    Dimension,
    Partial,
    Variable,
)


class TestVariable:
    def test_fourteen_variables_in_column_order(self):
        variables = Variable.all()

        assert len(variables) == 14
        assert [v.index for v in variables] == list(range(14))
        assert variables[0] == Variable.GNSS_X
        assert variables[-1] == Variable.SCAN_ANGLE

    def test_derived_and_angles(self):
        assert {v for v in Variable if v.is_derived} == {Variable.RANGE, Variable.SCAN_ANGLE}
        assert Variable.IMU_YAW.is_angle
        assert Variable.SCAN_ANGLE.is_angle
        assert not Variable.RANGE.is_angle
        assert not Variable.LEVER_ARM_X.is_angle

    def test_names(self):
        assert str(Variable.BORESIGHT_ROLL) == "BoresightRoll"
        assert Variable.from_name("BoresightRoll") == Variable.BORESIGHT_ROLL
        assert Variable.from_name("lever_arm_z") == Variable.LEVER_ARM_Z
        with pytest.raises(ValueError, match="unknown variable"):
            Variable.from_name("Gravity")

    def test_calibration_sets(self):
        assert BORESIGHT_VARIABLES == (
            Variable.BORESIGHT_ROLL,
            Variable.BORESIGHT_PITCH,
            Variable.BORESIGHT_YAW,
        )
        assert LEVER_ARM_VARIABLES == (
            Variable.LEVER_ARM_X,
            Variable.LEVER_ARM_Y,
            Variable.LEVER_ARM_Z,
        )


class TestPartial:
    def test_all_partials(self):
        partials = Partial.all()

        assert len(partials) == 42
        assert len(set(partials)) == 42
        assert partials[:3] == [
            Partial(Dimension.X, Variable.GNSS_X),
            Partial(Dimension.Y, Variable.GNSS_X),
            Partial(Dimension.Z, Variable.GNSS_X),
        ]

    def test_str(self):
        assert str(Partial(Dimension.X, Variable.BORESIGHT_ROLL)) == "dX/dBoresightRoll"

    def test_dimension_index(self):
        assert [d.index for d in Dimension.all()] == [0, 1, 2]

"""
Tests for the WorkingSet.
"""

import numpy as np
import pytest

from qpgraph import (
    DimensionError,
    DualKey,
    InvalidInputError,
    LinearInequality,
    VectorValues,
    WorkingSet,
)


@pytest.fixture
def inequalities():
    """x <= 1, -x <= 1, y <= 2."""
    return [
        LinearInequality({"x": [1.0]}, 1.0, DualKey("ineq", 0)),
        LinearInequality({"x": [-1.0]}, 1.0, DualKey("ineq", 1)),
        LinearInequality({"y": [1.0]}, 2.0, DualKey("ineq", 2)),
    ]


class TestWorkingSet:
    """Activity bookkeeping."""

    def test_all_inactive_by_default(self, inequalities):
        ws = WorkingSet(inequalities)

        assert len(ws) == 3
        assert ws.n_active == 0
        assert ws.active_indices() == []
        assert ws.inactive_indices() == [0, 1, 2]

    def test_activate_and_deactivate(self, inequalities):
        ws = WorkingSet(inequalities)
        ws.activate(2)

        assert ws.is_active(2)
        assert ws.signature() == (2,)

        ws.deactivate(2)
        assert not ws.is_active(2)

    def test_double_activation_rejected(self, inequalities):
        ws = WorkingSet(inequalities, [True, False, False])
        with pytest.raises(InvalidInputError):
            ws.activate(0)
        with pytest.raises(InvalidInputError):
            ws.deactivate(1)

    def test_indices_are_stable(self, inequalities):
        ws = WorkingSet(inequalities)
        ws.activate(1)
        assert ws[1] is inequalities[1]
        assert ws.at(0) is inequalities[0]
        assert list(ws) == inequalities

    def test_mask_length_checked(self, inequalities):
        with pytest.raises(DimensionError):
            WorkingSet(inequalities, [True])

    def test_copy_is_independent(self, inequalities):
        ws = WorkingSet(inequalities)
        clone = ws.copy()
        clone.activate(0)

        assert not ws.is_active(0)
        assert clone.is_active(0)

    def test_mask_is_a_copy(self, inequalities):
        ws = WorkingSet(inequalities)
        mask = ws.mask
        mask[0] = True
        assert not ws.is_active(0)

    def test_as_equalities(self, inequalities):
        ws = WorkingSet(inequalities, [False, True, True])
        eqs = ws.as_equalities()

        assert len(eqs) == 2
        assert [f.dual_key for f in eqs] == [DualKey("ineq", 1), DualKey("ineq", 2)]
        np.testing.assert_array_equal(eqs[0].get_a("x"), [[-1.0]])


class TestWorkingSetSeeding:
    """Initial activity from a start point or warm-start duals."""

    def test_tight_constraints_active(self, inequalities):
        x0 = VectorValues({"x": [1.0], "y": [0.0]})
        ws = WorkingSet.from_initial(inequalities, x0)
        assert ws.active_indices() == [0]

    def test_tolerance(self, inequalities):
        x0 = VectorValues({"x": [1.0 - 1e-4], "y": [0.0]})
        assert WorkingSet.from_initial(inequalities, x0).n_active == 0
        assert WorkingSet.from_initial(inequalities, x0, tol=1e-3).active_indices() == [0]

    def test_warm_start_duals(self, inequalities):
        x0 = VectorValues({"x": [0.0], "y": [0.0]})
        duals = VectorValues({DualKey("ineq", 2): [-1.0]})

        ws = WorkingSet.from_initial(inequalities, x0, duals)

        assert ws.active_indices() == [2]

    def test_empty_duals_fall_back_to_tightness(self, inequalities):
        x0 = VectorValues({"x": [-1.0], "y": [2.0]})
        ws = WorkingSet.from_initial(inequalities, x0, VectorValues())
        assert ws.active_indices() == [1, 2]

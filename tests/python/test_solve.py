"""
Tests for the matrix interface: solve(), solve_batch() and SolverParams.
"""

import math

import numpy as np
import pytest
from scipy import sparse

from qpgraph import (
    DimensionError,
    InvalidInputError,
    SolverParams,
    Status,
    solve,
    solve_batch,
)


class TestSolveQP:
    """QPs through solve()."""

    def test_simple_qp(self):
        """
        minimize x1² + x2² - 2x1 - 4x2
        subject to: x1 + x2 <= 2, x >= 0
        Optimal: x=(0.5, 1.5), obj=-4.5
        """
        result = solve(
            P=2.0 * np.eye(2),
            c=np.array([-2.0, -4.0]),
            A_ub=np.array([[1.0, 1.0]]),
            b_ub=np.array([2.0]),
            lb=np.zeros(2),
        )

        assert result.status == Status.OPTIMAL
        np.testing.assert_allclose(result.x.at("x"), [0.5, 1.5], atol=1e-8)
        assert result.objective == pytest.approx(-4.5)
        np.testing.assert_allclose(result.problem_info["y_ub"], [-1.0], atol=1e-8)
        np.testing.assert_allclose(result.problem_info["y_lower"], [0.0, 0.0])
        assert result.solve_time > 0

    def test_box_qp(self):
        result = solve(
            P=2.0 * np.eye(2),
            c=np.array([-3.0, -3.0]),
            lb=np.zeros(2),
            ub=np.ones(2),
        )

        np.testing.assert_allclose(result.x.at("x"), [1.0, 1.0], atol=1e-8)
        assert result.objective == pytest.approx(-4.0)
        # gradient 2x + q = (-1, -1) is balanced by the upper bounds
        np.testing.assert_allclose(result.problem_info["y_upper"], [-1.0, -1.0], atol=1e-8)

    def test_equality_qp(self):
        result = solve(
            P=np.eye(2),
            c=np.array([-1.0, -2.0]),
            A_eq=np.array([[1.0, 1.0]]),
            b_eq=np.array([1.0]),
            A_ub=np.array([[-1.0, 0.0]]),
            b_ub=np.array([-0.5]),
        )

        np.testing.assert_allclose(result.x.at("x"), [0.5, 0.5], atol=1e-8)
        np.testing.assert_allclose(result.problem_info["y_eq"], [-1.5], atol=1e-8)
        np.testing.assert_allclose(result.problem_info["y_ub"], [-1.0], atol=1e-8)

    def test_sparse_input(self):
        result = solve(
            P=sparse.csr_matrix(2.0 * np.eye(2)),
            c=np.array([-2.0, -4.0]),
            A_ub=sparse.csr_matrix([[1.0, 1.0]]),
            b_ub=np.array([2.0]),
            lb=np.zeros(2),
        )

        np.testing.assert_allclose(result.x.at("x"), [0.5, 1.5], atol=1e-8)

    def test_infinite_bounds_skipped(self):
        result = solve(
            P=np.eye(2),
            c=np.array([-5.0, 1.0]),
            lb=np.array([-np.inf, 0.0]),
            ub=np.array([3.0, np.inf]),
        )

        np.testing.assert_allclose(result.x.at("x"), [3.0, 0.0], atol=1e-8)
        assert len(result.working_set) == 2

    def test_user_start(self):
        result = solve(P=np.eye(1), c=np.array([-5.0]), ub=np.array([3.0]), x0=np.array([0.0]))

        np.testing.assert_allclose(result.x.at("x"), [3.0])
        assert result.iterations == 2

    def test_max_iterations_status(self):
        result = solve(
            P=np.eye(1),
            c=np.array([-5.0]),
            ub=np.array([3.0]),
            x0=np.array([0.0]),
            params={"max_iters": 1},
        )

        assert result.status == Status.MAX_ITERATIONS
        assert result.status.has_solution
        np.testing.assert_allclose(result.x.at("x"), [3.0])
        assert result.objective == pytest.approx(-10.5)
        assert result.iterations == 1

    def test_infeasible_start_status(self):
        result = solve(P=np.eye(1), c=np.array([-5.0]), ub=np.array([3.0]), x0=np.array([4.0]))

        assert result.status == Status.PRIMAL_INFEASIBLE
        assert math.isnan(result.objective)


class TestSolveLP:
    """LPs through solve()."""

    def test_simple_lp(self):
        result = solve(
            c=np.array([-1.0, -1.0]),
            A_ub=np.array([[1.0, 2.0], [3.0, 1.0]]),
            b_ub=np.array([4.0, 6.0]),
            lb=np.zeros(2),
        )

        assert result.status == Status.OPTIMAL
        np.testing.assert_allclose(result.x.at("x"), [1.6, 1.2], atol=1e-8)
        assert result.objective == pytest.approx(-2.8)
        np.testing.assert_allclose(result.problem_info["y_ub"], [-0.4, -0.2], atol=1e-8)

    def test_infeasible(self):
        """x <= -1 and x >= 0 cannot both hold."""
        result = solve(c=np.array([1.0]), A_ub=np.array([[1.0]]), b_ub=np.array([-1.0]), lb=np.zeros(1))

        assert result.status == Status.PRIMAL_INFEASIBLE
        assert not result.status.has_solution

    def test_unbounded(self):
        result = solve(c=np.array([-1.0]), lb=np.zeros(1))

        assert result.status == Status.DUAL_INFEASIBLE


class TestSolveInputs:
    """Malformed input raises instead of returning a status."""

    def test_no_cost(self):
        with pytest.raises(InvalidInputError):
            solve()

    def test_indefinite_hessian(self):
        with pytest.raises(InvalidInputError):
            solve(P=np.diag([1.0, -1.0]), c=np.zeros(2))

    def test_linear_term_outside_range(self):
        """A linear cost along a flat direction of P is unbounded below."""
        with pytest.raises(InvalidInputError):
            solve(P=np.diag([1.0, 0.0]), c=np.array([0.0, 1.0]))

    def test_wrong_rhs_length(self):
        with pytest.raises(DimensionError):
            solve(c=np.ones(2), A_ub=np.ones((2, 2)), b_ub=np.ones(3))

    def test_wrong_column_count(self):
        with pytest.raises(DimensionError):
            solve(c=np.ones(2), A_ub=np.ones((1, 3)), b_ub=np.ones(1))

    def test_nan_rejected(self):
        with pytest.raises(InvalidInputError):
            solve(c=np.array([1.0, np.nan]))


class TestSolveBatch:
    """Batch solving."""

    def test_batch(self):
        problems = [
            {"P": np.eye(1), "c": np.array([-5.0]), "ub": np.array([3.0])},
            {"c": np.array([-1.0]), "ub": np.array([2.0]), "lb": np.zeros(1)},
        ]

        results = solve_batch(problems)

        assert len(results) == 2
        np.testing.assert_allclose(results[0].x.at("x"), [3.0], atol=1e-8)
        np.testing.assert_allclose(results[1].x.at("x"), [2.0], atol=1e-8)


class TestSolverParams:
    """Parameter parsing."""

    def test_defaults(self):
        params = SolverParams()
        assert params.max_iterations == 1000
        assert params.detect_cycling

    def test_aliases(self):
        params = SolverParams.from_dict({"max_iters": 5, "tol": 1e-9})
        assert params.max_iterations == 5
        assert params.tolerance == 1e-9

    def test_unknown_key(self):
        with pytest.raises(InvalidInputError):
            SolverParams.from_dict({"rho": 1.0})

    @pytest.mark.parametrize("kwargs", [
        {"max_iterations": 0},
        {"tolerance": 0.0},
        {"active_tolerance": -1.0},
    ])
    def test_non_positive_rejected(self, kwargs):
        with pytest.raises(InvalidInputError):
            SolverParams(**kwargs)

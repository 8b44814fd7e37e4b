"""
Accuracy tests: qpgraph must match scipy's solvers within tolerance
on small random problems with a bounded feasible region.
"""

import numpy as np
from scipy.optimize import linprog, minimize
import pytest

import qpgraph

# Tolerance for matching reference solutions
ATOL = 1e-5
RTOL = 1e-5


def assert_close(val, ref_val, name, atol=ATOL, rtol=RTOL):
    """Assert qpgraph and reference values match within tolerance."""
    diff = abs(val - ref_val)
    rel_diff = diff / (abs(ref_val) + 1e-10)

    print(f"  {name}: qpgraph={val:.8f}, ref={ref_val:.8f}, "
          f"diff={diff:.2e}, rel={rel_diff:.2e}")

    assert diff < atol or rel_diff < rtol, \
        f"{name} mismatch: qpgraph={val}, ref={ref_val}, diff={diff}"


def random_polytope(rng, n, m):
    """
    Random constraints A x <= b inside the box 0 <= x <= 10, built around
    a strictly feasible point.
    """
    x_feas = rng.uniform(2.0, 8.0, n)
    A = rng.standard_normal((m, n))
    b = A @ x_feas + rng.uniform(0.5, 2.0, m)
    return A, b, np.zeros(n), np.full(n, 10.0)


class TestLPAccuracy:
    """LP accuracy tests - compare against scipy.optimize.linprog."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_lp(self, seed):
        rng = np.random.default_rng(seed)
        n, m = 4, 6
        A, b, lb, ub = random_polytope(rng, n, m)
        c = rng.standard_normal(n)

        ref = linprog(c, A_ub=A, b_ub=b, bounds=list(zip(lb, ub)), method="highs")
        assert ref.success, f"Reference solver failed: {ref.message}"

        result = qpgraph.solve(c=c, A_ub=A, b_ub=b, lb=lb, ub=ub)

        print(f"\n  seed={seed}: status={result.status}, iters={result.iterations}")
        assert result.status == qpgraph.Status.OPTIMAL
        assert_close(result.objective, ref.fun, "objective")
        for i in range(n):
            assert_close(result.x.at("x")[i], ref.x[i], f"x[{i}]", atol=1e-4)

    def test_lp_with_equality(self):
        """
        minimize x1 + 2x2 + 3x3
        subject to: x1 + x2 + x3 = 1, x >= 0
        Optimal: x=(1, 0, 0), obj=1
        """
        result = qpgraph.solve(
            c=np.array([1.0, 2.0, 3.0]),
            A_eq=np.ones((1, 3)),
            b_eq=np.array([1.0]),
            lb=np.zeros(3),
        )

        assert_close(result.objective, 1.0, "objective")
        np.testing.assert_allclose(result.x.at("x"), [1.0, 0.0, 0.0], atol=1e-8)

    def test_multipliers_match_reference(self):
        rng = np.random.default_rng(11)
        A, b, lb, ub = random_polytope(rng, 3, 5)
        c = rng.standard_normal(3)

        ref = linprog(c, A_ub=A, b_ub=b, bounds=list(zip(lb, ub)), method="highs")
        result = qpgraph.solve(c=c, A_ub=A, b_ub=b, lb=lb, ub=ub)

        # HiGHS reports d(obj)/d(b_ub), which is the multiplier with the same sign
        np.testing.assert_allclose(result.problem_info["y_ub"], ref.ineqlin.marginals, atol=1e-6)


class TestQPAccuracy:
    """QP accuracy tests - compare against scipy SLSQP."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_qp(self, seed):
        rng = np.random.default_rng(100 + seed)
        n, m = 4, 6
        A, b, lb, ub = random_polytope(rng, n, m)
        M = rng.standard_normal((n, n))
        P = M.T @ M + 0.1 * np.eye(n)
        c = 5.0 * rng.standard_normal(n)

        def obj(x):
            return 0.5 * x @ P @ x + c @ x

        ref = minimize(
            obj, np.full(n, 5.0), jac=lambda x: P @ x + c, method="SLSQP",
            bounds=list(zip(lb, ub)),
            constraints=[{"type": "ineq", "fun": lambda x: b - A @ x, "jac": lambda x: -A}],
            options={"ftol": 1e-12, "maxiter": 500},
        )

        result = qpgraph.solve(P=P, c=c, A_ub=A, b_ub=b, lb=lb, ub=ub)

        print(f"\n  seed={seed}: status={result.status}, iters={result.iterations}")
        assert result.status == qpgraph.Status.OPTIMAL
        assert result.objective <= ref.fun + 1e-6
        assert_close(result.objective, ref.fun, "objective")
        np.testing.assert_allclose(result.x.at("x"), ref.x, atol=1e-4)

    def test_unconstrained_qp(self):
        """
        Unconstrained QP: minimize (1/2)x'Px + q'x
        Has closed-form solution: x* = -P^{-1}q
        """
        P = np.array([[2.0, 0.5], [0.5, 1.0]])
        q = np.array([-2.0, -4.0])
        x_opt = -np.linalg.solve(P, q)

        result = qpgraph.solve(P=P, c=q)

        np.testing.assert_allclose(result.x.at("x"), x_opt, atol=1e-8)
        assert_close(result.objective, 0.5 * x_opt @ P @ x_opt + q @ x_opt, "objective")

    def test_kkt_conditions(self):
        rng = np.random.default_rng(7)
        n = 3
        A, b, lb, ub = random_polytope(rng, n, 4)
        P = np.eye(n)
        c = -20.0 * np.ones(n)

        result = qpgraph.solve(P=P, c=c, A_ub=A, b_ub=b, lb=lb, ub=ub)
        x = result.x.at("x")
        info = result.problem_info

        # feasibility
        assert np.all(A @ x <= b + 1e-8)
        assert np.all(x >= lb - 1e-8) and np.all(x <= ub + 1e-8)
        # multiplier signs
        for y in (info["y_ub"], info["y_lower"], info["y_upper"]):
            assert np.all(y <= 1e-9)
        # stationarity: P x + c = Aᵀy_ub + y_upper - y_lower
        np.testing.assert_allclose(
            P @ x + c, A.T @ info["y_ub"] + info["y_upper"] - info["y_lower"], atol=1e-8
        )
        # complementary slackness
        np.testing.assert_allclose(info["y_ub"] * (A @ x - b), 0.0, atol=1e-8)

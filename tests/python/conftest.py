"""
pytest configuration and fixtures for qpgraph tests.
"""

import sys
from pathlib import Path

import pytest
import numpy as np

# Allow running from a source checkout without installing
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "python"))

from qpgraph import QP, LP, VectorValues  # noqa: E402


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def single_bound_qp():
    """
    One cost factor pulling x toward 5, one bound x <= 3.

    minimize: ½(x - 5)²
    subject to: x <= 3

    Optimal: x=3, multiplier -2, obj=2
    """
    qp = QP()
    qp.add_cost({"x": [[1.0]]}, [5.0])
    qp.add_inequality({"x": [1.0]}, 3.0)
    return qp


@pytest.fixture
def two_bound_qp():
    """
    Two-dimensional target outside the negative quadrant.

    minimize: ½‖x - (2, -1)‖²
    subject to: x1 <= 0
                x2 <= 0

    At x=(0, 0) with both bounds active the multipliers are (-2, 1);
    dropping the second bound gives the optimum x=(0, -1), obj=2.
    """
    qp = QP()
    qp.add_cost({"x": np.eye(2)}, [2.0, -1.0])
    qp.add_inequality({"x": [1.0, 0.0]}, 0.0)
    qp.add_inequality({"x": [0.0, 1.0]}, 0.0)
    return qp


@pytest.fixture
def tie_qp():
    """
    Two inequalities reached at the same step length.

    minimize: ½(x - 5)² + ½(y - 1)²
    subject to: y <= 10     (never binds)
                x <= 3
                2x <= 6
    """
    qp = QP()
    qp.add_cost({"x": [[1.0]]}, [5.0])
    qp.add_cost({"y": [[1.0]]}, [1.0])
    qp.add_inequality({"y": [1.0]}, 10.0)
    qp.add_inequality({"x": [1.0]}, 3.0)
    qp.add_inequality({"x": [2.0]}, 6.0)
    return qp


@pytest.fixture
def equality_qp():
    """
    minimize: ½‖x - (1, 2)‖²
    subject to: x1 + x2 = 1
                x1 >= 0.5   (as -x1 <= -0.5)

    Optimal: x=(0.5, 0.5), obj=1.25, multipliers eq=-1.5, ineq=-1
    """
    qp = QP()
    qp.add_cost({"x": np.eye(2)}, [1.0, 2.0])
    qp.add_equality({"x": [[1.0, 1.0]]}, [1.0])
    qp.add_inequality({"x": [-1.0, 0.0]}, -0.5)
    return qp


@pytest.fixture
def simple_lp():
    """
    Simple LP problem for testing.

    minimize: -x1 - x2
    subject to: x1 + 2x2 <= 4
                3x1 + x2 <= 6
                x1, x2 >= 0

    Optimal: x=(1.6, 1.2), obj=-2.8
    """
    lp = LP({"x": [-1.0, -1.0]})
    lp.add_inequality({"x": [1.0, 2.0]}, 4.0)
    lp.add_inequality({"x": [3.0, 1.0]}, 6.0)
    lp.add_inequality({"x": [-1.0, 0.0]}, 0.0)
    lp.add_inequality({"x": [0.0, -1.0]}, 0.0)
    return lp


@pytest.fixture
def origin2():
    """Two-dimensional start point at the origin."""
    return VectorValues({"x": [0.0, 0.0]})


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")

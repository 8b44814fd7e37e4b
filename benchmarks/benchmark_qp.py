#!/usr/bin/env python3
"""
qpgraph Benchmark: Compare against scipy (SLSQP for QPs, HiGHS for LPs)
"""

import time
import numpy as np
from scipy.optimize import linprog, minimize

import qpgraph

print(f"qpgraph version: {qpgraph.__version__}")
print()


def generate_problem(n, m, seed=42):
    """Generate a random QP with a bounded feasible region."""
    rng = np.random.default_rng(seed)

    # Positive definite P
    M = rng.standard_normal((n, n)) / np.sqrt(n)
    P = M.T @ M + 0.1 * np.eye(n)

    # Constraints around a strictly feasible point
    x_feas = rng.uniform(2.0, 8.0, n)
    A = rng.standard_normal((m, n))
    b = A @ x_feas + rng.uniform(0.5, 2.0, m)

    # Linear cost
    q = 5.0 * rng.standard_normal(n)

    return P, q, A, b, np.zeros(n), np.full(n, 10.0)


def solve_qpgraph(P, q, A, b, lb, ub):
    """Solve with qpgraph."""
    start = time.perf_counter()
    result = qpgraph.solve(P=P, c=q, A_ub=A, b_ub=b, lb=lb, ub=ub)
    elapsed = time.perf_counter() - start
    return {
        'time': elapsed,
        'objective': result.objective,
        'status': result.status.value,
        'iterations': result.iterations,
    }


def solve_scipy(P, q, A, b, lb, ub):
    """Solve with scipy (SLSQP for QPs, HiGHS when P is None)."""
    start = time.perf_counter()
    if P is None:
        res = linprog(q, A_ub=A, b_ub=b, bounds=list(zip(lb, ub)), method="highs")
        iterations = res.nit
    else:
        res = minimize(
            lambda x: 0.5 * x @ P @ x + q @ x, (lb + ub) / 2,
            jac=lambda x: P @ x + q, method="SLSQP",
            bounds=list(zip(lb, ub)),
            constraints=[{"type": "ineq", "fun": lambda x: b - A @ x, "jac": lambda x: -A}],
            options={"ftol": 1e-10, "maxiter": 1000},
        )
        iterations = res.nit
    elapsed = time.perf_counter() - start
    return {
        'time': elapsed,
        'objective': res.fun if res.success else float('nan'),
        'status': 'optimal' if res.success else 'failed',
        'iterations': iterations,
    }


def benchmark_single(n, m, seed=42, lp=False):
    """Benchmark a single instance."""
    print(f"  Generating {'LP' if lp else 'QP'}: n={n}, m={m}")
    P, q, A, b, lb, ub = generate_problem(n, m, seed)
    if lp:
        P = None

    results = {}

    res = solve_scipy(P, q, A, b, lb, ub)
    results['scipy'] = res
    print(f"    scipy:    {res['time']*1000:8.1f} ms, obj={res['objective']:10.4f}, "
          f"iters={res['iterations']}, status={res['status']}")

    res = solve_qpgraph(P, q, A, b, lb, ub)
    results['qpgraph'] = res
    print(f"    qpgraph:  {res['time']*1000:8.1f} ms, obj={res['objective']:10.4f}, "
          f"iters={res['iterations']}, status={res['status']}")

    return results


def benchmark_scaling(lp=False):
    """Benchmark across different problem sizes."""
    print("=" * 70)
    print(f"{'LP' if lp else 'QP'} Scaling Benchmark")
    print("=" * 70)

    sizes = [(5, 10), (10, 20), (20, 40), (40, 80)]

    all_results = []

    for n, m in sizes:
        print(f"\nProblem size: {n} vars, {m} constraints")
        res = benchmark_single(n, m, lp=lp)
        all_results.append((n, m, res))

    # Summary table
    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    print(f"{'n':>8} {'m':>8} {'scipy (ms)':>12} {'qpgraph (ms)':>14} {'|Δobj|':>10}")
    print("-" * 70)

    for n, m, res in all_results:
        ref = res['scipy']
        ours = res['qpgraph']
        gap = abs(ref['objective'] - ours['objective'])
        print(f"{n:>8} {m:>8} {ref['time']*1000:>12.1f} {ours['time']*1000:>14.1f} {gap:>10.2e}")


def benchmark_chain():
    """Benchmark a chain of scalar poses with odometry costs and bound constraints."""
    print("\n" + "=" * 70)
    print("Factor Graph Chain Benchmark")
    print("=" * 70)

    # minimize Σ ½(x_{i+1} − x_i − 1)² + ½(x_0)²
    # subject to x_i <= 0.8 i
    length = 50
    qp = qpgraph.QP()
    qp.add_cost({0: [[1.0]]}, [0.0])
    for i in range(length - 1):
        qp.add_cost({i: [[-1.0]], i + 1: [[1.0]]}, [1.0])
    for i in range(length):
        qp.add_inequality({i: [1.0]}, 0.8 * i)

    start = time.perf_counter()
    result = qpgraph.QPSolver(qp).optimize()
    elapsed = time.perf_counter() - start

    print(f"  Chain: {length} poses, {len(qp.inequalities)} inequalities")
    print(f"    qpgraph:  {elapsed*1000:8.1f} ms, obj={result.objective:10.4f}, "
          f"iters={result.iterations}, active={len(result.active_constraints)}")


if __name__ == "__main__":
    benchmark_scaling()
    benchmark_scaling(lp=True)
    benchmark_chain()

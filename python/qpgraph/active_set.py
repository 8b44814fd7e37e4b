"""
Active-Set Solver
=================

Primal active-set iteration over linear factor graphs (Nocedal & Wright,
Numerical Optimization, 2nd ed., Sec. 16.5).

Each outer iteration solves the equality-constrained subproblem given by
the cost, the equalities and the currently active inequalities, then
either

- takes the step, activating the first inactive inequality it runs into,
- or, when the step is zero, computes the Lagrange multipliers from the
  dual graph and deactivates the active inequality whose multiplier has
  the wrong sign, or stops when none does.

Sign convention: with L = f − λᵀc and constraints aᵀx − b ≤ 0, an active
inequality is justified when λ ≤ 0. A positive multiplier means the
constraint is holding x against a direction that would lower the cost
while staying feasible, so it can be dropped.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from .config import SolverParams
from .exceptions import (
    CyclingError,
    DimensionError,
    InfeasibleStartError,
    NonConvergenceError,
    UnboundedError,
)
from .initialization import find_feasible_point
from .keys import Key
from .linear.factor_graph import (
    EqualityFactorGraph,
    FactorGraph,
    GaussianFactorGraph,
    InequalityFactorGraph,
)
from .linear.factors import JacobianFactor
from .linear.variable_index import VariableIndex
from .linear.vector_values import VectorValues
from .result import SolveResult, Status
from .working_set import WorkingSet

logger = logging.getLogger(__name__)

TermsContainer = List[Tuple[Key, np.ndarray]]


class Phase(Enum):
    """What the last outer iteration did."""

    COMPUTE_DIRECTION = "compute_direction"
    BOUND_STEP = "bound_step"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    CONVERGED = "converged"

    def __str__(self) -> str:
        return self.value


@dataclass
class SolverState:
    """
    Iterate of the active-set loop.

    Attributes:
        values: Current feasible point
        duals: Multipliers from the most recent dual solve
        working_set: Inequalities and their activity flags
        iterations: Outer iterations completed so far
        phase: What the last iteration did
        alpha: Step length taken by the last step, if any
    """

    values: VectorValues
    working_set: WorkingSet
    duals: VectorValues = field(default_factory=VectorValues)
    iterations: int = 0
    phase: Phase = Phase.COMPUTE_DIRECTION
    alpha: Optional[float] = None

    @property
    def converged(self) -> bool:
        return self.phase == Phase.CONVERGED


class ActiveSetSolver(ABC):
    """
    Base class of the active-set solvers.

    Subclasses supply the direction subproblem, the dual (stationarity)
    factor of a constrained key and the objective. The cost, equality and
    inequality graphs and their variable indices are fixed at
    construction.

    Args:
        cost: Cost factors used for the direction subproblem
        equalities: Equality constraints
        inequalities: Inequality constraints
        params: Solver parameters
    """

    #: Upper bound on the step length along a direction.
    start_alpha: float = 1.0

    def __init__(
        self,
        cost: Iterable[JacobianFactor],
        equalities: Iterable,
        inequalities: Iterable,
        params: Optional[SolverParams] = None,
    ) -> None:
        self.params = params if params is not None else SolverParams()
        self.base_graph = GaussianFactorGraph(cost)
        self.equalities = EqualityFactorGraph(equalities)
        self.inequalities = InequalityFactorGraph(inequalities)

        self.cost_variable_index = VariableIndex(self.base_graph)
        self.equality_variable_index = VariableIndex(self.equalities)
        self.inequality_variable_index = VariableIndex(self.inequalities)

        # every constrained key gets a factor in the dual graph
        self.constrained_keys: List[Key] = list(
            dict.fromkeys(self.equalities.keys() + self.inequalities.keys())
        )

        self.dims: Dict[Key, int] = {}
        for graph in (self.base_graph, self.equalities, self.inequalities):
            for key, d in graph.dims().items():
                if self.dims.setdefault(key, d) != d:
                    raise DimensionError(f"{key!r} used with dims {self.dims[key]} and {d}")
        self.ordering: List[Key] = list(self.dims)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def compute_step_size(
        self,
        working_set: WorkingSet,
        xk: VectorValues,
        p: VectorValues,
        start_alpha: float,
    ) -> Tuple[float, int]:
        """
        Largest step x' = xk + alpha*p, alpha <= start_alpha, that stays feasible.

        Only inactive inequalities are checked; those with aᵀp <= 0 never
        tighten along p. On ties the lowest working-set index wins.

        Returns:
            (alpha, factor_ix) where factor_ix is the inequality that
            becomes active, or -1 if none binds before start_alpha
        """
        min_alpha = start_alpha
        closest_ix = -1
        for ix in range(len(working_set)):
            if working_set.is_active(ix):
                continue
            factor = working_set[ix]
            aTp = factor.dot_product_row(p)
            if aTp <= 0:
                continue
            alpha = (factor.bound - factor.dot_product_row(xk)) / aTp
            if alpha < min_alpha:
                closest_ix = ix
                min_alpha = alpha
        return min_alpha, closest_ix

    def identify_leaving_constraint(self, working_set: WorkingSet, lambdas: VectorValues) -> int:
        """
        Active inequality with the largest positive multiplier.

        Returns:
            Its working-set index (lowest index on ties), or -1 if every
            active multiplier is <= 0

        Raises:
            KeyError: If an active inequality has no multiplier in ``lambdas``
        """
        worst_ix = -1
        # multipliers <= 0 belong to valid active constraints
        max_lambda = 0.0
        for ix in range(len(working_set)):
            if not working_set.is_active(ix):
                continue
            lam = float(lambdas.at(working_set[ix].dual_key)[0])
            if lam > max_lambda:
                worst_ix = ix
                max_lambda = lam
        return worst_ix

    def collect_dual_jacobians(
        self,
        key: Key,
        graph: FactorGraph,
        variable_index: VariableIndex,
    ) -> TermsContainer:
        """
        (dual key, A_keyᵀ) for every active factor of ``graph`` touching ``key``.

        ``graph`` is anything index-compatible with ``variable_index`` that
        answers ``is_active``: an equality graph or a working set.
        """
        terms: TermsContainer = []
        for ix in variable_index.get(key):
            if not graph.is_active(ix):
                continue
            factor = graph[ix]
            terms.append((factor.dual_key, factor.get_a(key).T))
        return terms

    def dual_jacobians(self, key: Key, working_set: WorkingSet) -> TermsContainer:
        """Dual terms at ``key`` from the equalities and active inequalities."""
        return self.collect_dual_jacobians(
            key, self.equalities, self.equality_variable_index
        ) + self.collect_dual_jacobians(key, working_set, self.inequality_variable_index)

    @abstractmethod
    def create_dual_factor(
        self,
        key: Key,
        working_set: WorkingSet,
        delta: VectorValues,
    ) -> JacobianFactor:
        """Stationarity equation of ``key``; empty if no active constraint touches it."""

    def build_dual_graph(self, working_set: WorkingSet, delta: VectorValues) -> GaussianFactorGraph:
        """Dual factors of all constrained keys, dropping empty ones."""
        dual_graph = GaussianFactorGraph()
        for key in self.constrained_keys:
            dual_factor = self.create_dual_factor(key, working_set, delta)
            if not dual_factor.empty():
                dual_graph.push_back(dual_factor)
        return dual_graph

    def compute_duals(self, working_set: WorkingSet, delta: VectorValues) -> VectorValues:
        """
        Solve the dual graph for the multipliers.

        Raises:
            SingularSystemError: If the active constraints are linearly dependent
        """
        return self.build_dual_graph(working_set, delta).optimize(require_full_rank=True)

    # ------------------------------------------------------------------
    # Subproblem
    # ------------------------------------------------------------------

    @abstractmethod
    def compute_direction(self, working_set: WorkingSet, xk: VectorValues) -> VectorValues:
        """Step to the minimizer of the subproblem with active inequalities as equalities."""

    @abstractmethod
    def objective(self, values: VectorValues) -> float:
        """Objective value at ``values``."""

    def working_constraints(self, working_set: WorkingSet, xk: VectorValues) -> EqualityFactorGraph:
        """Equalities and active inequalities in delta coordinates around ``xk``."""
        constraints = self.equalities.shifted(xk)
        constraints.extend(working_set.as_equalities().shifted(xk))
        return constraints

    def solve_direction(
        self,
        graph: GaussianFactorGraph,
        working_set: WorkingSet,
        xk: VectorValues,
    ) -> VectorValues:
        """Minimize ``graph`` (in delta coordinates) subject to the working constraints."""
        return graph.optimize(
            constraints=self.working_constraints(working_set, xk),
            ordering=self.ordering,
            dims=self.dims,
        )

    # ------------------------------------------------------------------
    # Outer loop
    # ------------------------------------------------------------------

    def iterate(self, state: SolverState) -> SolverState:
        """
        One outer iteration: a step (possibly activating one inequality),
        a deactivation, or convergence. The working set is updated in place.
        """
        working_set = state.working_set
        p = self.compute_direction(working_set, state.values)

        if p.norm() <= self.params.tolerance:
            duals = self.compute_duals(working_set, state.values)
            leaving_ix = self.identify_leaving_constraint(working_set, duals)
            if leaving_ix < 0:
                return SolverState(
                    state.values, working_set, duals, state.iterations + 1, Phase.CONVERGED
                )
            working_set.deactivate(leaving_ix)
            logger.debug("Deactivated inequality %d (lambda=%.3e)", leaving_ix,
                         duals.at(working_set[leaving_ix].dual_key)[0])
            return SolverState(
                state.values, working_set, duals, state.iterations + 1, Phase.DEACTIVATE
            )

        alpha, entering_ix = self.compute_step_size(working_set, state.values, p, self.start_alpha)
        if entering_ix < 0 and math.isinf(alpha):
            raise UnboundedError(f"no constraint blocks direction of norm {p.norm():.3e}")
        # a start point feasible only within tolerance can yield a tiny negative alpha
        alpha = max(alpha, 0.0)
        values = state.values + alpha * p

        if entering_ix < 0:
            return SolverState(
                values, working_set, state.duals, state.iterations + 1, Phase.BOUND_STEP, alpha
            )
        working_set.activate(entering_ix)
        logger.debug("Activated inequality %d (alpha=%.3e)", entering_ix, alpha)
        return SolverState(
            values, working_set, state.duals, state.iterations + 1, Phase.ACTIVATE, alpha
        )

    def check_feasibility(self, values: VectorValues) -> None:
        """
        Raises:
            InfeasibleStartError: If ``values`` violates a constraint
                by more than the feasibility tolerance
        """
        tol = self.params.feasibility_tolerance
        violation = max(
            self.equalities.violation(values),
            float(np.max(self.inequalities.violations(values), initial=0.0)),
        )
        if violation > tol:
            raise InfeasibleStartError(
                f"start point violates constraints by {violation:.3e}", violation=violation
            )

    def initial_state(
        self,
        initial_values: Optional[VectorValues] = None,
        duals: Optional[VectorValues] = None,
        working_set: Optional[WorkingSet] = None,
    ) -> SolverState:
        """
        Starting state: the given point (or a phase-one point) and a
        working set that is given, warm-started from ``duals``, or seeded
        with the inequalities tight at the start.
        """
        if initial_values is None:
            values = find_feasible_point(
                self.equalities, self.inequalities, self.ordering, self.dims,
                tol=self.params.feasibility_tolerance,
            )
        else:
            values = VectorValues.zero(self.dims) + initial_values
            if self.params.check_feasibility:
                self.check_feasibility(values)

        if working_set is not None:
            if len(working_set) != len(self.inequalities):
                raise DimensionError(
                    f"working set has {len(working_set)} factors, problem has {len(self.inequalities)}"
                )
            working_set = working_set.copy()
        elif initial_values is None:
            working_set = WorkingSet(self.inequalities)
        else:
            working_set = WorkingSet.from_initial(
                self.inequalities, values, duals, self.params.active_tolerance
            )
        return SolverState(values, working_set)

    def optimize(
        self,
        initial_values: Optional[VectorValues] = None,
        duals: Optional[VectorValues] = None,
        working_set: Optional[WorkingSet] = None,
    ) -> SolveResult:
        """
        Run the active-set loop to a KKT point.

        Args:
            initial_values: Feasible start; computed by phase one if omitted
            duals: Warm-start multipliers; their keys seed the working set
            working_set: Explicit initial working set (copied)

        Returns:
            SolveResult with status OPTIMAL

        Raises:
            InfeasibleStartError: If ``initial_values`` is infeasible
            InfeasibleError: If phase one finds no feasible point
            NonConvergenceError: If max_iterations is reached
            CyclingError: If a working set repeats before the point moves
            SingularSystemError: If the dual system is rank deficient
            UnboundedError: If a direction is never blocked (LP)
        """
        import time
        start_time = time.perf_counter()
        log_level = logging.INFO if self.params.verbose else logging.DEBUG

        state = self.initial_state(initial_values, duals, working_set)
        # working sets visited since the point last moved
        seen: Set[Tuple[int, ...]] = set()

        while not state.converged:
            if state.iterations >= self.params.max_iterations:
                raise NonConvergenceError(
                    f"no convergence after {state.iterations} iterations",
                    iterations=state.iterations,
                    state=state,
                )
            if self.params.detect_cycling:
                signature = state.working_set.signature()
                if signature in seen:
                    raise CyclingError(
                        f"working set {list(signature)} revisited at iteration {state.iterations}",
                        iterations=state.iterations,
                        state=state,
                    )
                seen.add(signature)

            state = self.iterate(state)
            if state.alpha is not None and state.alpha > 0:
                seen.clear()
            if logger.isEnabledFor(log_level):
                logger.log(
                    log_level, "iter %4d  %-11s  active=%s  objective=%.6e",
                    state.iterations, state.phase, state.working_set.active_indices(),
                    self.objective(state.values),
                )

        objective = self.objective(state.values)
        logger.log(log_level, "Converged after %d iterations, objective %.10g", state.iterations, objective)
        return SolveResult(
            status=Status.OPTIMAL,
            objective=objective,
            x=state.values,
            duals=state.duals,
            working_set=state.working_set,
            iterations=state.iterations,
            solve_time=time.perf_counter() - start_time,
        )

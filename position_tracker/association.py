"""Cost matrix construction and optimal assignment.

Rows of every cost matrix are observations, columns are tracks, so a solved
assignment ``P`` maps observation ``i`` to track ``P[i]``.

References:
  - Kuhn (1955) "The Hungarian Method for the Assignment Problem"
  - Munkres (1957) "Algorithms for the Assignment and Transportation Problems"
  - Jonker, Volgenant (1987) "A shortest augmenting path algorithm for
    dense and sparse linear assignment problems"
"""

import logging

import numpy as np
from scipy.optimize import linear_sum_assignment
from scipy.spatial.distance import cdist

from .errors import ContractViolation, InternalInconsistency

logger = logging.getLogger(__name__)


def build_cost_matrix(predicted: np.ndarray, observed: np.ndarray) -> np.ndarray:
    """Euclidean distance between every observation and every prediction.

    Args:
        predicted: Nx2 predicted track positions
        observed: Nx2 observed positions

    Returns:
        NxN float64 matrix, ``cost[i, j] = |observed[i] - predicted[j]|``
    """
    predicted = np.asarray(predicted, dtype=np.float64).reshape(-1, 2)
    observed = np.asarray(observed, dtype=np.float64).reshape(-1, 2)
    if len(predicted) != len(observed):
        raise ContractViolation(
            f"Cost matrix needs equal sizes, got {len(predicted)} predictions "
            f"and {len(observed)} observations")
    if len(observed) == 0:
        return np.zeros((0, 0))
    return cdist(observed, predicted)


def hungarian_algorithm(cost_matrix: np.ndarray) -> np.ndarray:
    """Minimum-cost perfect matching on a square cost matrix.

    Shortest augmenting path form of the Hungarian method with row and
    column potentials, O(N³). Rows are added one at a time; each is routed
    to a free column along a Dijkstra-like path over reduced costs, after
    which the potentials are adjusted so all reduced costs stay >= 0.

    Ties are broken by the lowest column index, so the result depends only
    on the input matrix.

    Args:
        cost_matrix: NxN non-negative cost matrix

    Returns:
        Length-N int array, ``P[i]`` = column assigned to row ``i``
    """
    cost = np.asarray(cost_matrix, dtype=np.float64)
    if cost.ndim != 2 or cost.shape[0] != cost.shape[1]:
        raise ContractViolation(f"Cost matrix must be square, got shape {cost.shape}")
    n = cost.shape[0]
    if n == 0:
        return np.zeros(0, dtype=np.int64)
    if not np.all(np.isfinite(cost)):
        raise ContractViolation("Cost matrix contains non-finite entries")
    if cost.min() < 0:
        raise ContractViolation("Cost matrix contains negative entries")

    # Index 0 of the column arrays is a virtual column holding the row
    # currently being inserted; real columns are 1..n.
    u = np.zeros(n + 1)                       # row potentials (1-based)
    v = np.zeros(n + 1)                       # column potentials
    p = np.zeros(n + 1, dtype=np.int64)       # p[j]: row matched to column j
    way = np.zeros(n + 1, dtype=np.int64)     # predecessor column on path

    for i in range(1, n + 1):
        p[0] = i
        j0 = 0
        minv = np.full(n + 1, np.inf)
        used = np.zeros(n + 1, dtype=bool)

        while True:
            used[j0] = True
            i0 = p[j0]

            free = ~used[1:]
            reduced = cost[i0 - 1] - u[i0] - v[1:]
            better = free & (reduced < minv[1:])
            minv[1:][better] = reduced[better]
            way[1:][better] = j0

            candidates = np.where(free, minv[1:], np.inf)
            j1 = int(np.argmin(candidates)) + 1
            delta = candidates[j1 - 1]

            u[p[used]] += delta
            v[used] -= delta
            minv[~used] -= delta

            j0 = j1
            if p[j0] == 0:
                break

        # Flip matched/unmatched edges along the augmenting path
        while j0:
            j1 = way[j0]
            p[j0] = p[j1]
            j0 = j1

    assignment = np.empty(n, dtype=np.int64)
    assignment[p[1:] - 1] = np.arange(n)
    return assignment


def _scipy_assignment(cost_matrix: np.ndarray) -> np.ndarray:
    rows, cols = linear_sum_assignment(cost_matrix)
    assignment = np.empty(len(rows), dtype=np.int64)
    assignment[rows] = cols
    return assignment


def validate_assignment(assignment: np.ndarray, n: int) -> np.ndarray:
    """Check ``assignment`` is a permutation of ``0..n-1``."""
    assignment = np.asarray(assignment)
    if (assignment.shape != (n,)
            or not np.array_equal(np.sort(assignment), np.arange(n))):
        logger.error("Solver returned a non-permutation for n=%d: %s",
                     n, assignment.tolist())
        raise InternalInconsistency(
            f"Assignment is not a permutation of 0..{n - 1}: {assignment.tolist()}")
    return assignment


def solve_assignment(cost_matrix: np.ndarray, method: str = "hungarian") -> np.ndarray:
    """Solve and validate one assignment problem.

    Args:
        cost_matrix: NxN non-negative cost matrix
        method: "hungarian" (built-in) or "scipy" (``linear_sum_assignment``)
    """
    cost = np.asarray(cost_matrix, dtype=np.float64)
    if method == "hungarian":
        assignment = hungarian_algorithm(cost)
    elif method == "scipy":
        if cost.ndim != 2 or cost.shape[0] != cost.shape[1]:
            raise ContractViolation(f"Cost matrix must be square, got shape {cost.shape}")
        assignment = _scipy_assignment(cost)
    else:
        raise ContractViolation(f"Unknown assignment method '{method}'")
    return validate_assignment(assignment, cost.shape[0])

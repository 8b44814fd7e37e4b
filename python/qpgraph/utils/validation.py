"""Input validation utilities."""

from typing import Any, Optional, Union

import numpy as np
from scipy import sparse

from ..exceptions import DimensionError, InvalidInputError

MatrixLike = Union[np.ndarray, sparse.spmatrix]


def as_vector(v: Optional[Any], name: str, n: Optional[int] = None) -> Optional[np.ndarray]:
    """
    Convert to a flat float vector, checking length and NaNs.

    Returns:
        None if ``v`` is None
    """
    if v is None:
        return None
    v = np.asarray(v, dtype=np.float64).ravel()
    if np.any(np.isnan(v)):
        raise InvalidInputError(f"{name} contains NaN values")
    if n is not None and len(v) != n:
        raise DimensionError(f"{name} has {len(v)} entries, expected {n}")
    return v


def as_matrix(M: Optional[MatrixLike], n: int, name: str) -> Optional[np.ndarray]:
    """Convert a dense or sparse matrix with ``n`` columns to a dense 2-D array."""
    if M is None:
        return None
    M = M.toarray() if sparse.issparse(M) else np.asarray(M, dtype=np.float64)
    if M.ndim == 1:
        M = M.reshape(1, -1)
    if M.shape[1] != n:
        raise DimensionError(f"{name} columns {M.shape[1]} != n={n}")
    if np.any(np.isnan(M)):
        raise InvalidInputError(f"{name} contains NaN values")
    return M

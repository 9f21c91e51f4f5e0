"""Dense linear algebra primitives used by the thermal analysis.

Thin wrappers over LAPACK (via scipy.linalg) and BLAS (via numpy) giving the
two operations the analysis needs:

- symmetric_eigen: eigendecomposition of a dense symmetric matrix
- multiply: in-place multiply-accumulate C <- alpha*A*B + beta*C
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import scipy.linalg as sla


class NumericalError(RuntimeError):
    """Raised when a numerical routine fails (e.g. eigensolver non-convergence)."""


def symmetric_eigen(matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Eigendecomposition of a dense symmetric matrix.

    Args:
        matrix: Square symmetric matrix (only the lower triangle is read)

    Returns:
        (eigenvalues, eigenvectors) where eigenvalues are in ascending order
        and column i of eigenvectors is the unit eigenvector for eigenvalue i.

    Raises:
        NumericalError: If the eigensolver does not converge or the input
            contains non-finite values.
    """
    try:
        values, vectors = sla.eigh(matrix, lower=True, check_finite=True)
    except (sla.LinAlgError, ValueError) as e:
        raise NumericalError(f"symmetric eigendecomposition failed: {e}") from e
    return values, vectors


def multiply(
    alpha: float,
    a: np.ndarray,
    b: np.ndarray,
    beta: float,
    c: np.ndarray,
) -> np.ndarray:
    """Compute c <- alpha * a @ b + beta * c in place.

    ``c`` may be a non-contiguous view (e.g. a window of the history buffer);
    the update is written through the view.

    Args:
        alpha: Scale applied to the product
        a: Left operand, shape (m, k)
        b: Right operand, shape (k, n) or (k,)
        beta: Scale applied to the existing contents of c
        c: Accumulator, shape (m, n) or (m,)

    Returns:
        c (the same object, updated).
    """
    product = a @ b
    if alpha != 1.0:
        product *= alpha
    if beta == 0.0:
        c[...] = product
    else:
        if beta != 1.0:
            c *= beta
        c += product
    return c

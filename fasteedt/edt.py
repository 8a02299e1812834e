"""
Exact squared Euclidean distance transform of 2D binary masks.

Separable two-pass algorithm described in:
[Str21] T. Strutz:
"The Distance Transform and its Computation - An Introduction"
Technical paper, 2021. https://arxiv.org/abs/2106.03503

Pass 1 propagates squared distances along each column with odd increments
(n^2 - (n-1)^2 = 2n - 1). Pass 2 takes the lower envelope of the parabolas
profile[k] + (x - k)^2 along each row with a monotonic stack.

The result is the SQUARED distance to the nearest foreground pixel.
"""

import logging
from typing import Tuple

import numpy as np
from numba import jit, prange

logger = logging.getLogger(__name__)


# ============================================================================
# ERRORS AND VALIDATION
# ============================================================================

class InvalidMaskError(ValueError):
    """Raised when the input is not a non-empty 2D mask of zeros and ones."""

    def __init__(self, message: str, shape: Tuple[int, ...] = (), values=()):
        super().__init__(message)
        self.shape = tuple(shape)
        self.values = tuple(values)


def validate_mask(mask) -> np.ndarray:
    """Check that mask is a non-empty 2D array holding only 0 and 1.

    All-background and all-foreground masks are valid.

    Args:
        mask: Array-like binary mask

    Returns:
        The mask as a numpy array (not copied if it already is one)

    Raises:
        InvalidMaskError: on wrong dimensionality, empty axes, non-numeric
            dtype or values outside {0, 1}
    """
    arr = np.asarray(mask)

    if arr.ndim != 2:
        raise InvalidMaskError(
            f"mask must be 2D, got {arr.ndim}D array of shape {arr.shape}",
            shape=arr.shape,
        )
    if arr.shape[0] < 1 or arr.shape[1] < 1:
        raise InvalidMaskError(
            f"mask must have at least one row and one column, got shape {arr.shape}",
            shape=arr.shape,
        )
    if not (arr.dtype == np.bool_ or np.issubdtype(arr.dtype, np.number)):
        raise InvalidMaskError(
            f"mask must be numeric or boolean, got dtype {arr.dtype}",
            shape=arr.shape,
        )

    uv = np.unique(arr)
    bad = uv[~np.isin(uv, (0, 1))]
    if bad.size:
        shown = bad[:5].tolist()
        raise InvalidMaskError(
            f"mask must contain only 0 and 1, found {shown}"
            + (f" and {bad.size - 5} more" if bad.size > 5 else ""),
            shape=arr.shape,
            values=shown,
        )

    return arr


def sentinel_distance(shape: Tuple[int, int]) -> int:
    """Upper bound rows^2 + cols^2, larger than any in-grid squared distance."""
    rows, cols = shape
    return int(rows) * int(rows) + int(cols) * int(cols)


# ============================================================================
# JIT-COMPILED LINE KERNELS
# ============================================================================

@jit(nopython=True, cache=True)
def _propagate_column(dt, j):
    """Turn column j of dt into its exact 1D squared distance profile."""
    rows = dt.shape[0]

    # Downwards
    ds = 1
    for i in range(1, rows):
        if dt[i, j] > dt[i - 1, j] + ds:
            dt[i, j] = dt[i - 1, j] + ds
            ds += 2
        else:
            ds = 1

    # Upwards
    ds = 1
    for i in range(rows - 2, -1, -1):
        if dt[i, j] > dt[i + 1, j] + ds:
            dt[i, j] = dt[i + 1, j] + ds
            ds += 2
        else:
            ds = 1


@jit(nopython=True, cache=True)
def _intersection(f, k, m):
    """Leftmost integer column where parabola m is not above parabola k."""
    num = f[m] - f[k] - k * k + m * m
    den = 2 * (m - k)
    # Integer ceil, den > 0
    return -((-num) // den)


@jit(nopython=True, cache=True)
def _reduce_row(dt, i, max_dist, f, js, ks):
    """
    Replace row i of dt by the lower envelope of its column parabolas.

    f, js and ks are scratch arrays of length cols, cols + 1 and cols.
    js holds the boundary where each stacked contributor starts to dominate,
    ks the column of that contributor.
    """
    cols = dt.shape[1]
    for x in range(cols):
        f[x] = dt[i, x]

    top = 0
    js[0] = -max_dist  # stopping point, never popped
    ks[0] = 0          # first (possibly dummy) contributor

    for m in range(1, cols):
        if f[m] >= max_dist:
            continue

        k = ks[top]
        j = _intersection(f, k, m)
        # New parabola hides the previous one
        while j <= js[top]:
            top -= 1
            k = ks[top]
            j = _intersection(f, k, m)

        if j < cols:
            top += 1
            js[top] = max(0, j)
            ks[top] = m

    # No contributor at all: whole mask is background
    if top == 0 and f[0] >= max_dist:
        for x in range(cols):
            dt[i, x] = max_dist
        return

    js[0] = 0
    js[top + 1] = cols

    for n in range(top + 1):
        k = ks[n]
        for x in range(js[n], js[n + 1]):
            dt[i, x] = f[k] + (x - k) * (x - k)


# ============================================================================
# PASS DRIVERS
# ============================================================================

@jit(nopython=True, cache=True)
def _squared_edt_serial(dt, max_dist):
    rows, cols = dt.shape

    for j in range(cols):
        _propagate_column(dt, j)

    # Scratch reused across rows
    f = np.empty(cols, dtype=np.int64)
    js = np.empty(cols + 1, dtype=np.int64)
    ks = np.empty(cols, dtype=np.int64)
    for i in range(rows):
        _reduce_row(dt, i, max_dist, f, js, ks)

    return dt


@jit(nopython=True, cache=True, parallel=True)
def _squared_edt_parallel(dt, max_dist):
    rows, cols = dt.shape

    for j in prange(cols):
        _propagate_column(dt, j)

    for i in prange(rows):
        # Each iteration owns its scratch
        f = np.empty(cols, dtype=np.int64)
        js = np.empty(cols + 1, dtype=np.int64)
        ks = np.empty(cols, dtype=np.int64)
        _reduce_row(dt, i, max_dist, f, js, ks)

    return dt


# ============================================================================
# PUBLIC API
# ============================================================================

def squared_distance_transform(mask, parallel: bool = False) -> np.ndarray:
    """
    Exact squared Euclidean distance transform of a 2D binary mask.

    Every cell receives the squared distance to the nearest foreground (1)
    cell: 0 on the foreground itself. If the mask has no foreground at all,
    every cell holds the sentinel bound rows^2 + cols^2.

    Args:
        mask: 2D array-like of zeros and ones (bool accepted)
        parallel: Run both passes across lines with numba prange

    Returns:
        int64 array of the same shape as mask

    Raises:
        InvalidMaskError: if mask is not a valid binary mask
    """
    bw = validate_mask(mask)
    max_dist = sentinel_distance(bw.shape)

    logger.debug(
        "Squared EDT of %dx%d mask (sentinel=%d, %s driver)",
        bw.shape[0], bw.shape[1], max_dist, "parallel" if parallel else "serial",
    )

    dt = np.full(bw.shape, max_dist, dtype=np.int64)
    dt[bw > 0] = 0

    if parallel:
        return _squared_edt_parallel(dt, max_dist)
    return _squared_edt_serial(dt, max_dist)

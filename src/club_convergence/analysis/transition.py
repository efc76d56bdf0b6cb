"""
Relative transition paths.

Phillips-Sul transition parameters: each unit's value divided by the
cross-sectional mean of the unit set in the same period.
"""

from typing import Sequence, Union
import logging

import pandas as pd
import numpy as np

from ..core.exceptions import ComputationError

logger = logging.getLogger(__name__)

Panel = Union[pd.DataFrame, np.ndarray]


def select_panel(X: Panel, rows: Sequence[int], cols: Sequence[int]) -> np.ndarray:
    """
    Extract the numeric block for some units and periods.

    Args:
        X: Panel matrix (units x columns)
        rows: Row positions of the units
        cols: Column positions of the time-series data

    Returns:
        Float array of shape (len(rows), len(cols))
    """
    rows = list(rows)
    cols = list(cols)
    if isinstance(X, pd.DataFrame):
        block = X.iloc[rows, cols].to_numpy(dtype=float)
    else:
        block = np.asarray(X)[np.ix_(rows, cols)].astype(float)
    return block


def compute_h(X: Union[np.ndarray, pd.DataFrame]) -> np.ndarray:
    """
    Compute the relative transition path of a group of units.

    h_it = X_it / mean_i(X_it)

    Args:
        X: Units x periods block

    Returns:
        Array of the same shape as X
    """
    values = np.asarray(X, dtype=float)
    if values.ndim == 1:
        values = values.reshape(1, -1)

    means = values.mean(axis=0)
    if np.any(means == 0):
        raise ComputationError(
            "transition path",
            "cross-sectional mean is zero in at least one period"
        )

    return values / means


def cross_sectional_variance(h: np.ndarray) -> np.ndarray:
    """
    Cross-sectional variation of the transition path.

    H_t = mean_i (h_it - 1)^2

    Args:
        h: Relative transition path (units x periods)

    Returns:
        1-D array with one value per period
    """
    h = np.asarray(h, dtype=float)
    if h.ndim == 1:
        h = h.reshape(1, -1)
    return ((h - 1.0) ** 2).mean(axis=0)


def trim_start(n_periods: int, time_trim: float) -> int:
    """
    Number of initial periods dropped before the log-t regression.

    log(log(1)) is undefined, so at least the first period goes.
    """
    return max(int(round(n_periods * time_trim)), 1)


def regression_periods(n_periods: int, time_trim: float) -> int:
    """Number of periods left for the log-t regression after trimming."""
    return n_periods - trim_start(n_periods, time_trim)

"""
Log-t regression module.

Implements the Phillips-Sul (2007) log-t convergence test with a
Quadratic Spectral HAC standard error for the slope coefficient.

    log(H_1 / H_t) - 2 log(log t) = a + b log t + u_t,    t = r+1, ..., T

Convergence is rejected when the t-statistic of b falls below the
critical value (-1.65 at 5%).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import logging

import numpy as np
import statsmodels.api as sm
from statsmodels.stats.sandwich_covariance import cov_hac
from scipy import stats

from ..core.constants import (
    DEFAULT_HAC_METHOD,
    HAC_METHODS,
    HAC_FIXED_QS,
    MIN_REGRESSION_OBS,
    FIXED_BANDWIDTH_SCALE,
    FIXED_BANDWIDTH_EXPONENT,
    ANDREWS_QS_CONSTANT,
    ANDREWS_MAX_RHO,
)
from ..core.exceptions import InsufficientDataError, ParameterError
from .transition import Panel, compute_h, cross_sectional_variance, select_panel, trim_start

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogTModel:
    """Result of a log-t regression."""
    beta: float
    std_err: float
    tvalue: float
    pvalue: float
    intercept: float
    nobs: int
    hac_method: str
    bandwidth: float

    @classmethod
    def undefined(cls, nobs: int, hac_method: str) -> 'LogTModel':
        """Model for a group whose cross-sectional variation vanishes."""
        nan = float('nan')
        return cls(
            beta=nan,
            std_err=nan,
            tvalue=nan,
            pvalue=nan,
            intercept=nan,
            nobs=nobs,
            hac_method=hac_method,
            bandwidth=nan,
        )


def quadratic_spectral(x: np.ndarray) -> np.ndarray:
    """
    Quadratic Spectral kernel.

    k(x) = 25 / (12 pi^2 x^2) * (sin(z) / z - cos(z)),  z = 6 pi x / 5

    Args:
        x: Lag divided by bandwidth

    Returns:
        Kernel weights, 1 at x == 0
    """
    x = np.asarray(x, dtype=float)
    weights = np.ones_like(x)
    nonzero = x != 0
    z = 6 * np.pi * x[nonzero] / 5
    weights[nonzero] = 25 / (12 * np.pi ** 2 * x[nonzero] ** 2) * (np.sin(z) / z - np.cos(z))
    return weights


def quadratic_spectral_weights(bandwidth: float) -> Callable[[int], np.ndarray]:
    """
    Build a statsmodels-compatible weights function for the QS kernel.

    Args:
        bandwidth: Kernel bandwidth; non-positive means no autocovariance terms

    Returns:
        Function mapping nlags to an array of nlags + 1 weights
    """
    def weights_func(nlags: int) -> np.ndarray:
        lags = np.arange(nlags + 1, dtype=float)
        if bandwidth <= 0:
            weights = np.zeros_like(lags)
            weights[0] = 1.0
            return weights
        return quadratic_spectral(lags / bandwidth)

    return weights_func


class LogTRegression:
    """
    Log-t regression estimator.

    Implements:
    - Cross-sectional variance of the transition path
    - OLS of the log-t equation after trimming the first periods
    - Quadratic Spectral HAC variance with fixed (FQSB) or
      Andrews plug-in (AQSB) bandwidth
    """

    def __init__(
        self,
        bandwidth: Optional[float] = None,
        transition: Callable[[np.ndarray], np.ndarray] = compute_h,
    ):
        """
        Initialize estimator.

        Args:
            bandwidth: Fixed QS bandwidth for FQSB (default: 4 * (n/100)^(2/9))
            transition: Function turning a units x periods block into h
        """
        self.bandwidth = bandwidth
        self.transition = transition

    @staticmethod
    def fixed_bandwidth(nobs: int) -> float:
        return FIXED_BANDWIDTH_SCALE * (nobs / 100.0) ** FIXED_BANDWIDTH_EXPONENT

    @staticmethod
    def andrews_bandwidth(scores: np.ndarray) -> float:
        """
        Andrews (1991) AR(1) plug-in bandwidth for the QS kernel.

        Args:
            scores: Estimating function of the slope (x_t * u_t)

        Returns:
            Bandwidth 1.3221 * (alpha(2) * n)^(1/5)
        """
        lagged = scores[:-1]
        denom = np.dot(lagged, lagged)
        if denom == 0:
            return 0.0

        rho = float(np.dot(scores[1:], lagged) / denom)
        rho = float(np.clip(rho, -ANDREWS_MAX_RHO, ANDREWS_MAX_RHO))
        alpha2 = 4 * rho ** 2 / (1 - rho) ** 4
        return ANDREWS_QS_CONSTANT * (alpha2 * len(scores)) ** 0.2

    def estimate(
        self,
        h: np.ndarray,
        time_trim: float,
        hac_method: str = DEFAULT_HAC_METHOD,
    ) -> LogTModel:
        """
        Run the log-t regression on a transition path.

        Args:
            h: Relative transition path (units x periods)
            time_trim: Share of initial periods to discard
            hac_method: 'FQSB' or 'AQSB'

        Returns:
            LogTModel with slope, HAC standard error and t-statistic
        """
        if hac_method not in HAC_METHODS:
            raise ParameterError("hac_method", f"must be one of {list(HAC_METHODS)}, got {hac_method!r}")

        H = cross_sectional_variance(h)
        n_periods = len(H)

        t = np.arange(trim_start(n_periods, time_trim) + 1, n_periods + 1)
        nobs = len(t)
        if nobs < MIN_REGRESSION_OBS:
            raise InsufficientDataError(MIN_REGRESSION_OBS, nobs, "log-t regression")

        if not (np.all(np.isfinite(H)) and np.all(H > 0)):
            logger.warning(
                f"Cross-sectional variation is zero or undefined for a group of {np.shape(h)[0]} unit(s); "
                "log-t statistic is not defined"
            )
            return LogTModel.undefined(nobs, hac_method)

        log_t = np.log(t)
        y = np.log(H[0] / H[t - 1]) - 2 * np.log(log_t)
        X = sm.add_constant(log_t, has_constant='add')
        results = sm.OLS(y, X).fit()

        if hac_method == HAC_FIXED_QS:
            bandwidth = self.bandwidth if self.bandwidth is not None else self.fixed_bandwidth(nobs)
        else:
            bandwidth = self.andrews_bandwidth(results.resid * log_t)

        cov = cov_hac(results, nlags=nobs - 1, weights_func=quadratic_spectral_weights(bandwidth))
        beta = float(results.params[1])

        with np.errstate(divide='ignore', invalid='ignore'):
            std_err = float(np.sqrt(cov[1, 1]))
            tvalue = beta / std_err

        return LogTModel(
            beta=beta,
            std_err=std_err,
            tvalue=float(tvalue),
            pvalue=float(stats.norm.cdf(tvalue)),
            intercept=float(results.params[0]),
            nobs=nobs,
            hac_method=hac_method,
            bandwidth=float(bandwidth),
        )

    def log_t_test(
        self,
        panel: Panel,
        units: Sequence[int],
        data_cols: Sequence[int],
        time_trim: float,
        hac_method: str = DEFAULT_HAC_METHOD,
    ) -> LogTModel:
        """
        Test convergence of a set of panel rows.

        Args:
            panel: Panel matrix
            units: Row positions of the units to test together
            data_cols: Column positions of the time-series data
            time_trim: Share of initial periods to discard
            hac_method: 'FQSB' or 'AQSB'

        Returns:
            LogTModel for the unit set
        """
        h = self.transition(select_panel(panel, units, data_cols))
        return self.estimate(h, time_trim, hac_method)

"""
Constants for Club Convergence.

Critical values, trimming defaults, method names and the kernel
constants of the log-t regression.
"""

from typing import Tuple

# =============================================================================
# Hypothesis Test Constants
# =============================================================================

# One-sided 5% critical value of the log-t test
DEFAULT_THRESHOLD = -1.65
DEFAULT_ESTAR = -1.65

# Share of initial periods discarded before the log-t regression
DEFAULT_TIME_TRIM = 1 / 3

# At least two periods must survive trimming
MIN_TIME_PERIODS = 2

# statsmodels needs df_resid > 0 for a slope t-statistic
MIN_REGRESSION_OBS = 3

# =============================================================================
# Merge Method Constants
# =============================================================================

MERGE_METHOD_PS = "PS"
MERGE_METHOD_VLT = "vLT"
MERGE_METHODS: Tuple[str, ...] = (MERGE_METHOD_PS, MERGE_METHOD_VLT)

# =============================================================================
# HAC Estimator Constants
# =============================================================================

HAC_FIXED_QS = "FQSB"      # Quadratic Spectral kernel, fixed bandwidth
HAC_ADAPTIVE_QS = "AQSB"   # Quadratic Spectral kernel, Andrews bandwidth
HAC_METHODS: Tuple[str, ...] = (HAC_FIXED_QS, HAC_ADAPTIVE_QS)
DEFAULT_HAC_METHOD = HAC_FIXED_QS

# Fixed bandwidth rule: 4 * (n / 100) ** (2 / 9)
FIXED_BANDWIDTH_SCALE = 4.0
FIXED_BANDWIDTH_EXPONENT = 2 / 9

# Andrews (1991) plug-in constant for the QS kernel
ANDREWS_QS_CONSTANT = 1.3221

# AR(1) coefficient cap for the Andrews plug-in
ANDREWS_MAX_RHO = 0.97

# =============================================================================
# Labels and Messages
# =============================================================================

CLUB_LABEL_PREFIX = "club"
NOTHING_TO_MERGE_MESSAGE = "The number of clubs is <2, there is nothing to merge."

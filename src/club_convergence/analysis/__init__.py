"""Analysis module - Transition paths, log-t regression, club merging"""

from .transition import compute_h, cross_sectional_variance, regression_periods, select_panel, trim_start
from .regression import LogTRegression, LogTModel
from .divergent import DivergentMerger
from .merge import ClubMerger, Decision, decide_ps, decide_vlt, merge_clubs

__all__ = [
    "compute_h",
    "cross_sectional_variance",
    "select_panel",
    "trim_start",
    "regression_periods",
    "LogTRegression",
    "LogTModel",
    "DivergentMerger",
    "ClubMerger",
    "Decision",
    "decide_ps",
    "decide_vlt",
    "merge_clubs",
]

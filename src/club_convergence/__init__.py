"""
Club Convergence - Phillips-Sul convergence club merging

A Python package for merging adjacent convergence clubs with the
Phillips-Sul or von Lyncker-Thoennessen procedure, using the log-t
regression test with HAC standard errors.
"""

__version__ = "0.3.0"
__author__ = "Club Convergence Team"

from .core.config import Config, ConfigLoader
from .core.exceptions import ClubConvergenceError, InvalidInputError, ParameterError
from .data.clubs import Club, ClubCollection, ClubMetadata, DivergentUnits
from .analysis.merge import ClubMerger, merge_clubs
from .analysis.divergent import DivergentMerger

__all__ = [
    "Config",
    "ConfigLoader",
    "ClubConvergenceError",
    "InvalidInputError",
    "ParameterError",
    "Club",
    "ClubCollection",
    "ClubMetadata",
    "DivergentUnits",
    "ClubMerger",
    "merge_clubs",
    "DivergentMerger",
    "__version__",
]

"""
Custom exceptions for Club Convergence.

Exception Hierarchy:
    ClubConvergenceError (Base)
    ├── ConfigError
    │   ├── ConfigNotFoundError
    │   └── ConfigValidationError
    ├── InvalidInputError
    ├── ParameterError
    └── AnalysisError
        ├── InsufficientDataError
        └── ComputationError
"""

from typing import Optional, List


class ClubConvergenceError(Exception):
    """Base exception for all Club Convergence errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Config Errors
# =============================================================================

class ConfigError(ClubConvergenceError):
    """Merge or regression settings could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No YAML file at the given path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No merge configuration at {path}")


class ConfigValidationError(ConfigError):
    """One or more settings are out of range."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"{len(errors)} invalid setting(s) in merge configuration",
            "; ".join(errors)
        )


# =============================================================================
# Input Errors
# =============================================================================

class InvalidInputError(ClubConvergenceError):
    """Input is not a well-formed club collection."""

    def __init__(self, reason: str, details: Optional[str] = None):
        self.reason = reason
        super().__init__(reason, details)


class ParameterError(ClubConvergenceError):
    """A procedure parameter is out of range or of the wrong type."""

    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid value for '{parameter}': {reason}")


# =============================================================================
# Analysis Errors
# =============================================================================

class AnalysisError(ClubConvergenceError):
    """The log-t test could not be carried out."""


class InsufficientDataError(AnalysisError):
    """Too few periods survive trimming."""

    def __init__(self, required: int, actual: int, analysis_type: str = "log-t regression"):
        self.required = required
        self.actual = actual
        self.analysis_type = analysis_type
        super().__init__(
            f"Too few periods left for the {analysis_type}",
            f"{actual} after trimming, {required} needed"
        )


class ComputationError(AnalysisError):
    """A transition path or regression statistic is undefined."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cannot compute the {operation}: {reason}")

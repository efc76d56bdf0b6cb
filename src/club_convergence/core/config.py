"""
Configuration management for Club Convergence.

Provides dataclass-based configuration with YAML loading and validation.
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import List, Optional
from pathlib import Path
import yaml
import logging

from .exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
)
from .constants import (
    DEFAULT_THRESHOLD,
    DEFAULT_ESTAR,
    DEFAULT_TIME_TRIM,
    DEFAULT_HAC_METHOD,
    HAC_METHODS,
    MERGE_METHOD_PS,
    MERGE_METHODS,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Config Dataclasses
# =============================================================================

@dataclass
class MergeConfig:
    """Club merging parameters."""
    method: str = MERGE_METHOD_PS
    threshold: float = DEFAULT_THRESHOLD
    merge_divergent: bool = False
    estar: float = DEFAULT_ESTAR
    time_trim: Optional[float] = None


@dataclass
class RegressionConfig:
    """Log-t regression parameters."""
    hac_method: str = DEFAULT_HAC_METHOD
    bandwidth: Optional[float] = None
    time_trim: float = DEFAULT_TIME_TRIM


@dataclass
class Config:
    """Main configuration container."""
    merge: MergeConfig = field(default_factory=MergeConfig)
    regression: RegressionConfig = field(default_factory=RegressionConfig)


# =============================================================================
# Config Loader
# =============================================================================

def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class ConfigLoader:
    """Configuration file loader and validator."""

    SECTIONS = ['merge', 'regression']

    @classmethod
    def load(cls, path: Path) -> Config:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML config file

        Returns:
            Config object

        Raises:
            ConfigNotFoundError: If file doesn't exist
            ConfigValidationError: If validation fails
        """
        path = Path(path)
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        logger.info(f"Loading configuration from {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {e}")

        # An empty file means all defaults
        if raw_config is None:
            raw_config = {}

        cls.validate(raw_config)
        return cls._build_config(raw_config)

    @classmethod
    def load_or_default(cls, path: Optional[Path] = None) -> Config:
        """
        Load config from path, falling back to default if not found.

        Args:
            path: Optional path to config file

        Returns:
            Config object (from file or default)
        """
        if path:
            try:
                return cls.load(path)
            except ConfigNotFoundError:
                logger.warning(f"Config not found at {path}, using default")

        logger.info("Using default configuration")
        return cls.get_default()

    @classmethod
    def validate(cls, raw_config: dict) -> None:
        """
        Validate raw configuration dictionary.

        Args:
            raw_config: Dictionary from YAML

        Raises:
            ConfigValidationError: If validation fails
        """
        if not isinstance(raw_config, dict):
            raise ConfigValidationError(["Top level of the config must be a mapping"])

        errors = []

        for key in raw_config:
            if key not in cls.SECTIONS:
                errors.append(f"Unknown section: '{key}'")

        for section in cls.SECTIONS:
            if section in raw_config and not isinstance(raw_config[section], dict):
                errors.append(f"'{section}' must be a dictionary")

        merge = raw_config.get('merge')
        if isinstance(merge, dict):
            errors.extend(cls._validate_merge(merge))

        regression = raw_config.get('regression')
        if isinstance(regression, dict):
            errors.extend(cls._validate_regression(regression))

        if errors:
            raise ConfigValidationError(errors)

    @classmethod
    def _validate_merge(cls, raw: dict) -> List[str]:
        errors = []

        if 'method' in raw and raw['method'] not in MERGE_METHODS:
            errors.append(f"'merge.method' must be one of {list(MERGE_METHODS)}")

        for key in ('threshold', 'estar'):
            if key in raw and not _is_number(raw[key]):
                errors.append(f"'merge.{key}' must be a number")

        if 'merge_divergent' in raw and not isinstance(raw['merge_divergent'], bool):
            errors.append("'merge.merge_divergent' must be true or false")

        time_trim = raw.get('time_trim')
        if time_trim is not None and not cls._valid_time_trim(time_trim):
            errors.append("'merge.time_trim' must be a number in (0, 1]")

        return errors

    @classmethod
    def _validate_regression(cls, raw: dict) -> List[str]:
        errors = []

        if 'hac_method' in raw and raw['hac_method'] not in HAC_METHODS:
            errors.append(f"'regression.hac_method' must be one of {list(HAC_METHODS)}")

        bandwidth = raw.get('bandwidth')
        if bandwidth is not None and (not _is_number(bandwidth) or bandwidth <= 0):
            errors.append("'regression.bandwidth' must be a positive number")

        if 'time_trim' in raw and not cls._valid_time_trim(raw['time_trim']):
            errors.append("'regression.time_trim' must be a number in (0, 1]")

        return errors

    @staticmethod
    def _valid_time_trim(value) -> bool:
        return _is_number(value) and 0 < value <= 1

    @classmethod
    def _build_config(cls, raw: dict) -> Config:
        """Build Config object from raw dictionary."""
        return Config(
            merge=cls._build_merge_config(raw.get('merge') or {}),
            regression=cls._build_regression_config(raw.get('regression') or {}),
        )

    @classmethod
    def _build_merge_config(cls, raw: dict) -> MergeConfig:
        """Build MergeConfig from raw dict."""
        return MergeConfig(
            method=raw.get('method', MERGE_METHOD_PS),
            threshold=float(raw.get('threshold', DEFAULT_THRESHOLD)),
            merge_divergent=raw.get('merge_divergent', False),
            estar=float(raw.get('estar', DEFAULT_ESTAR)),
            time_trim=raw.get('time_trim'),
        )

    @classmethod
    def _build_regression_config(cls, raw: dict) -> RegressionConfig:
        """Build RegressionConfig from raw dict."""
        return RegressionConfig(
            hac_method=raw.get('hac_method', DEFAULT_HAC_METHOD),
            bandwidth=raw.get('bandwidth'),
            time_trim=float(raw.get('time_trim', DEFAULT_TIME_TRIM)),
        )

    @classmethod
    def get_default(cls) -> Config:
        """Get default configuration."""
        return Config()

"""
Convergence club containers.

A ClubCollection is an ordered sequence of clubs (ordered by the growth
ranking of the initial clustering) plus a metadata value object and the
divergent units that belong to no club.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union
from collections import Counter
from numbers import Real
import logging

import pandas as pd
import numpy as np

from ..core.constants import (
    CLUB_LABEL_PREFIX,
    DEFAULT_HAC_METHOD,
    DEFAULT_TIME_TRIM,
    HAC_METHODS,
    MIN_REGRESSION_OBS,
    MIN_TIME_PERIODS,
)
from ..core.config import Config
from ..core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def club_label(n: int) -> str:
    """Label of the n-th club (1-based): club1, club2, ..."""
    return f"{CLUB_LABEL_PREFIX}{n}"


@dataclass(frozen=True)
class Club:
    """A group of units converging to a common path."""
    label: str
    id: Tuple[int, ...]
    model: Any
    unit_names: Optional[Tuple[str, ...]] = None
    clubs: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'id', tuple(int(i) for i in self.id))
        if self.unit_names is not None:
            object.__setattr__(self, 'unit_names', tuple(self.unit_names))
        object.__setattr__(self, 'clubs', tuple(self.clubs))

    def __len__(self) -> int:
        return len(self.id)

    @property
    def tvalue(self) -> float:
        return self.model.tvalue


@dataclass(frozen=True)
class DivergentUnits:
    """Units not assigned to any club."""
    id: Tuple[int, ...] = ()
    unit_names: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, 'id', tuple(int(i) for i in self.id))
        if self.unit_names is not None:
            object.__setattr__(self, 'unit_names', tuple(self.unit_names))

    def __len__(self) -> int:
        return len(self.id)


@dataclass(frozen=True)
class ClubMetadata:
    """
    Settings shared by every club of a collection.

    The panel is referenced, never copied.
    """
    panel: Any = field(repr=False, compare=False)
    data_cols: Tuple[int, ...]
    ref_col: Optional[int] = None
    hac_method: str = DEFAULT_HAC_METHOD
    time_trim: float = DEFAULT_TIME_TRIM
    track_unit_names: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'data_cols', tuple(self.data_cols))

    @property
    def n_periods(self) -> int:
        return len(self.data_cols)


@dataclass(frozen=True)
class ClubCollection:
    """Ordered convergence clubs with their metadata and divergent units."""
    clubs: Tuple[Club, ...]
    metadata: ClubMetadata
    divergent: DivergentUnits = field(default_factory=DivergentUnits)

    def __post_init__(self):
        object.__setattr__(self, 'clubs', tuple(self.clubs))

    def __len__(self) -> int:
        return len(self.clubs)

    def __iter__(self) -> Iterator[Club]:
        return iter(self.clubs)

    def __getitem__(self, key: Union[int, str]) -> Club:
        if isinstance(key, str):
            for club in self.clubs:
                if club.label == key:
                    return club
            raise KeyError(key)
        return self.clubs[key]

    @property
    def labels(self) -> List[str]:
        return [club.label for club in self.clubs]

    def units(self) -> List[int]:
        """Unit indices held by clubs, in club order."""
        return [i for club in self.clubs for i in club.id]

    def all_units(self) -> List[int]:
        """Unit indices held by clubs followed by the divergent ones."""
        return self.units() + list(self.divergent.id)

    def with_clubs(
        self,
        clubs: Sequence[Club],
        divergent: Optional[DivergentUnits] = None,
    ) -> 'ClubCollection':
        """
        Build a new collection carrying a copy of this collection's metadata.

        Args:
            clubs: Clubs of the new collection
            divergent: Divergent units (default: this collection's)

        Returns:
            New ClubCollection
        """
        return ClubCollection(
            clubs=tuple(clubs),
            metadata=replace(self.metadata),
            divergent=self.divergent if divergent is None else divergent,
        )

    def validate(self) -> None:
        """
        Check the structural invariants of the collection.

        Raises:
            InvalidInputError: If any invariant is violated
        """
        from ..analysis.transition import regression_periods

        errors = []
        meta = self.metadata

        if not isinstance(meta, ClubMetadata):
            raise InvalidInputError("metadata must be a ClubMetadata instance")
        if not isinstance(self.divergent, DivergentUnits):
            raise InvalidInputError("divergent must be a DivergentUnits instance")

        shape = np.shape(meta.panel)
        if len(shape) != 2:
            raise InvalidInputError("panel must be a two-dimensional matrix", f"shape: {shape}")
        n_units, n_cols = shape

        bad_cols = [c for c in meta.data_cols if not 0 <= c < n_cols]
        if bad_cols:
            errors.append(f"data columns out of range: {bad_cols}")
        if meta.ref_col is not None and not 0 <= meta.ref_col < n_cols:
            errors.append(f"reference column out of range: {meta.ref_col}")
        if meta.hac_method not in HAC_METHODS:
            errors.append(f"unknown HAC method: {meta.hac_method!r}")
        if meta.n_periods < MIN_TIME_PERIODS:
            errors.append(f"at least {MIN_TIME_PERIODS} data columns are needed, got {meta.n_periods}")
        if isinstance(meta.time_trim, bool) or not (isinstance(meta.time_trim, Real) and 0 < meta.time_trim <= 1):
            errors.append(f"stored time_trim must be in (0, 1], got {meta.time_trim!r}")
        else:
            nobs = regression_periods(meta.n_periods, meta.time_trim)
            if nobs < MIN_REGRESSION_OBS:
                errors.append(
                    f"stored time_trim {meta.time_trim:g} leaves {nobs} of {meta.n_periods} periods "
                    f"for the log-t regression, at least {MIN_REGRESSION_OBS} are needed"
                )

        for club in self.clubs:
            if not isinstance(club, Club):
                raise InvalidInputError("clubs must contain Club instances", f"got {type(club).__name__}")
            if len(club) == 0:
                errors.append(f"{club.label} has no units")
            if not hasattr(club.model, 'tvalue'):
                errors.append(f"{club.label} model has no tvalue")
            if meta.track_unit_names and (club.unit_names is None or len(club.unit_names) != len(club)):
                errors.append(f"{club.label} unit names do not match its units")

        label_counts = Counter(self.labels)
        duplicated_labels = sorted(label for label, n in label_counts.items() if n > 1)
        if duplicated_labels:
            errors.append(f"duplicated club labels: {duplicated_labels}")

        all_units = self.all_units()
        out_of_range = sorted({i for i in all_units if not 0 <= i < n_units})
        if out_of_range:
            errors.append(f"unit indices out of range: {out_of_range}")
        duplicated = sorted(i for i, n in Counter(all_units).items() if n > 1)
        if duplicated:
            errors.append(f"units assigned more than once: {duplicated}")

        if errors:
            raise InvalidInputError(
                "Invalid club collection",
                "; ".join(errors)
            )

    @classmethod
    def from_groups(
        cls,
        panel: Union[pd.DataFrame, np.ndarray],
        groups: Sequence[Sequence[int]],
        data_cols: Sequence[int],
        ref_col: Optional[int] = None,
        time_trim: Optional[float] = None,
        hac_method: Optional[str] = None,
        unit_names: Optional[Union[int, Sequence[str]]] = None,
        divergent: Sequence[int] = (),
        estimator=None,
        config: Optional[Config] = None,
    ) -> 'ClubCollection':
        """
        Build a collection from already identified groups of rows.

        Each group's model is estimated with the log-t regression. The
        layout is validated before anything is estimated.

        Args:
            panel: Panel matrix (units x columns)
            groups: Row positions of each club, in growth order
            data_cols: Column positions of the time-series data
            ref_col: Column position of the reference period
            time_trim: Share of initial periods discarded by the regression
                (default: config.regression.time_trim)
            hac_method: 'FQSB' or 'AQSB' (default: config.regression.hac_method)
            unit_names: Column position holding unit names, or one name per row
            divergent: Row positions of units outside every club
            estimator: LogTRegression (default: one with the configured bandwidth)
            config: Configuration object (default: Config())

        Returns:
            Validated ClubCollection
        """
        from ..analysis.regression import LogTRegression

        settings = (config or Config()).regression
        time_trim = settings.time_trim if time_trim is None else time_trim
        hac_method = settings.hac_method if hac_method is None else hac_method
        estimator = estimator or LogTRegression(bandwidth=settings.bandwidth)

        names = None
        if unit_names is not None:
            if isinstance(unit_names, int):
                if isinstance(panel, pd.DataFrame):
                    names = [str(v) for v in panel.iloc[:, unit_names]]
                else:
                    names = [str(v) for v in np.asarray(panel)[:, unit_names]]
            else:
                names = [str(v) for v in unit_names]

        groups = [[int(i) for i in group] for group in groups]
        metadata = ClubMetadata(
            panel=panel,
            data_cols=data_cols,
            ref_col=ref_col,
            hac_method=hac_method,
            time_trim=time_trim,
            track_unit_names=names is not None,
        )

        # Units and settings first, so a bad layout never reaches the estimator
        every_unit = [i for group in groups for i in group] + [int(i) for i in divergent]
        cls(clubs=(), metadata=metadata, divergent=DivergentUnits(id=every_unit)).validate()

        divergent_units = DivergentUnits(
            id=divergent,
            unit_names=[names[i] for i in divergent] if names is not None else None,
        )

        clubs = []
        for n, group in enumerate(groups, start=1):
            model = estimator.log_t_test(panel, group, data_cols, time_trim, hac_method)
            label = club_label(n)
            clubs.append(Club(
                label=label,
                id=group,
                model=model,
                unit_names=[names[i] for i in group] if names is not None else None,
                clubs=(label,),
            ))

        collection = cls(clubs=tuple(clubs), metadata=metadata, divergent=divergent_units)
        collection.validate()
        logger.debug(f"Built collection of {len(clubs)} clubs and {len(divergent_units)} divergent units")
        return collection

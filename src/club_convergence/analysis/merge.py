"""
Club merging module.

Merges adjacent convergence clubs with the Phillips-Sul (2009) or the
von Lyncker-Thoennessen (2017) procedure.

The scan keeps an accumulating group starting at club i and tests it
against clubs k = i+1, i+2, ... One decision is taken per candidate:

    MERGE             club k joins the group, continue with k+1
    STOP              the group is closed, the next scan starts at k
    STOP_APPEND_LAST  the group is closed and the last club, which failed
                      to join, is kept as a club of its own
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Callable, List, Optional, Sequence, Tuple
import logging

from ..core.config import Config
from ..core.constants import (
    HAC_FIXED_QS,
    MERGE_METHOD_VLT,
    MERGE_METHODS,
    MIN_TIME_PERIODS,
    MIN_REGRESSION_OBS,
    DEFAULT_THRESHOLD,
    DEFAULT_ESTAR,
    NOTHING_TO_MERGE_MESSAGE,
)
from ..core.exceptions import InvalidInputError, ParameterError
from ..data.clubs import Club, ClubCollection, ClubMetadata, club_label
from ..utils.logging import LogContext
from .regression import LogTModel, LogTRegression
from .transition import regression_periods
from .divergent import DivergentMerger

logger = logging.getLogger(__name__)


class Decision(Enum):
    """Outcome of testing one candidate club against the current group."""
    MERGE = "merge"
    STOP = "stop"
    STOP_APPEND_LAST = "stop_append_last"


def decide_ps(tvalue: float, threshold: float, is_last: bool) -> Decision:
    """
    Phillips-Sul rule: merge while the group still converges.

    Args:
        tvalue: t-statistic of the group plus candidate club
        threshold: Critical value
        is_last: Whether the candidate is the last club

    Returns:
        Decision
    """
    if tvalue > threshold:
        return Decision.MERGE
    return Decision.STOP_APPEND_LAST if is_last else Decision.STOP


def decide_vlt(
    tvalue: float,
    threshold: float,
    is_last: bool,
    pair_tvalue: Callable[[], float],
) -> Decision:
    """
    von Lyncker-Thoennessen rule.

    Besides passing the threshold, the group plus candidate must converge
    more strongly than the candidate with its successor. The last club has
    no successor, so the threshold alone decides there.

    Args:
        tvalue: t-statistic of the group plus candidate club
        threshold: Critical value
        is_last: Whether the candidate is the last club
        pair_tvalue: Computes the t-statistic of candidate and next club

    Returns:
        Decision
    """
    if not tvalue > threshold or is_last:
        return decide_ps(tvalue, threshold, is_last)
    if tvalue > pair_tvalue():
        return Decision.MERGE
    return Decision.STOP


@dataclass(frozen=True)
class _Group:
    """Accumulating candidate club."""
    units: Tuple[int, ...]
    labels: Tuple[str, ...]
    unit_names: Optional[Tuple[str, ...]]

    @classmethod
    def open(cls, club: Club, track_names: bool) -> '_Group':
        return cls(
            units=club.id,
            labels=(club.label,),
            unit_names=club.unit_names if track_names else None,
        )

    def absorb(self, club: Club) -> '_Group':
        names = None
        if self.unit_names is not None:
            names = self.unit_names + tuple(club.unit_names or ())
        return _Group(
            units=self.units + club.id,
            labels=self.labels + (club.label,),
            unit_names=names,
        )


@dataclass(frozen=True)
class ScanState:
    """Where one outer iteration of the scan stopped."""
    group: _Group
    stop: int
    append_last: bool


class ClubMerger:
    """
    Sequential club merging.

    Implements:
    - Phillips-Sul (PS) adjacent club merging
    - von Lyncker-Thoennessen (vLT) merging with pairwise comparison
    - Optional re-absorption of divergent units
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        estimator: Optional[LogTRegression] = None,
        divergent_merger: Optional[DivergentMerger] = None,
    ):
        """
        Initialize club merger.

        Args:
            config: Configuration object (default: Config())
            estimator: Log-t estimator (default: LogTRegression from config)
            divergent_merger: Collaborator for divergent units
        """
        self.config = config or Config()
        self.estimator = estimator or LogTRegression(bandwidth=self.config.regression.bandwidth)
        self.divergent_merger = divergent_merger or DivergentMerger(self.estimator)

    def merge(
        self,
        clubs: ClubCollection,
        time_trim: Optional[float] = None,
        merge_method: Optional[str] = None,
        threshold: Optional[float] = None,
        merge_divergent: Optional[bool] = None,
        estar: Optional[float] = None,
    ) -> ClubCollection:
        """
        Merge adjacent clubs.

        Arguments left as None fall back to the merge configuration.

        Args:
            clubs: Clubs to merge
            time_trim: Share of initial periods to discard (default: the collection's)
            merge_method: 'PS' or 'vLT'
            threshold: Critical value of the log-t test
            merge_divergent: Try to re-absorb divergent units afterwards
            estar: Critical value used for divergent units

        Returns:
            New ClubCollection

        Raises:
            InvalidInputError: If clubs is not a valid ClubCollection
            ParameterError: If merge_method or time_trim is invalid
        """
        settings = self.config.merge
        merge_method = settings.method if merge_method is None else merge_method
        threshold = settings.threshold if threshold is None else threshold
        merge_divergent = settings.merge_divergent if merge_divergent is None else merge_divergent
        estar = settings.estar if estar is None else estar
        if time_trim is None:
            time_trim = settings.time_trim

        self._check_method(merge_method)
        self._check_collection(clubs)
        time_trim = self._resolve_time_trim(clubs.metadata, time_trim)

        if len(clubs) < 2:
            logger.info(NOTHING_TO_MERGE_MESSAGE)
            return clubs

        with LogContext(logger, f"Merging {len(clubs)} clubs ({merge_method})", level=logging.DEBUG):
            merged = self._scan(clubs, time_trim, merge_method, threshold)

        logger.info(f"Merged {len(clubs)} clubs into {len(merged)} ({merge_method})")

        if merge_divergent:
            return self.divergent_merger.merge(merged, time_trim, estar)
        return merged

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_method(merge_method: str) -> None:
        if merge_method not in MERGE_METHODS:
            raise ParameterError("merge_method", f"must be one of {list(MERGE_METHODS)}, got {merge_method!r}")

    @staticmethod
    def _check_collection(clubs) -> None:
        if not isinstance(clubs, ClubCollection):
            raise InvalidInputError(
                "clubs must be a ClubCollection",
                f"got {type(clubs).__name__}"
            )
        metadata = clubs.metadata
        if isinstance(metadata, ClubMetadata) and metadata.n_periods < MIN_TIME_PERIODS:
            raise ParameterError("data_cols", "at least two time periods are needed to run this procedure")
        clubs.validate()

    @staticmethod
    def _resolve_time_trim(metadata: ClubMetadata, time_trim) -> float:
        # The stored value was checked by ClubCollection.validate
        if time_trim is None:
            return metadata.time_trim

        n_periods = metadata.n_periods
        if isinstance(time_trim, bool) or not isinstance(time_trim, Real):
            raise ParameterError("time_trim", "must be a numeric scalar")
        if not 0 < time_trim <= 1:
            raise ParameterError("time_trim", "should be a value between 0 and 1")
        if n_periods - round(n_periods * time_trim) < MIN_TIME_PERIODS:
            raise ParameterError(
                "time_trim",
                "either the number of time periods is too small or the value of time_trim is too high"
            )
        nobs = regression_periods(n_periods, time_trim)
        if nobs < MIN_REGRESSION_OBS:
            raise ParameterError(
                "time_trim",
                f"leaves {nobs} of {n_periods} periods for the log-t regression, "
                f"at least {MIN_REGRESSION_OBS} are needed"
            )
        return float(time_trim)

    # -------------------------------------------------------------------------
    # Scan
    # -------------------------------------------------------------------------

    def _test(
        self,
        metadata: ClubMetadata,
        units: Sequence[int],
        time_trim: float,
        hac_method: Optional[str] = None,
    ) -> LogTModel:
        return self.estimator.log_t_test(
            metadata.panel, units, metadata.data_cols, time_trim, hac_method or metadata.hac_method
        )

    def _decide(
        self,
        clubs: ClubCollection,
        k: int,
        tvalue: float,
        time_trim: float,
        merge_method: str,
        threshold: float,
    ) -> Decision:
        is_last = k == len(clubs) - 1
        if merge_method == MERGE_METHOD_VLT:
            def pair_tvalue() -> float:
                # The pairwise test always runs with the fixed bandwidth
                pair = clubs[k].id + clubs[k + 1].id
                return self._test(clubs.metadata, pair, time_trim, HAC_FIXED_QS).tvalue
            return decide_vlt(tvalue, threshold, is_last, pair_tvalue)
        return decide_ps(tvalue, threshold, is_last)

    def _grow(
        self,
        clubs: ClubCollection,
        start: int,
        time_trim: float,
        merge_method: str,
        threshold: float,
    ) -> ScanState:
        """Grow a group from club `start` until a candidate is refused."""
        metadata = clubs.metadata
        group = _Group.open(clubs[start], metadata.track_unit_names)

        for k in range(start + 1, len(clubs)):
            candidate = clubs[k]
            tvalue = self._test(metadata, group.units + candidate.id, time_trim).tvalue
            decision = self._decide(clubs, k, tvalue, time_trim, merge_method, threshold)
            logger.debug(f"{'+'.join(group.labels)} + {candidate.label}: t={tvalue:.3f} -> {decision.value}")

            if decision is Decision.MERGE:
                group = group.absorb(candidate)
                continue
            return ScanState(group, k, decision is Decision.STOP_APPEND_LAST)

        return ScanState(group, len(clubs) - 1, False)

    def _scan(
        self,
        clubs: ClubCollection,
        time_trim: float,
        merge_method: str,
        threshold: float,
    ) -> ClubCollection:
        metadata = clubs.metadata
        last = len(clubs) - 1
        merged: List[Club] = []

        i = 0
        while i < last:
            state = self._grow(clubs, i, time_trim, merge_method, threshold)
            group = state.group

            merged.append(Club(
                label=club_label(len(merged) + 1),
                id=group.units,
                model=self._test(metadata, group.units, time_trim),
                unit_names=group.unit_names,
                clubs=group.labels,
            ))

            if state.append_last:
                tail = clubs[last]
                merged.append(Club(
                    label=club_label(len(merged) + 1),
                    id=tail.id,
                    model=tail.model,
                    unit_names=tail.unit_names if metadata.track_unit_names else None,
                    clubs=(tail.label,),
                ))

            i = state.stop

        return clubs.with_clubs(merged)


def merge_clubs(
    clubs: ClubCollection,
    time_trim: Optional[float] = None,
    *,
    merge_method: str,
    threshold: float = DEFAULT_THRESHOLD,
    merge_divergent: bool = False,
    estar: float = DEFAULT_ESTAR,
    estimator: Optional[LogTRegression] = None,
    divergent_merger: Optional[DivergentMerger] = None,
) -> ClubCollection:
    """
    Merge convergence clubs with the PS or vLT procedure.

    Args:
        clubs: Clubs to merge
        time_trim: Share of initial periods to discard (default: the collection's)
        merge_method: 'PS' (Phillips-Sul 2009) or 'vLT' (von Lyncker-Thoennessen 2017)
        threshold: Critical value of the log-t test
        merge_divergent: Try to re-absorb divergent units afterwards
        estar: Critical value used for divergent units
        estimator: Log-t estimator (default: LogTRegression())
        divergent_merger: Collaborator for divergent units

    Returns:
        New ClubCollection

    Example:
        clubs = ClubCollection.from_groups(panel, groups, data_cols=range(1, 35))
        merged = merge_clubs(clubs, merge_method="vLT")
    """
    merger = ClubMerger(estimator=estimator, divergent_merger=divergent_merger)
    return merger.merge(
        clubs,
        time_trim=time_trim,
        merge_method=merge_method,
        threshold=threshold,
        merge_divergent=merge_divergent,
        estar=estar,
    )

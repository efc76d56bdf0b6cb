"""
Divergent unit merging.

After club merging, units that belong to no club are tested against
every club (von Lyncker and Thoennessen, 2017). A unit joins the club
giving the highest t-statistic when that statistic exceeds e*.
"""

from dataclasses import replace
from typing import Dict, List, Optional
import logging

from ..core.constants import DEFAULT_ESTAR
from ..core.exceptions import InvalidInputError
from ..data.clubs import ClubCollection, DivergentUnits
from .regression import LogTRegression

logger = logging.getLogger(__name__)


class DivergentMerger:
    """Re-assign divergent units to existing clubs."""

    def __init__(self, estimator: Optional[LogTRegression] = None):
        self.estimator = estimator or LogTRegression()

    def merge(
        self,
        clubs: ClubCollection,
        time_trim: Optional[float] = None,
        estar: float = DEFAULT_ESTAR,
    ) -> ClubCollection:
        """
        Try to include divergent units in the clubs.

        Units are scanned in order, repeatedly, until a full pass assigns
        nothing. Each assignment re-estimates the receiving club.

        Args:
            clubs: Collection after club merging
            time_trim: Share of initial periods to discard (default: the collection's)
            estar: Critical value a unit must beat to join a club

        Returns:
            New ClubCollection (the input itself when there is nothing to do)
        """
        if not isinstance(clubs, ClubCollection):
            raise InvalidInputError(
                "clubs must be a ClubCollection",
                f"got {type(clubs).__name__}"
            )

        if len(clubs.divergent) == 0 or len(clubs) == 0:
            logger.info("No divergent units or no clubs, nothing to merge")
            return clubs

        metadata = clubs.metadata
        if time_trim is None:
            time_trim = metadata.time_trim

        members: List[List[int]] = [list(club.id) for club in clubs]
        names: List[Optional[List[str]]] = [
            list(club.unit_names) if club.unit_names is not None else None for club in clubs
        ]
        models = [club.model for club in clubs]

        divergent_names: Dict[int, str] = {}
        if clubs.divergent.unit_names is not None:
            divergent_names = dict(zip(clubs.divergent.id, clubs.divergent.unit_names))

        remaining = list(clubs.divergent.id)
        assigned = True
        while assigned and remaining:
            assigned = False
            for unit in list(remaining):
                candidates = []
                for j, units in enumerate(members):
                    model = self.estimator.log_t_test(
                        metadata.panel, units + [unit], metadata.data_cols, time_trim, metadata.hac_method
                    )
                    if model.tvalue > estar:
                        candidates.append((model.tvalue, j))

                if not candidates:
                    continue

                best_t, best = max(candidates, key=lambda c: c[0])
                members[best].append(unit)
                if names[best] is not None:
                    names[best].append(divergent_names.get(unit, str(unit)))
                models[best] = self.estimator.log_t_test(
                    metadata.panel, members[best], metadata.data_cols, time_trim, metadata.hac_method
                )
                remaining.remove(unit)
                assigned = True
                logger.debug(f"Divergent unit {unit} joins {clubs[best].label} (t={best_t:.3f})")

        new_clubs = [
            replace(club, id=members[j], model=models[j], unit_names=names[j])
            for j, club in enumerate(clubs)
        ]
        divergent = DivergentUnits(
            id=remaining,
            unit_names=[divergent_names[u] for u in remaining] if divergent_names else None,
        )

        logger.info(
            f"{len(clubs.divergent) - len(remaining)} of {len(clubs.divergent)} divergent units assigned to clubs"
        )
        return clubs.with_clubs(new_clubs, divergent)

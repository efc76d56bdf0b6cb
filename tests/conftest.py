"""Pytest configuration and fixtures."""

import pytest
import pandas as pd
import numpy as np

from club_convergence.analysis.regression import LogTModel, LogTRegression
from club_convergence.data.clubs import Club, ClubCollection, ClubMetadata, DivergentUnits


N_PERIODS = 50

# Long-run relative levels of the synthetic groups.
# A1 and A2 share a level, so they form one club split in two.
GROUP_LEVELS = {
    "A1": 1.0,
    "A2": 1.0,
    "B": 1.6,
    "C": 2.6,
}
UNITS_PER_GROUP = 4


def _unit_path(rng, level, t, offset):
    decay = 1.0 / (np.log(t + 1) * np.sqrt(t))
    delta = level + offset * decay
    noise = 1 + 1e-4 * rng.standard_normal(len(t))
    return np.exp(0.02 * t) * delta * noise


@pytest.fixture
def panel():
    """
    Synthetic panel: a name column followed by 50 periods.

    Rows 0-15 are four groups of four units (A1, A2, B, C). Row 16 converges
    to the A level, row 17 to a level no group shares.
    """
    rng = np.random.default_rng(42)
    t = np.arange(1, N_PERIODS + 1, dtype=float)

    rows = []
    names = []
    for group, level in GROUP_LEVELS.items():
        offsets = np.linspace(-0.3, 0.3, UNITS_PER_GROUP)
        for j, offset in enumerate(offsets):
            rows.append(_unit_path(rng, level, t, offset))
            names.append(f"{group}_{j}")

    rows.append(_unit_path(rng, 1.0, t, 0.2))
    names.append("loner_A")
    rows.append(_unit_path(rng, 5.0, t, -0.2))
    names.append("outlier")

    data = pd.DataFrame(np.vstack(rows), columns=[f"y{i}" for i in range(1, N_PERIODS + 1)])
    data.insert(0, "region", names)
    return data


@pytest.fixture
def data_cols():
    return list(range(1, N_PERIODS + 1))


@pytest.fixture
def groups():
    return [list(range(g * UNITS_PER_GROUP, (g + 1) * UNITS_PER_GROUP)) for g in range(len(GROUP_LEVELS))]


@pytest.fixture
def clubs(panel, data_cols, groups):
    """Four initial clubs with two divergent units."""
    return ClubCollection.from_groups(
        panel,
        groups,
        data_cols=data_cols,
        ref_col=N_PERIODS,
        time_trim=1 / 3,
        unit_names=0,
        divergent=[16, 17],
    )


# =============================================================================
# Stub collaborators
# =============================================================================

def stub_model(tvalue: float) -> LogTModel:
    return LogTModel(
        beta=0.0,
        std_err=1.0,
        tvalue=tvalue,
        pvalue=0.5,
        intercept=0.0,
        nobs=10,
        hac_method="FQSB",
        bandwidth=1.0,
    )


def pseudo_tvalue(units) -> float:
    """Deterministic t-statistic in [-5, 5) for any unit set."""
    key = sum(i * i for i in units) * 7919 + len(units) * 104729
    return (key % 1000) / 100.0 - 5.0


class TableEstimator(LogTRegression):
    """
    Estimator answering from a table keyed on the tested unit set.

    Unit sets not in the table get `default`, or pseudo_tvalue when
    default is None.
    """

    def __init__(self, table=None, default=-10.0):
        super().__init__()
        self.table = {frozenset(k): v for k, v in (table or {}).items()}
        self.default = default
        self.calls = []

    def log_t_test(self, panel, units, data_cols, time_trim, hac_method="FQSB"):
        key = frozenset(units)
        self.calls.append((key, time_trim, hac_method))
        if key in self.table:
            tvalue = self.table[key]
        elif self.default is None:
            tvalue = pseudo_tvalue(units)
        else:
            tvalue = self.default
        return stub_model(tvalue)


def club_units(*indices):
    """Units of stub clubs: club n holds units 2n and 2n+1 (0-based n)."""
    return [u for n in indices for u in (2 * n, 2 * n + 1)]


@pytest.fixture
def make_collection():
    """Factory for stub collections where club n holds units 2n and 2n+1."""

    def _make(n_clubs, n_divergent=0, n_periods=12, time_trim=1 / 3, names=False, hac_method="FQSB"):
        n_units = 2 * n_clubs + n_divergent
        unit_names = [f"u{i}" for i in range(n_units)]
        clubs = [
            Club(
                label=f"club{n + 1}",
                id=club_units(n),
                model=stub_model(100.0 + n),
                unit_names=[unit_names[u] for u in club_units(n)] if names else None,
                clubs=(f"club{n + 1}",),
            )
            for n in range(n_clubs)
        ]
        divergent_ids = list(range(2 * n_clubs, n_units))
        return ClubCollection(
            clubs=clubs,
            metadata=ClubMetadata(
                panel=np.ones((n_units, n_periods + 1)),
                data_cols=range(1, n_periods + 1),
                ref_col=n_periods,
                hac_method=hac_method,
                time_trim=time_trim,
                track_unit_names=names,
            ),
            divergent=DivergentUnits(
                id=divergent_ids,
                unit_names=[unit_names[u] for u in divergent_ids] if names else None,
            ),
        )

    return _make


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "merge": {
            "method": "vLT",
            "threshold": -1.65,
            "merge_divergent": True,
            "estar": -1.0,
        },
        "regression": {
            "hac_method": "AQSB",
            "time_trim": 0.3,
        },
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config_dict):
    """Create temporary config file."""
    import yaml

    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)

    return config_path

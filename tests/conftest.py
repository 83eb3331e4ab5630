"""
Pytest configuration.

Ensures the project root is on PYTHONPATH so that
imports like `from src.ctgml...` work in local
and CI environments, and provides a synthetic copy
of the CTG "Raw Data" sheet so tests never hit the network.
"""

import sys
from pathlib import Path

import matplotlib

# Headless plotting for CI
matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

# Add project root to PYTHONPATH
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from src.ctgml.config import NUMERICAL_FEATURES  # noqa: E402

# Synthetic sheet layout: blank row, records (with duplicates), footer rows
CLASS_SIZES = {1: 120, 2: 45, 3: 30}
N_UNIQUE = sum(CLASS_SIZES.values())
N_DUPLICATES = 2
N_RECORDS = N_UNIQUE + N_DUPLICATES
FOOTER_SENTINEL = 99999.0


def make_raw_sheet(seed: int = 0) -> pd.DataFrame:
    """Frame shaped like the parsed "Raw Data" sheet, including columns the loader ignores."""

    rng = np.random.default_rng(seed)

    rows = []
    for code, size in CLASS_SIZES.items():
        shift = code - 1
        for _ in range(size):
            row = {"FileName": f"S{len(rows):04d}.txt", "b": rng.integers(0, 500), "CLASS": rng.integers(1, 11)}
            for j, col in enumerate(NUMERICAL_FEATURES):
                row[col] = round(float(rng.normal(50 + 6 * shift * (j % 4), 5)), 1)
            row["Tendency"] = int(rng.choice([-1, 0, 1]))
            row["NSP"] = code
            rows.append(row)

    records = pd.DataFrame(rows)
    records = records.sample(frac=1.0, random_state=seed).reset_index(drop=True)

    # Exact duplicates of the first records (same file re-exported)
    records = pd.concat([records, records.iloc[:N_DUPLICATES]], ignore_index=True)

    blank = pd.DataFrame([{c: np.nan for c in records.columns}])

    footer = pd.DataFrame([{c: np.nan for c in records.columns}, {c: FOOTER_SENTINEL for c in records.columns}])
    footer.loc[1, "NSP"] = 1.0
    footer.loc[1, "Tendency"] = 0.0

    return pd.concat([blank, records, footer], ignore_index=True)


@pytest.fixture
def raw_sheet() -> pd.DataFrame:
    return make_raw_sheet()


@pytest.fixture
def trimmed(raw_sheet):
    from src.ctgml.data_ingest import select_and_trim

    return select_and_trim(raw_sheet, first_row=1, n_records=N_RECORDS)


@pytest.fixture
def clean_df(trimmed):
    from src.ctgml.preprocess import clean_dataset

    return clean_dataset(trimmed)


@pytest.fixture
def train_test(clean_df):
    from src.ctgml.preprocess import split_train_test

    return split_train_test(clean_df, random_state=1234)

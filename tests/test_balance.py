# Notes:
# - Checks the class counts produced by the two SMOTE stages.
# - Checks synthetic rows are interpolations between two originals of their own class.
# - Checks reproducibility under a fixed seed.

import numpy as np
import pandas as pd
import pytest

from src.ctgml.balance import (
    balance_training_set,
    class_counts,
    counts_table,
    oversample_suspect,
    oversample_pathological,
)
from src.ctgml.config import TARGET_COL, TENDENCY_COL, TENDENCY_LEVELS, NUMERICAL_FEATURES, CLASS_ORDER


def test_pathological_reaches_three_times_training_count(train_test):
    """Pathological ends up at 3x its training count (2x synthetic on top of the originals)."""

    train, _ = train_test
    balanced = balance_training_set(train, random_state=1234)

    assert class_counts(balanced)["Pathological"] == 3 * class_counts(train)["Pathological"]


def test_stage_a_counts(train_test):
    """Suspect is tripled and Normal is cut relative to the synthetic Suspect rows."""

    train, _ = train_test
    before = class_counts(train)
    stage_a = oversample_suspect(train, suspect_over=2.0, normal_under=2.0, random_state=1234)
    after = class_counts(stage_a)

    n_synthetic = 2 * before["Suspect"]
    assert after["Suspect"] == before["Suspect"] + n_synthetic
    assert after["Normal"] == min(before["Normal"], 2 * n_synthetic)
    assert after["Pathological"] == 0


def test_normal_undersampling_keeps_original_rows(train_test):
    """Under-sampling only drops Normal rows, it never invents them."""

    train, _ = train_test
    stage_a = oversample_suspect(train, suspect_over=1.0, normal_under=0.5, random_state=1234)

    normal_orig = train[train[TARGET_COL] == "Normal"][NUMERICAL_FEATURES]
    normal_kept = stage_a[stage_a[TARGET_COL] == "Normal"][NUMERICAL_FEATURES]

    merged = normal_kept.merge(normal_orig.drop_duplicates(), how="left", indicator=True)
    assert (merged["_merge"] == "both").all()
    assert len(normal_kept) == round(0.5 * class_counts(train)["Suspect"])


def test_stage_b_only_returns_pathological(train_test):
    train, _ = train_test
    stage_b = oversample_pathological(train, over=2.0, random_state=1234)
    assert set(stage_b[TARGET_COL].unique()) == {"Pathological"}


def test_all_classes_survive_when_suspect_is_rarest(clean_df):
    """Pathological is still carried (and tripled) when Suspect has fewer training rows."""

    train = pd.concat(
        [
            clean_df[clean_df[TARGET_COL] == "Normal"],
            clean_df[clean_df[TARGET_COL] == "Suspect"].head(20),
            clean_df[clean_df[TARGET_COL] == "Pathological"],
        ]
    )
    before = class_counts(train)
    assert before["Suspect"] < before["Pathological"]

    after = class_counts(balance_training_set(train, random_state=1234))

    assert (after > 0).all()
    assert after["Suspect"] == 3 * before["Suspect"]
    assert after["Pathological"] == 3 * before["Pathological"]
    assert after["Normal"] == min(before["Normal"], 2 * 2 * before["Suspect"])


def _on_same_class_segment(row, originals, tol=1e-6):
    """True when ``row = a + t * (b - a)`` for two originals a, b and one t in [0, 1] on every feature."""

    offsets = row - originals  # row - a, one line per a
    spans = originals[None, :, :] - originals[:, None, :]  # b - a, indexed [a, b]

    norms = (spans ** 2).sum(axis=2)
    dots = (offsets[:, None, :] * spans).sum(axis=2)
    steps = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

    residual = offsets[:, None, :] - steps[:, :, None] * spans
    on_line = (np.abs(residual) <= tol).all(axis=2)
    in_range = (steps >= -tol) & (steps <= 1 + tol)

    return bool((on_line & in_range).any())


@pytest.mark.parametrize("label", ["Suspect", "Pathological"])
def test_synthetic_rows_interpolate_same_class_pairs(train_test, label):
    """Each resampled row lies on a segment between two originals of its own class.

    The same interpolation step applies to every numeric feature, so a row built by mixing
    features from different pairs (or from another class) would fail.
    """

    train, _ = train_test
    balanced = balance_training_set(train, random_state=1234)

    original = train[train[TARGET_COL] == label][NUMERICAL_FEATURES].to_numpy(dtype=float)
    resampled = balanced[balanced[TARGET_COL] == label][NUMERICAL_FEATURES].to_numpy(dtype=float)

    assert len(resampled) > len(original)
    for row in resampled:
        assert _on_same_class_segment(row, original)


def test_balanced_frame_keeps_schema(train_test):
    """Balanced rows keep the column order, categorical levels and have no gaps."""

    train, _ = train_test
    balanced = balance_training_set(train, random_state=1234)

    assert list(balanced.columns) == list(train.columns)
    assert list(balanced[TARGET_COL].cat.categories) == CLASS_ORDER
    assert set(balanced[TENDENCY_COL].unique()) <= set(TENDENCY_LEVELS)
    assert not balanced.isna().any().any()


def test_balancing_is_reproducible(train_test):
    """Same seed -> identical synthetic rows."""

    train, _ = train_test
    first = balance_training_set(train, random_state=99)
    second = balance_training_set(train, random_state=99)

    pd.testing.assert_frame_equal(first, second)


def test_balancing_leaves_training_set_untouched(train_test):
    train, _ = train_test
    snapshot = train.copy()
    balance_training_set(train, random_state=1234)
    pd.testing.assert_frame_equal(train, snapshot)


def test_counts_table_reports_growth(train_test):
    train, _ = train_test
    balanced = balance_training_set(train, random_state=1234)

    table, growth = counts_table(train, balanced)
    assert list(table.index) == CLASS_ORDER
    assert growth["Pathological"] == 3.0


def test_too_few_rows_for_neighbours_fails(train_test):
    """A class smaller than k+1 rows cannot be interpolated and the library error propagates."""

    train, _ = train_test
    tiny = pd.concat(
        [
            train[train[TARGET_COL] == "Normal"],
            train[train[TARGET_COL] == "Pathological"].head(3),
        ]
    )
    with pytest.raises(ValueError):
        oversample_pathological(tiny, over=2.0, random_state=1234)

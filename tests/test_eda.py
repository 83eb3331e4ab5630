# Notes:
# - EDA is side-effect only; check that every plot is written and the heatmap mask is right.

import numpy as np

from src.ctgml.eda import run_eda, correlation_lower_triangle, describe_dataset
from src.ctgml.config import NUMERICAL_FEATURES, SCATTER_PAIRS


def test_correlation_mask_hides_diagonal_and_upper_triangle(clean_df):
    corr, mask = correlation_lower_triangle(clean_df)

    assert corr.shape == (len(NUMERICAL_FEATURES), len(NUMERICAL_FEATURES))
    assert mask.diagonal().all()
    assert not np.tril(mask, k=-1).any()
    assert np.triu(mask, k=1)[np.triu_indices(len(NUMERICAL_FEATURES), k=1)].all()


def test_run_eda_writes_all_plots(clean_df, tmp_path):
    run_eda(clean_df, plots_dir=tmp_path)

    expected = ["feature_boxplots.png", "nsp_by_tendency.png", "correlation_heatmap.png"]
    expected += [f"scatter_{x.lower()}_{y.lower()}.png" for x, y in SCATTER_PAIRS]
    for name in expected:
        assert (tmp_path / name).exists(), name


def test_describe_dataset_prints_counts(clean_df, capsys):
    describe_dataset(clean_df)
    out = capsys.readouterr().out
    assert "NSP class counts" in out
    assert "Pathological" in out

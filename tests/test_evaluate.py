# Notes:
# - Confusion matrix margins must match the observed/predicted class counts.
# - Derived statistics are checked on a hand-computed example.
# - Variable importance returns a ranked, scaled table for every family.

import numpy as np
import pytest

from sklearn.ensemble import RandomForestClassifier
from sklearn.pipeline import Pipeline

from src.ctgml.evaluate import confusion_summary, variable_importance
from src.ctgml.train import build_search
from src.ctgml.preprocess import features_and_target
from src.ctgml.config import CLASS_ORDER, MODEL_FEATURES

Y_TRUE = ["Normal"] * 5 + ["Suspect"] * 3 + ["Pathological"] * 2
Y_PRED = ["Normal"] * 4 + ["Suspect"] + ["Suspect"] * 2 + ["Normal"] + ["Pathological"] * 2


def test_confusion_table_margins():
    """Row sums equal observed counts, column sums equal predicted counts."""

    summary = confusion_summary(Y_TRUE, Y_PRED)
    table = summary["table"]

    assert list(table.index) == CLASS_ORDER
    assert list(table.columns) == CLASS_ORDER
    assert table.sum(axis=1).tolist() == [5, 3, 2]
    assert table.sum(axis=0).tolist() == [5, 3, 2]


def test_confusion_statistics():
    """Accuracy, recall and specificity match the hand-computed values."""

    summary = confusion_summary(Y_TRUE, Y_PRED)
    per_class = summary["per_class"]

    assert summary["accuracy"] == pytest.approx(0.8)
    assert per_class.loc["Normal", "recall"] == pytest.approx(0.8)
    assert per_class.loc["Suspect", "precision"] == pytest.approx(2 / 3)
    # Normal: 5 negatives, 1 of them predicted Normal
    assert per_class.loc["Normal", "specificity"] == pytest.approx(0.8)
    assert per_class.loc["Pathological", "specificity"] == pytest.approx(1.0)
    assert per_class["support"].tolist() == [5, 3, 2]
    assert -1.0 <= summary["kappa"] <= 1.0


def test_perfect_predictions_have_kappa_one():
    summary = confusion_summary(Y_TRUE, Y_TRUE)
    assert summary["accuracy"] == 1.0
    assert summary["kappa"] == pytest.approx(1.0)
    assert np.diag(summary["table"].to_numpy()).tolist() == [5, 3, 2]


def test_missing_class_in_predictions_keeps_full_table():
    """A class never predicted still gets its (all-zero) column."""

    summary = confusion_summary(Y_TRUE, ["Normal"] * len(Y_TRUE))
    assert summary["table"]["Pathological"].sum() == 0
    assert summary["table"].shape == (3, 3)


def test_forest_importance_is_ranked_and_scaled(clean_df):
    X, y = features_and_target(clean_df)
    model = RandomForestClassifier(n_estimators=25, random_state=0).fit(X, y.astype(str))

    ranking = variable_importance("rf", model, X, y)

    assert set(ranking["feature"]) == set(MODEL_FEATURES)
    assert ranking["importance"].is_monotonic_decreasing
    assert ranking["importance_scaled"].iloc[0] == 100.0


def test_permutation_importance_for_network(clean_df):
    """The tuned network pipeline is ranked through permutation importance."""

    X, y = features_and_target(clean_df)
    search = build_search(
        "nnet",
        cv_folds=3,
        random_state=0,
        param_grid={"mlp__hidden_layer_sizes": [(3,)], "mlp__alpha": [0.1]},
    )
    model = search.fit(X, y.astype(str)).best_estimator_
    assert isinstance(model, Pipeline)

    ranking = variable_importance("nnet", model, X, y, random_state=0)

    assert set(ranking["feature"]) == set(MODEL_FEATURES)
    assert ranking["importance"].is_monotonic_decreasing
    assert ranking["importance_scaled"].max() <= 100.0


def test_unknown_family_is_rejected(clean_df):
    X, y = features_and_target(clean_df)
    with pytest.raises(ValueError):
        variable_importance("svm", object(), X, y)

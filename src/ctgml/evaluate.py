"""ctgml.evaluate

Notes (what this module does)
- Scores fitted classifiers on the held-out test set:
  * Confusion matrix (observed x predicted, fixed Normal/Suspect/Pathological order)
  * Accuracy, Cohen's kappa, per-class precision / recall (sensitivity) / specificity
- Ranks input features per model family:
  * Random forest and AdaBoost: impurity-based importances of the fitted ensemble
  * Neural network: permutation importance on the test set
- Saves confusion-matrix and importance plots for the report.
- Designed to be called from train.py after model fitting.
"""

from typing import Dict

import numpy as np
import pandas as pd

import matplotlib.pyplot as plt
import seaborn as sns

from sklearn.metrics import (
    accuracy_score,
    cohen_kappa_score,
    confusion_matrix,
    precision_recall_fscore_support,
)
from sklearn.inspection import permutation_importance

from .config import CLASS_ORDER, PERMUTATION_REPEATS, RANDOM_STATE, MODEL_LABELS
from .preprocess import features_and_target
from .utils import ensure_dir, render_table


def confusion_summary(y_true, y_pred) -> Dict[str, object]:
    """Confusion matrix plus the statistics derived from it.

    Args:
        y_true: Observed NSP labels.
        y_pred: Predicted NSP labels.

    Returns:
        Dict with ``table`` (rows observed, columns predicted), ``accuracy``, ``kappa``
        and ``per_class`` (precision, recall, specificity, support).
    """

    y_true = np.asarray(y_true).astype(str)
    y_pred = np.asarray(y_pred).astype(str)

    cm = confusion_matrix(y_true, y_pred, labels=CLASS_ORDER)
    table = pd.DataFrame(
        cm,
        index=pd.Index(CLASS_ORDER, name="observed"),
        columns=pd.Index(CLASS_ORDER, name="predicted"),
    )

    precision, recall, _, support = precision_recall_fscore_support(
        y_true, y_pred, labels=CLASS_ORDER, zero_division=0
    )

    # One-vs-rest specificity: true negatives over all observed negatives
    total = cm.sum()
    specificity = []
    for i in range(len(CLASS_ORDER)):
        negatives = total - cm[i, :].sum()
        true_negatives = negatives - (cm[:, i].sum() - cm[i, i])
        specificity.append(true_negatives / negatives if negatives else 0.0)

    per_class = pd.DataFrame(
        {
            "precision": precision,
            "recall": recall,
            "specificity": specificity,
            "support": support,
        },
        index=CLASS_ORDER,
    )

    return {
        "table": table,
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "kappa": float(cohen_kappa_score(y_true, y_pred, labels=CLASS_ORDER)),
        "per_class": per_class,
    }


def variable_importance(
    family: str,
    model,
    X_test: pd.DataFrame,
    y_test,
    random_state: int = RANDOM_STATE,
) -> pd.DataFrame:
    """Rank input features for a fitted model; ``importance_scaled`` is 0-100 like the top feature."""

    if family in ("rf", "adaboost"):
        scores = model.feature_importances_
    elif family == "nnet":
        result = permutation_importance(
            model,
            X_test,
            np.asarray(y_test).astype(str),
            scoring="accuracy",
            n_repeats=PERMUTATION_REPEATS,
            random_state=random_state,
        )
        scores = result.importances_mean
    else:
        raise ValueError(f"Unknown model family: {family}")

    ranking = pd.DataFrame({"feature": list(X_test.columns), "importance": scores})
    ranking = ranking.sort_values("importance", ascending=False).reset_index(drop=True)

    top = ranking["importance"].max()
    ranking["importance_scaled"] = (100 * ranking["importance"] / top).round(1) if top > 0 else 0.0

    return ranking


def evaluate_model(trained: dict, test_df: pd.DataFrame) -> dict:
    """Predict the test set with one trained model and collect its report items."""

    X_test, y_test = features_and_target(test_df)
    model = trained["model"]

    y_pred = model.predict(X_test)

    return {
        "family": trained["family"],
        "dataset": trained["dataset"],
        "y_pred": y_pred,
        "confusion": confusion_summary(y_test, y_pred),
        "importance": variable_importance(trained["family"], model, X_test, y_test),
    }


def plot_confusion_matrix(table: pd.DataFrame, title: str, out_path) -> None:
    """Create and save a confusion matrix heatmap."""

    ensure_dir(out_path.parent)

    plt.figure(figsize=(6, 5))
    sns.heatmap(
        table,
        annot=True,
        fmt="d",
        cmap="Blues",
        cbar=False,
        xticklabels=CLASS_ORDER,
        yticklabels=CLASS_ORDER,
    )
    plt.xlabel("Predicted")
    plt.ylabel("Observed")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)

    # Close figure to free memory (important in repeated runs)
    plt.close()


def plot_importance(ranking: pd.DataFrame, title: str, out_path, top_n: int = 15) -> None:
    """Horizontal bar chart of the top ``top_n`` features."""

    ensure_dir(out_path.parent)

    top = ranking.head(top_n)

    fig, ax = plt.subplots(figsize=(8, 6))
    sns.barplot(data=top, x="importance_scaled", y="feature", color="steelblue", ax=ax)
    ax.set_xlabel("Relative importance (top feature = 100)")
    ax.set_ylabel("")
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(out_path, dpi=200)
    plt.close(fig)


def print_confusion_summary(result: dict) -> None:
    """Print the confusion matrix, overall statistics and importance ranking of one model."""

    title = f"{MODEL_LABELS[result['family']]} ({result['dataset']} training set)"
    summary = result["confusion"]

    print(render_table(summary["table"], f"{title} - Confusion Matrix"))
    print(f"Accuracy: {summary['accuracy']:.4f}   Kappa: {summary['kappa']:.4f}")
    print(render_table(summary["per_class"].round(4), f"{title} - Statistics by Class"))
    print(render_table(result["importance"].head(10).set_index("feature"), f"{title} - Variable Importance"))

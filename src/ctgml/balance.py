"""ctgml.balance

Notes (what this module does)
- Builds the balanced training set used as the alternate model input.
- Stage A works on Normal + Suspect rows: Suspect gets synthetic SMOTE rows, then Normal is
  randomly under-sampled relative to the number of synthetic Suspect rows.
- Stage B works on Pathological (the rarest class in the CTG data): it is oversampled with
  SMOTE and only its rows are kept. Normal and Suspect always come from Stage A.
- The two stages are concatenated. The original training set is left untouched.

SMOTE interpolates between a row and one of its k nearest same-class neighbours, so every
synthetic feature vector stays inside the span of its own class. Tendency is a nominal column
and is resampled with SMOTENC (neighbour majority vote) instead of being interpolated.
"""

# Import typing for explicit signatures
from typing import Dict, Tuple

import pandas as pd

# imbalanced-learn provides the interpolating oversampler and the random undersampler
from imblearn.over_sampling import SMOTENC
from imblearn.under_sampling import RandomUnderSampler

from .config import (
    TARGET_COL,
    CLASS_ORDER,
    TENDENCY_COL,
    SMOTE_K_NEIGHBORS,
    BALANCE_SUSPECT_OVER,
    BALANCE_NORMAL_UNDER,
    BALANCE_PATHOLOGICAL_OVER,
    BALANCE_STAGE_A_CLASSES,
    BALANCE_STAGE_B_CLASS,
    RANDOM_STATE,
)
from .logging_config import get_logger
from .utils import to_builtin

logger = get_logger("balance")


def class_counts(df: pd.DataFrame) -> pd.Series:
    """Per-class row counts in NSP order (absent classes count as 0)."""
    return df[TARGET_COL].value_counts().reindex(CLASS_ORDER, fill_value=0)


def _smote_oversample(
    df: pd.DataFrame,
    targets: Dict[str, int],
    k_neighbors: int,
    random_state: int,
) -> pd.DataFrame:
    """Run SMOTENC so that each class in ``targets`` reaches the requested count."""

    X = df.drop(columns=[TARGET_COL])
    y = df[TARGET_COL].astype(str)

    sampler = SMOTENC(
        categorical_features=[X.columns.get_loc(TENDENCY_COL)],
        sampling_strategy=targets,
        k_neighbors=k_neighbors,
        random_state=random_state,
    )
    X_res, y_res = sampler.fit_resample(X, y)

    return _reassemble(X_res, y_res, df)


def _random_undersample(
    df: pd.DataFrame,
    targets: Dict[str, int],
    random_state: int,
) -> pd.DataFrame:
    """Randomly drop rows so that each class in ``targets`` is cut to the requested count."""

    X = df.drop(columns=[TARGET_COL])
    y = df[TARGET_COL].astype(str)

    sampler = RandomUnderSampler(sampling_strategy=targets, random_state=random_state)
    X_res, y_res = sampler.fit_resample(X, y)

    return _reassemble(X_res, y_res, df)


def _reassemble(X_res: pd.DataFrame, y_res: pd.Series, template: pd.DataFrame) -> pd.DataFrame:
    """Put features and label back together with the template's column order and dtypes."""

    out = pd.DataFrame(X_res).reset_index(drop=True)
    out[TARGET_COL] = pd.Series(y_res).to_numpy()
    out = out[template.columns]
    return out.astype(template.dtypes.to_dict())


def oversample_suspect(
    train: pd.DataFrame,
    suspect_over: float = BALANCE_SUSPECT_OVER,
    normal_under: float = BALANCE_NORMAL_UNDER,
    k_neighbors: int = SMOTE_K_NEIGHBORS,
    random_state: int = RANDOM_STATE,
) -> pd.DataFrame:
    """Stage A: synthetic Suspect rows plus a reduced Normal class.

    Args:
        train: Training rows (any classes; only Normal and Suspect are used).
        suspect_over: Synthetic Suspect rows as a multiple of the Suspect count.
        normal_under: Normal rows kept as a multiple of the synthetic Suspect rows
            (capped at the Normal rows available).
        k_neighbors: Same-class neighbours used for interpolation.
        random_state: Seed for both samplers.
    """

    subset = train[train[TARGET_COL].isin(BALANCE_STAGE_A_CLASSES)]
    counts = class_counts(subset)

    n_synthetic = int(round(counts["Suspect"] * suspect_over))
    oversampled = _smote_oversample(
        subset,
        {"Suspect": int(counts["Suspect"]) + n_synthetic},
        k_neighbors,
        random_state,
    )

    n_normal = min(int(counts["Normal"]), int(round(n_synthetic * normal_under)))
    return _random_undersample(oversampled, {"Normal": n_normal}, random_state)


def oversample_pathological(
    train: pd.DataFrame,
    over: float = BALANCE_PATHOLOGICAL_OVER,
    k_neighbors: int = SMOTE_K_NEIGHBORS,
    random_state: int = RANDOM_STATE,
) -> pd.DataFrame:
    """Stage B: Pathological with ``over`` times its count added as synthetic rows.

    Only Pathological rows are returned, whatever the relative sizes of the other classes.
    """

    counts = class_counts(train)
    label = BALANCE_STAGE_B_CLASS

    n_target = int(counts[label]) + int(round(counts[label] * over))
    oversampled = _smote_oversample(train, {label: n_target}, k_neighbors, random_state)

    return oversampled[oversampled[TARGET_COL] == label].reset_index(drop=True)


def balance_training_set(
    train: pd.DataFrame,
    suspect_over: float = BALANCE_SUSPECT_OVER,
    normal_under: float = BALANCE_NORMAL_UNDER,
    pathological_over: float = BALANCE_PATHOLOGICAL_OVER,
    k_neighbors: int = SMOTE_K_NEIGHBORS,
    random_state: int = RANDOM_STATE,
) -> pd.DataFrame:
    """Concatenate Stage A and Stage B into the balanced training set."""

    stage_a = oversample_suspect(train, suspect_over, normal_under, k_neighbors, random_state)
    stage_b = oversample_pathological(train, pathological_over, k_neighbors, random_state)

    # Stage A and Stage B own disjoint classes
    balanced = pd.concat([stage_a, stage_b], ignore_index=True)

    logger.info(
        "Training set balanced",
        extra={
            "before": to_builtin(class_counts(train).to_dict()),
            "after": to_builtin(class_counts(balanced).to_dict()),
        },
    )

    return balanced


def counts_table(before: pd.DataFrame, after: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """Side-by-side class counts before/after balancing and the per-class growth factor."""

    table = pd.DataFrame({"original": class_counts(before), "balanced": class_counts(after)})
    ratio = (table["balanced"] / table["original"]).round(2)
    return table, ratio

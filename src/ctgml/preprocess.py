"""ctgml.preprocess

Notes (what this module does)
- Recodes the raw sheet into analysis-ready columns:
  * NSP codes 1/2/3 -> ordered categorical Normal < Suspect < Pathological
  * Tendency codes -1/0/1 -> categorical left / symmetric / right
  * Numeric CTG features -> float
- Expands Tendency into three 0/1 indicator columns used as model inputs.
- Splits the dataset into train/test sets with a fixed seed (no stratification).

This module is designed to be imported by train.py, but it can also be run directly:
    python -m src.ctgml.preprocess
"""

# Import typing for explicit return types
from typing import Tuple

# Import pandas for DataFrame operations
import pandas as pd

# Import scikit-learn's splitter for the seeded partition
from sklearn.model_selection import train_test_split

# Import project configuration constants
from .config import (
    TARGET_COL,
    NSP_CODES,
    CLASS_ORDER,
    TENDENCY_COL,
    TENDENCY_CODES,
    TENDENCY_LEVELS,
    NUMERICAL_FEATURES,
    INDICATOR_COLUMNS,
    MODEL_FEATURES,
    TRAIN_FRACTION,
    RANDOM_STATE,
)

from .logging_config import get_logger

logger = get_logger("preprocess")


def _recode(codes: pd.Series, mapping: dict, levels: list, ordered: bool) -> pd.Series:
    """Map numeric codes onto a categorical with fixed levels; unknown codes are an error."""

    labels = pd.to_numeric(codes, errors="raise").map(mapping)

    # Missing codes and codes outside the mapping both end up as NaN here
    if labels.isna().any():
        bad = codes[labels.isna()].unique().tolist()
        raise ValueError(f"Unexpected {codes.name} codes: {bad}")

    return pd.Series(
        pd.Categorical(labels, categories=levels, ordered=ordered),
        index=codes.index,
        name=codes.name,
    )


def recode_labels(df: pd.DataFrame) -> pd.DataFrame:
    """Replace NSP codes by the ordered Normal/Suspect/Pathological factor."""
    out = df.copy()
    out[TARGET_COL] = _recode(out[TARGET_COL], NSP_CODES, CLASS_ORDER, ordered=True)
    return out


def recode_tendency(df: pd.DataFrame) -> pd.DataFrame:
    """Replace Tendency codes by the left/symmetric/right factor."""
    out = df.copy()
    out[TENDENCY_COL] = _recode(out[TENDENCY_COL], TENDENCY_CODES, TENDENCY_LEVELS, ordered=False)
    return out


def clean_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """Clean the trimmed sheet and return a recoded DataFrame.

    Args:
        df: Output of ``data_ingest.select_and_trim``.

    Returns:
        Float features, categorical Tendency and categorical NSP.
    """

    # Make a copy to avoid mutating caller's DataFrame
    df_clean = df.copy()

    # Excel cells may come back as object dtype; everything numeric is handled as float
    for col in NUMERICAL_FEATURES:
        df_clean[col] = pd.to_numeric(df_clean[col], errors="raise").astype(float)

    df_clean = recode_tendency(recode_labels(df_clean))

    logger.info("Dataset recoded", extra={"rows": len(df_clean)})

    return df_clean


def add_tendency_indicators(df: pd.DataFrame) -> pd.DataFrame:
    """Swap the Tendency factor for left/symmetric/right indicator columns (0/1)."""

    tendency = pd.Categorical(df[TENDENCY_COL], categories=TENDENCY_LEVELS)

    # Building from the categorical keeps all three columns even when a level is absent
    dummies = pd.get_dummies(tendency, prefix=TENDENCY_COL, dtype=int)
    dummies.index = df.index
    dummies = dummies.reindex(columns=INDICATOR_COLUMNS, fill_value=0)

    return pd.concat([df.drop(columns=[TENDENCY_COL]), dummies], axis=1)


def split_train_test(
    df: pd.DataFrame,
    train_fraction: float = TRAIN_FRACTION,
    random_state: int = RANDOM_STATE,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Draw a seeded training subset of ``train_fraction`` rows; the rest is the test set.

    Class proportions are left to chance on purpose (no ``stratify``).
    """

    train_df, test_df = train_test_split(
        df,
        train_size=train_fraction,
        random_state=random_state,
        shuffle=True,
    )
    return train_df, test_df


def features_and_target(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """Model inputs (numeric features + Tendency indicators) and the NSP label."""
    X = add_tendency_indicators(df)[MODEL_FEATURES]
    y = df[TARGET_COL]
    return X, y


if __name__ == "__main__":
    from .data_ingest import load_dataset

    df_cleaned = clean_dataset(load_dataset())
    train, test = split_train_test(df_cleaned)

    print("Preprocessing completed.")
    print(f"Train shape: {train.shape}, Test shape: {test.shape}")
    print(train[TARGET_COL].value_counts().reindex(CLASS_ORDER))

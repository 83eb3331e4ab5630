"""ctgml.eda

Notes (what this script does)
- Descriptive plots of the cleaned CTG dataset (nothing here feeds the models):
  * Boxplot of every numeric feature grouped by NSP
  * Bar chart of NSP counts grouped by Tendency
  * Correlation heatmap of numeric features (lower triangle, diagonal hidden)
  * Scatter plots of selected feature pairs coloured by NSP
- Saves plots into artifacts/plots and prints class counts / summary statistics.

Run (from project root):
    python -m src.ctgml.eda
"""

# Import numpy for the triangle mask
import numpy as np

# Import pandas for DataFrame operations
import pandas as pd

# Import matplotlib for plotting
import matplotlib.pyplot as plt

# Import seaborn for grouped statistical plots
import seaborn as sns

from .config import (
    NUMERICAL_FEATURES,
    TARGET_COL,
    TENDENCY_COL,
    CLASS_ORDER,
    CLASS_PALETTE,
    SCATTER_PAIRS,
    PLOTS_DIR,
    METRICS_DIR,
)
from .utils import ensure_dir, render_table
from .logging_config import get_logger

logger = get_logger("eda")


def plot_feature_boxplots(df: pd.DataFrame, plots_dir=PLOTS_DIR) -> None:
    """One boxplot per numeric feature, grouped by NSP, on a single grid figure."""

    ensure_dir(plots_dir)

    # 4 columns x 5 rows covers the 20 numeric features
    n_cols = 4
    n_rows = int(np.ceil(len(NUMERICAL_FEATURES) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(18, 4 * n_rows))
    fig.suptitle("CTG Features by Fetal State (NSP)", fontsize=16, fontweight="bold")
    axes = axes.ravel()

    for idx, col in enumerate(NUMERICAL_FEATURES):
        sns.boxplot(
            data=df,
            x=TARGET_COL,
            y=col,
            hue=TARGET_COL,
            order=CLASS_ORDER,
            palette=CLASS_PALETTE,
            legend=False,
            ax=axes[idx],
        )
        axes[idx].set_title(col, fontweight="bold")
        axes[idx].set_xlabel("")

    # Remove unused subplots
    for i in range(len(NUMERICAL_FEATURES), len(axes)):
        fig.delaxes(axes[i])

    fig.tight_layout()
    fig.savefig(plots_dir / "feature_boxplots.png", dpi=150)
    plt.close(fig)


def plot_nsp_by_tendency(df: pd.DataFrame, plots_dir=PLOTS_DIR) -> None:
    """Bar chart of NSP counts within each Tendency level."""

    ensure_dir(plots_dir)

    counts = pd.crosstab(df[TENDENCY_COL], df[TARGET_COL]).reindex(columns=CLASS_ORDER, fill_value=0)

    fig, ax = plt.subplots(figsize=(8, 5))
    counts.plot(
        kind="bar",
        ax=ax,
        color=[CLASS_PALETTE[c] for c in counts.columns],
        edgecolor="black",
    )
    ax.set_title("NSP Counts by Histogram Tendency")
    ax.set_xlabel("Tendency")
    ax.set_ylabel("Count")
    ax.tick_params(axis="x", rotation=0)
    ax.legend(title=TARGET_COL)

    # Annotate bars with counts
    for container in ax.containers:
        ax.bar_label(container, fmt="%d", fontsize=8)

    fig.tight_layout()
    fig.savefig(plots_dir / "nsp_by_tendency.png", dpi=150)
    plt.close(fig)


def correlation_lower_triangle(df: pd.DataFrame):
    """Correlation matrix of the numeric features and the mask hiding the upper triangle + diagonal."""
    corr = df[NUMERICAL_FEATURES].corr()
    mask = np.triu(np.ones_like(corr, dtype=bool))
    return corr, mask


def plot_correlation_heatmap(df: pd.DataFrame, plots_dir=PLOTS_DIR) -> None:
    """Plot and save the lower-triangle correlation heatmap of the numeric features."""

    ensure_dir(plots_dir)

    corr, mask = correlation_lower_triangle(df)

    plt.figure(figsize=(14, 11))
    sns.heatmap(
        corr,
        mask=mask,
        annot=True,
        fmt=".2f",
        annot_kws={"size": 7},
        cmap="coolwarm",
        center=0,
        vmin=-1,
        vmax=1,
        square=True,
        linewidths=0.5,
    )
    plt.title("Correlation of CTG Features", fontsize=16, fontweight="bold", pad=20)
    plt.tight_layout()
    plt.savefig(plots_dir / "correlation_heatmap.png", dpi=150)
    plt.close()


def plot_feature_scatter(df: pd.DataFrame, x: str, y: str, plots_dir=PLOTS_DIR) -> None:
    """Scatter plot of one feature pair, points coloured by NSP."""

    ensure_dir(plots_dir)

    fig, ax = plt.subplots(figsize=(8, 6))
    sns.scatterplot(
        data=df,
        x=x,
        y=y,
        hue=TARGET_COL,
        hue_order=CLASS_ORDER,
        palette=CLASS_PALETTE,
        alpha=0.6,
        edgecolor=None,
        ax=ax,
    )
    ax.set_title(f"{y} vs {x} by NSP")
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(plots_dir / f"scatter_{x.lower()}_{y.lower()}.png", dpi=150)
    plt.close(fig)


def describe_dataset(df: pd.DataFrame) -> None:
    """Print class counts (overall and by Tendency) and per-class feature means."""

    counts = df[TARGET_COL].value_counts().reindex(CLASS_ORDER).to_frame("count")
    counts["share"] = (counts["count"] / counts["count"].sum()).round(3)
    print(render_table(counts, "NSP class counts"))

    # Margins need plain labels ("All" is not a category level)
    by_tendency = pd.crosstab(
        df[TENDENCY_COL].astype(str), df[TARGET_COL].astype(str), margins=True
    ).reindex(columns=CLASS_ORDER + ["All"], fill_value=0)
    print(render_table(by_tendency, "NSP by Tendency"))

    means = df.groupby(TARGET_COL, observed=False)[NUMERICAL_FEATURES].mean().T.round(2)
    print(render_table(means, "Feature means by NSP"))


def save_tabular_eda(df: pd.DataFrame, output_dir=METRICS_DIR) -> None:
    """Persist the summary statistics table next to the metrics for the report."""

    ensure_dir(output_dir)
    summary = df[NUMERICAL_FEATURES].describe().round(2)
    summary.to_csv(output_dir / "data_describe.csv")
    summary.to_markdown(output_dir / "data_describe.md")


def run_eda(df: pd.DataFrame, plots_dir=PLOTS_DIR) -> None:
    """Render every descriptive plot for the cleaned dataset."""

    plot_feature_boxplots(df, plots_dir)
    plot_nsp_by_tendency(df, plots_dir)
    plot_correlation_heatmap(df, plots_dir)
    for x, y in SCATTER_PAIRS:
        plot_feature_scatter(df, x, y, plots_dir)

    logger.info("EDA plots saved", extra={"plots_dir": str(plots_dir)})


if __name__ == "__main__":
    from .data_ingest import load_dataset, load_feature_descriptions
    from .preprocess import clean_dataset

    sns.set_style("darkgrid")

    df_clean = clean_dataset(load_dataset())

    print(render_table(load_feature_descriptions().set_index("feature"), "Feature descriptions"))
    describe_dataset(df_clean)
    run_eda(df_clean)
    save_tabular_eda(df_clean)

    print("EDA plots saved to:", PLOTS_DIR)

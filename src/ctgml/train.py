"""ctgml.train

Notes (what this script does)
- Model development and comparison for the NSP (Normal / Suspect / Pathological) label.
- Workflow:
  1) Load the CTG workbook (download if needed) and recode it
  2) Seeded 70/30 train/test split
  3) Build the SMOTE-balanced copy of the training set
  4) For each family (neural network, random forest, AdaBoost) and each training set
     (balanced, original): 10-fold CV grid search on accuracy, refit on the full training set
  5) Evaluate every fitted model on the test set: confusion matrix, kappa, variable importance
  6) Save plots and metrics tables, optionally track runs in MLflow
- Fitted models live only for the duration of the run.

Run (from project root):
    python -m src.ctgml.train
"""

from typing import Dict, List, Optional

import pandas as pd

# Import sklearn models and CV utilities
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.neural_network import MLPClassifier
from sklearn.ensemble import RandomForestClassifier, AdaBoostClassifier
from sklearn.tree import DecisionTreeClassifier
from sklearn.model_selection import StratifiedKFold, GridSearchCV

# Import mlflow for experiment tracking
import mlflow

from .data_ingest import load_dataset
from .preprocess import clean_dataset, split_train_test, features_and_target
from .balance import balance_training_set, class_counts, counts_table
from .evaluate import evaluate_model, plot_confusion_matrix, plot_importance, print_confusion_summary

from .config import (
    RANDOM_STATE,
    CV_FOLDS,
    N_JOBS,
    NNET_MAX_ITER,
    NNET_PARAM_GRID,
    RF_PARAM_GRID,
    RF_N_ESTIMATORS,
    ADABOOST_PARAM_GRID,
    MODEL_FAMILIES,
    MODEL_LABELS,
    PLOTS_DIR,
    METRICS_DIR,
    MODEL_COMPARISON_PATH,
    METRICS_JSON_PATH,
    MLFLOW_ENABLED,
    MLFLOW_EXPERIMENT_NAME,
    MLFLOW_TRACKING_URI,
)

from .logging_config import get_logger
from .utils import ensure_dir, save_json, render_table

logger = get_logger("train")

PARAM_GRIDS = {
    "nnet": NNET_PARAM_GRID,
    "rf": RF_PARAM_GRID,
    "adaboost": ADABOOST_PARAM_GRID,
}


def build_estimator(family: str, random_state: int = RANDOM_STATE):
    """Unfitted estimator for one model family."""

    if family == "nnet":
        # Inputs are centred and scaled inside the pipeline so each CV fold is scaled on its own data
        return Pipeline(
            [
                ("scaler", StandardScaler()),
                ("mlp", MLPClassifier(solver="lbfgs", max_iter=NNET_MAX_ITER, random_state=random_state)),
            ]
        )
    if family == "rf":
        return RandomForestClassifier(n_estimators=RF_N_ESTIMATORS, random_state=random_state, n_jobs=N_JOBS)
    if family == "adaboost":
        # Multiclass boosting (SAMME) over decision stumps
        return AdaBoostClassifier(
            estimator=DecisionTreeClassifier(max_depth=1, random_state=random_state),
            random_state=random_state,
        )
    raise ValueError(f"Unknown model family: {family}")


def build_search(
    family: str,
    cv_folds: int = CV_FOLDS,
    random_state: int = RANDOM_STATE,
    param_grid: Optional[dict] = None,
) -> GridSearchCV:
    """Grid search over the family's hyperparameters, scored by CV accuracy and refit on all rows."""

    return GridSearchCV(
        estimator=build_estimator(family, random_state),
        param_grid=param_grid or PARAM_GRIDS[family],
        cv=StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=random_state),
        scoring="accuracy",
        n_jobs=N_JOBS,
        refit=True,
        verbose=0,
    )


def tune_family(
    family: str,
    train_df: pd.DataFrame,
    dataset: str,
    cv_folds: int = CV_FOLDS,
    random_state: int = RANDOM_STATE,
    param_grid: Optional[dict] = None,
) -> dict:
    """Run the grid search for one family on one training set and return the tuned model record."""

    X_train, y_train = features_and_target(train_df)

    search = build_search(family, cv_folds, random_state, param_grid)
    search.fit(X_train, y_train.astype(str))

    best = search.best_index_
    trained = {
        "family": family,
        "dataset": dataset,
        "model": search.best_estimator_,
        "best_params": search.best_params_,
        "cv_accuracy_mean": float(search.best_score_),
        "cv_accuracy_std": float(search.cv_results_["std_test_score"][best]),
        "n_train": len(train_df),
    }

    logger.info(
        "Grid search finished",
        extra={
            "family": family,
            "dataset": dataset,
            "best_params": str(search.best_params_),
            "cv_accuracy": trained["cv_accuracy_mean"],
        },
    )

    return trained


def train_all(
    datasets: Dict[str, pd.DataFrame],
    families: List[str] = MODEL_FAMILIES,
    cv_folds: int = CV_FOLDS,
    random_state: int = RANDOM_STATE,
    param_grids: Optional[dict] = None,
) -> List[dict]:
    """Tune every family on every named training set (family-major order)."""

    param_grids = param_grids or {}
    return [
        tune_family(family, df, name, cv_folds, random_state, param_grids.get(family))
        for family in families
        for name, df in datasets.items()
    ]


def configure_mlflow() -> None:
    """Configure MLflow tracking URI and experiment (local file store)."""
    mlflow.set_tracking_uri(MLFLOW_TRACKING_URI)
    mlflow.set_experiment(MLFLOW_EXPERIMENT_NAME)


def log_model_run(trained: dict, result: dict, plots_dir, metrics_dir) -> None:
    """Log one (family, training set) run to MLflow: params, CV/test metrics, report folders."""

    run_name = f"{trained['family']}_{trained['dataset']}"

    with mlflow.start_run(run_name=run_name):
        mlflow.set_tag("model_name", MODEL_LABELS[trained["family"]])
        mlflow.set_tag("training_set", trained["dataset"])

        mlflow.log_param("random_state", RANDOM_STATE)
        mlflow.log_param("n_train", trained["n_train"])
        for k, v in trained["best_params"].items():
            mlflow.log_param(k, v)

        mlflow.log_metric("cv_accuracy_mean", trained["cv_accuracy_mean"])
        mlflow.log_metric("cv_accuracy_std", trained["cv_accuracy_std"])
        mlflow.log_metric("test_accuracy", result["confusion"]["accuracy"])
        mlflow.log_metric("test_kappa", result["confusion"]["kappa"])

        mlflow.log_artifacts(str(plots_dir), artifact_path="plots")
        mlflow.log_artifacts(str(metrics_dir), artifact_path="metrics")


def comparison_table(trained_models: List[dict], results: List[dict]) -> pd.DataFrame:
    """One row per fitted model with CV and test-set scores."""

    rows = []
    for trained, result in zip(trained_models, results):
        rows.append(
            {
                "model": MODEL_LABELS[trained["family"]],
                "training_set": trained["dataset"],
                "best_params": str(trained["best_params"]),
                "cv_accuracy_mean": trained["cv_accuracy_mean"],
                "cv_accuracy_std": trained["cv_accuracy_std"],
                "test_accuracy": result["confusion"]["accuracy"],
                "test_kappa": result["confusion"]["kappa"],
            }
        )
    return pd.DataFrame(rows)


def run_analysis(
    df_clean: pd.DataFrame,
    plots_dir=PLOTS_DIR,
    metrics_dir=METRICS_DIR,
    families: List[str] = MODEL_FAMILIES,
    cv_folds: int = CV_FOLDS,
    param_grids: Optional[dict] = None,
    random_state: int = RANDOM_STATE,
    track: bool = MLFLOW_ENABLED,
) -> dict:
    """Split, balance, tune, evaluate and report on an already recoded dataset."""

    ensure_dir(plots_dir)
    ensure_dir(metrics_dir)

    # -----------------------------
    # Step 1: Split + balance
    # -----------------------------

    train_df, test_df = split_train_test(df_clean, random_state=random_state)
    balanced_df = balance_training_set(train_df, random_state=random_state)

    counts, growth = counts_table(train_df, balanced_df)
    counts["growth"] = growth
    print(render_table(counts, "Training class counts before/after balancing"))
    print(render_table(class_counts(test_df).to_frame("count"), "Test class counts"))

    # -----------------------------
    # Step 2: Grid search per family x training set
    # -----------------------------

    trained_models = train_all(
        {"balanced": balanced_df, "original": train_df},
        families=families,
        cv_folds=cv_folds,
        random_state=random_state,
        param_grids=param_grids,
    )

    # -----------------------------
    # Step 3: Evaluate on the test set
    # -----------------------------

    results = []
    for trained in trained_models:
        result = evaluate_model(trained, test_df)
        results.append(result)

        print_confusion_summary(result)

        stem = f"{trained['family']}_{trained['dataset']}"
        label = f"{MODEL_LABELS[trained['family']]} ({trained['dataset']})"
        plot_confusion_matrix(result["confusion"]["table"], f"Confusion Matrix - {label}", plots_dir / f"cm_{stem}.png")
        plot_importance(result["importance"], f"Variable Importance - {label}", plots_dir / f"importance_{stem}.png")

    # -----------------------------
    # Step 4: Save metrics artifacts
    # -----------------------------

    comparison_df = comparison_table(trained_models, results)
    comparison_df.to_csv(metrics_dir / MODEL_COMPARISON_PATH.name, index=False)
    print(render_table(comparison_df.set_index(["model", "training_set"]), "Model comparison"))

    metrics_payload = {
        f"{trained['family']}_{trained['dataset']}": {
            "best_params": trained["best_params"],
            "cv_accuracy_mean": trained["cv_accuracy_mean"],
            "cv_accuracy_std": trained["cv_accuracy_std"],
            "test_accuracy": result["confusion"]["accuracy"],
            "test_kappa": result["confusion"]["kappa"],
            "confusion_matrix": result["confusion"]["table"].to_numpy(),
            "top_features": result["importance"]["feature"].head(5).tolist(),
        }
        for trained, result in zip(trained_models, results)
    }
    metrics_payload["class_counts"] = {
        "train": class_counts(train_df).to_dict(),
        "balanced": class_counts(balanced_df).to_dict(),
        "test": class_counts(test_df).to_dict(),
    }
    save_json(metrics_payload, metrics_dir / METRICS_JSON_PATH.name)

    # -----------------------------
    # Step 5: MLflow experiment tracking
    # -----------------------------

    if track:
        configure_mlflow()
        for trained, result in zip(trained_models, results):
            log_model_run(trained, result, plots_dir, metrics_dir)

    return {
        "train": train_df,
        "test": test_df,
        "balanced": balanced_df,
        "trained": trained_models,
        "results": results,
        "comparison": comparison_df,
    }


def main() -> None:
    """Main training entry point."""

    df_clean = clean_dataset(load_dataset())
    logger.info("Dataset loaded", extra={"rows": len(df_clean)})

    run_analysis(df_clean)

    print("\nArtifacts written:")
    print(f"  Plots:   {PLOTS_DIR}")
    print(f"  Metrics: {METRICS_DIR}")


if __name__ == "__main__":
    main()

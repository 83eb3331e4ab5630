"""ctgml.config

Notes (what this module does)
- Centralizes constants used across ingestion, recoding, balancing, training, and evaluation.
- Keeps the workbook layout, column names, class ordering, resampling constants and
  hyperparameter grids in one place for reproducibility.
"""

# Import Path for OS-independent file path handling
from pathlib import Path  # Standard library utility for paths

# Define the project root as the directory that contains this file's grandparent (repo/src/ctgml)
PROJECT_ROOT = Path(__file__).resolve().parents[2]  # Resolve absolute path for reliability

# -----------------------------
# Dataset configuration
# -----------------------------

# UCI Cardiotocography workbook (2126 CTG sessions)
DATASET_URL = (
    "https://archive.ics.uci.edu/ml/machine-learning-databases/00193/CTG.xls"
)  # Public dataset endpoint

# Sheet index 3 counted from 1 ("Raw Data"); pandas counts from 0
SHEET_INDEX = 2

# The sheet has one blank row under the header and summary rows after the last record
FIRST_RECORD_ROW = 1  # Position of the first record once the header is parsed
N_RECORDS = 2126  # Number of CTG sessions in the sheet

# Numeric signal-derived features kept for modelling
NUMERICAL_FEATURES = [
    "LB", "AC", "FM", "UC", "DL", "DS", "DP",
    "ASTV", "MSTV", "ALTV", "MLTV",
    "Width", "Min", "Max", "Nmax", "Nzeros",
    "Mode", "Mean", "Median", "Variance",
]  # 20 numeric features

# Histogram tendency (-1 left asymmetric, 0 symmetric, 1 right asymmetric)
TENDENCY_COL = "Tendency"
TENDENCY_CODES = {-1: "left", 0: "symmetric", 1: "right"}
TENDENCY_LEVELS = ["left", "symmetric", "right"]

# Three-level outcome label
TARGET_COL = "NSP"
NSP_CODES = {1: "Normal", 2: "Suspect", 3: "Pathological"}
CLASS_ORDER = ["Normal", "Suspect", "Pathological"]

# Full column subset read from the sheet
SELECTED_COLUMNS = NUMERICAL_FEATURES + [TENDENCY_COL, TARGET_COL]

# Model inputs once Tendency is expanded into indicator columns
INDICATOR_COLUMNS = [f"{TENDENCY_COL}_{level}" for level in TENDENCY_LEVELS]
MODEL_FEATURES = NUMERICAL_FEATURES + INDICATOR_COLUMNS

# -----------------------------
# Train/test split configuration
# -----------------------------

TRAIN_FRACTION = 0.70  # Fraction of rows drawn for training (no stratification)
RANDOM_STATE = 1234  # Seed shared by splitting, resampling and model fitting

# -----------------------------
# Class balancing configuration
# -----------------------------

SMOTE_K_NEIGHBORS = 5  # Same-class neighbours used for interpolation

# Stage A (Normal vs Suspect): synthetic Suspect rows = BALANCE_SUSPECT_OVER * n_suspect,
# then Normal is cut down to BALANCE_NORMAL_UNDER * (synthetic Suspect rows)
BALANCE_SUSPECT_OVER = 2.0
BALANCE_NORMAL_UNDER = 2.0

# Stage A owns Normal and Suspect, Stage B owns the class left over (Pathological)
BALANCE_STAGE_A_CLASSES = ["Normal", "Suspect"]
BALANCE_STAGE_B_CLASS = "Pathological"

# Stage B (Pathological): synthetic Pathological rows = BALANCE_PATHOLOGICAL_OVER * n_pathological
BALANCE_PATHOLOGICAL_OVER = 2.0

# -----------------------------
# Model training configuration
# -----------------------------

CV_FOLDS = 10  # k-fold cross-validation inside the grid search
N_JOBS = -1  # Use all CPU cores for the search

NNET_MAX_ITER = 1000  # Upper bound on optimizer iterations for the network

# Grid-search spaces per model family
NNET_PARAM_GRID = {
    "mlp__hidden_layer_sizes": [(1,), (3,), (5,), (7,), (9,)],  # Hidden units
    "mlp__alpha": [0.0, 1e-4, 1e-1],  # L2 weight decay
}
RF_PARAM_GRID = {
    "max_features": [2, 4, 8, 12, 16, 23],  # Candidate features per split
}
RF_N_ESTIMATORS = 500  # Trees per forest
ADABOOST_PARAM_GRID = {
    "n_estimators": [50, 100, 150],  # Boosting iterations
}

MODEL_FAMILIES = ["nnet", "rf", "adaboost"]
MODEL_LABELS = {
    "nnet": "Neural Network",
    "rf": "Random Forest",
    "adaboost": "AdaBoost",
}

# Permutation repeats used to rank network inputs
PERMUTATION_REPEATS = 10

# -----------------------------
# Visualization configuration
# -----------------------------

# Feature pairs drawn as scatter plots coloured by NSP
SCATTER_PAIRS = [("ASTV", "ALTV"), ("Mean", "Mode")]

# Palette keyed by class label
CLASS_PALETTE = {"Normal": "tab:green", "Suspect": "tab:orange", "Pathological": "tab:red"}

# -----------------------------
# Paths for inputs and outputs
# -----------------------------

# Cached copy of the downloaded workbook
RAW_DATA_PATH = PROJECT_ROOT / "data" / "raw" / "CTG.xls"

# Feature name -> description table (rendered only)
FEATURE_DESCRIPTIONS_PATH = PROJECT_ROOT / "data" / "feature_descriptions.txt"

# Define where to store plots
PLOTS_DIR = PROJECT_ROOT / "artifacts" / "plots"  # Folder for images

# Define where to store metrics and tables
METRICS_DIR = PROJECT_ROOT / "artifacts" / "metrics"  # Folder for metrics
MODEL_COMPARISON_PATH = METRICS_DIR / "model_comparison.csv"  # Model comparison table
METRICS_JSON_PATH = METRICS_DIR / "metrics.json"  # Full metrics dump as JSON

# -----------------------------
# Experiment tracking
# -----------------------------

MLFLOW_ENABLED = True  # Switch off for offline/test runs
MLFLOW_TRACKING_URI = (PROJECT_ROOT / "mlruns").as_uri()  # Local file store
MLFLOW_EXPERIMENT_NAME = "ctg-nsp-classification"

"""ctgml.utils

Notes (what this module does)
- Small filesystem and reporting helpers shared by the pipeline stages.
- Converts numpy/pandas values into plain Python so metric payloads serialize cleanly.
"""

# Import json to write metrics/artifacts in a structured format
import json  # Standard library JSON utilities

# Import Path for filesystem path handling
from pathlib import Path  # OS-independent path utility

# numpy scalars show up in best_params_ and metric dicts
import numpy as np

# pandas frames are rendered as console tables
import pandas as pd


def ensure_dir(path: Path) -> None:
    """Create a directory (and parents) if it does not already exist."""
    path.mkdir(parents=True, exist_ok=True)


def to_builtin(obj):
    """Recursively convert numpy scalars/arrays and tuples into JSON-friendly values."""

    if isinstance(obj, dict):
        return {str(k): to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_builtin(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return to_builtin(obj.tolist())
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    return obj


def save_json(obj: dict, path: Path) -> None:
    """Save a metrics payload as pretty-printed JSON.

    Args:
        obj: Dictionary to save (numpy values are converted first).
        path: File path where JSON will be written.
    """

    # Ensure the parent directory exists before writing the file
    ensure_dir(path.parent)

    with path.open("w", encoding="utf-8") as f:
        json.dump(to_builtin(obj), f, indent=2, sort_keys=True)


def render_table(df: pd.DataFrame, title: str) -> str:
    """Format a DataFrame as an underlined, markdown-style console table."""
    return f"\n{title}\n{'-' * len(title)}\n{df.to_markdown()}"

"""ctgml.data_ingest

Notes (what this script does)
- Downloads the UCI Cardiotocography workbook (CTG.xls) once and caches it under data/raw.
- Reads the "Raw Data" sheet, keeps the fixed feature/label columns and the fixed record range,
  and drops fully-empty and duplicated rows.
- Reads the feature description table that accompanies the report.

Run (from project root):
    python -m src.ctgml.data_ingest
"""

# Import requests to download the workbook over HTTP
import requests  # HTTP client

# Import pandas for Excel/CSV parsing into a DataFrame
import pandas as pd  # Data manipulation library

# Import project configuration (URL, sheet layout, columns, paths)
from .config import (
    DATASET_URL,
    SHEET_INDEX,
    FIRST_RECORD_ROW,
    N_RECORDS,
    SELECTED_COLUMNS,
    RAW_DATA_PATH,
    FEATURE_DESCRIPTIONS_PATH,
)

# Import logging and filesystem helpers
from .logging_config import get_logger
from .utils import ensure_dir, render_table

logger = get_logger("data_ingest")


def download_workbook(path=RAW_DATA_PATH) -> None:
    """Download the CTG workbook from UCI and store the raw bytes at ``path``."""

    # Timeout avoids hanging indefinitely on a dead mirror
    response = requests.get(DATASET_URL, timeout=60)

    # Fail fast on network/HTTP issues
    response.raise_for_status()

    # The workbook is binary (.xls), so write bytes as-is
    ensure_dir(path.parent)
    path.write_bytes(response.content)

    logger.info("Workbook downloaded", extra={"path": str(path), "bytes": len(response.content)})


def load_or_download(path=RAW_DATA_PATH):
    """Return the local workbook path, downloading it first if it is not cached."""

    if not path.exists():  # Check local cache
        download_workbook(path)
    return path


def read_raw_sheet(path=RAW_DATA_PATH, sheet_index: int = SHEET_INDEX) -> pd.DataFrame:
    """Read the raw CTG sheet exactly as stored (header row parsed, nothing dropped)."""
    return pd.read_excel(path, sheet_name=sheet_index)


def select_and_trim(
    raw: pd.DataFrame,
    first_row: int = FIRST_RECORD_ROW,
    n_records: int = N_RECORDS,
) -> pd.DataFrame:
    """Keep the modelling columns and the known record range of the raw sheet.

    Args:
        raw: Sheet as returned by ``read_raw_sheet``.
        first_row: Position of the first CTG record (rows above it are header filler).
        n_records: Number of records; everything below them is footer material.

    Returns:
        DataFrame with ``SELECTED_COLUMNS`` only, no empty rows and no duplicate rows.
        A sheet without the expected columns raises ``KeyError``.
    """

    # Column selection doubles as the schema check
    df = raw[SELECTED_COLUMNS]

    # Drop the header/footer rows by position
    df = df.iloc[first_row:first_row + n_records]

    before = len(df)
    df = df.dropna(how="all")
    df = df.drop_duplicates()

    logger.info(
        "Raw sheet trimmed",
        extra={"rows_in_range": before, "rows_kept": len(df), "rows_dropped": before - len(df)},
    )

    return df.reset_index(drop=True)


def load_dataset(path=None) -> pd.DataFrame:
    """Acquire the workbook (cached or downloaded) and return the trimmed record table."""

    if path is None:
        path = load_or_download()
    return select_and_trim(read_raw_sheet(path))


def load_feature_descriptions(path=FEATURE_DESCRIPTIONS_PATH) -> pd.DataFrame:
    """Read the tab-delimited feature -> description table (documentation only)."""
    return pd.read_csv(path, sep="\t", header=None, names=["feature", "description"])


if __name__ == "__main__":
    df_raw = load_dataset()

    print("Dataset ready.")
    print(f"Path: {RAW_DATA_PATH}")
    print(f"Shape: {df_raw.shape}")  # Expected ~ (2113, 22)
    print(render_table(load_feature_descriptions().set_index("feature"), "Feature descriptions"))

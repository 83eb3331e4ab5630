"""scripts.run_pipeline

Notes (what this script does)
- Single top-level entrypoint for the CTG fetal-state analysis:
  Data Acquisition -> EDA -> Balancing/Model Training/Evaluation.
- Runs the module CLIs (data_ingest, eda, train) as child processes so each stage behaves
  exactly as when it is run on its own.
- Outputs are written to the project folders used elsewhere:
    data/raw (cached workbook), artifacts/plots, artifacts/metrics

How to run (from project root)
    python scripts/run_pipeline.py

Optional flags
    python scripts/run_pipeline.py --skip-eda
    python scripts/run_pipeline.py --skip-train
    python scripts/run_pipeline.py --only ingest
"""

import argparse
import subprocess
import sys
import time
from pathlib import Path

STAGES = {
    "ingest": "src.ctgml.data_ingest",  # Download/cache and trim the workbook
    "eda": "src.ctgml.eda",  # Descriptive plots and tables
    "train": "src.ctgml.train",  # Balance, tune, evaluate
}


def _run(cmd: list[str], cwd: Path) -> None:
    """Run a command, stream its output, and fail fast on errors."""

    print(f"\n[RUN] {' '.join(cmd)}")

    completed = subprocess.run(cmd, cwd=str(cwd))

    if completed.returncode != 0:
        raise RuntimeError(f"Command failed with exit code {completed.returncode}: {cmd}")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse CLI arguments for stage selection."""

    parser = argparse.ArgumentParser(description="Run the CTG fetal-state classification pipeline.")
    parser.add_argument(
        "--only",
        choices=list(STAGES),
        default=None,
        help="Run only a single stage (ingest | eda | train).",
    )
    parser.add_argument("--skip-eda", action="store_true", help="Skip the EDA stage.")
    parser.add_argument("--skip-train", action="store_true", help="Skip the training stage.")
    return parser.parse_args(argv)


def selected_stages(args: argparse.Namespace) -> list[str]:
    """Stage names to run, in pipeline order."""

    if args.only:
        return [args.only]

    stages = ["ingest"]
    if not args.skip_eda:
        stages.append("eda")
    if not args.skip_train:
        stages.append("train")
    return stages


def main(argv=None) -> None:
    """Main orchestration entrypoint."""

    t0 = time.time()

    project_root = Path(__file__).resolve().parents[1]
    args = parse_args(argv)

    # Use the current interpreter so the active virtualenv is honoured
    py = sys.executable

    for stage in selected_stages(args):
        _run([py, "-m", STAGES[stage]], project_root)

    dt = time.time() - t0
    print(f"\nPipeline completed successfully in {dt:.2f} seconds.")
    print("Outputs:")
    print("  data/raw/")
    print("  artifacts/plots/ and artifacts/metrics/")


if __name__ == "__main__":
    main()

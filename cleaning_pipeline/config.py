"""
Configuration Module
====================
Defines file paths, logging settings, statistical thresholds, missing-value
markers, accepted date formats and the default stage order used throughout
the data cleaning pipeline.

Every value can be overridden through environment variables, either set
directly or placed in a ``.env`` file at the project root.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load .env file into os.environ (before any os.environ.get calls)
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parent.parent
_env_file = _project_root / ".env"
_env_example = _project_root / ".env.example"

# Prefer .env; fall back to .env.example
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=False)
elif _env_example.exists():
    load_dotenv(dotenv_path=_env_example, override=False)


def _env_list(name: str, default: list[str], sep: str = ",") -> list[str]:
    """Read a separator-delimited list from the environment."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return [item.strip() for item in raw.split(sep)]


# ---------------------------------------------------------------------------
# Directory paths
# ---------------------------------------------------------------------------
BASE_DIR = _project_root
DATA_DIR = Path(os.environ.get("CLEANING_DATA_DIR", BASE_DIR / "data"))
REPORTS_DIR = Path(os.environ.get("CLEANING_REPORTS_DIR", BASE_DIR / "reports"))

# Input / output file paths
RAW_CSV = DATA_DIR / "raw.csv"
CLEANED_CSV = DATA_DIR / "cleaned.csv"

# Report file paths
CLEANING_LOG = REPORTS_DIR / "cleaning_log.txt"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("CLEANING_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ---------------------------------------------------------------------------
# Outlier thresholds
# ---------------------------------------------------------------------------
IQR_MULTIPLIER = float(os.environ.get("CLEANING_IQR_MULTIPLIER", "1.5"))
ZSCORE_THRESHOLD = float(os.environ.get("CLEANING_ZSCORE_THRESHOLD", "3.0"))

# Quartiles are meaningless on very small samples
MIN_VALUES_FOR_QUARTILES = 4

# ---------------------------------------------------------------------------
# Missing value placeholders
# ---------------------------------------------------------------------------
# String cells that mean "no value" once stripped and lowercased
MISSING_MARKERS = _env_list(
    "CLEANING_MISSING_MARKERS",
    ["", "nan", "n/a", "na", "null", "none", "invalid_date", "-"],
)

IMPUTATION_STRATEGIES = ("mean", "median", "mode", "constant", "ffill", "bfill")

# ---------------------------------------------------------------------------
# Date formats
# ---------------------------------------------------------------------------
# Tried in order; the first one that parses wins
DATE_FORMATS = _env_list(
    "CLEANING_DATE_FORMATS",
    [
        "%Y-%m-%d",      # 1985-03-15
        "%Y/%m/%d",      # 1975/05/10
        "%m/%d/%Y",      # 01/15/2024
        "%d.%m.%Y",      # 15.01.2024
        "%Y-%m-%d %H:%M:%S",
    ],
    sep=";",
)

# ---------------------------------------------------------------------------
# Column kinds
# ---------------------------------------------------------------------------
COLUMN_KINDS = ("numeric", "categorical", "temporal")

# ---------------------------------------------------------------------------
# Integrity check actions
# ---------------------------------------------------------------------------
INTEGRITY_ACTIONS = ("flag", "drop", "raise")

# ---------------------------------------------------------------------------
# Default pipeline
# ---------------------------------------------------------------------------
# Used when no stage configuration is supplied. Safe on any dataset: it
# never scales, encodes or removes outliers without explicit columns.
DEFAULT_PIPELINE = [
    {"stage": "standardize_missing"},
    {"stage": "strip_whitespace"},
    {"stage": "drop_duplicates"},
    {"stage": "impute_missing", "strategy": "median"},
    {"stage": "impute_missing", "strategy": "mode"},
]

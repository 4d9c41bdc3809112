"""Record table loading and saving."""

from pathlib import Path

import pandas as pd

EXCEL_SUFFIXES = (".xlsx", ".xls")
CSV_SUFFIX = ".csv"


def _table_kind(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return "excel"
    if suffix == CSV_SUFFIX:
        return "csv"
    raise ValueError(f"Unsupported table format: {suffix}. Supported formats: .xlsx, .xls, .csv")


def read_table(path: Path) -> pd.DataFrame:
    """
    Read a table of placement or creatif records.

    Every cell is read as text and blank cells stay empty strings, so ids such
    as ``"000123"`` keep their leading zeros and blank fields never resolve.

    Args:
        path: ``.csv``, ``.xlsx`` or ``.xls`` file

    Returns:
        pandas DataFrame of strings

    Raises:
        ValueError: If the extension is not supported
        FileNotFoundError: If the file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Record table not found: {path}")

    if _table_kind(path) == "excel":
        return pd.read_excel(path, dtype=str, keep_default_na=False)
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def write_table(df: pd.DataFrame, path: Path) -> Path:
    """Write a record table next to the run outputs, in the format its extension names."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if _table_kind(path) == "excel":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path


def row_to_record(row: pd.Series) -> dict[str, str]:
    """Row as a plain record dict, dropping blank cells."""
    return {str(k): str(v) for k, v in row.items() if isinstance(v, str) and v.strip()}

"""Utilities for loading batch lookup requests from spreadsheets."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from .models import LookupRequest

PathLike = Union[str, Path]

_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "request_id": ("request_id", "id", "record_id", "lead_id"),
    "phone": ("phone", "phone_number", "number", "caller", "ani"),
    "first_name": ("first_name", "firstname", "first", "given_name"),
    "last_name": ("last_name", "lastname", "last", "surname"),
}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_lookup_requests(
    path: PathLike,
    *,
    column_mapping: Optional[Mapping[str, str]] = None,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[LookupRequest]:
    """Load lookup requests from a CSV/TSV/Excel file.

    Parameters
    ----------
    path:
        Path to the spreadsheet.
    column_mapping:
        Optional mapping of :class:`LookupRequest` field names to column names.
        Unmapped fields are matched against common column name synonyms.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV.
    loader_kwargs:
        Extra keyword arguments forwarded to the pandas reader.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    mapping = dict(column_mapping or {})
    requests: List[LookupRequest] = []

    for _, row in dataframe.iterrows():
        if _row_is_empty(row):
            continue
        requests.append(_row_to_request(row, dataframe.columns, mapping))

    return requests


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    # Phone numbers must stay text; numeric parsing drops leading zeros and "+".
    loader_kwargs.setdefault("dtype", str)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=engine, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _row_is_empty(row: pd.Series) -> bool:
    return all(pd.isna(value) or (isinstance(value, str) and not value.strip()) for value in row.values)


def _row_to_request(row: pd.Series, columns: Iterable[str], mapping: Mapping[str, str]) -> LookupRequest:
    resolved = {field: _resolve_column(field, columns, mapping) for field in _FIELD_SYNONYMS}
    used = {column for column in resolved.values() if column}

    metadata = {
        str(column): _clean_text(value)
        for column, value in row.items()
        if column not in used and _clean_text(value) is not None
    }

    return LookupRequest(
        phone=_extract(row, resolved["phone"]) or "",
        first_name=_extract(row, resolved["first_name"]),
        last_name=_extract(row, resolved["last_name"]),
        request_id=_extract(row, resolved["request_id"]),
        metadata=metadata,
    )


def _resolve_column(field: str, available_columns: Iterable[str], mapping: Mapping[str, str]) -> Optional[str]:
    if field in mapping:
        return mapping[field]

    synonyms = tuple(name.lower() for name in _FIELD_SYNONYMS.get(field, (field,)))
    by_name = {str(column).strip().lower().replace(" ", "_"): column for column in available_columns}
    for synonym in synonyms:
        if synonym in by_name:
            return by_name[synonym]
    return None


def _extract(row: pd.Series, column: Optional[str]) -> Optional[str]:
    if not column or column not in row:
        return None
    return _clean_text(row[column])


def _clean_text(value: Any) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


__all__ = ["load_lookup_requests", "UnsupportedFileTypeError"]
